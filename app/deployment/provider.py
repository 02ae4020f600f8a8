"""
provider.py - Hosting provider deployment client

Thin wrapper around the Vercel deployments API. Every call is made once,
with a bounded timeout; failures are surfaced as DeploymentProviderError.
"""

import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

from .models import DeploymentRecord, UploadFile

_LOG = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.vercel.com"
DEPLOYMENTS_PATH = "/v13/deployments"
NAME_TAKEN_CODE = "name_already_exists"


class DeploymentProviderError(Exception):
    """Raised when the provider rejects a deployment or cannot be reached."""

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message or "Deployment failed")
        self.provider_message = message
        self.code = code
        self.status_code = status_code

    @property
    def is_name_taken(self) -> bool:
        """True if the provider refused the project name as already used."""
        if self.code == NAME_TAKEN_CODE:
            return True
        return bool(self.provider_message and "already exists" in self.provider_message.lower())


def build_session(token: str) -> requests.Session:
    """Build a requests session authenticated with a bearer token."""
    session = requests.Session()
    session.headers.update({
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    })
    return session


def build_deployment_payload(name: str, files: List[UploadFile]) -> dict:
    """Request body for a production deployment served as-is (no build step)."""
    return {
        "name": name,
        "files": [f.to_provider_file() for f in files],
        "projectSettings": {
            "framework": None,
            "buildCommand": None,
            "outputDirectory": None,
            "installCommand": None,
        },
        "target": "production",
    }


class VercelClient:
    """Client for the provider deployments endpoint."""

    def __init__(self, token: Optional[str], api_base: str = DEFAULT_API_BASE,
                 timeout: float = 30, session: Optional[requests.Session] = None):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = session

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = build_session(self.token)
        return self._session

    @property
    def deployments_url(self) -> str:
        return f"{self.api_base}{DEPLOYMENTS_PATH}"

    def create_deployment(self, name: str, files: List[UploadFile]) -> DeploymentRecord:
        """
        Create a production deployment of ``files`` under project ``name``.

        Raises:
            DeploymentProviderError: on HTTP errors, timeouts, transport
                failures and unreadable responses.
        """
        payload = build_deployment_payload(name, files)
        try:
            resp = self.session.post(
                self.deployments_url,
                params={"skipAutoDetectionConfirmation": "1"},
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise self._provider_error(e.response) from e
        except requests.exceptions.RequestException as e:
            _LOG.error("Provider request failed: %s", e)
            raise DeploymentProviderError() from e

        try:
            return DeploymentRecord.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            _LOG.error("Unreadable provider response: %s", e)
            raise DeploymentProviderError() from e

    @staticmethod
    def _provider_error(response: Optional[requests.Response]) -> DeploymentProviderError:
        if response is None:
            _LOG.error("Provider API error without response")
            return DeploymentProviderError()

        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            error = {}

        status_code = response.status_code
        _LOG.error("Provider API error (%s): %s", status_code, error or response.text)
        return DeploymentProviderError(
            message=error.get("message"),
            code=error.get("code"),
            status_code=status_code,
        )
