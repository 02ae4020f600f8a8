import logging
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from .models import DeployRequest, DeploymentResult
from .provider import DeploymentProviderError, VercelClient
from .upload_processor import UploadValidationError, is_valid_name, process_upload

if TYPE_CHECKING:
    from app.quota import QuotaManager

logger = logging.getLogger(__name__)

QUOTA_CHECK_NAME = "quota-check"


class DeploymentService:
    """Validates uploads, enforces quota and submits deployments."""

    def __init__(self,
                 quota_manager: "QuotaManager",
                 provider_client: VercelClient,
                 provider_domain: str = "vercel.app"):
        self.quota_manager = quota_manager
        self.provider_client = provider_client
        self.provider_domain = provider_domain

    def check_quota(self, client_id: str, now: Optional[datetime] = None) -> DeploymentResult:
        """Report remaining quota and any active cooldown. Never charges."""
        status = self.quota_manager.quota_status(client_id, now)
        return DeploymentResult(
            success=True,
            remaining_quota=status.remaining,
            cooldown=status.cooldown,
            remaining_seconds=status.remaining_seconds
        )

    def deploy(self, deploy_request: DeployRequest, client_id: str) -> DeploymentResult:
        """Deploy an uploaded site for a client.

        The quota lookup, admission check, provider call and charge run
        under the client's lock, so concurrent requests from one client are
        admitted one at a time.
        """
        if not deploy_request.is_complete():
            return DeploymentResult(
                success=False,
                message="Missing name, fileData or fileName",
                error="missing_fields"
            )

        name = deploy_request.name
        if not is_valid_name(name):
            return DeploymentResult(
                success=False,
                message="Name may only contain lowercase letters, digits and hyphens",
                error="invalid_name"
            )

        with self.quota_manager.client_lock(client_id):
            return self._deploy_locked(deploy_request, client_id)

    def _deploy_locked(self, deploy_request: DeployRequest, client_id: str) -> DeploymentResult:
        name = deploy_request.name
        record = self.quota_manager.get_quota_info(client_id)
        decision = self.quota_manager.check_admission(record)

        if decision.cooldown:
            return DeploymentResult(
                success=False,
                message="Cooldown active, please wait before deploying again",
                error="cooldown",
                cooldown=True,
                remaining_seconds=decision.remaining_seconds,
                remaining_quota=decision.remaining
            )
        if not decision.allowed:
            return DeploymentResult(
                success=False,
                message="Daily deployment quota exhausted",
                error="quota_exhausted",
                remaining_quota=0
            )

        try:
            files = process_upload(deploy_request.file_name, deploy_request.file_data)
        except UploadValidationError as e:
            return DeploymentResult(success=False, message=str(e), error=e.reason)

        if not self.provider_client.is_configured:
            logger.error("Deployment token is not configured")
            return DeploymentResult(
                success=False,
                message="Deployment token is not configured",
                error="missing_credential"
            )

        logger.info(f"Deploying '{name}' with {len(files)} file(s) for client {client_id}")
        try:
            deployment = self.provider_client.create_deployment(name, files)
        except DeploymentProviderError as e:
            return self._handle_provider_error(e, client_id)

        record = self.quota_manager.charge_success(client_id)
        url = deployment.public_url(name, self.provider_domain)
        logger.info(f"Deployment {deployment.id} ready at {url}")

        return DeploymentResult(
            success=True,
            url=url,
            deployment_id=deployment.id,
            remaining_quota=record.remaining
        )

    def _handle_provider_error(self, error: DeploymentProviderError, client_id: str) -> DeploymentResult:
        if error.is_name_taken:
            record = self.quota_manager.charge_name_taken(client_id)
            return DeploymentResult(
                success=False,
                message="Name is already taken, try another one",
                error="name_taken",
                remaining_quota=record.remaining
            )

        return DeploymentResult(
            success=False,
            message=error.provider_message or "Deployment failed",
            error="provider_error"
        )
