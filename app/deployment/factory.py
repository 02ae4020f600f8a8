from typing import Dict, Any, Optional

import requests

from .provider import VercelClient, DEFAULT_API_BASE
from .services import DeploymentService
from .routes import create_deployment_routes


def create_deployment_module(
    quota_manager,
    token: Optional[str],
    api_base: str = DEFAULT_API_BASE,
    provider_domain: str = "vercel.app",
    timeout_seconds: float = 30,
    session: Optional[requests.Session] = None
) -> Dict[str, Any]:
    """Create and configure all deployment components."""

    provider_client = VercelClient(
        token=token,
        api_base=api_base,
        timeout=timeout_seconds,
        session=session
    )

    deployment_service = DeploymentService(
        quota_manager=quota_manager,
        provider_client=provider_client,
        provider_domain=provider_domain
    )

    deployment_bp = create_deployment_routes(deployment_service)

    return {
        "blueprint": deployment_bp,
        "service": deployment_service,
        "provider_client": provider_client
    }
