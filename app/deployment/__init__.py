"""
Static site deployment module.
Validates HTML/ZIP uploads and publishes them through the hosting provider API.
"""

from .models import UploadFile, DeployRequest, DeploymentRecord, DeploymentResult
from .provider import VercelClient, DeploymentProviderError
from .services import DeploymentService
from .upload_processor import UploadValidationError, is_safe_file, process_upload

__all__ = [
    "UploadFile",
    "DeployRequest",
    "DeploymentRecord",
    "DeploymentResult",
    "VercelClient",
    "DeploymentProviderError",
    "DeploymentService",
    "UploadValidationError",
    "is_safe_file",
    "process_upload",
]
