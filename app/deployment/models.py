from dataclasses import dataclass
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class UploadFile:
    """A single file of the site being deployed."""
    filepath: str
    content: str  # base64 encoded

    def to_provider_file(self) -> Dict[str, str]:
        return {"file": self.filepath, "data": self.content}


@dataclass
class DeployRequest:
    """Fields of a deploy request body."""
    name: Optional[str] = None
    file_data: Optional[str] = None
    file_name: Optional[str] = None

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "DeployRequest":
        """Build from a parsed JSON body; non-string values count as absent."""
        if not isinstance(data, dict):
            return cls()

        def _text(key: str) -> Optional[str]:
            value = data.get(key)
            return value if isinstance(value, str) else None

        return cls(
            name=_text("name"),
            file_data=_text("fileData"),
            file_name=_text("fileName")
        )

    def is_complete(self) -> bool:
        return bool(self.name and self.file_data and self.file_name)


class DeploymentRecord(BaseModel):
    """Deployment returned by the hosting provider."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, description="Provider deployment id")
    url: Optional[str] = Field(default=None, description="Hostname assigned to the deployment")

    def public_url(self, name: str, provider_domain: str) -> str:
        """Public URL of the site, falling back to the project subdomain."""
        if self.url:
            return f"https://{self.url}"
        return f"https://{name}.{provider_domain}"


@dataclass
class DeploymentResult:
    """Result of a deploy or quota-check request."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None  # reason code, see routes for status mapping
    url: Optional[str] = None
    deployment_id: Optional[str] = None
    remaining_quota: Optional[int] = None
    cooldown: bool = False
    remaining_seconds: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        """Convert to the JSON body returned to the caller."""
        if self.success:
            return {
                "success": True,
                "url": self.url,
                "deploymentId": self.deployment_id,
                "remainingQuota": self.remaining_quota
            }

        body: Dict[str, Any] = {"error": self.message}
        if self.cooldown:
            body["cooldown"] = True
            body["remainingSeconds"] = self.remaining_seconds
        if self.remaining_quota is not None:
            body["remainingQuota"] = self.remaining_quota
        return body

    def to_quota_response(self) -> Dict[str, Any]:
        """JSON body for a quota-check request."""
        body: Dict[str, Any] = {"remainingQuota": self.remaining_quota}
        if self.cooldown:
            body["cooldown"] = True
            body["remainingSeconds"] = self.remaining_seconds
        return body
