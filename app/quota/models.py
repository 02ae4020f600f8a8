"""
Data models for the deployment quota system.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class QuotaConfig:
    """Configuration for per-client quota limits."""
    daily_limit: int = 50
    cooldown_seconds: int = 300
    eviction_hours: int = 24


@dataclass
class ClientQuotaRecord:
    """Daily quota and cooldown state for one client fingerprint."""
    remaining: int
    last_reset: date
    last_deployment_at: Optional[datetime] = None
    cooldown_until: Optional[datetime] = None  # None means no active cooldown

    def is_cooling_down(self, now: datetime) -> bool:
        return self.cooldown_until is not None and self.cooldown_until > now

    @classmethod
    def fresh(cls, daily_limit: int, today: date) -> "ClientQuotaRecord":
        return cls(remaining=daily_limit, last_reset=today)


@dataclass
class QuotaDecision:
    """Result of an admission check."""
    allowed: bool
    remaining: int
    reason: Optional[str] = None  # "cooldown", "quota_exhausted"
    remaining_seconds: Optional[int] = None

    @property
    def cooldown(self) -> bool:
        return self.reason == "cooldown"
