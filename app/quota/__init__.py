"""
Quota management module for per-client deployment limits.
Tracks a daily deployment budget and a post-deployment cooldown per client fingerprint.
"""

from .models import ClientQuotaRecord, QuotaConfig, QuotaDecision
from .manager import QuotaManager, get_client_id
from .store import InMemoryQuotaStore, QuotaStore

__all__ = [
    "ClientQuotaRecord",
    "QuotaConfig",
    "QuotaDecision",
    "QuotaManager",
    "QuotaStore",
    "InMemoryQuotaStore",
    "get_client_id",
]
