"""
Factory for creating quota management components.
"""

from datetime import datetime
from typing import Callable, Optional

from .models import QuotaConfig
from .manager import QuotaManager
from .store import InMemoryQuotaStore, QuotaStore


def create_quota_module(
    daily_limit: int = 50,
    cooldown_seconds: int = 300,
    eviction_hours: int = 24,
    store: Optional[QuotaStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> dict:
    """
    Create quota management module.

    Args:
        daily_limit: Deployments allowed per client per day
        cooldown_seconds: Wait enforced after a successful deployment
        eviction_hours: Idle time after which a record is dropped
        store: Record backend, in-memory when omitted
        clock: Time source, replaceable in tests

    Returns:
        Dictionary with:
        - manager: QuotaManager instance
        - config: QuotaConfig instance
        - store: QuotaStore instance
    """
    config = QuotaConfig(
        daily_limit=daily_limit,
        cooldown_seconds=cooldown_seconds,
        eviction_hours=eviction_hours
    )

    store = store or InMemoryQuotaStore()

    manager = QuotaManager(
        config=config,
        store=store,
        clock=clock
    )

    return {
        "manager": manager,
        "config": config,
        "store": store
    }
