"""
Quota manager for per-client deployment limits and cooldowns.
"""

import hashlib
import logging
import math
from contextlib import contextmanager
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Dict, Iterator, List, Optional

from flask import request

from .models import ClientQuotaRecord, QuotaConfig, QuotaDecision
from .store import QuotaStore

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "unknown"


def get_client_id(address: Optional[str], user_agent: Optional[str]) -> str:
    """Fingerprint a client from its network address and agent string.

    Identical address + agent pairs always map to the same 32-character
    hex digest. There is no other notion of client identity.
    """
    raw = (address or UNKNOWN_ADDRESS) + (user_agent or "")
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class QuotaManager:
    """
    Tracks the daily deployment budget and post-deployment cooldown of
    every client fingerprint.

    Record lifecycle:
    - created with the full daily limit on first lookup
    - reset to the daily limit on the first lookup of a new calendar day
    - debited on successful deployments (which also start a cooldown)
      and on name-taken rejections (which do not)
    - evicted once its last deployment is older than the eviction window
    """

    def __init__(
        self,
        config: QuotaConfig,
        store: QuotaStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize QuotaManager.

        Args:
            config: QuotaConfig with limits and timings
            store: Backend holding the client records
            clock: Returns the current local time
        """
        self.config = config
        self.store = store
        self.clock = clock
        self._locks_guard = Lock()
        self._client_locks: Dict[str, List] = {}  # client_id -> [Lock, holders]

    @property
    def cooldown(self) -> timedelta:
        return timedelta(seconds=self.config.cooldown_seconds)

    @property
    def eviction_window(self) -> timedelta:
        return timedelta(hours=self.config.eviction_hours)

    def get_client_address(self) -> str:
        """Get the forwarded client address of the current request."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded
        return request.remote_addr or UNKNOWN_ADDRESS

    def identify_request(self) -> str:
        """Derive the client fingerprint of the current request."""
        return get_client_id(
            self.get_client_address(),
            request.headers.get("User-Agent", "")
        )

    @contextmanager
    def client_lock(self, client_id: str) -> Iterator[None]:
        """
        Serialize lookup, admission and charge for a single client.

        Requests from different clients never wait on each other.
        """
        with self._locks_guard:
            entry = self._client_locks.setdefault(client_id, [Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._client_locks[client_id]

    def get_quota_info(self, client_id: str, now: Optional[datetime] = None) -> ClientQuotaRecord:
        """
        Look up (creating or resetting as needed) the record of a client.

        Every lookup also sweeps idle records out of the store.

        Args:
            client_id: Client fingerprint
            now: Current time, defaults to the manager clock

        Returns:
            The client's current ClientQuotaRecord
        """
        now = now or self.clock()
        today = now.date()

        record = self.store.get(client_id)
        if record is None:
            record = ClientQuotaRecord.fresh(self.config.daily_limit, today)
            self.store.put(client_id, record)
        elif record.last_reset != today:
            record.remaining = self.config.daily_limit
            record.last_reset = today
            record.cooldown_until = None
            self.store.put(client_id, record)
            logger.info(f"Daily quota reset: {client_id}")

        self.store.sweep(now, self.eviction_window)
        return record

    def check_admission(self, record: ClientQuotaRecord, now: Optional[datetime] = None) -> QuotaDecision:
        """
        Decide whether a client may deploy right now.

        An active cooldown is reported before an exhausted quota.
        """
        now = now or self.clock()

        if record.is_cooling_down(now):
            return QuotaDecision(
                allowed=False,
                remaining=record.remaining,
                reason="cooldown",
                remaining_seconds=self._seconds_left(record, now)
            )

        if record.remaining <= 0:
            return QuotaDecision(allowed=False, remaining=0, reason="quota_exhausted")

        return QuotaDecision(allowed=True, remaining=record.remaining)

    def quota_status(self, client_id: str, now: Optional[datetime] = None) -> QuotaDecision:
        """Check quota without consuming. Useful for UI display."""
        now = now or self.clock()
        record = self.get_quota_info(client_id, now)

        if record.is_cooling_down(now):
            return QuotaDecision(
                allowed=False,
                remaining=record.remaining,
                reason="cooldown",
                remaining_seconds=self._seconds_left(record, now)
            )
        return QuotaDecision(allowed=record.remaining > 0, remaining=record.remaining)

    def charge_success(self, client_id: str, now: Optional[datetime] = None) -> ClientQuotaRecord:
        """Debit one deployment and start a fresh cooldown."""
        now = now or self.clock()
        record = self.get_quota_info(client_id, now)
        record.remaining = max(0, record.remaining - 1)
        record.last_deployment_at = now
        record.cooldown_until = now + self.cooldown
        self.store.put(client_id, record)

        logger.info(f"Charged deployment: {client_id} -> {record.remaining}/{self.config.daily_limit}")
        return record

    def charge_name_taken(self, client_id: str, now: Optional[datetime] = None) -> ClientQuotaRecord:
        """Debit one deployment without touching the cooldown."""
        record = self.get_quota_info(client_id, now)
        record.remaining = max(0, record.remaining - 1)
        self.store.put(client_id, record)

        logger.info(f"Charged name-taken attempt: {client_id} -> {record.remaining}/{self.config.daily_limit}")
        return record

    @staticmethod
    def _seconds_left(record: ClientQuotaRecord, now: datetime) -> int:
        return math.ceil((record.cooldown_until - now).total_seconds())
