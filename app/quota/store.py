"""
Keyed storage backends for client quota records.
"""

import logging
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Optional

from .models import ClientQuotaRecord

logger = logging.getLogger(__name__)


class QuotaStore:
    """Interface for quota record storage.

    Backends keep one ClientQuotaRecord per client id. ``sweep`` removes
    records whose last deployment is older than ``max_idle`` relative to
    ``now`` and returns how many were removed.
    """

    def get(self, client_id: str) -> Optional[ClientQuotaRecord]:
        raise NotImplementedError

    def put(self, client_id: str, record: ClientQuotaRecord) -> None:
        raise NotImplementedError

    def sweep(self, now: datetime, max_idle: timedelta) -> int:
        raise NotImplementedError


class InMemoryQuotaStore(QuotaStore):
    """Process-local store. Not durable and not shared between instances."""

    def __init__(self):
        self._records: Dict[str, ClientQuotaRecord] = {}
        self._lock = Lock()

    def get(self, client_id: str) -> Optional[ClientQuotaRecord]:
        with self._lock:
            return self._records.get(client_id)

    def put(self, client_id: str, record: ClientQuotaRecord) -> None:
        with self._lock:
            self._records[client_id] = record

    def sweep(self, now: datetime, max_idle: timedelta) -> int:
        with self._lock:
            # Records without a deployment count as zero elapsed time
            stale = [
                client_id for client_id, record in self._records.items()
                if record.last_deployment_at is not None
                and now - record.last_deployment_at > max_idle
            ]
            for client_id in stale:
                del self._records[client_id]

        if stale:
            logger.info(f"Evicted {len(stale)} idle quota record(s)")
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, client_id: str) -> bool:
        with self._lock:
            return client_id in self._records
