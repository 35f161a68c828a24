"""In-memory state store.

Notes:
- Per-process only: running multiple workers gives each its own counters.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading

from ratelimiter.adapters.state_store.base import AbstractStateStore, CounterRecord
from ratelimiter.core.errors import StateNotFoundError


class InMemoryStateStore(AbstractStateStore):
    """Dict-backed store used by tests and single-process local runs.

    Records are immutable, so they are stored as-is and handed back without
    copying.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, CounterRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, key: str) -> CounterRecord:
        with self._lock:
            record = self._records.get(key)
        if record is None:
            raise StateNotFoundError(
                code="state_not_found",
                message="Rate limit state not found",
                details={"key": key},
            )
        return record

    def save(self, record: CounterRecord) -> None:
        with self._lock:
            self._records[record.key] = record

    def list_keys(self) -> list[str]:
        with self._lock:
            return list(self._records)

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)
