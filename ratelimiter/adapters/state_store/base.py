"""State store interfaces and the per-identity counter record.

The rate limiter should depend on this abstraction (not a concrete backend)
so Redis can be swapped for an in-memory fake in tests without touching the
decision logic.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass

from ratelimiter.core.errors import StoreError


@dataclass(frozen=True)
class CounterRecord:
    """Request counter for a single client identity.

    Attributes:
        key: Client identity (usually an IP address); also the storage key.
        count: Requests admitted since the last reset.
        blocked_at: UNIX epoch seconds when the identity was blocked (0 when not blocked).
    """

    key: str
    count: int = 0
    blocked_at: int = 0

    @classmethod
    def new(cls, key: str) -> "CounterRecord":
        return cls(key=key, count=0, blocked_at=0)

    def is_blocked(self, now: float, block_duration: float) -> bool:
        """Whether the block window is still active at ``now``.

        Release is computed at read time; ``blocked_at`` is never cleared.

        Args:
            now: Current UNIX time in seconds.
            block_duration: Block window length in seconds.
        """
        if self.blocked_at <= 0:
            return False
        return now < self.blocked_at + block_duration

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "CounterRecord":
        """Decode a stored record.

        Raises:
            StoreError: If the payload is not a valid counter record.
        """
        try:
            data = json.loads(raw)
            return cls(
                key=str(data["key"]),
                count=int(data.get("count", 0)),
                blocked_at=int(data.get("blocked_at", 0)),
            )
        except (ValueError, TypeError, KeyError, OverflowError) as exc:
            raise StoreError(
                code="store_invalid_payload",
                message=f"Stored counter record could not be decoded: {exc}",
                details={"operation": "decode"},
            ) from exc


class AbstractStateStore(ABC):
    """Interface for counter record persistence.

    Implementations raise ``StateNotFoundError`` from ``get`` for unknown keys
    and ``StoreError`` for any other failure. They must tolerate concurrent
    calls from request threads and the cleanup sweep.
    """

    @abstractmethod
    def get(self, key: str) -> CounterRecord:
        """Load the record stored under ``key``.

        Raises:
            StateNotFoundError: If no record exists.
            StoreError: If the backend fails.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, record: CounterRecord) -> None:
        """Persist ``record`` under ``record.key``, replacing any previous value."""
        raise NotImplementedError

    @abstractmethod
    def list_keys(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. No-op by default."""
