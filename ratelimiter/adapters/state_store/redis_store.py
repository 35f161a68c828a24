"""Redis-backed state store.

Each identity is stored as a plain Redis string holding the JSON-encoded
counter record, without expiry. Listing uses ``KEYS *``, so the store expects
a logical database dedicated to rate limit counters.
"""

from __future__ import annotations

import logging

import redis

from ratelimiter.adapters.state_store.base import AbstractStateStore, CounterRecord
from ratelimiter.core.errors import StateNotFoundError, StoreError

logger = logging.getLogger(__name__)


def normalize_redis_url(address: str) -> str:
    """Accept both ``host:port`` addresses and full Redis URLs.

    Examples:
        >>> normalize_redis_url("localhost:6379")
        'redis://localhost:6379'
        >>> normalize_redis_url("rediss://cache.internal:6380/2")
        'rediss://cache.internal:6380/2'
    """
    address = address.strip()
    if "://" in address:
        return address
    return f"redis://{address}"


class RedisStateStore(AbstractStateStore):
    """State store using a synchronous redis-py client."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def connect(
        cls,
        address: str,
        *,
        password: str | None = None,
        db: int = 0,
        socket_timeout: float = 5.0,
    ) -> "RedisStateStore":
        """Create a client and verify connectivity with PING.

        Args:
            address: ``host:port`` or ``redis://`` URL.
            password: Optional Redis password.
            db: Logical database number.
            socket_timeout: Connect/read timeout in seconds.

        Returns:
            RedisStateStore bound to a live connection pool.

        Raises:
            StoreError: If Redis cannot be reached.
        """
        url = normalize_redis_url(address)
        client = redis.Redis.from_url(
            url,
            password=password or None,
            db=db,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        try:
            client.ping()
        except redis.RedisError as exc:
            client.close()
            raise StoreError(
                code="store_unavailable",
                message=f"Redis is unreachable: {exc}",
                details={"operation": "ping", "backend": "redis"},
            ) from exc

        logger.info("store.redis_connected", extra={"redis_db": db})
        return cls(client)

    def get(self, key: str) -> CounterRecord:
        try:
            raw = self._client.get(key)
        except UnicodeDecodeError as exc:
            raise StoreError(
                code="store_invalid_payload",
                message=f"Stored counter record could not be decoded: {exc}",
                details={"operation": "decode", "backend": "redis"},
            ) from exc
        except redis.RedisError as exc:
            raise self._store_error("get", exc) from exc
        if raw is None:
            raise StateNotFoundError(
                code="state_not_found",
                message="Rate limit state not found",
                details={"key": key},
            )
        return CounterRecord.from_json(raw)

    def save(self, record: CounterRecord) -> None:
        try:
            self._client.set(record.key, record.to_json())
        except redis.RedisError as exc:
            raise self._store_error("save", exc) from exc

    def list_keys(self) -> list[str]:
        try:
            return list(self._client.keys("*"))
        except redis.RedisError as exc:
            raise self._store_error("list_keys", exc) from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise self._store_error("delete", exc) from exc

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _store_error(operation: str, exc: Exception) -> StoreError:
        return StoreError(
            code="store_unavailable",
            message=f"Redis {operation} failed: {exc}",
            details={"operation": operation, "backend": "redis"},
        )
