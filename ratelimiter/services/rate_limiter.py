"""Rate decision engine.

Answers, per request, whether a client identity may proceed. Each identity
owns one counter record in the state store:

- Open: requests are counted until the effective budget is reached.
- Blocked: the request that finds the budget exhausted resets the counter
  and stamps ``blocked_at``; every request is denied until
  ``blocked_at + block_duration`` has passed.
- Release is computed at read time. Once the block window has elapsed the
  next request is evaluated as Open again.

Known limitation:
    Load, decide and persist are three separate store calls. Concurrent
    requests for the same identity can all read the same count and all be
    admitted, overshooting the budget. Closing that gap needs an atomic
    increment-and-compare in the store; a process-local lock would not help
    across workers.

Failure policy:
    ``allow`` never raises. Any store failure is logged and answered with a
    deny, so clients see internal errors as "rate limit exceeded".
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ratelimiter.adapters.state_store.base import AbstractStateStore, CounterRecord
from ratelimiter.adapters.token_limits.base import AbstractTokenLimitResolver
from ratelimiter.core.errors import StateNotFoundError, StoreError
from ratelimiter.core.logging import hash_identity
from ratelimiter.services.cleanup import CleanupSweeper

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-identity request budget with a cool-down block window."""

    def __init__(
        self,
        *,
        default_limit: int,
        cleanup_interval_seconds: float,
        block_duration_seconds: float,
        token_limits: AbstractTokenLimitResolver,
        store: AbstractStateStore,
        clock: Callable[[], float] = time.time,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the engine and start the cleanup sweep when enabled.

        Args:
            default_limit: Requests allowed per identity without a token override.
            cleanup_interval_seconds: Sweep period; 0 disables the sweep.
            block_duration_seconds: How long an identity stays blocked.
            token_limits: Resolver for per-token budget overrides.
            store: State store holding counter records.
            clock: Time source returning UNIX time in seconds.
            stop_event: Optional shutdown signal that also stops the sweep.

        Raises:
            ValueError: If any numeric argument is out of range.
        """
        if default_limit < 1:
            raise ValueError("default_limit must be >= 1")
        if cleanup_interval_seconds < 0:
            raise ValueError("cleanup_interval_seconds must be >= 0")
        if block_duration_seconds < 0:
            raise ValueError("block_duration_seconds must be >= 0")

        self._default_limit = default_limit
        self._block_duration = block_duration_seconds
        self._token_limits = token_limits
        self._store = store
        self._clock = clock

        self._sweeper: CleanupSweeper | None = None
        if cleanup_interval_seconds > 0:
            self._sweeper = CleanupSweeper(
                store,
                interval_seconds=cleanup_interval_seconds,
                stop_event=stop_event,
            )
            self._sweeper.start()

    @property
    def default_limit(self) -> int:
        return self._default_limit

    @property
    def block_duration_seconds(self) -> float:
        return self._block_duration

    @property
    def store(self) -> AbstractStateStore:
        return self._store

    @property
    def sweeper(self) -> CleanupSweeper | None:
        return self._sweeper

    def limit_for(self, token: str) -> int:
        """Effective budget for ``token``: its override if positive, else the default."""
        override = self._token_limits.limit_for(token)
        return override if override > 0 else self._default_limit

    def allow(self, identity: str, token: str = "") -> bool:
        """Decide whether a request from ``identity`` may proceed.

        Args:
            identity: Client identity, typically the remote IP address.
            token: Optional client token used to look up an override budget.

        Returns:
            bool: True to admit the request, False to reject it.
        """
        identity_hash = hash_identity(identity)

        try:
            record = self._load(identity)
        except StoreError as exc:
            self._log_store_error("load", exc, identity_hash)
            return False

        now = self._clock()
        if record.is_blocked(now, self._block_duration):
            logger.debug(
                "rate_limit.blocked",
                extra={"identity_hash": identity_hash, "blocked_at": record.blocked_at},
            )
            return False

        limit = self.limit_for(token)

        if record.count >= limit:
            blocked = CounterRecord(key=identity, count=0, blocked_at=int(now))
            try:
                self._store.save(blocked)
            except StoreError as exc:
                self._log_store_error("save_blocked", exc, identity_hash)
                return False
            logger.info(
                "rate_limit.block_started",
                extra={
                    "identity_hash": identity_hash,
                    "limit": limit,
                    "block_s": self._block_duration,
                },
            )
            return False

        try:
            self._store.save(CounterRecord(key=identity, count=record.count + 1, blocked_at=0))
        except StoreError as exc:
            self._log_store_error("save_count", exc, identity_hash)
            return False

        logger.debug(
            "rate_limit.allowed",
            extra={"identity_hash": identity_hash, "count": record.count + 1, "limit": limit},
        )
        return True

    def close(self) -> None:
        """Stop the cleanup sweep, if running."""
        if self._sweeper is not None:
            self._sweeper.stop()

    def __enter__(self) -> "RateLimiter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _load(self, identity: str) -> CounterRecord:
        """Load the identity's record, creating and persisting it on first contact."""
        try:
            return self._store.get(identity)
        except StateNotFoundError:
            record = CounterRecord.new(identity)
            self._store.save(record)
            return record

    def _log_store_error(self, operation: str, exc: StoreError, identity_hash: str) -> None:
        logger.error(
            "rate_limit.store_error",
            extra={
                "operation": operation,
                "identity_hash": identity_hash,
                "error_code": exc.code,
                "error_message": exc.message,
            },
        )
