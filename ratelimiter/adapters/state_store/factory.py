"""Factory pattern for creating state store instances."""

from __future__ import annotations

from ratelimiter.adapters.state_store.base import AbstractStateStore
from ratelimiter.adapters.state_store.in_memory import InMemoryStateStore
from ratelimiter.adapters.state_store.redis_store import RedisStateStore
from ratelimiter.core.config import StoreSettings, settings
from ratelimiter.core.errors import ConfigurationAppError


def create_state_store(store_settings: StoreSettings | None = None) -> AbstractStateStore:
    """Instantiate the configured state store backend.

    Args:
        store_settings: Optional store settings; defaults to global settings.

    Returns:
        AbstractStateStore: Ready-to-use store. The Redis backend is verified
            with PING before being returned.

    Raises:
        ConfigurationAppError: If the backend name is unknown.
        StoreError: If Redis cannot be reached.
    """
    cfg = store_settings or settings.store
    backend = cfg.store_backend.strip().lower()

    if backend == "redis":
        return RedisStateStore.connect(
            cfg.redis_url,
            password=cfg.redis_password,
            db=cfg.redis_db,
            socket_timeout=cfg.redis_socket_timeout,
        )

    if backend == "memory":
        return InMemoryStateStore()

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown state store backend: '{backend}'. Supported backends: redis, memory",
        details={"backend": backend},
    )
