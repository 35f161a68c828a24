"""Application factory for the rate limiter service.

Centralizes app construction (metadata, middleware, handlers, routers) and
the lifecycle of the rate decision engine: the state store and engine are
built on startup and closed on shutdown, which also stops the cleanup sweep.
"""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from ratelimiter.adapters.state_store.factory import create_state_store
from ratelimiter.adapters.token_limits.static import TokenLimitList
from ratelimiter.api.routes import health_router, hello_router
from ratelimiter.core.config import Settings, settings
from ratelimiter.core.exception_handlers import setup_exception_handlers
from ratelimiter.core.logging import configure_logging
from ratelimiter.core.middleware import request_id_middleware
from ratelimiter.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def build_rate_limiter(
    cfg: Settings,
    *,
    stop_event: threading.Event | None = None,
) -> RateLimiter:
    """Assemble store, token budgets and engine from configuration.

    Raises:
        StoreError: If the configured store cannot be reached.
        ConfigurationAppError: If the store backend is unknown.
    """
    store = create_state_store(cfg.store)
    token_limits = TokenLimitList.from_string(cfg.rate_limit.token_list)

    limiter = RateLimiter(
        default_limit=cfg.rate_limit.default_limit,
        cleanup_interval_seconds=cfg.rate_limit.cleanup_interval_seconds,
        block_duration_seconds=cfg.rate_limit.block_duration_seconds,
        token_limits=token_limits,
        store=store,
        stop_event=stop_event,
    )
    logger.info(
        "rate_limiter.configured",
        extra={
            "store_backend": cfg.store.store_backend,
            "default_limit": cfg.rate_limit.default_limit,
            "token_budgets": len(token_limits),
            "block_s": cfg.rate_limit.block_duration_seconds,
            "cleanup_interval_s": cfg.rate_limit.cleanup_interval_seconds,
        },
    )
    return limiter


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the engine on startup unless one was injected, and close it on shutdown."""
    if getattr(app.state, "rate_limiter", None) is not None:
        # Injected by the caller, who owns its lifecycle
        yield
        return

    shutdown = threading.Event()
    limiter = build_rate_limiter(settings, stop_event=shutdown)
    app.state.rate_limiter = limiter
    try:
        yield
    finally:
        shutdown.set()
        limiter.close()
        limiter.store.close()
        app.state.rate_limiter = None
        logger.info("rate_limiter.stopped")


def create_app(rate_limiter: RateLimiter | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Optional pre-built engine (tests, embedding). When
            omitted, one is built from settings at startup.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Rate Limiter",
        description=(
            "Per-identity request budgets backed by a shared key-value store. "
            "Clients are identified by IP address; an API_KEY header can grant "
            "a larger budget. Exceeding the budget blocks the client for a "
            "configurable cool-down period."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.rate_limiter = rate_limiter

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(hello_router)
    app.include_router(health_router)

    return app
