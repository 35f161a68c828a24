"""Rate limiting dependency for FastAPI routes.

This module wires the rate decision engine into the HTTP layer:

- The client identity is the remote address reported by the ASGI server
  (already stripped of its port).
- The client token is read from the configured header (``API_KEY`` by
  default); a missing header means no token.
- A deny is raised as ``RateLimitExceededError`` and rendered as HTTP 429 by
  the global exception handlers.

The dependency is a plain ``def`` so FastAPI runs it in its threadpool; the
engine performs blocking store I/O.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from ratelimiter.core.config import settings
from ratelimiter.core.errors import ConfigurationAppError, InvalidRemoteAddressError, RateLimitExceededError
from ratelimiter.core.logging import hash_identity
from ratelimiter.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def get_rate_limiter(request: Request) -> RateLimiter | None:
    """Return the limiter built during application startup.

    Returns None when rate limiting is disabled.

    Raises:
        ConfigurationAppError: If the application was started without a limiter.
    """

    if not settings.rate_limit.enabled:
        return None

    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        raise ConfigurationAppError(
            code="rate_limiter_not_initialized",
            message="Rate limiter is not available",
        )
    return limiter


def extract_identity(request: Request) -> str:
    """Derive the rate limit identity from the request's remote address.

    Raises:
        InvalidRemoteAddressError: If the server did not report a client address.
    """

    if request.client is None or not request.client.host:
        raise InvalidRemoteAddressError(
            code="invalid_remote_address",
            message="invalid remote address",
        )
    return request.client.host


def enforce_rate_limit(
    request: Request,
    limiter: Annotated[RateLimiter | None, Depends(get_rate_limiter)],
) -> None:
    """FastAPI dependency enforcing the per-identity request budget.

    Args:
        request: FastAPI request.
        limiter: Rate decision engine (overridable in tests).

    Raises:
        RateLimitExceededError: When the engine denies the request.
        InvalidRemoteAddressError: When the client address is unavailable.
    """

    if limiter is None or not settings.rate_limit.enabled:
        return

    identity = extract_identity(request)
    token = request.headers.get(settings.rate_limit.token_header, "")

    if limiter.allow(identity, token):
        return

    logger.warning(
        "rate_limit.rejected",
        extra={
            "identity_hash": hash_identity(identity),
            "token_present": bool(token),
            "limit": limiter.limit_for(token),
            "path": request.url.path,
        },
    )
    raise RateLimitExceededError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded",
    )
