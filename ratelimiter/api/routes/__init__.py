from __future__ import annotations

from ratelimiter.api.routes.health import router as health_router
from ratelimiter.api.routes.hello import router as hello_router

__all__ = ["health_router", "hello_router"]
