"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any import that might load settings,
so the app never tries to reach Redis during tests.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RATELIMIT_STORE_BACKEND", "memory")
os.environ.setdefault("RATELIMIT", "10")
os.environ.setdefault("RATELIMIT_CLEANUP_INTERVAL", "0")
os.environ.setdefault("RATELIMIT_BLOCK_TIME", "5000")
os.environ.setdefault("RATELIMIT_TOKEN_LIST", "50")

from typing import Callable, Iterator  # noqa: E402

import pytest  # noqa: E402

from ratelimiter.adapters.state_store.in_memory import InMemoryStateStore  # noqa: E402
from ratelimiter.adapters.token_limits.static import TokenLimitList  # noqa: E402
from ratelimiter.services.rate_limiter import RateLimiter  # noqa: E402


class FakeClock:
    """Deterministic clock used to drive block windows."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def make_limiter(store: InMemoryStateStore, clock: FakeClock) -> Iterator[Callable[..., RateLimiter]]:
    """Build limiters with test defaults; closes them after the test."""

    created: list[RateLimiter] = []

    def _make(**overrides) -> RateLimiter:
        kwargs = {
            "default_limit": 2,
            "cleanup_interval_seconds": 0,
            "block_duration_seconds": 5,
            "token_limits": TokenLimitList(),
            "store": store,
            "clock": clock,
        }
        kwargs.update(overrides)
        limiter = RateLimiter(**kwargs)
        created.append(limiter)
        return limiter

    yield _make

    for limiter in created:
        limiter.close()
