"""State store adapters.

The rate limiter depends only on ``AbstractStateStore``; the Redis adapter is
used in deployments and the in-memory adapter in tests and local runs.
"""

from ratelimiter.adapters.state_store.base import AbstractStateStore, CounterRecord
from ratelimiter.adapters.state_store.factory import create_state_store
from ratelimiter.adapters.state_store.in_memory import InMemoryStateStore
from ratelimiter.adapters.state_store.redis_store import RedisStateStore

__all__ = [
    "AbstractStateStore",
    "CounterRecord",
    "InMemoryStateStore",
    "RedisStateStore",
    "create_state_store",
]
