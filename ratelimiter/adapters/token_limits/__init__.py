"""Token limit resolvers: map a client token to an override request budget."""

from ratelimiter.adapters.token_limits.base import AbstractTokenLimitResolver
from ratelimiter.adapters.token_limits.static import TokenLimitList, parse_token_limits

__all__ = [
    "AbstractTokenLimitResolver",
    "TokenLimitList",
    "parse_token_limits",
]
