"""Token budgets parsed from a configuration string.

The configured list is a comma-separated set of integers. Each value ``N``
defines the token ``Token<N>`` with a budget of ``N`` requests, so
``"10,50"`` grants ``Token10`` ten requests and ``Token50`` fifty.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ratelimiter.adapters.token_limits.base import AbstractTokenLimitResolver

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "Token"


def parse_token_limits(limits: str | None) -> dict[str, int]:
    """Parse a comma-separated budget list into a token-to-budget mapping.

    Blank and non-integer entries are skipped.

    Examples:
        >>> parse_token_limits("10,20")
        {'Token10': 10, 'Token20': 20}
        >>> parse_token_limits("10, abc,,30")
        {'Token10': 10, 'Token30': 30}
        >>> parse_token_limits(None)
        {}
    """
    if not limits or not limits.strip():
        return {}

    parsed: dict[str, int] = {}
    for raw in limits.split(","):
        value = raw.strip()
        if not value:
            continue
        try:
            limit = int(value)
        except ValueError:
            logger.warning("token_limits.invalid_entry", extra={"entry": value})
            continue
        parsed[f"{TOKEN_PREFIX}{value}"] = limit
    return parsed


class TokenLimitList(AbstractTokenLimitResolver):
    """Fixed token budgets, looked up by exact token match."""

    def __init__(self, limits: Mapping[str, int] | None = None) -> None:
        self._limits: dict[str, int] = dict(limits or {})

    @classmethod
    def from_string(cls, limits: str | None) -> "TokenLimitList":
        return cls(parse_token_limits(limits))

    def __len__(self) -> int:
        return len(self._limits)

    def limit_for(self, token: str) -> int:
        return self._limits.get(token, 0)
