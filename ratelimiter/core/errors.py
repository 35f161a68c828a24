"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    key: str
    operation: str
    backend: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when the service cannot be assembled from its configuration."""


class StoreError(AppError):
    """Raised when the state store cannot complete an operation."""


class StateNotFoundError(StoreError):
    """Raised when the state store holds no record for a key.

    Not a failure for the rate limiter: it triggers lazy record creation.
    """


class RateLimitExceededError(AppError):
    """Raised by the HTTP layer when a request is denied."""


class InvalidRemoteAddressError(AppError):
    """Raised when the client identity cannot be derived from a request."""
