"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

DENIAL_MESSAGE = "You may only request 3 times per minute."


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    strategy: str
    operation: str
    report: str
    request_id: str
    context: NotRequired[dict[str, Any]]


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


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class StoreUnavailableError(AppError):
    """Raised when the shared counter store cannot serve a command."""


class QueryExecutionError(AppError):
    """Raised when the relational store fails to execute a report query."""


@dataclass
class RateLimitExceededError(AppError):
    """Raised by the decision gate when a client has no tokens left.

    Not a failure: the handler turns it into the fixed 429 denial payload.
    """

    code: str = "rate_limit_exceeded"
    message: str = DENIAL_MESSAGE
    details: ErrorDetails | None = None
    retry_after_seconds: int | None = None
