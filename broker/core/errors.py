"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    http_status: int
    url: str
    attempts: int
    cause: str
    platform: str
    hint: str
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
    """Raised when caller input or configuration is invalid."""


class TransportAppError(AppError):
    """Raised when an upstream call fails with a non-retryable outcome.

    Covers non-2xx statuses other than 429, connection-level failures,
    undecodable bodies, and an exhausted throttling attempt ceiling.
    """

    @property
    def status_code(self) -> int | None:
        """HTTP status returned by the upstream, if one was received."""
        if not self.details:
            return None
        return self.details.get("http_status")


class PayloadAppError(AppError):
    """Raised when the upstream answered 2xx with an unusable payload."""
