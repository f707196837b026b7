"""Application-level exception types.

This module defines the record store's error taxonomy. Every engine failure
is one of these, so the HTTP layer can map them to status codes and log
them consistently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class FieldErrorDetail(TypedDict):
    """A single failed schema constraint."""

    field: str
    message: str


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    record_id: int | float
    errors: list[FieldErrorDetail]
    limit: int
    remaining: int
    reset_at: int
    retry_after: int


@dataclass
class AppError(Exception):
    """Base error for record store failures.

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
    """Raised when a candidate record does not satisfy the schema."""


class NotFoundAppError(AppError):
    """Raised when an update/delete references an id that is not stored."""


class StorageAppError(AppError):
    """Raised when the document file cannot be read, parsed or written."""


class RateLimitAppError(AppError):
    """Raised when a client exhausted its quota for the current window."""
