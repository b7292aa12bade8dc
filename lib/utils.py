# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4


# =============================================================================
# Identifier / Timestamp Utilities
# =============================================================================

def new_record_id() -> str:
    """Generate a fresh identifier for a stored record."""
    return str(uuid4())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None = None) -> datetime:
    """
    Return "now", guaranteed to be later than `previous`.

    Modification timestamps must strictly increase on every mutation, even
    when two mutations land within the clock's resolution.

    Args:
        previous: The timestamp being replaced (if any)

    Returns:
        A UTC datetime strictly greater than `previous`
    """
    now = utcnow()
    if previous is not None:
        if previous.tzinfo is None:
            previous = previous.replace(tzinfo=timezone.utc)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    return now


def is_blank(value: str | None) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


def normalize_name(name: str) -> str:
    """
    Normalize a company/platform name for lookups.

    Example:
        normalize_name("  LinkedIn ")  # "linkedin"
    """
    return name.strip().lower()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyStoreError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_STORE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
