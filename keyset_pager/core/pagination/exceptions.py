"""Pagination exceptions.

Both errors are raised before or around query execution and never wrap
failures coming from the executor itself; those propagate unchanged.
"""
from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for pagination failures.

    Attributes:
        message: Error description
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(PaginationError):
    """Invalid pagination configuration.

    Raised at the start of a call, e.g. when no cursor fields were given
    or a direction is not recognised. This is a programming error rather
    than bad client input.
    """

    def __init__(self, message: str, option: str | None = None):
        details = {"option": option} if option else {}
        super().__init__(message, details=details)
        self.option = option


class CursorError(PaginationError):
    """Malformed, truncated or otherwise undecodable cursor.

    Cursors usually come straight from clients, so callers are expected to
    catch this and answer with an "invalid pagination token" response.

    Attributes:
        reason: Short machine-readable reason (e.g. "truncated", "bad_tag")
    """

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or "Invalid cursor", details={"reason": reason})

    def __repr__(self) -> str:
        return f"CursorError(reason={self.reason!r})"


__all__ = [
    "ConfigError",
    "CursorError",
    "PaginationError",
]
