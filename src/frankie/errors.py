"""Frankie exception hierarchy."""

from __future__ import annotations


class FrankieError(Exception):
    """Base for all frankie-specific errors."""


class InvalidRoutePattern(FrankieError, ValueError):  # noqa: N818
    """Raised at registration time for a malformed route pattern."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")


class RouterFrozenError(FrankieError, RuntimeError):
    """Raised when routes or middleware are added after the app started serving."""
