"""Custom exception hierarchy for the thought graph engine."""

from __future__ import annotations


class ThoughtGraphError(Exception):
    """Base exception for all thought graph errors."""


class RecordValidationError(ThoughtGraphError):
    """Thought record is malformed or relationally inconsistent."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ObserverOverflowError(ThoughtGraphError):
    """Observer fell too far behind the delta stream and was dropped."""


class ServiceNotInitializedError(ThoughtGraphError):
    """A shared service was requested before application startup."""
