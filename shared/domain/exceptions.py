"""
Domain Errors

Errors raised by the scheduling core. They are detected locally and
surfaced to the caller synchronously; nothing here is retried.
"""


class DomainError(Exception):
    """Base class for errors raised by domain code."""


class InvalidInterval(DomainError, ValueError):
    """Raised when a stay ends at or before its start."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Check-out ({end}) must be after check-in ({start})")


class NotFound(DomainError, LookupError):
    """Raised when a referenced apartment or booking does not exist."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")
