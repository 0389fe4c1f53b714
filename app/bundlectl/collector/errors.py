"""Exceptions raised by the collector package."""


class CollectorError(Exception):
    """Base exception for collection errors."""


class PatternSyntaxError(CollectorError, ValueError):
    """Raised when an include/exclude glob pattern is malformed.

    Attributes:
        pattern: The offending pattern as supplied by the caller.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")


class SinkError(CollectorError):
    """Raised when a sink fails to consume an entry."""


class PermissionDeniedError(CollectorError):
    """Raised when a caller lacks a permission a component requires."""
