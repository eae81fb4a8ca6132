"""Shared error types for timecapsule.

Failures are reported to the caller as exceptions and turned into user-facing
messages by the presentation layer. Nothing here is fatal to the process.
"""


class TimeCapsuleError(Exception):
    """Base error for timecapsule."""


class ValidationError(TimeCapsuleError):
    """A required field was blank when creating a capsule."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class PersistenceError(TimeCapsuleError):
    """The backing store rejected a write."""


class NotFoundError(TimeCapsuleError):
    """No capsule matches the requested id."""

    def __init__(self, capsule_id, message: str | None = None):
        self.capsule_id = capsule_id
        super().__init__(message or f"Capsule {capsule_id} not found")


class AccessDeniedError(TimeCapsuleError):
    """Password missing or wrong for a password-protected capsule."""
