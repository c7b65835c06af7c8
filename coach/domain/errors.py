"""Error taxonomy for plan operations.

ValidationError, EmptySourceError and NotFoundError are recoverable and meant to
be shown to the user; StorageError wraps backend failures and carries the
backend message verbatim.
"""


class PlanError(Exception):
    """Base class for every error raised by the plan engine."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(PlanError, ValueError):
    """A required field is missing or a value is out of range."""


class EmptySourceError(PlanError):
    """A copy operation found nothing to copy."""


class NotFoundError(PlanError, LookupError):
    """An entry or template id no longer exists."""


class InvalidTransitionError(PlanError):
    """Status change not allowed (only planned entries can be completed or skipped)."""


class StorageError(PlanError):
    """The storage backend failed; prior state is left unchanged."""

    def __init__(self, message: str = "", status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    'PlanError', 'ValidationError', 'EmptySourceError', 'NotFoundError',
    'InvalidTransitionError', 'StorageError'
]
