"""Error types shared by the store, the service and the HTTP layer."""

from typing import Optional


class ExpenseTrackerError(Exception):
    """Base class for expense tracker failures."""


class ValidationError(ExpenseTrackerError, ValueError):
    """Raised when a creation request breaks a business rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class StorageError(ExpenseTrackerError):
    """Raised when the backing store fails or returns unreadable data."""
