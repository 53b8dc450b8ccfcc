"""Expense tracker API: record expenses, list them, find the largest one."""

from .errors import ExpenseTrackerError, StorageError, ValidationError

__version__ = "1.0.0"

__all__ = ["ExpenseTrackerError", "StorageError", "ValidationError", "__version__"]
