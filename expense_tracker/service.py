"""Business rules for expenses.

``ExpenseService`` validates creation requests before anything touches
the database, stamps new records with an id and a UTC timestamp, and
turns stored rows back into ``ExpenseRecord`` values.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

import pydantic

from .crud import ExpenseStore
from .errors import StorageError, ValidationError
from .models import Expense
from .schemas import ExpenseCreate, ExpenseRecord

LOGGER = logging.getLogger(__name__)

MIN_AMOUNT = 0.01
MIN_CATEGORY_LENGTH = 1
MAX_CATEGORY_LENGTH = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_expense(request: ExpenseCreate) -> None:
    """Raise ``ValidationError`` for the first rule ``request`` breaks.

    The category is checked as given: it is not trimmed, so a run of
    spaces is a valid category.
    """
    amount = request.amount
    if not math.isfinite(amount):
        raise ValidationError("Amount must be a finite number", field="amount")
    if amount < MIN_AMOUNT:
        raise ValidationError(
            f"Amount must be at least {MIN_AMOUNT}", field="amount"
        )
    if not MIN_CATEGORY_LENGTH <= len(request.category) <= MAX_CATEGORY_LENGTH:
        raise ValidationError(
            f"Category must be between {MIN_CATEGORY_LENGTH} and "
            f"{MAX_CATEGORY_LENGTH} characters",
            field="category",
        )
    try:
        request.category.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError(
            "Category must be valid UTF-8 text", field="category"
        ) from exc


class ExpenseService:
    def __init__(
        self,
        store: ExpenseStore,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ):
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    def add_expense(self, request: ExpenseCreate) -> ExpenseRecord:
        try:
            validate_expense(request)
        except ValidationError as exc:
            LOGGER.info("Rejected expense (%s): %s", exc.field, exc.message)
            raise

        record = ExpenseRecord(
            id=self._id_factory(),
            amount=request.amount,
            category=request.category,
            occurred_at=self._clock(),
        )
        self.store.insert(record)
        LOGGER.info("Recorded expense %s (%s %s)", record.id, record.category, record.amount)
        return record

    def get_all_expenses(self) -> list[ExpenseRecord]:
        return self._to_records(self.store.list_all())

    def get_highest_expense(self) -> Optional[ExpenseRecord]:
        """The largest expense, or None when nothing has been recorded."""
        row = self.store.find_max_amount()
        if row is None:
            return None
        return self._to_record(row)

    def _to_records(self, rows: Iterable[Expense]) -> list[ExpenseRecord]:
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: Expense) -> ExpenseRecord:
        try:
            return ExpenseRecord.model_validate(row)
        except pydantic.ValidationError as exc:
            LOGGER.error("Stored expense %r is malformed: %s", row.id, exc)
            raise StorageError("stored expense is malformed") from exc
