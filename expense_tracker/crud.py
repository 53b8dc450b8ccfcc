import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import Base, build_engine, build_session_factory
from .errors import StorageError
from .models import Expense
from .schemas import ExpenseRecord

LOGGER = logging.getLogger(__name__)


class ExpenseStore:
    """Sole reader and writer of the ``expenses`` table.

    Every call opens its own short-lived session, so one store can be
    shared by concurrent requests; write serialization is left to the
    database itself.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "ExpenseStore":
        return cls(build_engine(database_url))

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            session.rollback()
            LOGGER.exception("Expense store failed to %s", action)
            raise StorageError(f"failed to {action}") from exc
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create the expenses table if it does not exist yet."""
        try:
            Base.metadata.create_all(bind=self.engine, tables=[Expense.__table__])
        except SQLAlchemyError as exc:
            LOGGER.exception("Could not create the expenses table")
            raise StorageError("failed to create schema") from exc

    def insert(self, record: ExpenseRecord) -> None:
        with self._session("insert expense") as db:
            db.add(
                Expense(
                    id=str(record.id),
                    amount=record.amount,
                    category=record.category,
                    occurred_at=record.occurred_at,
                )
            )

    def list_all(self) -> list[Expense]:
        """All rows, newest first. An empty table gives an empty list."""
        with self._session("list expenses") as db:
            return db.query(Expense).order_by(Expense.occurred_at.desc()).all()

    def find_max_amount(self) -> Optional[Expense]:
        """The row with the greatest amount, or None when the table is empty.

        Ties are resolved by whichever row the database returns first.
        """
        with self._session("find highest expense") as db:
            return db.query(Expense).order_by(Expense.amount.desc()).first()

    def dispose(self) -> None:
        self.engine.dispose()
