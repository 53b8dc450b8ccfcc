from sqlalchemy import REAL, Column, Text

from .database import Base
from .db_types import UTCDateTime


class Expense(Base):
    """One row of the append-only ``expenses`` table."""

    __tablename__ = "expenses"

    id = Column(Text, primary_key=True)
    amount = Column(REAL, nullable=False)
    category = Column(Text, nullable=False)
    occurred_at = Column("date", UTCDateTime(), nullable=False)
