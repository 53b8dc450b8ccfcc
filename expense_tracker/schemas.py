from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ExpenseCreate(BaseModel):
    """Incoming creation request.

    Only the JSON shape is checked here. The business rules (minimum
    amount, category length) belong to ``ExpenseService`` so they apply
    to every caller, not just HTTP ones.
    """

    amount: float = Field(..., strict=True, description="Must be at least 0.01")
    category: str = Field(..., strict=True, description="1 to 50 characters, stored verbatim")


class ExpenseRecord(BaseModel):
    id: UUID
    amount: float
    category: str
    occurred_at: datetime = Field(..., alias="date")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)


class ErrorBody(BaseModel):
    error: str
    status: int
