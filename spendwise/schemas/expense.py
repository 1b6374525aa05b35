# spendwise/schemas/expense.py
from typing import List, Optional
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import Field, field_validator
import uuid

from spendwise.schemas.base import CamelModel, Money
from spendwise.schemas.category import CategoryRead
from spendwise.schemas.receipt import ReceiptRead

MAX_AMOUNT = Decimal("999999.99")
MAX_TAGS = 10


def _to_naive_utc(value: datetime) -> datetime:
    """Stored dates are naive UTC; offsets on input are folded in."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ExpenseCreate(CamelModel):
    amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2)
    category_id: uuid.UUID
    expense_date: datetime
    description: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("expense_date")
    @classmethod
    def normalize_expense_date(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)


class ExpenseUpdate(CamelModel):
    """Partial update; only fields present in the payload are applied."""

    amount: Optional[Decimal] = Field(None, gt=0, le=MAX_AMOUNT, decimal_places=2)
    category_id: Optional[uuid.UUID] = None
    expense_date: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    tags: Optional[List[str]] = Field(None, max_length=MAX_TAGS)

    @field_validator("amount", "category_id", "expense_date", "tags")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("expense_date")
    @classmethod
    def normalize_expense_date(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)


class ExpenseRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: uuid.UUID
    amount: Money
    expense_date: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime
    category: CategoryRead
    receipts: List[ReceiptRead] = []


class ExpenseFilters(CamelModel):
    """Optional list filters. Ranges apply only when both bounds are given."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category_id: Optional[uuid.UUID] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    tags: List[str] = []

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_bounds(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value) if value is not None else None

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def has_amount_range(self) -> bool:
        return self.min_amount is not None and self.max_amount is not None
