# spendwise/schemas/analytics.py
from typing import List
from datetime import datetime
from decimal import Decimal
import uuid

from spendwise.schemas.base import CamelModel, Money

class MonthlyTrend(CamelModel):
    month: str  # "YYYY-MM"
    total: Money
    count: int

class CategoryBreakdownItem(CamelModel):
    category_id: uuid.UUID
    category_name: str
    total: Money
    count: int
    color: str
    percentage: float

class CategoryBreakdown(CamelModel):
    breakdown: List[CategoryBreakdownItem]
    total: Money = Decimal("0")
    count: int = 0

class MonthlyTrendsResponse(CamelModel):
    trends: List[MonthlyTrend]
    range: int
    start_date: datetime
    end_date: datetime

class CategoryBreakdownResponse(CategoryBreakdown):
    range: int
    start_date: datetime
    end_date: datetime
