# spendwise/utils/analytics.py
"""
Spending analytics: monthly trends and category breakdown.

Both reports fetch the caller's expenses inside an inclusive date window and
group them in Python. Amounts are summed as ``Decimal`` so totals match the
stored two-digit precision exactly; only the percentages are floats.
"""
import calendar
from collections import OrderedDict
from datetime import datetime, date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.category import Category
from spendwise.models.expense import Expense
from spendwise.schemas.analytics import CategoryBreakdown, CategoryBreakdownItem, MonthlyTrend

FALLBACK_COLOR = "#8884d8"
ZERO = Decimal("0")


# ────────────────────────────────────────────────────────────────────────────────
# DATE WINDOW
# ────────────────────────────────────────────────────────────────────────────────
def month_window(months: int, today: Optional[date] = None) -> Tuple[datetime, datetime]:
    """
    Return the inclusive window covering ``months`` calendar months that ends
    with the current month: first instant of the earliest month through the
    last microsecond of the current month.
    """
    if months < 1:
        raise ValueError("months must be at least 1")
    today = today or datetime.utcnow().date()

    # Months since year 0 makes stepping back across year boundaries trivial
    index = today.year * 12 + (today.month - 1) - (months - 1)
    start_year, start_month = divmod(index, 12)
    start = datetime(start_year, start_month + 1, 1)

    last_day = calendar.monthrange(today.year, today.month)[1]
    end = datetime(today.year, today.month, last_day, 23, 59, 59, 999999)
    return start, end


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


# ────────────────────────────────────────────────────────────────────────────────
# PURE AGGREGATION
# ────────────────────────────────────────────────────────────────────────────────
def summarize_monthly_trends(rows: Iterable[Tuple[Decimal, datetime]]) -> List[MonthlyTrend]:
    """
    Group ``(amount, expense_date)`` rows by calendar month.

    One entry per month that has at least one expense, ascending by month key.
    Empty months are not filled in.
    """
    totals = {}
    counts = {}
    for amount, expense_date in rows:
        key = month_key(expense_date)
        totals[key] = totals.get(key, ZERO) + Decimal(amount)
        counts[key] = counts.get(key, 0) + 1

    return [
        MonthlyTrend(month=key, total=totals[key], count=counts[key])
        for key in sorted(totals)
    ]


def summarize_category_breakdown(
    rows: Iterable[Tuple[Decimal, uuid.UUID, str, Optional[str]]],
) -> CategoryBreakdown:
    """
    Group ``(amount, category_id, category_name, color)`` rows by category.

    Items are sorted by total, largest first; ties keep the order in which the
    categories were first seen. Each percentage is computed on its own against
    the grand total, so their sum may be off 100 by rounding.
    """
    groups: "OrderedDict[uuid.UUID, dict]" = OrderedDict()
    grand_total = ZERO
    count = 0

    for amount, category_id, category_name, color in rows:
        amount = Decimal(amount)
        group = groups.get(category_id)
        if group is None:
            group = groups[category_id] = {
                "category_id": category_id,
                "category_name": category_name,
                "color": color or FALLBACK_COLOR,
                "total": ZERO,
                "count": 0,
            }
        group["total"] += amount
        group["count"] += 1
        grand_total += amount
        count += 1

    items = [
        CategoryBreakdownItem(
            **group,
            percentage=float(group["total"] / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for group in groups.values()
    ]
    # sorted() is stable, which keeps discovery order among equal totals
    items = sorted(items, key=lambda item: item.total, reverse=True)

    return CategoryBreakdown(breakdown=items, total=grand_total, count=count)


# ────────────────────────────────────────────────────────────────────────────────
# QUERIES
# ────────────────────────────────────────────────────────────────────────────────
async def get_monthly_trends(
    user_id: uuid.UUID,
    start_date: datetime,
    end_date: datetime,
    db: AsyncSession,
) -> List[MonthlyTrend]:
    result = await db.execute(
        select(Expense.amount, Expense.expense_date)
        .where(
            Expense.user_id == user_id,
            Expense.expense_date >= start_date,
            Expense.expense_date <= end_date,
        )
        .order_by(Expense.expense_date.asc())
    )
    return summarize_monthly_trends(result.all())


async def get_category_breakdown(
    user_id: uuid.UUID,
    start_date: datetime,
    end_date: datetime,
    db: AsyncSession,
) -> CategoryBreakdown:
    # Category name and color are read as they are now, not as they were
    # when the expense was recorded
    result = await db.execute(
        select(Expense.amount, Category.id, Category.name, Category.color)
        .join(Category, Expense.category_id == Category.id)
        .where(
            Expense.user_id == user_id,
            Expense.expense_date >= start_date,
            Expense.expense_date <= end_date,
        )
        .order_by(Expense.expense_date.asc())
    )
    return summarize_category_breakdown(result.all())
