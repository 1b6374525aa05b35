# spendwise/api/v1/routes/analytics.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.schemas.analytics import CategoryBreakdownResponse, MonthlyTrendsResponse
from spendwise.core.database import get_async_session
from spendwise.core.auth import User
from spendwise.api.deps import get_current_user
from spendwise.utils.analytics import get_category_breakdown, get_monthly_trends, month_window

router = APIRouter(prefix="/analytics", tags=["analytics"])

@router.get("/monthly-trends", response_model=MonthlyTrendsResponse)
async def read_monthly_trends(
    months: int = Query(6, alias="range", ge=1, le=60, description="Number of months ending with the current one"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Spending per month over the window; months without expenses are omitted."""
    start_date, end_date = month_window(months)
    trends = await get_monthly_trends(user.id, start_date, end_date, db)
    return MonthlyTrendsResponse(trends=trends, range=months, start_date=start_date, end_date=end_date)

@router.get("/category-breakdown", response_model=CategoryBreakdownResponse)
async def read_category_breakdown(
    months: int = Query(1, alias="range", ge=1, le=60, description="Number of months ending with the current one"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Spending per category over the window, largest first, with percentages."""
    start_date, end_date = month_window(months)
    data = await get_category_breakdown(user.id, start_date, end_date, db)
    return CategoryBreakdownResponse(
        breakdown=data.breakdown,
        total=data.total,
        count=data.count,
        range=months,
        start_date=start_date,
        end_date=end_date,
    )
