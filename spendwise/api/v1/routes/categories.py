# spendwise/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from spendwise.schemas.category import CategoryCreate, CategoryRead
from spendwise.crud.category import create_category_for_user, get_categories_for_user
from spendwise.core.database import get_async_session
from spendwise.core.auth import User
from spendwise.api.deps import get_current_user

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=List[CategoryRead])
async def read_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_categories_for_user(user.id, db)

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_category_for_user(user.id, cat_in, db)
