# spendwise/api/v1/routes/expenses.py
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from spendwise.schemas.base import MessageResponse
from spendwise.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate, ExpenseFilters
from spendwise.crud.expense import (
    create_expense_for_user,
    get_expenses_for_user,
    get_expense_by_id,
    update_expense,
    delete_expense,
)
from spendwise.core.database import get_async_session
from spendwise.core.auth import User
from spendwise.core.exceptions import NotFoundError
from spendwise.core.storage import ReceiptStorage, delete_blob_quietly
from spendwise.api.deps import get_current_user, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])

@router.get("", response_model=List[ExpenseRead])
async def read_expenses(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    category_id: Optional[uuid.UUID] = Query(None, alias="categoryId"),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount"),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount"),
    tags: Optional[List[str]] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    List the caller's expenses, newest first. Date and amount ranges only
    apply when both of their bounds are given; ``tags`` matches expenses
    carrying any of the listed tags.
    """
    filters = ExpenseFilters(
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        min_amount=min_amount,
        max_amount=max_amount,
        tags=tags or [],
    )
    return await get_expenses_for_user(user.id, db, filters)

@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await create_expense_for_user(user.id, ex_in, db)
    logger.info(f"Expense {expense.id} created for user {user.id}")
    return expense

@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise NotFoundError("Expense not found")
    return expense

@router.put("/{expense_id}", response_model=ExpenseRead)
async def update_expense_endpoint(
    expense_id: uuid.UUID,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise NotFoundError("Expense not found")
    return await update_expense(expense, ex_in, db)

@router.delete("/{expense_id}", response_model=MessageResponse)
async def delete_expense_endpoint(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    storage: ReceiptStorage = Depends(get_storage),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise NotFoundError("Expense not found")

    blob_keys = [receipt.file_key for receipt in expense.receipts]
    await delete_expense(expense, db)
    logger.info(f"Expense {expense_id} deleted with {len(blob_keys)} receipt(s)")

    # Receipt rows are already gone; blobs are removed best-effort
    for key in blob_keys:
        await delete_blob_quietly(storage, key)

    return {"message": "Expense deleted successfully"}
