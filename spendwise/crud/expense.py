# spendwise/crud/expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from spendwise.models.expense import Expense
from typing import List, Optional
import uuid
from spendwise.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseFilters

async def get_expenses_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    filters: Optional[ExpenseFilters] = None,
) -> List[Expense]:
    """Expenses owned by ``user_id``, newest first, with category and receipts loaded."""
    query = select(Expense).where(Expense.user_id == user_id)
    if filters is not None:
        if filters.has_date_range:
            query = query.where(
                Expense.expense_date >= filters.start_date,
                Expense.expense_date <= filters.end_date,
            )
        if filters.category_id is not None:
            query = query.where(Expense.category_id == filters.category_id)
        if filters.has_amount_range:
            query = query.where(
                Expense.amount >= filters.min_amount,
                Expense.amount <= filters.max_amount,
            )
    result = await db.execute(query.order_by(Expense.expense_date.desc()))
    expenses = result.unique().scalars().all()

    if filters is not None and filters.tags:
        # Tags are a JSON list, so "any of" is checked here rather than in SQL
        wanted = set(filters.tags)
        expenses = [ex for ex in expenses if wanted.intersection(ex.tags or [])]
    return expenses

async def get_expense_by_id(expense_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Expense]:
    """Owner-scoped lookup: another user's expense is indistinguishable from a missing one."""
    result = await db.execute(
        select(Expense)
        .where(Expense.id == expense_id, Expense.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()

async def create_expense_for_user(user_id: uuid.UUID, ex_in: ExpenseCreate, db: AsyncSession) -> Expense:
    new_ex = Expense(**ex_in.model_dump(), user_id=user_id)
    db.add(new_ex)
    await db.commit()
    # Reload with the category joined and the (empty) receipt list
    return await get_expense_by_id(new_ex.id, user_id, db)

async def update_expense(expense: Expense, ex_in: ExpenseUpdate, db: AsyncSession) -> Expense:
    for field, value in ex_in.model_dump(exclude_unset=True).items():
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    return await get_expense_by_id(expense.id, expense.user_id, db)

async def delete_expense(expense: Expense, db: AsyncSession) -> None:
    """Delete the expense; its receipt rows go with it."""
    await db.delete(expense)
    await db.commit()
