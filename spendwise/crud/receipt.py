# spendwise/crud/receipt.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload
from spendwise.models.expense import Expense
from spendwise.models.receipt import Receipt
from typing import Optional
import uuid

async def get_receipt_by_id(receipt_id: uuid.UUID, db: AsyncSession) -> Optional[Receipt]:
    """Unscoped lookup; the parent expense is loaded so callers can check its owner."""
    result = await db.execute(
        select(Receipt)
        .options(joinedload(Receipt.expense))
        .where(Receipt.id == receipt_id)
    )
    return result.unique().scalar_one_or_none()

async def get_receipt_for_user(receipt_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Receipt]:
    result = await db.execute(
        select(Receipt)
        .join(Expense, Receipt.expense_id == Expense.id)
        .where(Receipt.id == receipt_id, Expense.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_receipt(
    expense_id: uuid.UUID,
    file_name: str,
    file_url: str,
    file_key: str,
    file_size: int,
    mime_type: str,
    db: AsyncSession,
) -> Receipt:
    receipt = Receipt(
        expense_id=expense_id,
        file_name=file_name,
        file_url=file_url,
        file_key=file_key,
        file_size=file_size,
        mime_type=mime_type,
    )
    db.add(receipt)
    await db.commit()
    await db.refresh(receipt)
    return receipt

async def delete_receipt(receipt: Receipt, db: AsyncSession) -> None:
    await db.delete(receipt)
    await db.commit()
