# spendwise/api/v1/routes/receipts.py
import logging
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from spendwise.schemas.base import MessageResponse
from spendwise.schemas.receipt import ReceiptRead
from spendwise.crud.expense import get_expense_by_id
from spendwise.models.receipt import MAX_FILE_NAME_LENGTH
from spendwise.crud.receipt import create_receipt, delete_receipt, get_receipt_by_id, get_receipt_for_user
from spendwise.core.config import settings
from spendwise.core.database import get_async_session
from spendwise.core.auth import User
from spendwise.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from spendwise.core.storage import (
    ALLOWED_RECEIPT_TYPES,
    ReceiptStorage,
    build_receipt_key,
    delete_blob_quietly,
)
from spendwise.api.deps import get_current_user, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/receipts", tags=["receipts"])

def _stored_file_name(filename: str) -> str:
    """Shorten a client filename to fit the column, keeping its extension."""
    if len(filename) <= MAX_FILE_NAME_LENGTH:
        return filename
    stem, dot, extension = filename.rpartition(".")
    if dot and stem and len(extension) < 16:
        return f"{stem[:MAX_FILE_NAME_LENGTH - len(extension) - 1]}.{extension}"
    return filename[:MAX_FILE_NAME_LENGTH]

def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None

@router.post("", response_model=ReceiptRead, status_code=status.HTTP_201_CREATED)
async def upload_receipt(
    file: Optional[UploadFile] = File(None),
    expense_id: Optional[str] = Form(None, alias="expenseId"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    storage: ReceiptStorage = Depends(get_storage),
):
    """
    Attach a receipt to one of the caller's expenses.

    Type and size are checked before anything is stored. The blob is written
    first and the metadata row second; if the second step fails the blob is
    left orphaned.
    """
    if file is None:
        raise ValidationError("No file provided")
    if not expense_id:
        raise ValidationError("Expense ID required")

    parsed_id = _parse_uuid(expense_id)
    expense = await get_expense_by_id(parsed_id, user.id, db) if parsed_id else None
    if not expense:
        raise NotFoundError("Expense not found or unauthorized")

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_RECEIPT_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, and PDF are allowed.")

    # One byte past the limit is enough to know it is too large
    content = await file.read(settings.MAX_RECEIPT_SIZE + 1)
    if len(content) > settings.MAX_RECEIPT_SIZE:
        raise ValidationError("File size exceeds 5MB limit")

    file_name = _stored_file_name(file.filename or "receipt")
    key = build_receipt_key(expense.id, content_type)
    file_url = await storage.upload(content, key, content_type)

    try:
        receipt = await create_receipt(
            expense_id=expense.id,
            file_name=file_name,
            file_url=file_url,
            file_key=key,
            file_size=len(content),
            mime_type=content_type,
            db=db,
        )
    except Exception:
        logger.error(f"Receipt metadata insert failed; blob {key} is orphaned")
        raise

    logger.info(f"Receipt {receipt.id} uploaded for expense {expense.id}")
    return receipt

@router.get("/{receipt_id}", response_model=ReceiptRead)
async def read_receipt(
    receipt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    receipt = await get_receipt_for_user(receipt_id, user.id, db)
    if not receipt:
        raise NotFoundError("Receipt not found")
    return receipt

@router.delete("/{receipt_id}", response_model=MessageResponse)
async def delete_receipt_endpoint(
    receipt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    storage: ReceiptStorage = Depends(get_storage),
):
    receipt = await get_receipt_by_id(receipt_id, db)
    if not receipt:
        raise NotFoundError("Receipt not found")
    if receipt.expense.user_id != user.id:
        raise ForbiddenError("Unauthorized")

    # A failed blob delete must not block the metadata delete
    await delete_blob_quietly(storage, receipt.file_key)
    await delete_receipt(receipt, db)
    logger.info(f"Receipt {receipt_id} deleted")

    return {"message": "Receipt deleted successfully"}
