# spendwise/schemas/receipt.py
from datetime import datetime
import uuid

from spendwise.schemas.base import CamelModel

class ReceiptRead(CamelModel):
    id: uuid.UUID
    expense_id: uuid.UUID
    file_name: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: datetime
