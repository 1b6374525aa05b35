# spendwise/models/receipt.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Integer, DateTime, Uuid
from sqlalchemy.orm import relationship
from spendwise.core.database import Base

MAX_FILE_NAME_LENGTH = 255

class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    expense_id = Column(Uuid(as_uuid=True), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(length=MAX_FILE_NAME_LENGTH), nullable=False)
    file_url = Column(String(length=1024), nullable=False)
    # Storage key of the blob, used when the blob has to be removed
    file_key = Column(String(length=512), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(length=100), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    expense = relationship("Expense", back_populates="receipts")

    def __repr__(self):
        return f"<Receipt file_name={self.file_name} expense_id={self.expense_id}>"
