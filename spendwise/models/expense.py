# spendwise/models/expense.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Numeric, DateTime, JSON, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from spendwise.core.database import Base

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    expense_date = Column(DateTime, nullable=False)
    description = Column(String(length=500), nullable=True)
    location = Column(String(length=200), nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="expenses")
    category = relationship("Category", back_populates="expenses", lazy="joined")
    receipts = relationship(
        "Receipt",
        back_populates="expense",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Receipt.created_at",
    )

    __table_args__ = (
        Index("ix_expenses_user_date", "user_id", "expense_date"),
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )

    def __repr__(self):
        return f"<Expense amount={self.amount} date={self.expense_date} user_id={self.user_id}>"
