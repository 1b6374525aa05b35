# spendwise/models/category.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
from spendwise.core.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # NULL owner marks a shared default visible to every user
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(length=50), nullable=False)
    description = Column(String(length=200), nullable=True)
    icon = Column(String(length=10), nullable=True)
    color = Column(String(length=7), nullable=True)  # "#RRGGBB"
    is_default = Column(Boolean(), default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="categories")
    expenses = relationship("Expense", back_populates="category", passive_deletes="all")

    def __repr__(self):
        return f"<Category name={self.name} user_id={self.user_id}>"
