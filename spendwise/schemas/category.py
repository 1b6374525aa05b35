# spendwise/schemas/category.py
from typing import Optional
from datetime import datetime
from pydantic import Field
import uuid

from spendwise.schemas.base import CamelModel

class CategoryBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=10)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

class CategoryCreate(CategoryBase):
    pass

class CategoryRead(CategoryBase):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    is_default: bool = False
    created_at: Optional[datetime] = None
