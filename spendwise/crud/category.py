# spendwise/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import or_, and_
from spendwise.models.category import Category
from typing import List
import uuid
from spendwise.schemas.category import CategoryCreate

async def get_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    """The user's own categories plus shared defaults, defaults first then by name."""
    result = await db.execute(
        select(Category)
        .where(
            or_(
                Category.user_id == user_id,
                and_(Category.user_id.is_(None), Category.is_default.is_(True)),
            )
        )
        .order_by(Category.is_default.desc(), Category.name.asc())
    )
    return result.scalars().all()

async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    new_cat = Category(**cat_in.model_dump(), user_id=user_id, is_default=False)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat


# Default categories created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Food & Dining", "icon": "🍔", "color": "#f59e0b"},
    {"name": "Transportation", "icon": "🚗", "color": "#3b82f6"},
    {"name": "Shopping", "icon": "🛍️", "color": "#ec4899"},
    {"name": "Entertainment", "icon": "🎬", "color": "#8b5cf6"},
    {"name": "Bills & Utilities", "icon": "💡", "color": "#10b981"},
    {"name": "Healthcare", "icon": "🏥", "color": "#ef4444"},
]

async def seed_default_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    """Ensure the user has the default categories; create missing ones.

    Returns the list of categories that were created (empty if none were needed).
    """
    result = await db.execute(select(Category.name).where(Category.user_id == user_id))
    existing_names_lower = {row[0].lower() for row in result.all()}

    categories_to_create: List[Category] = [
        Category(user_id=user_id, is_default=True, **cat)
        for cat in DEFAULT_CATEGORIES
        if cat["name"].lower() not in existing_names_lower
    ]

    if categories_to_create:
        db.add_all(categories_to_create)
        await db.commit()

    return categories_to_create
