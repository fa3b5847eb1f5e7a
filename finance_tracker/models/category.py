"""
Category models.
Categories with user_id=None are global and visible to every user.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ..core.clock import utcnow

TransactionType = Literal["income", "expense"]


class CategoryCreate(BaseModel):
    """Request model for creating a category."""

    user_id: str | None = None
    name: str = Field(..., min_length=1)
    type: TransactionType


class Category(BaseModel):
    """Category model for database storage."""

    category_id: str = Field(..., description="Unique category identifier")
    user_id: str | None = Field(
        default=None, description="Owner, or None for a shared category"
    )
    name: str = Field(..., description="Display name (e.g., 'Food & Dining')")
    type: TransactionType = Field(..., description="income or expense")
    created_at: datetime = Field(default_factory=utcnow)
