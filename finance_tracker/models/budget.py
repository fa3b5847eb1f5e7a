"""
Monthly budget models.
A budget is unique per (user_id, category_id, month).
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..core.clock import utcnow

MONTH_PATTERN = r"^\d{4}-\d{2}$"


class BudgetUpsert(BaseModel):
    """Request model for creating or updating a budget."""

    user_id: str
    category_id: str | None = None
    monthly_limit: float = Field(..., gt=0)
    month: str = Field(..., pattern=MONTH_PATTERN)


class Budget(BaseModel):
    """Budget model for database storage."""

    budget_id: str = Field(..., description="Unique budget identifier")
    user_id: str = Field(..., description="Owner of the budget")
    category_id: str | None = Field(default=None, description="FK to categories")
    monthly_limit: float = Field(..., description="Spending limit for the month")
    month: str = Field(..., description="Budget month (YYYY-MM)")
    created_at: datetime = Field(default_factory=utcnow)
