"""
Savings goal models.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from ..core.clock import utcnow


class GoalCreate(BaseModel):
    """Request model for creating a savings goal."""

    user_id: str
    name: str = Field(..., min_length=1, max_length=255)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0, ge=0)
    target_date: date


class Goal(BaseModel):
    """Goal model for database storage."""

    goal_id: str = Field(..., description="Unique goal identifier")
    user_id: str = Field(..., description="Owner of the goal")
    name: str = Field(..., description="Goal name (e.g., 'Vacation')")
    target_amount: float
    current_amount: float = 0
    target_date: str = Field(..., description="Target date (YYYY-MM-DD)")
    created_at: datetime = Field(default_factory=utcnow)
