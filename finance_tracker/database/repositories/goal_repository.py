"""
Savings goal repository.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.clock import Clock, SystemClock
from ...models.goal import Goal, GoalCreate

logger = structlog.get_logger()


class GoalRepository:
    """Repository for goal data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection, clock: Clock | None = None):
        self.collection = collection
        self.clock = clock or SystemClock()

    async def ensure_indexes(self) -> None:
        """Create indexes for goal lookups."""
        await self.collection.create_index("goal_id", unique=True, name="idx_goal_id")
        await self.collection.create_index(
            [("user_id", 1), ("target_date", 1)], name="idx_user_goals"
        )

        logger.info("Goal indexes ensured")

    async def create(self, goal_create: GoalCreate) -> Goal:
        """
        Create a savings goal.

        Args:
            goal_create: Goal creation data

        Returns:
            Created goal with generated ID
        """
        goal = Goal(
            goal_id=f"goal_{uuid.uuid4().hex[:12]}",
            user_id=goal_create.user_id,
            name=goal_create.name,
            target_amount=goal_create.target_amount,
            current_amount=goal_create.current_amount,
            target_date=goal_create.target_date.isoformat(),
            created_at=self.clock.now(),
        )

        await self.collection.insert_one(goal.model_dump())

        logger.info(
            "Goal created",
            goal_id=goal.goal_id,
            user_id=goal.user_id,
            target_amount=goal.target_amount,
            target_date=goal.target_date,
        )

        return goal

