"""
Budget repository.
A budget is unique per (user_id, category_id, month); writes go through an
upsert that only changes monthly_limit when the budget already exists.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...core.clock import Clock, SystemClock
from ...models.budget import Budget, BudgetUpsert

logger = structlog.get_logger()


class BudgetRepository:
    """Repository for budget data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection, clock: Clock | None = None):
        """
        Initialize budget repository.

        Args:
            collection: MongoDB collection for budgets
            clock: Time source for created_at
        """
        self.collection = collection
        self.clock = clock or SystemClock()

    async def ensure_indexes(self) -> None:
        """
        Create indexes for optimal query performance.
        Called during application startup.

        The compound unique index is what makes upsert() conflict-safe.
        """
        await self.collection.create_index("budget_id", unique=True, name="idx_budget_id")
        await self.collection.create_index(
            [("user_id", 1), ("category_id", 1), ("month", 1)],
            unique=True,
            name="idx_budget_unique",
        )

        logger.info("Budget indexes ensured")

    async def upsert(self, budget_upsert: BudgetUpsert) -> Budget:
        """
        Create a budget, or update the limit of the existing one.

        Args:
            budget_upsert: Budget key (user, category, month) and limit

        Returns:
            Budget as stored after the write
        """
        key = {
            "user_id": budget_upsert.user_id,
            "category_id": budget_upsert.category_id,
            "month": budget_upsert.month,
        }

        update = {
            "$set": {"monthly_limit": budget_upsert.monthly_limit},
            "$setOnInsert": {
                "budget_id": f"bud_{uuid.uuid4().hex[:12]}",
                "created_at": self.clock.now(),
            },
        }

        try:
            result = await self.collection.find_one_and_update(
                key, update, upsert=True, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            # Lost an insert race on the unique key; the row exists now
            result = await self.collection.find_one_and_update(
                key, update, return_document=ReturnDocument.AFTER
            )

        result.pop("_id", None)
        budget = Budget(**result)

        logger.info(
            "Budget upserted",
            budget_id=budget.budget_id,
            user_id=budget.user_id,
            category_id=budget.category_id,
            month=budget.month,
            monthly_limit=budget.monthly_limit,
        )

        return budget

    async def list_by_month(self, user_id: str, month: str) -> list[Budget]:
        """
        Get a user's budgets for one month.

        Args:
            user_id: Owner of the budgets
            month: YYYY-MM

        Returns:
            List of budgets
        """
        cursor = self.collection.find({"user_id": user_id, "month": month})

        budgets = []
        async for budget_dict in cursor:
            budget_dict.pop("_id", None)
            budgets.append(Budget(**budget_dict))

        return budgets
