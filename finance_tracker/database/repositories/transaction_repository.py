"""
Transaction repository for income and expense records.
Per-category sums and averages are computed in MongoDB with $group
pipelines; classification of the results lives in the analytics engine.
"""

import uuid
from collections.abc import Mapping
from typing import Any

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.clock import Clock, SystemClock
from ...models.category import TransactionType
from ...models.transaction import Transaction, TransactionCreate

logger = structlog.get_logger()


class TransactionRepository:
    """Repository for transaction data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection, clock: Clock | None = None):
        """
        Initialize transaction repository.

        Args:
            collection: MongoDB collection for transactions
            clock: Time source for created_at
        """
        self.collection = collection
        self.clock = clock or SystemClock()

    async def ensure_indexes(self) -> None:
        """
        Create indexes for optimal query performance.
        Called during application startup.
        """
        await self.collection.create_index("transaction_id", unique=True)
        await self.collection.create_index(
            [("user_id", 1), ("type", 1), ("month", 1)], name="idx_user_type_month"
        )
        await self.collection.create_index([("user_id", 1), ("date", -1)])

        logger.info("Transaction indexes created")

    async def create(self, transaction_create: TransactionCreate) -> Transaction:
        """
        Record a new transaction.

        Args:
            transaction_create: Transaction creation data

        Returns:
            Created transaction with generated ID and month key
        """
        transaction = Transaction.from_create(
            f"txn_{uuid.uuid4().hex[:12]}", transaction_create, created_at=self.clock.now()
        )

        await self.collection.insert_one(transaction.model_dump())

        logger.info(
            "Transaction created",
            transaction_id=transaction.transaction_id,
            user_id=transaction.user_id,
            type=transaction.type,
            amount=transaction.amount,
            category_id=transaction.category_id,
        )

        return transaction

    async def list_by_user(
        self,
        user_id: str,
        type: TransactionType | None = None,
        month: str | None = None,
    ) -> list[Transaction]:
        """
        List a user's transactions, optionally filtered by type and month.

        Args:
            user_id: Owner of the transactions
            type: Optional income/expense filter
            month: Optional YYYY-MM filter

        Returns:
            List of transactions sorted by date ascending
        """
        query: dict = {"user_id": user_id}
        if type is not None:
            query["type"] = type
        if month is not None:
            query["month"] = month

        cursor = self.collection.find(query).sort("date", 1)

        transactions = []
        async for transaction_dict in cursor:
            transaction_dict.pop("_id", None)
            transactions.append(Transaction(**transaction_dict))

        return transactions

    async def aggregate_by_category(
        self,
        user_id: str,
        type: TransactionType = "expense",
        month: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Sum, count and average amounts per category in the database.

        Args:
            user_id: Owner of the transactions
            type: income or expense
            month: Optional YYYY-MM filter (all time when None)

        Returns:
            [{"category_id", "total", "count", "average"}]; category_id is None
            for uncategorized transactions
        """
        match: dict[str, Any] = {"user_id": user_id, "type": type}
        if month is not None:
            match["month"] = month

        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": "$category_id",
                    "total": {"$sum": "$amount"},
                    "count": {"$sum": 1},
                    "average": {"$avg": "$amount"},
                }
            },
        ]

        rows = []
        async for row in self.collection.aggregate(pipeline):
            rows.append(
                {
                    "category_id": row["_id"],
                    "total": row["total"],
                    "count": row["count"],
                    "average": row["average"],
                }
            )

        logger.debug(
            "Transactions aggregated by category",
            user_id=user_id,
            type=type,
            month=month,
            group_count=len(rows),
        )

        return rows

    async def list_expenses_at_or_above(
        self, user_id: str, thresholds: Mapping[str | None, float]
    ) -> list[Transaction]:
        """
        List expenses whose amount reaches their category's threshold.

        Args:
            user_id: Owner of the transactions
            thresholds: category_id (None for uncategorized) -> minimum amount

        Returns:
            Matching expenses sorted by date ascending
        """
        if not thresholds:
            return []

        query = {
            "user_id": user_id,
            "type": "expense",
            "$or": [
                {"category_id": category_id, "amount": {"$gte": threshold}}
                for category_id, threshold in thresholds.items()
            ],
        }

        cursor = self.collection.find(query).sort("date", 1)

        transactions = []
        async for transaction_dict in cursor:
            transaction_dict.pop("_id", None)
            transactions.append(Transaction(**transaction_dict))

        return transactions
