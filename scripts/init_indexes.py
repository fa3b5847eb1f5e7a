"""
Initialize MongoDB indexes for optimal query performance.
Run with: python -m scripts.init_indexes

Uses the same ensure_indexes() the application calls at startup, so the two
can never drift apart.
"""

import asyncio

import structlog

from finance_tracker.core.config import get_settings
from finance_tracker.database.mongodb import MongoDB
from finance_tracker.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    GoalRepository,
    MessageRepository,
    TransactionRepository,
)

logger = structlog.get_logger()

REPOSITORIES = {
    "messages": MessageRepository,
    "categories": CategoryRepository,
    "transactions": TransactionRepository,
    "budgets": BudgetRepository,
    "goals": GoalRepository,
}


async def create_indexes() -> None:
    """Create all required indexes for the application."""
    settings = get_settings()
    mongodb = MongoDB()
    await mongodb.connect(settings.mongodb_url)

    print("🔧 Initializing MongoDB Indexes\n")

    try:
        for collection_name, repository_cls in REPOSITORIES.items():
            collection = mongodb.get_collection(collection_name)
            await repository_cls(collection).ensure_indexes()

            info = await collection.index_information()
            print(f"📝 '{collection_name}' collection:")
            for index_name in sorted(info):
                print(f"  ✅ {index_name}")

        print("\n✅ All indexes created")
        logger.info("Indexes initialized", database=settings.database_name)
    finally:
        await mongodb.disconnect()


if __name__ == "__main__":
    asyncio.run(create_indexes())
