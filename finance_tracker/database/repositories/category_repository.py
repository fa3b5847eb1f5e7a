"""
Category repository.
Categories are looked up by (owner-or-shared, name, type) with get-or-create
semantics. No uniqueness is enforced, so two concurrent creators can both
insert the same name; lookups simply take the first match.
"""

import re
import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.clock import Clock, SystemClock
from ...models.category import Category, CategoryCreate, TransactionType

logger = structlog.get_logger()


class CategoryRepository:
    """Repository for category data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection, clock: Clock | None = None):
        """
        Initialize category repository.

        Args:
            collection: MongoDB collection for categories
            clock: Time source for created_at
        """
        self.collection = collection
        self.clock = clock or SystemClock()

    async def ensure_indexes(self) -> None:
        """
        Create indexes for optimal query performance.
        Called during application startup.
        """
        await self.collection.create_index("category_id", unique=True, name="idx_category_id")
        await self.collection.create_index(
            [("user_id", 1), ("name", 1), ("type", 1)], name="idx_category_lookup"
        )

        logger.info("Category indexes ensured")

    async def find(
        self,
        user_id: str,
        name: str,
        type: TransactionType | None = None,
        case_insensitive: bool = False,
    ) -> Category | None:
        """
        Find a category visible to the user.

        Args:
            user_id: Requesting user; shared categories (user_id=None) also match
            name: Category name
            type: Optional income/expense filter
            case_insensitive: Match the name ignoring case

        Returns:
            First matching category or None
        """
        query: dict = {"user_id": {"$in": [user_id, None]}}
        if case_insensitive:
            query["name"] = {"$regex": f"^{re.escape(name)}$", "$options": "i"}
        else:
            query["name"] = name
        if type is not None:
            query["type"] = type

        category_dict = await self.collection.find_one(query)

        if not category_dict:
            return None

        # Remove MongoDB _id field
        category_dict.pop("_id", None)

        return Category(**category_dict)

    async def create(self, category_create: CategoryCreate) -> Category:
        """
        Create a new category.

        Args:
            category_create: Category creation data

        Returns:
            Created category with generated ID
        """
        category = Category(
            category_id=f"cat_{uuid.uuid4().hex[:12]}",
            user_id=category_create.user_id,
            name=category_create.name,
            type=category_create.type,
            created_at=self.clock.now(),
        )

        await self.collection.insert_one(category.model_dump())

        logger.info(
            "Category created",
            category_id=category.category_id,
            user_id=category.user_id,
            name=category.name,
            type=category.type,
        )

        return category

    async def get_or_create(
        self,
        user_id: str,
        name: str,
        type: TransactionType | None = None,
        create_type: TransactionType = "expense",
        case_insensitive: bool = False,
    ) -> Category:
        """
        Return a visible category with this name, creating it if missing.

        Args:
            user_id: Owner for a newly created category
            name: Category name
            type: Type filter for the lookup (None matches any type)
            create_type: Type given to a newly created category when type is None
            case_insensitive: Match the name ignoring case

        Returns:
            Existing or newly created category
        """
        existing = await self.find(
            user_id, name, type=type, case_insensitive=case_insensitive
        )
        if existing:
            return existing

        return await self.create(
            CategoryCreate(user_id=user_id, name=name, type=type or create_type)
        )

    async def get_names(self, category_ids: list[str]) -> dict[str, str]:
        """
        Map category IDs to display names.

        Args:
            category_ids: Category identifiers to resolve

        Returns:
            Dict of category_id -> name for the IDs that exist
        """
        if not category_ids:
            return {}

        cursor = self.collection.find(
            {"category_id": {"$in": list(set(category_ids))}},
            {"category_id": 1, "name": 1},
        )

        return {doc["category_id"]: doc["name"] async for doc in cursor}
