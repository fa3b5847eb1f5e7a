"""
MongoDB connection manager.

One AsyncIOMotorClient per process, opened in the application lifespan and
shared by every repository through get_collection().
"""

import structlog
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from ..core.config import parse_database_name
from ..core.exceptions import ConfigurationError, DatabaseError

logger = structlog.get_logger()

INVALID_NAME_CHARS = ("?", "&", "=", "/", " ")


class MongoDB:
    """MongoDB connection manager with async support."""

    def __init__(self, server_selection_timeout_ms: int = 5000) -> None:
        self.client: AsyncIOMotorClient | None = None
        self.database: AsyncIOMotorDatabase | None = None
        self.server_selection_timeout_ms = server_selection_timeout_ms

    async def connect(self, mongodb_url: str) -> None:
        """
        Open the client and verify the server answers a ping.

        Raises:
            ConfigurationError: URL has no usable database name
            DatabaseError: Server unreachable
        """
        database_name = parse_database_name(mongodb_url)
        if not database_name or any(c in database_name for c in INVALID_NAME_CHARS):
            logger.error("Invalid database name in MongoDB URL", parsed_value=database_name)
            raise ConfigurationError(
                f"Database name '{database_name}' is invalid. "
                "Expected MONGODB_URL like mongodb://host:port/dbname?params",
                parsed_db_name=database_name,
            )

        try:
            self.client = AsyncIOMotorClient(
                mongodb_url, serverSelectionTimeoutMS=self.server_selection_timeout_ms
            )
            self.database = self.client[database_name]
            await self.client.admin.command("ping")
        except Exception as e:
            logger.error(
                "Failed to connect to MongoDB",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DatabaseError(
                f"MongoDB connection failed: {e}",
                original_error=type(e).__name__,
            ) from e

        logger.info("MongoDB connection established", database=database_name)

    async def disconnect(self) -> None:
        """Close the client if one was opened."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("MongoDB connection closed")

    async def health_check(self) -> dict[str, bool | str]:
        """Ping the server and report version and database."""
        if self.client is None or self.database is None:
            return {"connected": False, "error": "No client connection"}

        try:
            await self.client.admin.command("ping")
            server_info = await self.client.server_info()
        except Exception as e:
            logger.error("MongoDB health check failed", error=str(e))
            return {"connected": False, "error": str(e)}

        return {
            "connected": True,
            "version": server_info.get("version", "unknown"),
            "database": self.database.name,
        }

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Get a collection from the connected database.

        Raises:
            DatabaseError: connect() has not succeeded yet
        """
        if self.database is None:
            raise DatabaseError(
                "Cannot get collection: database connection not established",
                collection_name=collection_name,
            )
        return self.database[collection_name]
