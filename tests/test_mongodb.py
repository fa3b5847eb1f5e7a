"""
Unit tests for the MongoDB connection manager.
"""

import pytest

from finance_tracker.core.config import Settings, parse_database_name
from finance_tracker.core.exceptions import ConfigurationError, DatabaseError
from finance_tracker.database.mongodb import MongoDB


class TestParseDatabaseName:
    """Test database name extraction"""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("mongodb://localhost:27017/finance_tracker", "finance_tracker"),
            ("mongodb://db:27017/finance?retryWrites=true&w=majority", "finance"),
            ("mongodb://localhost:27017/", ""),
        ],
    )
    def test_parse(self, url, expected):
        """Test query parameters are stripped"""
        assert parse_database_name(url) == expected

    def test_settings_use_same_parser(self):
        """Test Settings.database_name and the connection manager agree"""
        url = "mongodb://db:27017/finance?retryWrites=true"
        settings = Settings(_env_file=None, mongodb_url=url)

        assert settings.database_name == parse_database_name(url) == "finance"


class TestMongoDB:
    """Test connection manager guards"""

    @pytest.mark.asyncio
    async def test_connect_rejects_missing_database(self):
        """Test a URL without a database name is a configuration error"""
        with pytest.raises(ConfigurationError):
            await MongoDB().connect("mongodb://localhost:27017/")

    def test_get_collection_before_connect(self):
        """Test collections are unavailable before connect()"""
        with pytest.raises(DatabaseError):
            MongoDB().get_collection("messages")

    @pytest.mark.asyncio
    async def test_health_check_without_client(self):
        """Test health check reports disconnected state"""
        assert await MongoDB().health_check() == {
            "connected": False,
            "error": "No client connection",
        }
