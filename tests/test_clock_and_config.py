"""
Unit tests for the time source and application settings.
"""

from datetime import UTC, date, datetime

from finance_tracker.core.clock import (
    FixedClock,
    SystemClock,
    current_month,
    month_key,
    today,
    utcnow,
)
from finance_tracker.core.config import Settings

# ===== Clock Tests =====


class TestClock:
    """Test clock helpers"""

    def test_utcnow_is_timezone_aware(self):
        """Test utcnow returns an aware UTC datetime"""
        assert utcnow().tzinfo is UTC

    def test_system_clock_is_aware(self):
        """Test SystemClock returns aware datetimes"""
        assert SystemClock().now().tzinfo is not None

    def test_fixed_clock(self):
        """Test FixedClock always returns its instant"""
        instant = datetime(2025, 10, 5, 9, 30, tzinfo=UTC)
        clock = FixedClock(instant)

        assert clock.now() == instant
        assert today(clock) == date(2025, 10, 5)
        assert current_month(clock) == "2025-10"

    def test_month_key_pads(self):
        """Test month key is zero-padded"""
        assert month_key(date(2026, 1, 31)) == "2026-01"


# ===== Settings Tests =====


class TestSettings:
    """Test settings defaults and derived properties"""

    def test_agent_defaults(self):
        """Test loop bound and context size defaults"""
        settings = Settings(_env_file=None)

        assert settings.agent_max_iterations == 4
        assert settings.agent_context_limit == 30
        assert settings.llm_timeout_seconds is None

    def test_database_name_strips_query(self):
        """Test database name parsing from MongoDB URL"""
        settings = Settings(
            _env_file=None,
            mongodb_url="mongodb://localhost:27017/finance?retryWrites=true",
        )

        assert settings.database_name == "finance"

    def test_environment_flags(self):
        """Test is_development and is_production"""
        settings = Settings(_env_file=None, environment="production")

        assert settings.is_production
        assert not settings.is_development
