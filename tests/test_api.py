"""
Unit tests for the HTTP API.

The app is built with create_app() and its dependencies overridden, so no
lifespan (and no MongoDB or LLM) is involved.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from finance_tracker.agent.finance_agent import FALLBACK_MESSAGE
from finance_tracker.api.dependencies.chat_deps import (
    get_budget_repository,
    get_category_repository,
    get_clock,
    get_finance_agent,
    get_message_repository,
    get_mongodb,
    get_transaction_repository,
)
from finance_tracker.core.clock import FixedClock
from finance_tracker.core.config import Settings, get_settings
from finance_tracker.core.exceptions import UpstreamError
from finance_tracker.main import create_app
from finance_tracker.models import Budget, ConversationMessage, Transaction

SECRET = "test-secret"
NOW = datetime(2025, 10, 5, 12, 0, tzinfo=UTC)


def auth_headers(user_id="user_1", secret=SECRET):
    token = jwt.encode({"sub": user_id}, secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def expense(transaction_id, amount, category_id="cat_food", date="2025-10-02"):
    return Transaction(
        transaction_id=transaction_id,
        user_id="user_1",
        amount=amount,
        type="expense",
        category_id=category_id,
        date=date,
        month=date[:7],
    )


def food_row(total, count):
    return {"category_id": "cat_food", "total": total, "count": count, "average": total / count}


# ===== Fixtures =====


@pytest.fixture
def mock_agent():
    agent = Mock()
    agent.send_message = AsyncMock(return_value={"message": "Recorded."})
    return agent


@pytest.fixture
def mock_message_repo():
    repo = Mock()
    repo.get_history = AsyncMock(return_value=[])
    repo.count_by_user = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def mock_transaction_repo():
    repo = Mock()
    repo.list_by_user = AsyncMock(return_value=[])
    repo.aggregate_by_category = AsyncMock(return_value=[])
    repo.list_expenses_at_or_above = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_category_repo():
    repo = Mock()
    repo.get_names = AsyncMock(return_value={"cat_food": "Food & Dining"})
    return repo


@pytest.fixture
def mock_budget_repo():
    repo = Mock()
    repo.list_by_month = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_mongodb():
    mongodb = Mock()
    mongodb.health_check = AsyncMock(return_value={"connected": True, "version": "7.0"})
    return mongodb


@pytest.fixture
def client(
    mock_agent,
    mock_message_repo,
    mock_transaction_repo,
    mock_category_repo,
    mock_budget_repo,
    mock_mongodb,
):
    """Create test client with mocked dependencies."""
    app = create_app()
    settings = Settings(_env_file=None, secret_key=SECRET, environment="test")

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_finance_agent] = lambda: mock_agent
    app.dependency_overrides[get_message_repository] = lambda: mock_message_repo
    app.dependency_overrides[get_transaction_repository] = lambda: mock_transaction_repo
    app.dependency_overrides[get_category_repository] = lambda: mock_category_repo
    app.dependency_overrides[get_budget_repository] = lambda: mock_budget_repo
    app.dependency_overrides[get_mongodb] = lambda: mock_mongodb
    app.dependency_overrides[get_clock] = lambda: FixedClock(NOW)

    return TestClient(app)


# ===== Authentication =====


class TestAuthentication:
    """Test bearer token verification"""

    def test_missing_header(self, client):
        """Test 401 without Authorization header"""
        response = client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 401

    def test_malformed_header(self, client):
        """Test 401 for non-Bearer scheme"""
        response = client.post(
            "/api/chat", json={"message": "hi"}, headers={"Authorization": "Token abc"}
        )

        assert response.status_code == 401

    def test_wrong_secret(self, client):
        """Test 401 for a token signed with another key"""
        response = client.post(
            "/api/chat", json={"message": "hi"}, headers=auth_headers(secret="other")
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"


# ===== Chat =====


class TestChat:
    """Test chat endpoints"""

    def test_send_message(self, client, mock_agent):
        """Test the agent runs for the token's user"""
        response = client.post(
            "/api/chat", json={"message": "I spent 500 on pizza"}, headers=auth_headers()
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Recorded."}
        mock_agent.send_message.assert_awaited_once_with("user_1", "I spent 500 on pizza")

    def test_fallback_is_success(self, client, mock_agent):
        """Test an exhausted turn is still a 200"""
        mock_agent.send_message.return_value = {"message": FALLBACK_MESSAGE}

        response = client.post("/api/chat", json={"message": "hi"}, headers=auth_headers())

        assert response.status_code == 200
        assert response.json()["message"] == FALLBACK_MESSAGE

    def test_empty_message_rejected(self, client, mock_agent):
        """Test message min length"""
        response = client.post("/api/chat", json={"message": ""}, headers=auth_headers())

        assert response.status_code == 422
        mock_agent.send_message.assert_not_called()

    def test_upstream_error_maps_to_502(self, client, mock_agent):
        """Test UpstreamError goes through the AppError handler"""
        mock_agent.send_message.side_effect = UpstreamError(
            "OpenRouter error: 503", upstream_status=503, body="unavailable"
        )

        response = client.post("/api/chat", json={"message": "hi"}, headers=auth_headers())

        assert response.status_code == 502
        assert response.json() == {
            "detail": "OpenRouter error: 503",
            "error_type": "upstream_error",
        }

    def test_history(self, client, mock_message_repo):
        """Test history returns persisted messages and total"""
        mock_message_repo.get_history.return_value = [
            ConversationMessage(
                message_id="msg_1",
                user_id="user_1",
                role="tool",
                content='{"ok": true}',
                tool_name="budget_status",
                created_at=NOW,
            )
        ]
        mock_message_repo.count_by_user.return_value = 12

        response = client.get("/api/chat/history?limit=5", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 12
        assert data["messages"][0]["tool_name"] == "budget_status"
        mock_message_repo.get_history.assert_awaited_once_with("user_1", limit=5)


# ===== Analytics =====


class TestAnalytics:
    """Test read-only analytics endpoints"""

    def test_spending_defaults_to_current_month(self, client, mock_transaction_repo):
        """Test spending by category for the clock's month"""
        mock_transaction_repo.aggregate_by_category.return_value = [food_row(300.0, 1)]

        response = client.get("/api/analytics/spending", headers=auth_headers())

        assert response.status_code == 200
        assert response.json() == {
            "month": "2025-10",
            "categories": [{"category": "Food & Dining", "total": 300.0}],
        }
        mock_transaction_repo.aggregate_by_category.assert_awaited_once_with(
            "user_1", month="2025-10"
        )

    def test_spending_rejects_bad_month(self, client):
        """Test month query validation"""
        response = client.get("/api/analytics/spending?month=2025-1", headers=auth_headers())

        assert response.status_code == 422

    def test_summary_for_month(self, client, mock_transaction_repo):
        """Test monthly summary totals with a month filter"""
        mock_transaction_repo.list_by_user.return_value = [
            expense("t1", 300),
            Transaction(
                transaction_id="t2",
                user_id="user_1",
                amount=1000,
                type="income",
                date="2025-09-01",
                month="2025-09",
            ),
        ]
        mock_transaction_repo.aggregate_by_category.return_value = [food_row(300.0, 1)]

        response = client.get("/api/analytics/summary?month=2025-09", headers=auth_headers())

        data = response.json()
        assert data["month"] == "2025-09"
        assert data["total_income"] == 1000.0
        assert data["total_expense"] == 300.0
        assert data["categories"] == [{"category": "Food & Dining", "total": 300.0}]
        mock_transaction_repo.list_by_user.assert_awaited_once_with("user_1", month="2025-09")
        mock_transaction_repo.aggregate_by_category.assert_awaited_once_with(
            "user_1", month="2025-09"
        )

    def test_summary_without_month_is_all_time(self, client, mock_transaction_repo):
        """Test summary aggregates every month when no filter is given"""
        mock_transaction_repo.list_by_user.return_value = [
            expense("t1", 300),
            Transaction(
                transaction_id="t2",
                user_id="user_1",
                amount=120,
                type="expense",
                category_id="cat_food",
                date="2025-07-14",
                month="2025-07",
            ),
        ]
        mock_transaction_repo.aggregate_by_category.return_value = [food_row(420.0, 2)]

        response = client.get("/api/analytics/summary", headers=auth_headers())

        data = response.json()
        assert response.status_code == 200
        assert data["month"] is None
        assert data["total_expense"] == 420.0
        assert [t["date"] for t in data["trends"]] == ["2025-07-14", "2025-10-02"]
        mock_transaction_repo.list_by_user.assert_awaited_once_with("user_1", month=None)
        mock_transaction_repo.aggregate_by_category.assert_awaited_once_with(
            "user_1", month=None
        )

    def test_anomalies(self, client, mock_transaction_repo):
        """Test flagged expenses from aggregated category means"""
        mock_transaction_repo.aggregate_by_category.return_value = [food_row(600.0, 3)]
        mock_transaction_repo.list_expenses_at_or_above.return_value = [expense("t3", 400)]

        response = client.get("/api/analytics/anomalies", headers=auth_headers())

        items = response.json()["items"]
        assert [i["transaction"]["transaction_id"] for i in items] == ["t3"]
        assert items[0]["category_average"] == 200.0
        mock_transaction_repo.aggregate_by_category.assert_awaited_once_with("user_1")
        mock_transaction_repo.list_expenses_at_or_above.assert_awaited_once_with(
            "user_1", {"cat_food": 400.0}
        )

    def test_budget_status(self, client, mock_budget_repo, mock_transaction_repo):
        """Test utilization and status"""
        mock_budget_repo.list_by_month.return_value = [
            Budget(
                budget_id="bud_1",
                user_id="user_1",
                category_id="cat_food",
                monthly_limit=1000,
                month="2025-10",
            )
        ]
        mock_transaction_repo.aggregate_by_category.return_value = [food_row(950.0, 2)]

        response = client.get("/api/budgets/status", headers=auth_headers())

        item = response.json()["items"][0]
        assert item["status"] == "red"
        assert item["spent"] == 950.0


# ===== Health =====


class TestHealth:
    """Test health endpoints"""

    def test_health_ok(self, client):
        """Test healthy MongoDB"""
        response = client.get("/api/health")

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "ok"
        assert data["dependencies"]["mongodb"]["connected"] is True

    def test_health_degraded(self, client, mock_mongodb):
        """Test degraded status when MongoDB is down"""
        mock_mongodb.health_check.return_value = {"connected": False, "error": "timeout"}

        response = client.get("/api/health")

        assert response.json()["status"] == "degraded"

    def test_liveness(self, client):
        """Test liveness probe"""
        assert client.get("/api/health/live").json() == {"alive": True, "status": "ok"}
