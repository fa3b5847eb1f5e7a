"""
Unit tests for custom exception hierarchy.

Tests exception mapping, status codes, and error serialization including:
- Base AppError functionality (to_dict, context handling)
- Client errors (400-level): ValidationError
- Tool errors: ToolExecutionError, UnknownToolError
- Upstream errors (502): UpstreamError with status and body
"""

from finance_tracker.core.exceptions import (
    AppError,
    ConfigurationError,
    DatabaseError,
    ExternalServiceError,
    ToolExecutionError,
    UnknownToolError,
    UpstreamError,
    ValidationError,
)

# ===== Base AppError Tests =====


class TestAppError:
    """Test base AppError functionality"""

    def test_create_app_error(self):
        """Test creating basic AppError"""
        error = AppError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.status_code == 500
        assert error.error_type == "internal_error"
        assert error.context == {}

    def test_app_error_to_dict(self):
        """Test AppError serialization includes context"""
        error = AppError("Error occurred", user_id="user_1")

        assert error.to_dict() == {
            "error_type": "internal_error",
            "message": "Error occurred",
            "status_code": 500,
            "user_id": "user_1",
        }


# ===== Client and Server Errors =====


class TestStatusMapping:
    """Test HTTP status codes per error class"""

    def test_client_errors(self):
        """Test 400-level errors"""
        assert ValidationError("bad").status_code == 400

    def test_server_errors(self):
        """Test 500-level errors"""
        assert DatabaseError("down").status_code == 500
        assert ConfigurationError("missing").error_type == "configuration_error"

    def test_external_service_error_keeps_service(self):
        """Test ExternalServiceError records the service name"""
        error = ExternalServiceError("timeout", service="mongodb")

        assert error.status_code == 503
        assert error.context["service"] == "mongodb"


# ===== Tool Errors =====


class TestToolErrors:
    """Test tool-level errors"""

    def test_tool_execution_error_carries_tool_name(self):
        """Test ToolExecutionError context"""
        error = ToolExecutionError("Currency XYZ not supported", tool_name="currency_to_base")

        assert error.message == "Currency XYZ not supported"
        assert error.context["tool_name"] == "currency_to_base"
        assert isinstance(error, AppError)

    def test_unknown_tool_message(self):
        """Test UnknownToolError message format"""
        error = UnknownToolError("delete_everything")

        assert error.message == "Unknown tool delete_everything"
        assert error.error_type == "unknown_tool_error"
        assert isinstance(error, ToolExecutionError)


# ===== Upstream Errors =====


class TestUpstreamError:
    """Test LLM upstream failures"""

    def test_http_failure_attributes(self):
        """Test non-2xx failure keeps status and body"""
        error = UpstreamError("OpenRouter error: 429", upstream_status=429, body="rate limited")

        assert error.status_code == 502
        assert error.upstream_status == 429
        assert error.body == "rate limited"
        assert error.context["service"] == "openrouter"
        assert isinstance(error, ExternalServiceError)

    def test_transport_failure_has_no_status(self):
        """Test network failure carries no upstream status"""
        error = UpstreamError("connection refused")

        assert error.upstream_status is None
        assert error.body == ""
        assert error.to_dict()["upstream_status"] is None
