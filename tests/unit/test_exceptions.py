"""Unit tests for custom exception hierarchy"""
from datetime import datetime
import psycopg

from src.exceptions import (
    LearnBotError,
    InvalidArgumentError,
    NotFoundError,
    DatabaseError,
    ConnectionError,
    QueryError,
    ConcurrencyConflictError,
    ConfigurationError,
    AuthenticationError,
    wrap_external_exception
)


class TestLearnBotError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = LearnBotError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = LearnBotError(
            message="Save failed",
            user_id="user-1",
            operation="save_path",
            context={"version": 3},
            user_message="Could not save your progress"
        )
        assert error.user_id == "user-1"
        assert error.operation == "save_path"
        assert error.context["version"] == 3
        assert error.user_message == "Could not save your progress"

    def test_to_dict(self):
        """Test exception serialization"""
        error_dict = LearnBotError(message="Test error", user_id="user-1").to_dict()
        assert error_dict["error"] == "LearnBotError"
        assert error_dict["message"] == "Test error"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict


class TestClientErrors:
    """Test client-facing errors"""

    def test_invalid_argument(self):
        error = InvalidArgumentError("must be positive", field="total_questions", value=0)
        assert error.field == "total_questions"
        assert error.value == 0
        assert error.user_message == "Invalid total_questions: must be positive"
        assert error.context == {"field": "total_questions", "value": 0}

    def test_not_found(self):
        error = NotFoundError("Step 9 not found", record_type="Step", record_id=9)
        assert error.user_message == "Step not found."
        assert error.context["record_id"] == 9

    def test_not_found_merges_extra_context(self):
        error = NotFoundError("missing", record_type="Step", record_id=1, context={"path": "u1"})
        assert error.context == {"path": "u1", "record_type": "Step", "record_id": 1}

    def test_client_errors_log_as_warning(self, caplog):
        with caplog.at_level("WARNING", logger="src.exceptions"):
            InvalidArgumentError("bad", field="score")
        assert caplog.records[-1].levelname == "WARNING"


class TestDatabaseErrors:
    """Test database error hierarchy"""

    def test_concurrency_conflict(self):
        error = ConcurrencyConflictError("stale", record_type="LearningPath", expected_version=4)
        assert isinstance(error, DatabaseError)
        assert error.expected_version == 4

    def test_authentication_error(self, caplog):
        with caplog.at_level("WARNING", logger="src.exceptions"):
            error = AuthenticationError("Invalid API key", context={"key_prefix": "abcd"})
        assert error.user_message == "Authentication failed. Please check your API key."
        assert error.context == {"key_prefix": "abcd"}
        assert caplog.records[-1].levelname == "WARNING"

    def test_configuration_error(self):
        error = ConfigurationError("bad backend", config_key="STORAGE_BACKEND")
        assert error.config_key == "STORAGE_BACKEND"


class TestWrapExternalException:
    """Test wrapping of psycopg errors"""

    def test_wrap_operational_error(self):
        wrapped = wrap_external_exception(psycopg.OperationalError("down"), operation="load_path")
        assert isinstance(wrapped, ConnectionError)
        assert wrapped.operation == "load_path"

    def test_wrap_query_error_keeps_context(self):
        wrapped = wrap_external_exception(
            psycopg.ProgrammingError("syntax"),
            operation="save_path",
            user_id="user-1",
            context={"version": 2},
        )
        assert isinstance(wrapped, QueryError)
        assert wrapped.context["version"] == 2
        assert wrapped.user_id == "user-1"

    def test_wrap_unknown_error(self):
        wrapped = wrap_external_exception(ValueError("boom"), operation="save_user")
        assert type(wrapped) is LearnBotError
        assert "save_user failed" in wrapped.message
