"""
Unit tests for the shared settings, logging, retry and error helpers.
"""

import pytest
from unittest.mock import AsyncMock

from shared.config import get_settings
from shared.errors import InvalidCredentialsError, ResourceError, TokenExpiredError
from shared.logging import (
    add_correlation_context,
    add_service_context,
    clear_context,
    configure_logging,
    get_logger,
    set_auth_context,
    set_request_id,
)
from shared.retry import RetryConfig, RetryError, _calculate_delay, retry_on_exception
from shared.test_helpers import TestEnvironment


class TestSettings:
    """Test cases for IdentitySettings."""

    def test_reads_prefixed_environment(self, monkeypatch):
        for key, value in TestEnvironment.get_mock_config().items():
            monkeypatch.setenv(key, value)
        monkeypatch.setenv("IDENTITY_CACHE_REGIONS", '{"accounts": {"ttl": 10}}')

        settings = get_settings(_env_file=None)

        assert settings.base_url == "https://api.example.com/v1"
        assert settings.api_key_id == "TENANTKEYID"
        assert settings.log_level == "debug"
        assert settings.cache_regions == {"accounts": {"ttl": 10}}
        assert settings.admin_directory_name == "Stormpath Administrators"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("IDENTITY_CACHE_TTL", "60")

        assert get_settings(cache_ttl=5, _env_file=None).cache_ttl == 5


class TestLogging:
    """Test cases for logging helpers."""

    def teardown_method(self):
        clear_context()

    def test_correlation_context(self):
        request_id = set_request_id()
        set_auth_context(application_href="app", account_href="acct")

        event = add_correlation_context(None, "info", {"event": "x"})

        assert event["request_id"] == request_id
        assert event["application_href"] == "app"
        assert event["account_href"] == "acct"

    def test_cleared_context_adds_nothing(self):
        set_request_id("req-1")
        clear_context()

        assert add_correlation_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_component_from_logger_name(self):
        event = add_service_context(None, "info", {"logger": "identity_sdk.authc.basic"})

        assert event["component"] == "authc"

    def test_configure_logging(self):
        configure_logging("orders-api", "debug")

        get_logger("identity_sdk.tests").info("configured")


class TestRetry:
    """Test cases for retry_on_exception."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        operation = AsyncMock(side_effect=[ConnectionError("down"), "ok"])
        wrapped = retry_on_exception((ConnectionError,), RetryConfig(max_attempts=3, base_delay=0))(operation)

        assert await wrapped() == "ok"
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_other_exceptions_are_not_retried(self):
        operation = AsyncMock(side_effect=ValueError("bad input"))
        wrapped = retry_on_exception((ConnectionError,), RetryConfig(max_attempts=3, base_delay=0))(operation)

        with pytest.raises(ValueError):
            await wrapped()
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        operation = AsyncMock(side_effect=ConnectionError("down"))
        wrapped = retry_on_exception((ConnectionError,), RetryConfig(max_attempts=2, base_delay=0))(operation)

        with pytest.raises(RetryError) as exc_info:
            await wrapped()

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.last_exception, ConnectionError)

    @pytest.mark.parametrize(
        "strategy,attempt,expected",
        [
            ("exponential", 3, 2.0),
            ("linear", 3, 1.5),
            ("fixed", 3, 0.5),
            ("exponential", 10, 5.0),
        ],
    )
    def test_delay(self, strategy, attempt, expected):
        config = RetryConfig(base_delay=0.5, max_delay=5.0, jitter=False, backoff_strategy=strategy)

        assert _calculate_delay(attempt, config) == expected


class TestErrors:
    """Test cases for the error taxonomy."""

    def test_error_response(self):
        response = InvalidCredentialsError().to_response()

        assert response.code == "INVALID_CREDENTIALS"
        assert response.status_code == 401
        assert response.error == "invalid_client"

    def test_unauthenticated_codes(self):
        error = TokenExpiredError()

        assert error.code == "TOKEN_EXPIRED"
        assert error.status_code == 401
        assert error.user_message == "Token has expired"

    def test_resource_error_string(self):
        error = ResourceError("https://api.example.com/v1/accounts/x", {"status": 404, "code": 404})

        assert "HTTP 404" in str(error)
        assert error.message == "HTTP 404 for resource 'https://api.example.com/v1/accounts/x'"
