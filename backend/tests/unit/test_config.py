"""
Unit tests for backend.panstream.core.config module.

Covers defaults, environment overrides, bounds validation and the derived retry policy.
"""

import pytest
from pydantic import ValidationError
from unittest.mock import patch

from backend.panstream.core.config import Settings, get_settings, validate_env_cli
from backend.panstream.upstream import RetryPolicy

ENV_VARS = (
    "UPSTREAM_BASE_URL",
    "UPSTREAM_USER_AGENT",
    "UPSTREAM_TIMEOUT_SECONDS",
    "UPSTREAM_MAX_ATTEMPTS",
    "UPSTREAM_BACKOFF_SECONDS",
    "UPSTREAM_RETRY_CLIENT_ERRORS",
    "UPSTREAM_MAX_CONCURRENCY",
    "FEED_PAGE_SIZE",
    "LOG_LEVEL",
    "LOG_JSON",
    "FRONTEND_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestSettings:
    """Test cases for the Settings class."""

    def test_settings_default_values(self, clean_env):
        """Defaults match the production catalog and retry budget."""
        settings = Settings(_env_file=None)

        assert settings.upstream_base_url == "https://api.sansekai.my.id/api/dramabox"
        assert settings.upstream_timeout_seconds == 9.0
        assert settings.upstream_max_attempts == 3
        assert settings.upstream_backoff_seconds == 0.35
        assert settings.upstream_retry_client_errors is False
        assert settings.upstream_max_concurrency == 0
        assert settings.feed_page_size == 18
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.frontend_origins == "http://localhost:3000,http://127.0.0.1:3000"

    def test_settings_with_environment_variables(self, clean_env):
        clean_env.setenv("UPSTREAM_BASE_URL", "https://mirror.example/api")
        clean_env.setenv("UPSTREAM_TIMEOUT_SECONDS", "2.5")
        clean_env.setenv("UPSTREAM_MAX_ATTEMPTS", "5")
        clean_env.setenv("UPSTREAM_BACKOFF_SECONDS", "0.1")
        clean_env.setenv("UPSTREAM_RETRY_CLIENT_ERRORS", "true")
        clean_env.setenv("UPSTREAM_MAX_CONCURRENCY", "8")
        clean_env.setenv("FEED_PAGE_SIZE", "24")
        clean_env.setenv("LOG_LEVEL", "DEBUG")
        clean_env.setenv("LOG_JSON", "1")

        settings = Settings(_env_file=None)

        assert settings.upstream_base_url == "https://mirror.example/api"
        assert settings.upstream_timeout_seconds == 2.5
        assert settings.upstream_max_attempts == 5
        assert settings.upstream_backoff_seconds == 0.1
        assert settings.upstream_retry_client_errors is True
        assert settings.upstream_max_concurrency == 8
        assert settings.feed_page_size == 24
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    def test_case_insensitive_env_vars(self, clean_env):
        clean_env.setenv("upstream_max_attempts", "4")
        clean_env.setenv("LOG_level", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.upstream_max_attempts == 4
        assert settings.log_level == "DEBUG"

    def test_max_attempts_bounds(self, clean_env):
        clean_env.setenv("UPSTREAM_MAX_ATTEMPTS", "1")
        assert Settings(_env_file=None).upstream_max_attempts == 1

        clean_env.setenv("UPSTREAM_MAX_ATTEMPTS", "0")
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)
        assert "greater than or equal to 1" in str(exc_info.value)

        clean_env.setenv("UPSTREAM_MAX_ATTEMPTS", "11")
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)
        assert "less than or equal to 10" in str(exc_info.value)

    def test_timeout_must_be_positive(self, clean_env):
        clean_env.setenv("UPSTREAM_TIMEOUT_SECONDS", "0")
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)
        assert "greater than 0" in str(exc_info.value)

    def test_invalid_page_size_type(self, clean_env):
        clean_env.setenv("FEED_PAGE_SIZE", "a-dozen")
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)
        assert "Input should be a valid integer" in str(exc_info.value)

    def test_allowed_origins_property(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.allowed_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]

    def test_allowed_origins_with_custom_values(self, clean_env):
        clean_env.setenv("FRONTEND_ORIGINS", "http://localhost:8080, https://example.com ,,http://test.com")

        settings = Settings(_env_file=None)

        assert settings.allowed_origins == ["http://localhost:8080", "https://example.com", "http://test.com"]

    def test_retry_policy_mirrors_settings(self, clean_env):
        settings = Settings(
            _env_file=None,
            upstream_timeout_seconds=4.0,
            upstream_max_attempts=2,
            upstream_backoff_seconds=0.5,
            upstream_retry_client_errors=True,
        )

        assert RetryPolicy.from_settings(settings) == RetryPolicy(
            timeout=4.0, max_attempts=2, backoff_base=0.5, retry_client_errors=True
        )


class TestGetSettings:
    """Test cases for the get_settings function."""

    def test_get_settings_success(self, clean_env):
        settings = get_settings()
        assert isinstance(settings, Settings)

    @patch("backend.panstream.core.config.Settings")
    def test_get_settings_validation_error(self, mock_settings, capsys):
        error_detail = [{"type": "missing", "loc": ("upstream_base_url",), "input": {}}]
        mock_settings.side_effect = ValidationError.from_exception_data("Settings", error_detail)

        with pytest.raises(ValidationError):
            get_settings()
        assert "Configuration validation error" in capsys.readouterr().err


class TestValidateEnvCli:
    def test_valid_configuration_is_reported(self, clean_env, capsys):
        validate_env_cli()

        output = capsys.readouterr().out
        assert "Environment configuration is valid" in output
        assert "attempts=3" in output

    def test_invalid_configuration_exits(self, clean_env, capsys):
        clean_env.setenv("UPSTREAM_MAX_ATTEMPTS", "0")

        with pytest.raises(SystemExit) as exc_info:
            validate_env_cli()

        assert exc_info.value.code == 1
        assert "upstream_max_attempts" in capsys.readouterr().out
