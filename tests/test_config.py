"""Tests for configuration module."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from openai_imagegen.config import (
    FatalStartupError,
    Settings,
    get_settings,
    print_settings_json,
    validate_credentials,
)


@pytest.fixture(autouse=True)
def _isolated(clean_env):
    """Every test starts without OpenAI credentials."""


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert settings.openai_api_key is None
        assert settings.openai_base_url is None
        assert settings.request_timeout == 120.0
        assert settings.max_retries == 2
        assert settings.download_timeout == 60.0
        assert settings.log_level == "INFO"

    def test_api_key_from_standard_variable(self) -> None:
        """OPENAI_API_KEY should be picked up without a prefix."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-from-env"}):
            settings = Settings()
            assert settings.openai_api_key is not None
            assert settings.openai_api_key.get_secret_value() == "sk-from-env"

    def test_settings_from_env(self) -> None:
        """Prefixed settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "IMAGEGEN_LOG_LEVEL": "DEBUG",
                "IMAGEGEN_MAX_RETRIES": "0",
                "IMAGEGEN_REQUEST_TIMEOUT": "30",
                "OPENAI_BASE_URL": "http://localhost:8080/v1",
            },
        ):
            settings = Settings()
            assert settings.log_level == "DEBUG"
            assert settings.max_retries == 0
            assert settings.request_timeout == 30.0
            assert settings.openai_base_url == "http://localhost:8080/v1"

    def test_settings_from_dotenv_file(self, clean_env) -> None:
        """A .env file in the working directory should be read."""
        (clean_env / ".env").write_text("OPENAI_API_KEY=sk-dotenv\n")
        settings = Settings()
        assert settings.openai_api_key is not None
        assert settings.openai_api_key.get_secret_value() == "sk-dotenv"


class TestGetSettings:
    """Test get_settings function."""

    def test_get_settings_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_print_settings_json(self) -> None:
        """print_settings_json should return valid JSON."""
        settings = Settings()
        parsed = json.loads(print_settings_json(settings))

        assert "openai_api_key" in parsed
        assert "request_timeout" in parsed
        assert "log_level" in parsed

    def test_api_key_is_masked(self) -> None:
        """The API key must never be rendered in clear text."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-very-secret"}):
            json_str = print_settings_json()
        assert "sk-very-secret" not in json_str


class TestValidateCredentials:
    """Test startup credential validation."""

    def test_missing_key_is_fatal(self) -> None:
        """A missing API key should stop the server from starting."""
        with pytest.raises(FatalStartupError) as exc_info:
            validate_credentials(Settings())
        assert "OPENAI_API_KEY" in str(exc_info.value)
        assert exc_info.value.code == "missing_api_key"

    def test_blank_key_is_fatal(self) -> None:
        """A blank API key counts as missing."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "   "}):
            with pytest.raises(FatalStartupError):
                validate_credentials(Settings())

    def test_valid_key_returned(self, caplog) -> None:
        """A well-formed key is returned without warnings."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-proj-abc"}):
            with caplog.at_level(logging.WARNING):
                assert validate_credentials(Settings()) == "sk-proj-abc"
        assert caplog.records == []

    def test_unexpected_prefix_warns(self, caplog) -> None:
        """A key without the sk- prefix is accepted with a warning."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "gateway-key"}):
            with caplog.at_level(logging.WARNING):
                assert validate_credentials(Settings()) == "gateway-key"
        assert "expected format" in caplog.text
