"""Configuration settings for openai_imagegen.

Uses pydantic-settings for config parsing from environment variables,
an optional .env file and defaults. The OpenAI credentials are read from
the standard OPENAI_* variables; everything else uses the IMAGEGEN_ prefix.
"""

import logging
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Prefix carried by OpenAI secret keys (user and project keys alike)
API_KEY_PREFIX = "sk-"


class FatalStartupError(Exception):
    """Raised when the server cannot start with the current configuration."""

    def __init__(self, message: str, code: str = "startup_error") -> None:
        """Initialize FatalStartupError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the IMAGEGEN_ prefix,
    except the OpenAI credentials which also honour OPENAI_API_KEY and
    OPENAI_BASE_URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="IMAGEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "IMAGEGEN_OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_BASE_URL", "IMAGEGEN_OPENAI_BASE_URL"),
        description="Override for the OpenAI API base URL",
    )

    # Upstream behaviour
    request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for image generation requests (seconds)",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries performed by the OpenAI client on transient errors",
    )
    download_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for downloading images returned as URLs (seconds)",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    The API key is rendered masked by SecretStr.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


def validate_credentials(settings: Settings) -> str:
    """Check that an API key is configured before the server starts.

    A key without the usual prefix is only warned about, since OpenAI-compatible
    gateways may issue keys in other formats.

    Args:
        settings: Effective settings.

    Returns:
        The API key in clear text.

    Raises:
        FatalStartupError: If no API key is configured.
    """
    if settings.openai_api_key is None:
        raise FatalStartupError(
            "OPENAI_API_KEY environment variable is required. Provide your "
            "OpenAI API key in the .env file or in the MCP settings configuration.",
            code="missing_api_key",
        )

    api_key = settings.openai_api_key.get_secret_value().strip()
    if not api_key:
        raise FatalStartupError(
            "OPENAI_API_KEY environment variable is empty",
            code="missing_api_key",
        )

    if not api_key.startswith(API_KEY_PREFIX):
        logger.warning(
            "The OPENAI_API_KEY does not appear to be in the expected format "
            "(OpenAI API keys typically start with %r)",
            API_KEY_PREFIX,
        )

    return api_key


__all__ = [
    "API_KEY_PREFIX",
    "FatalStartupError",
    "Settings",
    "get_settings",
    "print_settings_json",
    "validate_credentials",
]
