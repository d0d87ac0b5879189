"""
Configuration module for the PanStream backend.

This module provides the Settings class that loads and validates environment variables
for the upstream catalog client. It uses Pydantic BaseSettings for type validation
and default value handling.
"""

from __future__ import annotations

import sys

from pydantic import Field, ValidationError, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every upstream knob lives here so tests and alternative deployments can point the
    client at a different catalog without touching module globals.
    """

    # Upstream catalog
    upstream_base_url: str = Field(
        default="https://api.sansekai.my.id/api/dramabox",
        description="Base URL of the upstream drama catalog API"
    )
    upstream_user_agent: str = Field(
        default="PanStream/0.1 (+https://github.com/panstream/panstream)",
        description="User-Agent sent with upstream requests"
    )
    upstream_timeout_seconds: float = Field(
        default=9.0,
        gt=0.0,
        le=120.0,
        description="Hard timeout (in seconds) for a single upstream attempt",
    )
    upstream_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts per upstream call (1 means no retries)",
    )
    upstream_backoff_seconds: float = Field(
        default=0.35,
        ge=0.0,
        le=30.0,
        description="Base delay for linear backoff between upstream attempts",
    )
    upstream_retry_client_errors: bool = Field(
        default=False,
        description="Retry 4xx responses like transient failures (legacy behaviour)",
    )
    upstream_max_concurrency: int = Field(
        default=0,
        ge=0,
        le=256,
        description="Cap on in-flight upstream requests per client (0 disables the cap)",
    )

    # Page shaping
    feed_page_size: int = Field(
        default=18,
        ge=1,
        le=100,
        description="Maximum number of cards kept per listing section",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of the development console format",
    )

    # CORS Configuration
    frontend_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        description="Comma-separated list of allowed frontend origins"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse frontend_origins into a list of allowed CORS origins."""
        return [origin.strip() for origin in self.frontend_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """
    Get application settings instance.

    Returns:
        Settings: Validated application settings

    Raises:
        ValidationError: If environment variables are invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        # Log validation error details for debugging
        print(f"Configuration validation error: {e}", file=sys.stderr)
        raise


def validate_env_cli() -> None:
    """
    CLI command to validate environment configuration.

    This function can be called via: python -m backend.panstream.core.config --check
    """
    try:
        settings = get_settings()
        print("✅ Environment configuration is valid")
        print(f"Upstream base URL: {settings.upstream_base_url}")
        print(
            "Retry policy: "
            f"timeout={settings.upstream_timeout_seconds}s, "
            f"attempts={settings.upstream_max_attempts}, "
            f"backoff={settings.upstream_backoff_seconds}s"
        )
        print(f"Retry 4xx responses: {'✅ Yes' if settings.upstream_retry_client_errors else '❌ No'}")
        print(f"Concurrency cap: {settings.upstream_max_concurrency or 'unbounded'}")
        print(f"Feed page size: {settings.feed_page_size}")
        print(f"Log level: {settings.log_level}")
    except ValidationError as e:
        print("❌ Environment configuration is invalid:")
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            print(f"  - {field}: {error['msg']}")
        sys.exit(1)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Configuration validation utility")
    parser.add_argument("--check", action="store_true", help="Validate environment configuration")

    args = parser.parse_args()

    if args.check:
        validate_env_cli()
    else:
        parser.print_help()
