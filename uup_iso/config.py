"""Configuration settings for uup_iso.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://api.uupdump.net"
DEFAULT_WEB_BASE_URL = "https://uupdump.net"


def _default_work_dir() -> Path:
    """Return the default working directory for conversion packages."""
    return Path.home() / ".cache" / "uup-iso" / "work"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the UUP_ISO_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="UUP_ISO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote catalog
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base URL of the UUP dump JSON API",
    )
    web_base_url: str = Field(
        default=DEFAULT_WEB_BASE_URL,
        description="Base URL of the UUP dump download site",
    )
    user_agent: str = Field(
        default="uup-iso/0.1",
        description="User-Agent header sent to the catalog",
    )

    # Retry policy
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single catalog request",
    )
    max_attempts: int = Field(
        default=15,
        ge=1,
        description="Attempts per catalog call before giving up",
    )
    retry_delay: float = Field(
        default=10.0,
        ge=0,
        description="Fixed wait between catalog attempts",
    )

    # Paths
    output_dir: Path = Field(
        default=Path("output"),
        description="Directory receiving the finished ISO",
    )
    work_dir: Path = Field(
        default_factory=_default_work_dir,
        description="Directory for conversion packages and logs",
    )

    # Operational
    conversion_timeout: int = Field(
        default=14400,
        ge=60,
        description="Timeout for the conversion script",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_WEB_BASE_URL",
    "Settings",
    "get_settings",
    "print_settings_json",
]
