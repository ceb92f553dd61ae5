"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from uup_iso.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_WEB_BASE_URL,
    Settings,
    get_settings,
    print_settings_json,
)


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert settings.api_base_url == DEFAULT_API_BASE_URL == "https://api.uupdump.net"
        assert settings.web_base_url == DEFAULT_WEB_BASE_URL == "https://uupdump.net"
        assert settings.max_attempts == 15
        assert settings.retry_delay == 10.0
        assert settings.output_dir == Path("output")
        assert settings.work_dir == Path.home() / ".cache" / "uup-iso" / "work"
        assert settings.log_level == "INFO"

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "UUP_ISO_API_BASE_URL": "http://localhost:9000",
                "UUP_ISO_MAX_ATTEMPTS": "3",
                "UUP_ISO_RETRY_DELAY": "0.5",
                "UUP_ISO_LOG_LEVEL": "DEBUG",
            },
        ):
            settings = Settings()
            assert settings.api_base_url == "http://localhost:9000"
            assert settings.max_attempts == 3
            assert settings.retry_delay == 0.5
            assert settings.log_level == "DEBUG"

    def test_work_dir_from_env(self) -> None:
        """Work dir should be configurable via env."""
        with patch.dict(os.environ, {"UUP_ISO_WORK_DIR": "/tmp/uup-work"}):
            settings = Settings()
            assert settings.work_dir == Path("/tmp/uup-work")

    def test_rejects_zero_attempts(self) -> None:
        """At least one catalog attempt is required."""
        with pytest.raises(ValidationError):
            Settings(max_attempts=0)

    def test_rejects_unknown_log_level(self) -> None:
        """Log level should be one of the logging module's names."""
        with pytest.raises(ValidationError):
            Settings(log_level="CHATTY")  # type: ignore[arg-type]


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

        assert parsed["api_base_url"] == DEFAULT_API_BASE_URL
        assert "work_dir" in parsed
        assert "max_attempts" in parsed
        assert "conversion_timeout" in parsed

    def test_print_settings_json_default(self) -> None:
        """print_settings_json without args should use default settings."""
        parsed = json.loads(print_settings_json())
        assert "web_base_url" in parsed
