"""Unit tests for environment settings."""

import logging
from pathlib import Path

import pytest

from src.settings import AppSettings, get_settings


class TestAppSettings:
    """Tests for AppSettings."""

    @pytest.mark.unit
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test default values without environment overrides."""
        monkeypatch.chdir(tmp_path)
        for name in ("LOG_LEVEL", "JSON_LOGS", "DEFAULT_FEED_SIZE", "CONFIG_PATH"):
            monkeypatch.delenv(f"FEED_{name}", raising=False)

        settings = get_settings()

        assert settings.log_level == "INFO"
        assert settings.json_logs is True
        assert settings.default_feed_size == 20
        assert settings.config_path is None

    @pytest.mark.unit
    def test_environment_overrides(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Test FEED_-prefixed environment variables."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FEED_LOG_LEVEL", "debug")
        monkeypatch.setenv("FEED_JSON_LOGS", "false")
        monkeypatch.setenv("FEED_DEFAULT_FEED_SIZE", "7")
        monkeypatch.setenv("FEED_MAX_HISTORY_SIZE", "40")

        settings = AppSettings()

        assert settings.log_level_value() == logging.DEBUG
        assert settings.json_logs is False
        assert settings.default_feed_size == 7
        assert settings.max_history_size == 40

    @pytest.mark.unit
    def test_unknown_level_defaults_to_info(self) -> None:
        """Test that an unknown level name maps to INFO."""
        assert AppSettings(log_level="chatty").log_level_value() == logging.INFO
