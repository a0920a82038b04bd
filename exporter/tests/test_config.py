"""
Unit tests for exporter configuration (ExporterSettings).

Tests verify:
- Config loads from EXPORTER_-prefixed environment variables.
- Every variable has a default; nothing is required.
- Config loads from a .env file in the working directory.
- LISTEN_PORT is range-checked and LOG_LEVEL normalized.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from pathlib import Path

import pytest
from exporter.src.config import DEFAULT_CLIENT_ID, ExporterSettings
from pydantic import ValidationError


class TestExporterSettingsLoadsFromEnv:
    """Config loads all values from environment variables."""

    def test_loads_all_env_vars(self, env_vars_full: dict[str, str]) -> None:
        """All env vars are read and assigned correctly."""
        settings = ExporterSettings()

        assert settings.ticker == int(env_vars_full["EXPORTER_TICKER"])
        assert settings.client_id == env_vars_full["EXPORTER_CLIENT_ID"]
        assert settings.tokens_path == env_vars_full["EXPORTER_TOKENS_PATH"]
        assert settings.listen_host == env_vars_full["EXPORTER_LISTEN_HOST"]
        assert settings.listen_port == int(env_vars_full["EXPORTER_LISTEN_PORT"])
        assert settings.history_days == int(env_vars_full["EXPORTER_HISTORY_DAYS"])
        assert settings.history_interval == int(env_vars_full["EXPORTER_HISTORY_INTERVAL"])
        assert settings.http_timeout_s == 5.5
        assert settings.log_level == "DEBUG"

    def test_defaults_applied_when_vars_missing(self) -> None:
        """No variable is required; defaults fill every field."""
        settings = ExporterSettings()

        assert settings.ticker == 10
        assert settings.client_id == DEFAULT_CLIENT_ID
        assert settings.tokens_path == "tokens.json"
        assert settings.listen_host == "0.0.0.0"
        assert settings.listen_port == 9898
        assert settings.history_days == 30
        assert settings.history_interval == 3600
        assert settings.http_timeout_s == 30.0
        assert settings.log_level == "INFO"

    def test_loads_from_env_file(self, tmp_path: Path) -> None:
        """A .env file in the working directory is picked up."""
        (tmp_path / ".env").write_text("EXPORTER_TICKER=42\nEXPORTER_CLIENT_ID=from-file\n")

        settings = ExporterSettings()

        assert settings.ticker == 42
        assert settings.client_id == "from-file"

    def test_unprefixed_vars_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TICKER", "99")

        assert ExporterSettings().ticker == 10


class TestExporterSettingsValidation:
    """Field validators reject out-of-range values."""

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_invalid_listen_port_raises(
        self, monkeypatch: pytest.MonkeyPatch, port: str
    ) -> None:
        monkeypatch.setenv("EXPORTER_LISTEN_PORT", port)

        with pytest.raises(ValidationError) as exc_info:
            ExporterSettings()
        assert "listen_port" in str(exc_info.value).lower()

    def test_unknown_log_level_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXPORTER_LOG_LEVEL", "chatty")

        with pytest.raises(ValidationError):
            ExporterSettings()

    def test_non_numeric_ticker_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXPORTER_TICKER", "often")

        with pytest.raises(ValidationError):
            ExporterSettings()
