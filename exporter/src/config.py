"""
Exporter configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading. Every variable
carries the ``EXPORTER_`` prefix and may also come from a ``.env`` file.
Defaults are fallback values only; apart from the listen port and the log
level nothing is range-checked.

CHANGELOG:
- 2026-10-19: Add history pull, HTTP timeout and log level settings
- 2026-10-19: Initial creation (ticker + client id)

TODO:
- None
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CLIENT_ID = "1bb50063-6b0c-4d11-bd99-387f4a91cc46"
"""Public OAuth client id of the tado° web app."""


class ExporterSettings(BaseSettings):
    """tado° exporter configuration.

    Attributes:
        ticker: Seconds between two live-state polls.
        client_id: OAuth2 client identifier used for the device-code grant.
        tokens_path: JSON file holding the persisted token record.
        listen_host: Interface the scrape server binds to.
        listen_port: TCP port of the scrape server.
        history_days: Number of past days pulled per zone for /history.
        history_interval: Seconds between two full history pulls.
        http_timeout_s: Transport timeout for every upstream request.
        log_level: Root logger level name.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPORTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ticker: int = 10
    client_id: str = DEFAULT_CLIENT_ID
    tokens_path: str = "tokens.json"
    listen_host: str = "0.0.0.0"
    listen_port: int = 9898
    history_days: int = 30
    history_interval: int = 3600
    http_timeout_s: float = 30.0
    log_level: str = "INFO"

    @field_validator("listen_port")
    @classmethod
    def listen_port_must_be_valid(cls, v: int) -> int:
        """Validate the scrape port is in the TCP range."""
        if v < 1 or v > 65535:
            raise ValueError("EXPORTER_LISTEN_PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"EXPORTER_LOG_LEVEL '{v}' is not a logging level")
        return level
