"""
Shared test fixtures for exporter tests.

Provides environment variable fixtures for ExporterSettings tests and small
factories for mocked httpx responses. All exporter env vars are cleaned
before each test to ensure isolation.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# All ExporterSettings environment variable names, used for cleanup.
_ALL_EXPORTER_ENV_VARS = (
    "EXPORTER_TICKER",
    "EXPORTER_CLIENT_ID",
    "EXPORTER_TOKENS_PATH",
    "EXPORTER_LISTEN_HOST",
    "EXPORTER_LISTEN_PORT",
    "EXPORTER_HISTORY_DAYS",
    "EXPORTER_HISTORY_INTERVAL",
    "EXPORTER_HTTP_TIMEOUT_S",
    "EXPORTER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_exporter_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all exporter env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file or token record
    is accidentally picked up.
    """
    for var in _ALL_EXPORTER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every ExporterSettings environment variable.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "EXPORTER_TICKER": "30",
        "EXPORTER_CLIENT_ID": "client-123",
        "EXPORTER_TOKENS_PATH": "/data/tokens.json",
        "EXPORTER_LISTEN_HOST": "127.0.0.1",
        "EXPORTER_LISTEN_PORT": "9100",
        "EXPORTER_HISTORY_DAYS": "7",
        "EXPORTER_HISTORY_INTERVAL": "600",
        "EXPORTER_HTTP_TIMEOUT_S": "5.5",
        "EXPORTER_LOG_LEVEL": "debug",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


def make_response(status_code: int = 200, payload: Any = None) -> MagicMock:
    """Create a mock httpx response with a status code and a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def make_http(
    *,
    post: list[Any] | None = None,
    get: list[Any] | None = None,
) -> AsyncMock:
    """Create a mock httpx.AsyncClient whose post/get return the given responses in order."""
    http = AsyncMock()
    http.post = AsyncMock(side_effect=post or [])
    http.get = AsyncMock(side_effect=get or [])
    return http


class FakeClock:
    """Monotonic clock advanced only by :meth:`sleep`."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
