"""
Exporter daemon main loop for the tado° Prometheus exporter.

Runs three concurrent asyncio tasks:
1. **Poll loop**: every ``ticker`` seconds, makes sure the session is valid,
   fetches zone state and weather, and updates the Prometheus gauges.
2. **History loop**: every ``history_interval`` seconds, pulls the last
   ``history_days`` days of day reports for every zone and installs them in
   the history store.
3. **Scrape server**: uvicorn serving /metrics, /history and /health.

Both loops are resilient: an exception in one iteration is logged and does
not crash the loop or affect the others. An authentication failure aborts
the current iteration only. Graceful shutdown on SIGTERM/SIGINT sets a
shared asyncio.Event; the loops are cancelled, even mid-tick, and the server
is asked to exit.

Structured JSON logging is used for all events.

CHANGELOG:
- 2026-10-19: Cancel in-flight ticks on shutdown
- 2026-10-19: Add history loop and embedded scrape server
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import json
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from exporter.src.errors import AuthError

if TYPE_CHECKING:
    import uvicorn

    from exporter.src.client import TadoClient
    from exporter.src.history import HistoryStore
    from exporter.src.metrics import ExporterMetrics
    from exporter.src.session import SessionManager

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging for the exporter.

    Sets up the root logger with a JSON-formatted handler writing to stderr.

    Args:
        level: Root logger level name.
    """

    class _JsonFormatter(logging.Formatter):
        """Minimal JSON log formatter."""

        def format(self, record: logging.LogRecord) -> str:
            log_entry = {
                "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info and record.exc_info[1] is not None:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def _masked_token(value: str | None) -> str:
    """Return a short non-reversible fingerprint for diagnostics."""
    if not value:
        return "empty"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"len={len(value)} sha256={digest}"


# ---------------------------------------------------------------------------
# Startup config logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup.

    The client id is logged as a fingerprint only.

    Args:
        settings: An ExporterSettings instance (or any object with the same attrs).
    """
    logger.info(
        "tado exporter starting with config: "
        "ticker=%s, history_days=%s, history_interval=%s, "
        "listen=%s:%s, tokens_path=%s, http_timeout_s=%s, "
        "client_id_masked=%s",
        settings.ticker,  # type: ignore[attr-defined]
        settings.history_days,  # type: ignore[attr-defined]
        settings.history_interval,  # type: ignore[attr-defined]
        settings.listen_host,  # type: ignore[attr-defined]
        settings.listen_port,  # type: ignore[attr-defined]
        settings.tokens_path,  # type: ignore[attr-defined]
        settings.http_timeout_s,  # type: ignore[attr-defined]
        _masked_token(settings.client_id),  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Single-iteration functions (easily testable)
# ---------------------------------------------------------------------------


async def _poll_once(
    *,
    session: SessionManager,
    client: TadoClient,
    metrics: ExporterMetrics,
) -> bool:
    """Execute a single authenticate-fetch-update cycle.

    Catches all exceptions so that the caller's loop is never broken. An
    authentication failure skips the whole tick; a failed resource only
    leaves its own gauges stale.

    Args:
        session: Session manager to validate before fetching.
        client: The tado° API client.
        metrics: Gauges to update.

    Returns:
        True if the tick authenticated and ran its fetches, False otherwise.
    """
    try:
        await session.ensure_valid_session()
    except AuthError:
        logger.error("Authentication failed, skipping poll", exc_info=True)
        return False
    except Exception:
        logger.error("Session error, skipping poll", exc_info=True)
        return False

    try:
        zones = await client.list_zones()
        if zones:
            metrics.set_zones(zones)
        else:
            logger.warning("No zone data this tick, zone gauges left unchanged")

        metrics.set_weather(await client.fetch_weather())
    except Exception:
        logger.error("Poll cycle error", exc_info=True)
        return False

    logger.info("Poll success: %d zone(s) updated", len(zones))
    return True


async def _history_once(
    *,
    session: SessionManager,
    client: TadoClient,
    history: HistoryStore,
    days: int,
) -> bool:
    """Execute a single full history pull.

    Catches all exceptions so that the caller's loop is never broken.

    Args:
        session: Session manager to validate before fetching.
        client: The tado° API client.
        history: Store receiving the pulled reports.
        days: Number of past days to pull per zone.

    Returns:
        True if a pull completed and was installed, False otherwise.
    """
    try:
        await session.ensure_valid_session()
        pulled = await client.retrieve_history(days)
    except AuthError:
        logger.error("Authentication failed, skipping history pull", exc_info=True)
        return False
    except Exception:
        logger.error("History pull error", exc_info=True)
        return False

    history.replace(pulled)
    logger.info("History pull success: %d zone(s)", len(pulled))
    return True


# ---------------------------------------------------------------------------
# Loop runners
# ---------------------------------------------------------------------------


async def _poll_loop(
    *,
    session: SessionManager,
    client: TadoClient,
    metrics: ExporterMetrics,
    ticker_s: float,
    shutdown_event: asyncio.Event,
) -> None:
    """Run the poll loop until shutdown_event is set.

    Executes _poll_once, then sleeps for ticker_s, checking the shutdown
    event between iterations. Ticks never overlap.
    """
    logger.info("Poll loop started (interval=%ss)", ticker_s)
    while not shutdown_event.is_set():
        await _poll_once(session=session, client=client, metrics=metrics)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=ticker_s)
    logger.info("Poll loop stopped")


async def _history_loop(
    *,
    session: SessionManager,
    client: TadoClient,
    history: HistoryStore,
    days: int,
    history_interval_s: float,
    shutdown_event: asyncio.Event,
) -> None:
    """Run the history loop until shutdown_event is set."""
    logger.info("History loop started (interval=%ss, days=%d)", history_interval_s, days)
    while not shutdown_event.is_set():
        await _history_once(session=session, client=client, history=history, days=days)
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=history_interval_s)
    logger.info("History loop stopped")


async def _serve(server: uvicorn.Server, shutdown_event: asyncio.Event) -> None:
    """Serve HTTP until the server exits; a server exit triggers shutdown."""
    try:
        await server.serve()
    finally:
        shutdown_event.set()


async def _stop_server(server: uvicorn.Server, shutdown_event: asyncio.Event) -> None:
    """Ask the server to exit once shutdown is requested."""
    await shutdown_event.wait()
    server.should_exit = True


# ---------------------------------------------------------------------------
# Concurrent runner with graceful shutdown
# ---------------------------------------------------------------------------


async def run_loops(
    *,
    session: SessionManager,
    client: TadoClient,
    metrics: ExporterMetrics,
    history: HistoryStore,
    ticker_s: float,
    history_days: int,
    history_interval_s: float,
    shutdown_event: asyncio.Event,
    server: uvicorn.Server | None = None,
) -> None:
    """Run the poll loop, the history loop and the scrape server until shutdown.

    Args:
        session: Session manager shared by both loops.
        client: The tado° API client.
        metrics: Gauges updated by the poll loop.
        history: Store updated by the history loop.
        ticker_s: Seconds between poll cycles.
        history_days: Days pulled per zone by the history loop.
        history_interval_s: Seconds between history pulls.
        shutdown_event: Event to signal graceful shutdown.
        server: uvicorn server to run alongside, or None to skip serving.
    """
    logger.info("Starting poll and history loops")

    loops = [
        asyncio.create_task(
            _poll_loop(
                session=session,
                client=client,
                metrics=metrics,
                ticker_s=ticker_s,
                shutdown_event=shutdown_event,
            )
        ),
        asyncio.create_task(
            _history_loop(
                session=session,
                client=client,
                history=history,
                days=history_days,
                history_interval_s=history_interval_s,
                shutdown_event=shutdown_event,
            )
        ),
    ]
    serving = []
    if server is not None:
        serving.append(asyncio.create_task(_serve(server, shutdown_event)))
        serving.append(asyncio.create_task(_stop_server(server, shutdown_event)))

    # A tick may be blocked in a device login or a history pull; cancel it
    # instead of waiting for it to finish.
    try:
        await shutdown_event.wait()
    finally:
        for task in loops:
            task.cancel()
        for result in await asyncio.gather(*loops, return_exceptions=True):
            if isinstance(result, Exception):
                logger.error("Loop ended with an error", exc_info=result)

    await asyncio.gather(*serving)
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main() -> None:
    """Async entrypoint: load config, build components, run loops.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    import httpx
    import uvicorn

    from exporter.src.client import TadoClient
    from exporter.src.config import ExporterSettings
    from exporter.src.history import HistoryStore
    from exporter.src.metrics import ExporterMetrics
    from exporter.src.server import create_app
    from exporter.src.session import SessionManager
    from exporter.src.token_store import TokenStore

    settings = ExporterSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    metrics = ExporterMetrics()
    history = HistoryStore()
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(metrics, history),
            host=settings.listen_host,
            port=settings.listen_port,
            log_config=None,
        )
    )

    async with httpx.AsyncClient(timeout=settings.http_timeout_s) as http:
        session = SessionManager(
            http,
            client_id=settings.client_id,
            token_store=TokenStore(settings.tokens_path),
        )
        client = TadoClient(http, session)

        await run_loops(
            session=session,
            client=client,
            metrics=metrics,
            history=history,
            ticker_s=settings.ticker,
            history_days=settings.history_days,
            history_interval_s=settings.history_interval,
            shutdown_event=shutdown_event,
            server=server,
        )


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the exporter daemon."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
