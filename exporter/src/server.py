"""
FastAPI application serving the exporter's scrape endpoints.

Routes:
- GET /metrics: Prometheus exposition of the live gauges.
- GET /history: timestamped inside temperature history in Prometheus text.
- GET /health: ``{"status": "ok"}`` liveness probe.

The metrics and history objects are created by the daemon and stored on
``app.state`` by :func:`create_app`; handlers only ever read them.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

import logging

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from exporter.src.history import HistoryStore
from exporter.src.metrics import ExporterMetrics, render_history

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    """Render the live gauges in Prometheus text format."""
    body, content_type = request.app.state.metrics.render()
    return Response(content=body, media_type=content_type)


@router.get("/history", response_class=PlainTextResponse)
async def history(request: Request) -> str:
    """Render the accumulated zone history."""
    logger.info("Retrieving history")
    return render_history(request.app.state.history.snapshot())


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status.

    Returns:
        dict: ``{"status": "ok"}`` indicating the exporter is alive.
    """
    return {"status": "ok"}


def create_app(metrics: ExporterMetrics, history: HistoryStore) -> FastAPI:
    """Build the scrape application around the daemon's shared state.

    Args:
        metrics: Gauge set updated by the poll loop.
        history: History store updated by the history loop.

    Returns:
        FastAPI: Application ready to be served by uvicorn.
    """
    app = FastAPI(
        title="tado exporter",
        description="Prometheus exporter for tado° zone and weather data.",
        version="0.1.0",
    )
    app.state.metrics = metrics
    app.state.history = history
    app.include_router(router)
    return app
