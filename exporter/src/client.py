"""
Authenticated client for the tado° REST API.

Issues bearer-authenticated GETs for the home identity, the zone (room)
directory, per-zone live state, the outdoor weather and per-zone day
reports, and converts every payload into the internal model.

Failure policy: the low-level helper raises TransportError or
DeserializationError; every public operation catches both, logs, and
degrades to an empty/absent result for that resource only. Callers must
run ``SessionManager.ensure_valid_session()`` before a batch of calls.

Operations:
- resolve_home_id(): first home of the account, cached once resolved.
- list_zones(): current state of every zone ([] on failure).
- fetch_zone_state(zone_id): current state of one zone.
- fetch_weather(): outdoor conditions.
- fetch_zone_day_report(zone_id, day): one day of inside temperatures.
- retrieve_history(days): day-by-day history pull for every zone.

CHANGELOG:
- 2026-10-19: Build response validators once per process
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from exporter.src.api_models import (
    MeApiResponse,
    WeatherApiResponse,
    ZoneDayReportApiResponse,
    ZonesApiResponse,
)
from exporter.src.converter import (
    convert_day_report_inside_temperature,
    convert_weather,
    convert_zone,
)
from exporter.src.errors import DeserializationError, TransportError
from exporter.src.history import merge
from exporter.src.models import DataPoint, HistoryReport, Weather, ZoneState
from exporter.src.session import SessionManager

logger = logging.getLogger(__name__)

BASE_URL = "https://my.tado.com/api/v2"
HOPS_URL = "https://hops.tado.com"

DEFAULT_HISTORY_DAYS = 30

_ME = TypeAdapter(MeApiResponse)
_ROOMS = TypeAdapter(list[ZonesApiResponse])
_ROOM = TypeAdapter(ZonesApiResponse)
_WEATHER = TypeAdapter(WeatherApiResponse)
_DAY_REPORT = TypeAdapter(ZoneDayReportApiResponse)


class TadoClient:
    """tado° API client bound to a session manager.

    The access token is read from the live session on every request; expiry
    is not re-checked between calls of a batch.

    Args:
        http: Shared async HTTP client.
        session: Session manager providing credentials and the home id cache.
        base_url: my.tado.com API root (home, weather, day reports).
        hops_url: hops.tado.com API root (rooms).

    Usage::

        await session.ensure_valid_session()
        zones = await client.list_zones()
        weather = await client.fetch_weather()
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionManager,
        *,
        base_url: str = BASE_URL,
        hops_url: str = HOPS_URL,
    ) -> None:
        self._http = http
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._hops_url = hops_url.rstrip("/")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve_home_id(self) -> int | None:
        """Return the account's first home id, resolving it on first use.

        Returns:
            The home id, or ``None`` if it could not be resolved this time.
            Only a successful resolution is cached, so a later call retries.
        """
        session = self._session.session
        if session.home_id is not None:
            return session.home_id

        try:
            me = await self._get(f"{self._base_url}/me", _ME)
        except (TransportError, DeserializationError) as exc:
            logger.error("Unable to retrieve home identifier: %s", exc)
            return None

        if not me.homes:
            logger.error("Unable to retrieve home identifier: account has no homes")
            return None

        session.home_id = me.homes[0].id
        logger.info("Resolved home identifier %d", session.home_id)
        return session.home_id

    async def list_zones(self) -> list[ZoneState]:
        """Fetch the state of every zone of the home.

        Returns:
            One snapshot per zone, or ``[]`` if the home or the zone list
            could not be retrieved. A partial list is never returned.
        """
        home_id = await self.resolve_home_id()
        if home_id is None:
            return []

        try:
            rooms = await self._get(
                f"{self._hops_url}/homes/{home_id}/rooms",
                _ROOMS,
            )
        except (TransportError, DeserializationError) as exc:
            logger.error("Unable to retrieve home zones: %s", exc)
            return []

        zones = []
        for room in rooms:
            logger.info("Retrieving zone details for %s", room.name)
            zones.append(convert_zone(room))
        return zones

    async def fetch_zone_state(self, zone_id: int) -> ZoneState | None:
        """Fetch the live state of one zone, or ``None`` on failure."""
        home_id = await self.resolve_home_id()
        if home_id is None:
            return None

        try:
            room = await self._get(
                f"{self._hops_url}/homes/{home_id}/rooms/{zone_id}",
                _ROOM,
            )
        except (TransportError, DeserializationError) as exc:
            logger.error("Unable to retrieve state of zone %d: %s", zone_id, exc)
            return None
        return convert_zone(room)

    async def fetch_weather(self) -> Weather | None:
        """Fetch the outdoor conditions, or ``None`` on failure."""
        logger.info("Retrieving weather details")
        home_id = await self.resolve_home_id()
        if home_id is None:
            return None

        try:
            weather = await self._get(
                f"{self._base_url}/homes/{home_id}/weather",
                _WEATHER,
            )
        except (TransportError, DeserializationError) as exc:
            logger.error("Unable to retrieve weather info: %s", exc)
            return None
        return convert_weather(weather)

    async def fetch_zone_day_report(
        self,
        zone_id: int,
        day: date,
    ) -> list[DataPoint] | None:
        """Fetch one calendar day of a zone's inside temperature series.

        Args:
            zone_id: Upstream zone identifier.
            day: Calendar date of the report.

        Returns:
            The day's data points in upstream order, or ``None`` on failure.
        """
        home_id = await self.resolve_home_id()
        if home_id is None:
            return None

        try:
            report = await self._get(
                f"{self._base_url}/homes/{home_id}/zones/{zone_id}/dayReport",
                _DAY_REPORT,
                params={"date": day.isoformat()},
            )
        except (TransportError, DeserializationError) as exc:
            logger.error(
                "Unable to retrieve day report of zone %d for %s: %s",
                zone_id,
                day.isoformat(),
                exc,
            )
            return None
        return convert_day_report_inside_temperature(report)

    async def retrieve_history(
        self,
        days: int = DEFAULT_HISTORY_DAYS,
        *,
        today: date | None = None,
    ) -> dict[str, HistoryReport]:
        """Pull the last *days* days of history for every zone.

        Walks backward from yesterday, one day report per zone and day, and
        merges each into a fresh map. The session is re-checked before each
        zone so a long pull cannot outlive the access token.

        Args:
            days: Number of past days to fetch per zone.
            today: Reference date, defaults to the current UTC date.

        Returns:
            Zone name -> merged history report.

        Raises:
            AuthError: The session could not be kept valid during the pull.
        """
        if today is None:
            today = datetime.now(tz=UTC).date()

        history: dict[str, HistoryReport] = {}
        for zone in await self.list_zones():
            await self._session.ensure_valid_session()
            for offset in range(1, days + 1):
                day = today - timedelta(days=offset)
                logger.info("Retrieving history of %s for %s", zone.name, day.isoformat())
                points = await self.fetch_zone_day_report(zone.id, day)
                if points is None:
                    continue
                merge(history, HistoryReport(name=zone.name, inside_temperature=points))
        return history

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get(
        self,
        url: str,
        adapter: TypeAdapter[Any],
        params: dict[str, str] | None = None,
    ) -> Any:
        """GET *url* with the bearer token and validate the body with *adapter*.

        Raises:
            TransportError: Network failure or non-2xx status.
            DeserializationError: Body is not JSON or does not validate.
        """
        headers = {"Authorization": f"Bearer {self._session.access_token}"}
        try:
            response = await self._http.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise TransportError(f"GET {url} returned HTTP {response.status_code}")

        try:
            return adapter.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise DeserializationError(f"Malformed response from {url}: {exc}") from exc
