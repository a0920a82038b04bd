"""
Pydantic models for the raw tado° API payloads.

One model per upstream response shape. Field names are snake_case with a
camelCase alias generator, so payloads validate as returned by the API.
Unknown fields are ignored; fields the endpoint may omit or null are typed
``X | None``. A missing required field raises ``ValidationError``, which the
client turns into :class:`~exporter.src.errors.DeserializationError`.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# OAuth2 endpoints (snake_case on the wire)
# ---------------------------------------------------------------------------


class AuthStartResponse(BaseModel):
    """Device authorization response."""

    device_code: str
    expires_in: int
    interval: int
    verification_uri_complete: str
    user_code: str | None = None


class AuthTokensResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int


class AuthTokensErrorResponse(BaseModel):
    error: str
    error_description: str | None = None


# ---------------------------------------------------------------------------
# Home identity
# ---------------------------------------------------------------------------


class HomeApiResponse(_ApiModel):
    id: int
    name: str | None = None


class MeApiResponse(_ApiModel):
    homes: list[HomeApiResponse] = []


# ---------------------------------------------------------------------------
# Rooms (zone directory and per-room state)
# ---------------------------------------------------------------------------


class ZoneStateSettingTemperatureApiResponse(_ApiModel):
    value: float


class ZoneStateSettingApiResponse(_ApiModel):
    power: str
    temperature: ZoneStateSettingTemperatureApiResponse | None = None


class ActivityDataPointsHeatingPowerApiResponse(_ApiModel):
    percentage: float


class SensorDataPointsInsideTemperatureApiResponse(_ApiModel):
    value: float


class SensorDataPointsHumidityApiResponse(_ApiModel):
    percentage: float


class ZoneStateSensorDataPointsApiResponse(_ApiModel):
    inside_temperature: SensorDataPointsInsideTemperatureApiResponse | None = None
    humidity: SensorDataPointsHumidityApiResponse | None = None


class ZoneStateOpenWindowApiResponse(_ApiModel):
    activated: bool | None = None
    expiry_in_seconds: int | None = None


class ZonesApiResponse(_ApiModel):
    """One entry of ``GET /homes/{id}/rooms`` (also ``/rooms/{room_id}``)."""

    id: int
    name: str
    setting: ZoneStateSettingApiResponse
    heating_power: ActivityDataPointsHeatingPowerApiResponse | None = None
    sensor_data_points: ZoneStateSensorDataPointsApiResponse
    open_window: ZoneStateOpenWindowApiResponse | None = None


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------


class WeatherSolarIntensityApiResponse(_ApiModel):
    percentage: float


class WeatherOutsideTemperatureApiResponse(_ApiModel):
    celsius: float
    fahrenheit: float


class WeatherApiResponse(_ApiModel):
    solar_intensity: WeatherSolarIntensityApiResponse
    outside_temperature: WeatherOutsideTemperatureApiResponse


# ---------------------------------------------------------------------------
# Day report
# ---------------------------------------------------------------------------


class DayReportTemperatureApiResponse(_ApiModel):
    celsius: float
    fahrenheit: float


class DayReportDataPointApiResponse(_ApiModel):
    timestamp: str
    value: DayReportTemperatureApiResponse


class DayReportInsideTemperatureApiResponse(_ApiModel):
    data_points: list[DayReportDataPointApiResponse] = []


class DayReportMeasuredDataApiResponse(_ApiModel):
    inside_temperature: DayReportInsideTemperatureApiResponse


class ZoneDayReportApiResponse(_ApiModel):
    measured_data: DayReportMeasuredDataApiResponse
