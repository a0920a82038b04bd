"""
Pydantic models for the normalized tado° domain state.

These are the shapes handed to the metrics renderer and the history
endpoint. Every optional upstream field stays optional here: absence is
preserved as ``None`` and never replaced by a default.

CHANGELOG:
- 2026-10-19: Add Credentials token record
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel


class Credentials(BaseModel):
    """OAuth2 token pair as persisted in the token record.

    Attributes:
        access_token: Bearer token attached to every data request.
        refresh_token: Token exchanged for a new pair once the access token
            nears expiry.
        expires_in: Access token lifetime in seconds, as issued.
    """

    access_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0


class Temperature(BaseModel):
    celsius: float
    fahrenheit: float


class SingleTemperature(BaseModel):
    """A single celsius reading as reported by the rooms endpoint."""

    value: float


class SolarIntensity(BaseModel):
    percentage: float


class Humidity(BaseModel):
    percentage: float


class HeatingPower(BaseModel):
    percentage: float


class ZoneStateSetting(BaseModel):
    """Target setting of a zone. ``temperature`` is None when heating is off."""

    temperature: SingleTemperature | None = None


class ZoneStateOpenWindow(BaseModel):
    """Marker: present only while an open window is detected."""


class ZoneStateSensorDataPoints(BaseModel):
    inside_temperature: SingleTemperature | None = None
    humidity: Humidity | None = None


class ZoneState(BaseModel):
    """Snapshot of one zone taken on a single poll.

    Attributes:
        name: Zone name, used as the join key for metrics and history.
        id: Upstream zone (room) identifier.
        setting: Current target setting.
        heating_power: Heating demand, absent for zones without heating.
        sensor_data_points: Measured inside conditions.
        open_window: Set when the zone reports an open window.
    """

    name: str
    id: int
    setting: ZoneStateSetting
    heating_power: HeatingPower | None = None
    sensor_data_points: ZoneStateSensorDataPoints
    open_window: ZoneStateOpenWindow | None = None


class Weather(BaseModel):
    """Outdoor conditions at the home location."""

    solar_intensity: SolarIntensity
    outside_temperature: Temperature


class DataPoint(BaseModel):
    """One timestamped value of a history series.

    Attributes:
        timestamp: RFC3339 timestamp as returned upstream.
        value: Measured temperature.
    """

    timestamp: str
    value: Temperature


class HistoryReport(BaseModel):
    """Inside temperature series of one zone, in arrival order."""

    name: str
    inside_temperature: list[DataPoint] = []
