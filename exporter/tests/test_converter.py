"""
Unit tests for the pure response converters.

Tests verify:
- Null setting temperature and open window convert to absent fields.
- Present values (including 0.0) are preserved exactly.
- Weather converts celsius, fahrenheit and solar intensity unchanged.
- Day report data points keep their order and timestamps.
- Missing required fields raise ValidationError at the payload layer.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import pytest
from exporter.src.api_models import (
    AuthTokensResponse,
    WeatherApiResponse,
    ZoneDayReportApiResponse,
    ZonesApiResponse,
)
from exporter.src.converter import (
    convert_credentials,
    convert_day_report_inside_temperature,
    convert_weather,
    convert_zone,
)
from exporter.src.models import (
    SolarIntensity,
    Temperature,
    Weather,
    ZoneStateOpenWindow,
)
from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Fixtures: payloads as returned upstream
# ---------------------------------------------------------------------------

_ROOM_HEATING_OFF = {
    "id": 1,
    "name": "Living room",
    "sensorDataPoints": {
        "insideTemperature": {"value": 20.4},
        "humidity": {"percentage": 53.0},
    },
    "setting": {"power": "OFF", "temperature": None},
    "heatingPower": {"percentage": 0.0},
    "openWindow": None,
    "connection": {"state": "CONNECTED"},
}

_ROOM_WINDOW_OPEN = {
    "id": 2,
    "name": "Bedroom",
    "sensorDataPoints": {"insideTemperature": {"value": 18.1}},
    "setting": {"power": "ON", "temperature": {"value": 19.5}},
    "openWindow": {"activated": True, "expiryInSeconds": 900},
}

_WEATHER = {
    "solarIntensity": {
        "type": "PERCENTAGE",
        "percentage": 18.3,
        "timestamp": "2022-09-03T17:43:41.088Z",
    },
    "outsideTemperature": {
        "celsius": 21.53,
        "fahrenheit": 70.75,
        "timestamp": "2022-09-03T17:43:41.088Z",
        "type": "TEMPERATURE",
        "precision": {"celsius": 0.01, "fahrenheit": 0.01},
    },
    "weatherState": {
        "type": "WEATHER_STATE",
        "value": "CLOUDY_PARTLY",
        "timestamp": "2022-09-03T17:43:41.088Z",
    },
}

_DAY_REPORT = {
    "zoneType": "HEATING",
    "measuredData": {
        "insideTemperature": {
            "timeSeriesType": "dataPoints",
            "valueType": "temperature",
            "dataPoints": [
                {
                    "timestamp": "2022-09-02T00:00:00.000Z",
                    "value": {"celsius": 21.0, "fahrenheit": 69.8},
                },
                {
                    "timestamp": "2022-09-02T00:15:00.000Z",
                    "value": {"celsius": 20.9, "fahrenheit": 69.62},
                },
            ],
        },
        "humidity": {"dataPoints": []},
    },
}


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------


class TestConvertZone:
    """Rooms entries convert to ZoneState preserving optionality."""

    def test_null_fields_become_absent(self) -> None:
        """setting.temperature = null and openWindow = null -> None."""
        zone = convert_zone(ZonesApiResponse.model_validate(_ROOM_HEATING_OFF))

        assert zone.setting.temperature is None
        assert zone.open_window is None

    def test_present_fields_preserved_exactly(self) -> None:
        """heatingPower 0.0 and sensor values survive unchanged."""
        zone = convert_zone(ZonesApiResponse.model_validate(_ROOM_HEATING_OFF))

        assert zone.name == "Living room"
        assert zone.id == 1
        assert zone.heating_power is not None
        assert zone.heating_power.percentage == 0.0
        assert zone.sensor_data_points.inside_temperature is not None
        assert zone.sensor_data_points.inside_temperature.value == 20.4
        assert zone.sensor_data_points.humidity is not None
        assert zone.sensor_data_points.humidity.percentage == 53.0

    def test_missing_optional_members_become_absent(self) -> None:
        """Omitted heatingPower and humidity are absent, not defaulted."""
        zone = convert_zone(ZonesApiResponse.model_validate(_ROOM_WINDOW_OPEN))

        assert zone.heating_power is None
        assert zone.sensor_data_points.humidity is None

    def test_open_window_marker_and_setting(self) -> None:
        zone = convert_zone(ZonesApiResponse.model_validate(_ROOM_WINDOW_OPEN))

        assert zone.open_window == ZoneStateOpenWindow()
        assert zone.setting.temperature is not None
        assert zone.setting.temperature.value == 19.5

    def test_missing_setting_power_is_rejected(self) -> None:
        """setting.power is guaranteed by the endpoint; absence is an error."""
        payload = {**_ROOM_HEATING_OFF, "setting": {"temperature": None}}

        with pytest.raises(ValidationError):
            ZonesApiResponse.model_validate(payload)

    def test_missing_name_is_rejected(self) -> None:
        payload = {k: v for k, v in _ROOM_HEATING_OFF.items() if k != "name"}

        with pytest.raises(ValidationError):
            ZonesApiResponse.model_validate(payload)


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------


class TestConvertWeather:
    def test_weather_values_preserved(self) -> None:
        weather = convert_weather(WeatherApiResponse.model_validate(_WEATHER))

        assert weather == Weather(
            solar_intensity=SolarIntensity(percentage=18.3),
            outside_temperature=Temperature(celsius=21.53, fahrenheit=70.75),
        )

    def test_missing_outside_temperature_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WeatherApiResponse.model_validate({"solarIntensity": {"percentage": 1.0}})


# ---------------------------------------------------------------------------
# Day report
# ---------------------------------------------------------------------------


class TestConvertDayReport:
    def test_points_in_order(self) -> None:
        points = convert_day_report_inside_temperature(
            ZoneDayReportApiResponse.model_validate(_DAY_REPORT)
        )

        assert [p.timestamp for p in points] == [
            "2022-09-02T00:00:00.000Z",
            "2022-09-02T00:15:00.000Z",
        ]
        assert points[1].value == Temperature(celsius=20.9, fahrenheit=69.62)

    def test_empty_series(self) -> None:
        payload = {"measuredData": {"insideTemperature": {"dataPoints": []}}}

        points = convert_day_report_inside_temperature(
            ZoneDayReportApiResponse.model_validate(payload)
        )

        assert points == []


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestConvertCredentials:
    def test_credentials_fields(self) -> None:
        tokens = AuthTokensResponse.model_validate(
            {"access_token": "a", "refresh_token": "r", "expires_in": 599, "scope": "x"}
        )

        credentials = convert_credentials(tokens)

        assert credentials.access_token == "a"
        assert credentials.refresh_token == "r"
        assert credentials.expires_in == 599
