"""
Pure converters from raw tado° API payloads to the internal model.

Each function maps one upstream shape (see :mod:`exporter.src.api_models`)
to its counterpart in :mod:`exporter.src.models`. Optional upstream members
map to ``None``; nothing is defaulted or validated beyond what the payload
models already enforce.

This module is pure: no side effects, no I/O, no clock.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from exporter.src.api_models import (
    AuthTokensResponse,
    WeatherApiResponse,
    ZoneDayReportApiResponse,
    ZonesApiResponse,
)
from exporter.src.models import (
    Credentials,
    DataPoint,
    HeatingPower,
    Humidity,
    SingleTemperature,
    SolarIntensity,
    Temperature,
    Weather,
    ZoneState,
    ZoneStateOpenWindow,
    ZoneStateSensorDataPoints,
    ZoneStateSetting,
)


def convert_credentials(tokens: AuthTokensResponse) -> Credentials:
    """Convert a token endpoint response into the persisted record."""
    return Credentials(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


def convert_zone(zone: ZonesApiResponse) -> ZoneState:
    """Convert one rooms entry into a :class:`ZoneState` snapshot.

    Args:
        zone: Validated rooms payload entry.

    Returns:
        The zone snapshot, with ``None`` for every absent optional member.
    """
    setting_temperature = None
    if zone.setting.temperature is not None:
        setting_temperature = SingleTemperature(value=zone.setting.temperature.value)

    heating_power = None
    if zone.heating_power is not None:
        heating_power = HeatingPower(percentage=zone.heating_power.percentage)

    sensors = zone.sensor_data_points
    inside_temperature = None
    if sensors.inside_temperature is not None:
        inside_temperature = SingleTemperature(value=sensors.inside_temperature.value)
    humidity = None
    if sensors.humidity is not None:
        humidity = Humidity(percentage=sensors.humidity.percentage)

    return ZoneState(
        name=zone.name,
        id=zone.id,
        setting=ZoneStateSetting(temperature=setting_temperature),
        heating_power=heating_power,
        sensor_data_points=ZoneStateSensorDataPoints(
            inside_temperature=inside_temperature,
            humidity=humidity,
        ),
        open_window=ZoneStateOpenWindow() if zone.open_window is not None else None,
    )


def convert_weather(weather: WeatherApiResponse) -> Weather:
    """Convert the weather payload into a :class:`Weather` snapshot."""
    return Weather(
        solar_intensity=SolarIntensity(percentage=weather.solar_intensity.percentage),
        outside_temperature=Temperature(
            celsius=weather.outside_temperature.celsius,
            fahrenheit=weather.outside_temperature.fahrenheit,
        ),
    )


def convert_day_report_inside_temperature(
    report: ZoneDayReportApiResponse,
) -> list[DataPoint]:
    """Extract the inside temperature series of a day report, in order."""
    return [
        DataPoint(
            timestamp=point.timestamp,
            value=Temperature(
                celsius=point.value.celsius,
                fahrenheit=point.value.fahrenheit,
            ),
        )
        for point in report.measured_data.inside_temperature.data_points
    ]
