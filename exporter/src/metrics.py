"""
Prometheus metrics for tado° zone state, weather and history.

``ExporterMetrics`` owns its own CollectorRegistry and the gauges the
exporter publishes on /metrics. Gauges are only set for values present in
the latest snapshot; an absent optional value leaves the previous sample in
place. ``render_history`` formats the accumulated history as OpenMetrics
text lines with explicit sample timestamps for backfilling.

CHANGELOG:
- 2026-10-19: Render history through an OpenMetrics collector
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.openmetrics.exposition import generate_latest as generate_openmetrics

from exporter.src.models import HistoryReport, Weather, ZoneState

logger = logging.getLogger(__name__)

DEVICE_TYPE = "tado"


class ExporterMetrics:
    """Gauge set for one exporter process.

    Args:
        registry: Registry to register the gauges on. A fresh one is created
            when omitted, so several instances never collide.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        self.activity_heating_power = Gauge(
            "tado_activity_heating_power_percentage",
            "The % of heating power in a specific zone.",
            ["zone", "type"],
            registry=self.registry,
        )
        self.setting_temperature = Gauge(
            "tado_setting_temperature_value",
            "The temperature of a specific zone in celsius degrees.",
            ["zone", "type", "unit"],
            registry=self.registry,
        )
        self.sensor_temperature = Gauge(
            "tado_sensor_temperature_value",
            "The temperature of a specific zone in celsius degrees.",
            ["zone", "type", "unit"],
            registry=self.registry,
        )
        self.sensor_humidity = Gauge(
            "tado_sensor_humidity_percentage",
            "The % of humidity in a specific zone.",
            ["zone", "type"],
            registry=self.registry,
        )
        self.sensor_window_opened = Gauge(
            "tado_sensor_window_opened",
            "1 if the sensor detected a window is open, 0 otherwise.",
            ["zone", "type"],
            registry=self.registry,
        )
        self.weather_solar_intensity = Gauge(
            "weather_solar_intensity",
            "Solar intensity outside the house.",
            registry=self.registry,
        )
        self.weather_outside_temperature = Gauge(
            "weather_outside_temperature",
            "Temperature outside the house.",
            ["unit"],
            registry=self.registry,
        )

    def set_zones(self, zones: Iterable[ZoneState]) -> None:
        """Update the zone gauges from the latest zone snapshots."""
        for zone in zones:
            # Setting temperature is null while the zone's heating is off.
            if zone.setting.temperature is not None:
                value = zone.setting.temperature.value
                self.setting_temperature.labels(zone.name, DEVICE_TYPE, "celsius").set(value)
                logger.info("-> %s (%s) -> setting temperature (celsius): %s", zone.name, DEVICE_TYPE, value)
            else:
                logger.info("-> %s (%s) -> setting temperature (celsius): Off", zone.name, DEVICE_TYPE)

            window_open = zone.open_window is not None
            self.sensor_window_opened.labels(zone.name, DEVICE_TYPE).set(1.0 if window_open else 0.0)
            logger.info("-> %s (%s) -> window opened: %s", zone.name, DEVICE_TYPE, window_open)

            sensors = zone.sensor_data_points
            if sensors.inside_temperature is not None:
                value = sensors.inside_temperature.value
                self.sensor_temperature.labels(zone.name, DEVICE_TYPE, "celsius").set(value)
                logger.info("-> %s (%s) -> sensor temperature (celsius): %s", zone.name, DEVICE_TYPE, value)

            if sensors.humidity is not None:
                value = sensors.humidity.percentage
                self.sensor_humidity.labels(zone.name, DEVICE_TYPE).set(value)
                logger.info("-> %s (%s) -> sensor humidity: %s%%", zone.name, DEVICE_TYPE, value)

            if zone.heating_power is not None:
                value = zone.heating_power.percentage
                self.activity_heating_power.labels(zone.name, DEVICE_TYPE).set(value)
                logger.info("-> %s (%s) -> heating power: %s%%", zone.name, DEVICE_TYPE, value)

    def set_weather(self, weather: Weather | None) -> None:
        """Update the weather gauges; ``None`` leaves them untouched."""
        if weather is None:
            return

        self.weather_solar_intensity.set(weather.solar_intensity.percentage)
        logger.info("-> setting solar intensity (percentage): %s", weather.solar_intensity.percentage)

        self.weather_outside_temperature.labels("celsius").set(weather.outside_temperature.celsius)
        self.weather_outside_temperature.labels("fahrenheit").set(weather.outside_temperature.fahrenheit)
        logger.info(
            "-> setting outside temperature: %s C / %s F",
            weather.outside_temperature.celsius,
            weather.outside_temperature.fahrenheit,
        )

    def render(self) -> tuple[bytes, str]:
        """Return the exposition body and its content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


class HistoryCollector:
    """Collector exposing stored history as timestamped gauge samples.

    Each data point yields a celsius and a fahrenheit sample of
    ``tado_sensor_temperature_value`` stamped with the point's epoch second.
    Zones are emitted in name order, points in stored order. A point whose
    timestamp cannot be parsed is logged and skipped.
    """

    def __init__(self, history: Mapping[str, HistoryReport]) -> None:
        self._history = history

    def collect(self) -> Iterator[GaugeMetricFamily]:
        family = GaugeMetricFamily(
            "tado_sensor_temperature_value",
            "The temperature of a specific zone in celsius degrees.",
            labels=["type", "unit", "zone"],
        )
        for name in sorted(self._history):
            report = self._history[name]
            for point in report.inside_temperature:
                try:
                    ts = int(datetime.fromisoformat(point.timestamp).timestamp())
                except ValueError:
                    logger.warning(
                        "Skipping history point of %s with bad timestamp %r",
                        report.name,
                        point.timestamp,
                    )
                    continue
                for unit, value in (
                    ("celsius", point.value.celsius),
                    ("fahrenheit", point.value.fahrenheit),
                ):
                    family.add_metric([DEVICE_TYPE, unit, report.name], value, timestamp=ts)
        if family.samples:
            yield family


def render_history(history: Mapping[str, HistoryReport]) -> str:
    """Format zone history as OpenMetrics text with sample timestamps.

    Label values are escaped by the exposition writer. The output is
    terminated by ``# EOF``.
    """
    registry = CollectorRegistry()
    registry.register(HistoryCollector(history))
    return generate_openmetrics(registry).decode("utf-8")
