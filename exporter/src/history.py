"""
History aggregation for per-zone inside temperature series.

``merge`` folds one day report into a map keyed by zone name: new zones are
inserted as-is, known zones get the new data points appended in arrival
order. Points are neither sorted nor de-duplicated by timestamp.

``HistoryStore`` holds the map read by the /history endpoint. The history
loop writes it while request handlers read it, so every access goes through
one lock and readers only ever see copies.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from exporter.src.models import HistoryReport


def merge(history: dict[str, HistoryReport], report: HistoryReport) -> None:
    """Fold *report* into *history* in place.

    Args:
        history: Zone name -> accumulated report.
        report: Newly fetched report for a single zone.
    """
    existing = history.get(report.name)
    if existing is None:
        history[report.name] = report
    else:
        existing.inside_temperature.extend(report.inside_temperature)


class HistoryStore:
    """Lock-guarded zone history shared between the history loop and readers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: dict[str, HistoryReport] = {}

    def replace(self, pulled: Mapping[str, HistoryReport]) -> None:
        """Install the reports of a full history pull, one zone at a time.

        Zones present in *pulled* overwrite their previous entry; zones not
        present keep whatever they had.
        """
        with self._lock:
            for name, report in pulled.items():
                self._history[name] = report.model_copy(deep=True)

    def snapshot(self) -> dict[str, HistoryReport]:
        """Return a deep copy of the stored history."""
        with self._lock:
            return {
                name: report.model_copy(deep=True)
                for name, report in self._history.items()
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)
