# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory metrics collector that pushes snapshots through an InfluxPublisher."""

import logging
import math
import threading
import time
from typing import Callable

from .base import MetricsCollector
from .config import DestinationConfig
from .http_sender import HttpSender
from .line_protocol import MetricRecord
from .publisher import InfluxPublisher, PublishReport

logger = logging.getLogger(__name__)

METRIC_TYPE_TAG = "metric_type"

Clock = Callable[[], int]

_MetricKey = tuple[str, tuple[tuple[str, str], ...]]


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def snake_case(name: str) -> str:
    """Convert a dotted metric name to snake_case ('my.counter' -> 'my_counter')."""
    return "_".join(part for part in name.replace("=", "_").split(".") if part)


def _key(name: str, tags: dict[str, str] | None) -> _MetricKey:
    normalized = tuple(sorted((snake_case(k), str(v)) for k, v in (tags or {}).items()))
    return snake_case(name), normalized


class _Distribution:
    """Step accumulator for observed values."""

    def __init__(self) -> None:
        self.count = 0
        self.total = 0.0
        self.upper = 0.0

    def record(self, value: float) -> None:
        value = float(value)
        self.count += 1
        self.total += value
        self.upper = value if self.count == 1 else max(self.upper, value)

    def fields(self) -> dict[str, int | float]:
        mean = self.total / self.count if self.count else 0.0
        return {"sum": self.total, "count": self.count, "mean": mean, "upper": self.upper}


class InfluxMetricsCollector(MetricsCollector):
    """Metrics collector that ships step snapshots to an Influx destination.

    Values are kept in memory with step semantics: each snapshot reports what
    happened since the previous one and resets the step. Registered counters
    and histograms keep reporting (with zero values) after activity stops;
    gauges report the last value set.

    A step is handed over when the publisher takes its snapshot. If that
    cycle is then rejected or its write fails, the step is dropped rather
    than merged into the next one, so a later step never reports activity
    twice.
    """
    # Hint for runtimes that feature-detect push capability
    can_push: bool = True

    def __init__(
        self,
        config: DestinationConfig,
        sender: HttpSender | None = None,
        clock: Clock | None = None,
    ):
        """Initialize the collector.

        Args:
            config: Destination settings
            sender: Optional transport override
            clock: Callable returning epoch milliseconds (default: wall clock)
        """
        self.clock = clock or system_clock
        self.publisher = InfluxPublisher(config, snapshot_source=self.snapshot, sender=sender)
        self.last_report: PublishReport | None = None
        self._lock = threading.Lock()
        self._counters: dict[_MetricKey, float] = {}
        self._gauges: dict[_MetricKey, float] = {}
        self._distributions: dict[_MetricKey, _Distribution] = {}

    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        key = _key(name, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0.0) + float(value)
        logger.debug(f"InfluxMetricsCollector: increment {name} by {value} with tags {tags}")

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        key = _key(name, tags)
        with self._lock:
            self._distributions.setdefault(key, _Distribution()).record(value)
        logger.debug(f"InfluxMetricsCollector: observe {name} value {value} with tags {tags}")

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        key = _key(name, tags)
        with self._lock:
            self._gauges[key] = float(value)
        logger.debug(f"InfluxMetricsCollector: gauge {name} set to {value} with tags {tags}")

    def register_counter(self, name: str, tags: dict[str, str] | None = None) -> None:
        """Register a counter so it is reported even before its first increment."""
        key = _key(name, tags)
        with self._lock:
            self._counters.setdefault(key, 0.0)

    def snapshot(self) -> list[MetricRecord]:
        """Capture the current step and reset step-based values.

        The reset happens here regardless of what the publish cycle does
        with the records.

        Returns:
            Records ordered by metric type, then name and tags
        """
        timestamp = self.clock()
        records: list[MetricRecord] = []
        with self._lock:
            for key in sorted(self._counters):
                records.append(self._record(key, "counter", {"value": self._counters[key]}, timestamp))
                self._counters[key] = 0.0
            for key in sorted(self._gauges):
                value = self._gauges[key]
                if not math.isfinite(value):
                    continue
                records.append(self._record(key, "gauge", {"value": value}, timestamp))
            for key in sorted(self._distributions):
                distribution = self._distributions[key]
                records.append(self._record(key, "histogram", distribution.fields(), timestamp))
                self._distributions[key] = _Distribution()
        return records

    @staticmethod
    def _record(key: _MetricKey, metric_type: str, fields: dict[str, int | float], timestamp: int) -> MetricRecord:
        name, tags = key
        tag_map = dict(tags)
        tag_map[METRIC_TYPE_TAG] = metric_type
        return MetricRecord(name=name, fields=fields, tags=tag_map, timestamp=timestamp)

    def push(self) -> None:
        """Publish the current step to the destination.

        Raises:
            InfluxPublisherError: If the cycle was rejected or the write failed
        """
        report = self.publisher.publish()
        self.last_report = report
        report.raise_for_error()

    def close(self) -> None:
        self.publisher.close()
