# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Recording interface shared by step-based collectors.

Values are accumulated per step, the interval between two snapshots. Each
recorded name and tag set becomes one Influx measurement series tagged with
its metric type.
"""

import logging
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class _Pushable(Protocol):
    """Collector that can ship its current step on demand."""

    def push(self) -> None: ...


class MetricsCollector(ABC):
    """Records counters, gauges and distributions for step snapshots.

    What each kind reports per step:

    - counter: ``value`` field, the sum of increments during the step
      (zero for an idle step once the series exists)
    - gauge: ``value`` field, the last value set, carried across steps
    - histogram: ``sum``, ``count``, ``mean`` and ``upper`` fields over the
      values observed during the step
    """

    @abstractmethod
    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        """Add to a counter for the current step.

        Args:
            name: Dotted or snake_case series name
            value: Amount to add (default: 1.0)
            tags: Tag set identifying the series
        """
        pass

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Record one sample in the current step's distribution."""
        pass

    @abstractmethod
    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Set the gauge reported by this and following steps.

        Non-finite values are kept but left out of snapshots.
        """
        pass

    def safe_push(self) -> None:
        """Ship the current step if the collector can push; log failures instead of raising."""
        if isinstance(self, _Pushable):
            try:
                self.push()
            except Exception as e:
                logger.warning(f"Failed to push metrics: {e}")
