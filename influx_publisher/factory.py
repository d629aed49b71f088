# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory functions for creating publishers and collectors."""

import logging

from .collector import Clock, InfluxMetricsCollector
from .config import DestinationConfig
from .http_sender import HttpSender
from .providers import ConfigProvider, EnvConfigProvider
from .publisher import InfluxPublisher, SnapshotSource

logger = logging.getLogger(__name__)


def _resolve_config(config: DestinationConfig | None, provider: ConfigProvider | None) -> DestinationConfig:
    if config is not None:
        return config
    provider = provider or EnvConfigProvider()
    resolved = DestinationConfig.from_provider(provider)
    logger.debug(f"Resolved destination config for {resolved.uri}")
    return resolved


def create_publisher(
    snapshot_source: SnapshotSource,
    config: DestinationConfig | None = None,
    sender: HttpSender | None = None,
    provider: ConfigProvider | None = None,
) -> InfluxPublisher:
    """Create a publisher for an externally managed snapshot source.

    Args:
        snapshot_source: Callable returning the current snapshot
        config: Destination settings; read from ``provider`` when omitted
        sender: Optional transport override
        provider: Config provider (default: process environment)

    Returns:
        Configured InfluxPublisher

    Examples:
        >>> publisher = create_publisher(lambda: [], config=DestinationConfig(token="my-token"))
        >>> publisher.publish().outcome.value
        'skipped'
    """
    return InfluxPublisher(_resolve_config(config, provider), snapshot_source=snapshot_source, sender=sender)


def create_metrics_collector(
    config: DestinationConfig | None = None,
    sender: HttpSender | None = None,
    clock: Clock | None = None,
    provider: ConfigProvider | None = None,
) -> InfluxMetricsCollector:
    """Create an in-memory collector that pushes to the configured destination.

    Args:
        config: Destination settings; read from ``provider`` when omitted
        sender: Optional transport override
        clock: Callable returning epoch milliseconds
        provider: Config provider (default: process environment)

    Returns:
        Configured InfluxMetricsCollector
    """
    return InfluxMetricsCollector(_resolve_config(config, provider), sender=sender, clock=clock)
