# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Influx metrics publisher.

Periodically converts in-process metrics into line protocol and ships them to
a time-series destination speaking either the legacy single-node API or the
multi-tenant API, detecting which one by probing the destination's version.

Example:
    >>> from influx_publisher import DestinationConfig, create_metrics_collector
    >>> collector = create_metrics_collector(DestinationConfig(uri="http://influx:8086", token="my-token"))
    >>> collector.increment("requests.handled", tags={"service": "ingestion"})
    >>> collector.safe_push()
"""

__version__ = "0.1.0"

from .base import MetricsCollector
from .collector import InfluxMetricsCollector, system_clock
from .config import DestinationConfig
from .dialect import DetectedDialect, Dialect
from .dispatcher import (
    LegacyWriteStrategy,
    MultiTenantWriteStrategy,
    WriteDispatcher,
    WriteRequest,
    WriteStrategy,
)
from .exceptions import (
    ConfigurationError,
    EncodingError,
    InfluxPublisherError,
    ProbeError,
    TransportError,
    WriteError,
)
from .factory import create_metrics_collector, create_publisher
from .http_sender import HttpResponse, HttpSender, RequestsHttpSender
from .line_protocol import MetricRecord, encode_record, encode_snapshot
from .prober import VersionProber
from .providers import ConfigProvider, EnvConfigProvider, StaticConfigProvider
from .publisher import InfluxPublisher, PublishOutcome, PublishReport
from .validation import ValidationFailure, require_valid, validate_config

__all__ = [
    # Version
    "__version__",
    # Configuration
    "DestinationConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    "ValidationFailure",
    "validate_config",
    "require_valid",
    # Dialects
    "Dialect",
    "DetectedDialect",
    "VersionProber",
    # Encoding
    "MetricRecord",
    "encode_record",
    "encode_snapshot",
    # Dispatch
    "WriteStrategy",
    "LegacyWriteStrategy",
    "MultiTenantWriteStrategy",
    "WriteDispatcher",
    "WriteRequest",
    # Transport
    "HttpSender",
    "HttpResponse",
    "RequestsHttpSender",
    # Publishing
    "InfluxPublisher",
    "PublishOutcome",
    "PublishReport",
    "MetricsCollector",
    "InfluxMetricsCollector",
    "system_clock",
    "create_publisher",
    "create_metrics_collector",
    # Exceptions
    "InfluxPublisherError",
    "ConfigurationError",
    "ProbeError",
    "EncodingError",
    "TransportError",
    "WriteError",
]
