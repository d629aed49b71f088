# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Publish orchestration: one isolated cycle per publish() call."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from .config import DestinationConfig
from .dialect import DetectedDialect, Dialect
from .dispatcher import WriteDispatcher
from .exceptions import ConfigurationError, EncodingError
from .http_sender import HttpSender, RequestsHttpSender
from .line_protocol import MetricRecord, encode_snapshot
from .prober import VersionProber
from .validation import require_valid

logger = logging.getLogger(__name__)

SnapshotSource = Callable[[], Sequence[MetricRecord]]


class PublishOutcome(Enum):
    """Terminal state of a publish cycle."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class PublishReport:
    """What happened during one publish cycle.

    Attributes:
        outcome: Terminal state of the cycle
        dialect: Dialect used for the cycle, if probing happened
        records: Number of records in the snapshot
        batches_sent: Number of write requests accepted by the destination
        error: Underlying cause for REJECTED and FAILED cycles
        status: HTTP status of the failed write, if any
        body: Response body of the failed write, if any
    """
    outcome: PublishOutcome
    dialect: DetectedDialect | None = None
    records: int = 0
    batches_sent: int = 0
    error: Exception | None = None
    status: int | None = None
    body: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (PublishOutcome.SUCCESS, PublishOutcome.SKIPPED)

    def raise_for_error(self) -> None:
        """Re-raise the cycle's error, if any."""
        if self.error is not None:
            raise self.error


class InfluxPublisher:
    """Ships metric snapshots to a destination speaking either wire dialect.

    Each call to publish() runs validate, snapshot, probe-if-needed,
    dialect validation, encode and dispatch in that order. Failures are
    reported on the returned PublishReport rather than raised, and only the
    detected dialect carries over between cycles.
    """

    def __init__(
        self,
        config: DestinationConfig,
        snapshot_source: SnapshotSource,
        sender: HttpSender | None = None,
    ):
        """Initialize the publisher.

        Args:
            config: Destination settings, shared read-only across cycles
            snapshot_source: Callable returning the current snapshot; called
                once per cycle
            sender: Transport; defaults to a requests-backed sender using the
                configured timeouts
        """
        self.config = config
        self.snapshot_source = snapshot_source
        self.sender = sender or RequestsHttpSender(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )
        self.prober = VersionProber(config.base_uri, self.sender)
        self.dispatcher = WriteDispatcher(config, self.sender)
        self._publish_lock = threading.Lock()

    @property
    def detected_dialect(self) -> DetectedDialect:
        return self.prober.detected

    def publish(self) -> PublishReport:
        """Run one publish cycle.

        Returns:
            PublishReport for the cycle; never raises
        """
        with self._publish_lock:
            try:
                return self._publish()
            except Exception as e:
                # Errors from snapshot sources and custom senders end the cycle here
                logger.exception(f"Unexpected error during metrics publish: {e}")
                return PublishReport(PublishOutcome.FAILED, error=e)

    def _publish(self) -> PublishReport:
        try:
            require_valid(self.config)
        except ConfigurationError as e:
            logger.error(f"Metrics publish rejected: {e}")
            return PublishReport(PublishOutcome.REJECTED, error=e)

        snapshot = list(self.snapshot_source())
        if not snapshot:
            logger.debug("No metrics to publish")
            return PublishReport(PublishOutcome.SKIPPED)

        detected = self.prober.resolve()
        report = PublishReport(PublishOutcome.FAILED, dialect=detected, records=len(snapshot))

        try:
            require_valid(self.config, detected.dialect)
        except ConfigurationError as e:
            logger.error(f"Metrics publish rejected: {e}")
            report.outcome = PublishOutcome.REJECTED
            report.error = e
            return report

        try:
            lines = encode_snapshot(snapshot)
        except EncodingError as e:
            logger.error(f"Unable to encode metrics snapshot: {e}")
            report.error = e
            return report

        if detected.dialect is Dialect.LEGACY_SINGLE_NODE:
            self.dispatcher.ensure_database(detected.dialect)

        result = self.dispatcher.dispatch(detected.dialect, lines)
        report.batches_sent = result.succeeded
        if result.error is not None:
            report.error = result.error
            report.status = result.error.status
            report.body = result.error.body
            return report

        report.outcome = PublishOutcome.SUCCESS
        logger.debug(
            f"Published {len(lines)} metrics in {result.batches} batch(es) "
            f"using {detected.dialect.value} dialect"
        )
        return report

    def close(self) -> None:
        self.sender.close()
