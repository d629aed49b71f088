# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Destination version probe with a write-once dialect cache."""

import logging
import threading

from .dialect import UNKNOWN, VERSION_HEADER, DetectedDialect, Dialect, dialect_for_version
from .exceptions import ProbeError, TransportError
from .http_sender import HttpSender

logger = logging.getLogger(__name__)

PING_PATH = "/ping"

# Dialect assumed when the destination does not say otherwise
DEFAULT_DIALECT = Dialect.MULTI_TENANT


class VersionProber:
    """Discovers which wire dialect a destination speaks.

    Issues ``HEAD <uri>/ping`` and reads the version header. A definite answer
    (a recognised version, or a successful response without one) is cached
    for the lifetime of the prober and never replaced. Error statuses and
    transport failures fall back to the multi-tenant dialect for the current
    call only, so the next call probes again.
    """

    def __init__(self, base_uri: str, sender: HttpSender):
        """Initialize the prober.

        Args:
            base_uri: Destination base URI without trailing slash
            sender: Transport used for the probe request
        """
        self.base_uri = base_uri.rstrip("/")
        self.sender = sender
        self._detected = UNKNOWN
        self._lock = threading.Lock()

    @property
    def detected(self) -> DetectedDialect:
        """Currently cached detection (UNKNOWN until a definite answer)."""
        return self._detected

    def resolve(self) -> DetectedDialect:
        """Return the cached dialect, probing the destination if still unknown.

        Never raises: probe failures degrade to the default dialect.
        """
        cached = self._detected
        if cached.is_known:
            return cached

        try:
            detected, definite = self._probe()
        except ProbeError as e:
            logger.warning(f"Version probe failed, assuming {DEFAULT_DIALECT.value}: {e}")
            return DetectedDialect(DEFAULT_DIALECT)

        if definite:
            return self._record(detected)
        return detected

    def reset(self) -> None:
        """Forget the cached dialect so the next resolve() probes again."""
        with self._lock:
            self._detected = UNKNOWN

    def _record(self, detected: DetectedDialect) -> DetectedDialect:
        with self._lock:
            if not self._detected.is_known:
                self._detected = detected
                logger.info(
                    "Detected destination dialect",
                    extra={"dialect": detected.dialect.value, "version": detected.version},
                )
            return self._detected

    def _probe(self) -> tuple[DetectedDialect, bool]:
        """Issue the probe request.

        Returns:
            Tuple of (detection, whether the detection is definite)

        Raises:
            ProbeError: If the request could not be sent
        """
        url = f"{self.base_uri}{PING_PATH}"
        try:
            response = self.sender.send("HEAD", url)
        except TransportError as e:
            raise ProbeError(str(e)) from e

        if not 200 <= response.status < 400:
            logger.warning(
                f"Version probe returned status {response.status}, assuming {DEFAULT_DIALECT.value}"
            )
            return DetectedDialect(DEFAULT_DIALECT), False

        version = response.headers.get(VERSION_HEADER)
        dialect = dialect_for_version(version)
        if dialect is None:
            logger.debug(f"No recognisable version in probe response ({version!r})")
            return DetectedDialect(DEFAULT_DIALECT, version or None), True
        return DetectedDialect(dialect, version), True
