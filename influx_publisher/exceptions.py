# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions for metric publishing operations."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import ValidationFailure


class InfluxPublisherError(Exception):
    """Base exception for publisher errors."""
    pass


class ConfigurationError(InfluxPublisherError):
    """Raised when a required setting is missing or malformed."""

    def __init__(self, failures: "list[ValidationFailure]"):
        self.failures = list(failures)
        super().__init__("; ".join(failure.message for failure in self.failures))


class ProbeError(InfluxPublisherError):
    """Raised when the version probe could not reach the destination."""
    pass


class EncodingError(InfluxPublisherError):
    """Raised when a metric record cannot be written as line protocol."""
    pass


class TransportError(InfluxPublisherError):
    """Raised when a request could not be sent or no response was received."""
    pass


class WriteError(InfluxPublisherError):
    """Raised when the destination rejects a write or the write cannot be sent."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body
