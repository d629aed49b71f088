# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Destination config validation.

Validation runs in two passes. Before the destination has been probed only
dialect-independent rules apply; once the dialect is known the credential and
database/bucket rules for that dialect are added.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from .config import CONSISTENCY_LEVELS, DestinationConfig
from .dialect import Dialect
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ValidationFailure:
    """A single invalid setting.

    Attributes:
        property: Name of the offending setting
        value: The literal invalid value
        reason: Human-readable reason, phrased to follow "but it"
        prefix: Property prefix used in the message
    """
    property: str
    value: Any
    reason: str
    prefix: str = "influx"

    @property
    def message(self) -> str:
        rendered = "null" if self.value is None else self.value
        return f"{self.prefix}.{self.property} was '{rendered}' but it {self.reason}"

    def __str__(self) -> str:
        return self.message


def _is_blank(value: str) -> bool:
    return not value.strip()


def _check_uri(config: DestinationConfig) -> list[ValidationFailure]:
    if config.uri is None:
        return [ValidationFailure("uri", None, "is required", config.prefix)]
    parsed = urlparse(config.uri)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return [ValidationFailure("uri", config.uri, "must be an absolute http(s) URL", config.prefix)]
    return []


def _check_required_text(config: DestinationConfig, name: str, value: str | None) -> list[ValidationFailure]:
    if value is None:
        return [ValidationFailure(name, None, "is required", config.prefix)]
    if _is_blank(value):
        return [ValidationFailure(name, value, "cannot be blank", config.prefix)]
    return []


def _check_token(config: DestinationConfig, required: bool) -> list[ValidationFailure]:
    if config.token is None:
        if required:
            return [ValidationFailure("token", None, "is required", config.prefix)]
        return []
    if _is_blank(config.token):
        return [ValidationFailure("token", config.token, "cannot be blank", config.prefix)]
    return []


def _common_failures(config: DestinationConfig) -> list[ValidationFailure]:
    failures = _check_uri(config)

    if config.consistency not in CONSISTENCY_LEVELS:
        failures.append(ValidationFailure(
            "consistency",
            config.consistency,
            f"must be one of {', '.join(CONSISTENCY_LEVELS)}",
            config.prefix,
        ))
    if config.batch_size <= 0:
        failures.append(ValidationFailure("batch_size", config.batch_size, "must be positive", config.prefix))
    if config.connect_timeout <= 0:
        failures.append(ValidationFailure("connect_timeout", config.connect_timeout, "must be positive", config.prefix))
    if config.read_timeout <= 0:
        failures.append(ValidationFailure("read_timeout", config.read_timeout, "must be positive", config.prefix))
    return failures


def validate_config(config: DestinationConfig, dialect: Dialect = Dialect.UNKNOWN) -> list[ValidationFailure]:
    """Check a destination config.

    Args:
        config: Config to check
        dialect: Resolved dialect; UNKNOWN applies only the
            dialect-independent rules

    Returns:
        List of failures, empty when the config is valid
    """
    failures = _common_failures(config)

    if dialect is Dialect.LEGACY_SINGLE_NODE:
        failures.extend(_check_required_text(config, "db", config.db))
        failures.extend(_check_token(config, required=False))
    elif dialect is Dialect.MULTI_TENANT:
        failures.extend(_check_token(config, required=True))
        failures.extend(_check_required_text(config, "bucket", config.resolved_bucket))

    return failures


def require_valid(config: DestinationConfig, dialect: Dialect = Dialect.UNKNOWN) -> None:
    """Validate a config and raise if it is not usable.

    Raises:
        ConfigurationError: If any rule fails
    """
    failures = validate_config(config, dialect)
    if failures:
        raise ConfigurationError(failures)
