# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Destination configuration for the metrics publisher."""

from dataclasses import dataclass, replace
from typing import Any

from .providers import ConfigProvider

CONSISTENCY_LEVELS = ("any", "one", "quorum", "all")


@dataclass(frozen=True)
class DestinationConfig:
    """Settings describing where and how snapshots are written."""

    uri: str | None = "http://localhost:8086"
    """Base URI of the time-series destination."""

    db: str | None = "mydb"
    """Database name written to by the legacy single-node dialect."""

    bucket: str | None = None
    """Bucket written to by the multi-tenant dialect (defaults to db)."""

    org: str | None = None
    """Organization identifier for the multi-tenant dialect."""

    retention_policy: str | None = None
    """Retention policy name (legacy dialect)."""

    retention_duration: str | None = None
    """Retention duration used when the database is auto-created, e.g. '2h'."""

    retention_replication_factor: int | None = None
    """Replication factor used when the database is auto-created."""

    retention_shard_duration: str | None = None
    """Shard group duration used when the database is auto-created."""

    consistency: str | None = "one"
    """Write consistency level (legacy dialect)."""

    username: str | None = None
    """Username for legacy authentication."""

    password: str | None = None
    """Password for legacy authentication."""

    token: str | None = None
    """Authentication token; mandatory for the multi-tenant dialect."""

    auto_create_db: bool = True
    """Issue CREATE DATABASE before the first legacy write."""

    batch_size: int = 10000
    """Maximum number of lines submitted in one write request."""

    connect_timeout: float = 1.0
    """Connect timeout in seconds, passed through to the transport."""

    read_timeout: float = 10.0
    """Read timeout in seconds, passed through to the transport."""

    compressed: bool = False
    """Gzip the request body."""

    prefix: str = "influx"
    """Property prefix used in validation messages."""

    @property
    def resolved_bucket(self) -> str | None:
        """Bucket name, falling back to the database name."""
        return self.bucket if self.bucket is not None else self.db

    @property
    def base_uri(self) -> str:
        return (self.uri or "").rstrip("/")

    def with_updates(self, **changes: Any) -> "DestinationConfig":
        """Return a copy of this config with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_provider(cls, provider: ConfigProvider, key_prefix: str = "INFLUX_") -> "DestinationConfig":
        """Resolve a config from a provider.

        Keys are the upper-cased field names prefixed with ``key_prefix``
        (``INFLUX_URI``, ``INFLUX_TOKEN``, ...). Missing keys keep the field
        defaults.

        Args:
            provider: Provider to read values from
            key_prefix: Prefix prepended to every key

        Returns:
            DestinationConfig instance
        """
        defaults = cls()

        def key(name: str) -> str:
            return f"{key_prefix}{name.upper()}"

        replication = provider.get(key("retention_replication_factor"))
        return cls(
            uri=provider.get(key("uri"), defaults.uri),
            db=provider.get(key("db"), defaults.db),
            bucket=provider.get(key("bucket")),
            org=provider.get(key("org")),
            retention_policy=provider.get(key("retention_policy")),
            retention_duration=provider.get(key("retention_duration")),
            retention_replication_factor=(
                provider.get_int(key("retention_replication_factor")) if replication is not None else None
            ),
            retention_shard_duration=provider.get(key("retention_shard_duration")),
            consistency=provider.get(key("consistency"), defaults.consistency),
            username=provider.get(key("username")),
            password=provider.get(key("password")),
            token=provider.get(key("token")),
            auto_create_db=provider.get_bool(key("auto_create_db"), defaults.auto_create_db),
            batch_size=provider.get_int(key("batch_size"), defaults.batch_size),
            connect_timeout=provider.get_float(key("connect_timeout"), defaults.connect_timeout),
            read_timeout=provider.get_float(key("read_timeout"), defaults.read_timeout),
            compressed=provider.get_bool(key("compressed"), defaults.compressed),
        )
