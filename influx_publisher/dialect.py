# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Wire dialects spoken by the destination and version parsing."""

import re
from dataclasses import dataclass
from enum import Enum

VERSION_HEADER = "X-Influxdb-Version"

_MAJOR_VERSION = re.compile(r"^\s*v?(\d+)")


class Dialect(Enum):
    """Enumeration of destination wire dialects."""
    UNKNOWN = "unknown"
    LEGACY_SINGLE_NODE = "legacy_single_node"
    MULTI_TENANT = "multi_tenant"


@dataclass(frozen=True)
class DetectedDialect:
    """Result of a version probe.

    Attributes:
        dialect: The resolved dialect
        version: Version string reported by the destination, if any
    """
    dialect: Dialect
    version: str | None = None

    @property
    def is_known(self) -> bool:
        return self.dialect is not Dialect.UNKNOWN


UNKNOWN = DetectedDialect(Dialect.UNKNOWN)


def parse_major_version(version: str | None) -> int | None:
    """Extract the major version from a version string such as '1.7.10' or 'v2.0.4'."""
    if not version:
        return None
    match = _MAJOR_VERSION.match(version)
    if match is None:
        return None
    return int(match.group(1))


def dialect_for_version(version: str | None) -> Dialect | None:
    """Map a reported version to a dialect.

    Returns:
        LEGACY_SINGLE_NODE for major version 1, MULTI_TENANT for 2 and above,
        None when the version is absent or unrecognised
    """
    major = parse_major_version(version)
    if major is None or major < 1:
        return None
    if major == 1:
        return Dialect.LEGACY_SINGLE_NODE
    return Dialect.MULTI_TENANT
