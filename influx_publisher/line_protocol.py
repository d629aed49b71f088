# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Line protocol encoding for metric snapshots.

Each record becomes one line::

    measurement[,tag_key=tag_value]* field_key=field_value[,field_key=field_value]* timestamp

Tags are written sorted by key and fields in the record's order, so encoding
the same snapshot twice yields byte-identical output.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping, Sequence

from .exceptions import EncodingError

# Floats outside this range cannot be written as exact integers
_MAX_EXACT_INTEGER = 2 ** 53


@dataclass(frozen=True)
class MetricRecord:
    """One measurement captured at publish time.

    Attributes:
        name: Measurement name
        fields: Field name to numeric value; ``int`` values are written as
            integers, ``float`` values as floats
        tags: Tag key to tag value
        timestamp: Milliseconds since the epoch
    """
    name: str
    fields: Mapping[str, int | float]
    tags: Mapping[str, str] = field(default_factory=dict)
    timestamp: int = 0


def _escape(value: str, specials: str) -> str:
    value = value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    value = value.replace("\\", "\\\\")
    for char in specials:
        value = value.replace(char, f"\\{char}")
    return value


def escape_measurement(name: str) -> str:
    return _escape(name, ", ")


def escape_key(key: str) -> str:
    """Escape a tag key, tag value or field key."""
    return _escape(key, ",= ")


def format_field_value(value: int | float) -> str:
    """Format a numeric field value independent of locale.

    Raises:
        EncodingError: For booleans, non-numeric values, NaN and infinities
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EncodingError(f"Field value {value!r} is not numeric")
    if isinstance(value, int):
        return f"{value}i"
    if not math.isfinite(value):
        raise EncodingError(f"Field value {value!r} is not finite")
    if value.is_integer() and abs(value) < _MAX_EXACT_INTEGER:
        return str(int(value))
    return repr(value)


def encode_record(record: MetricRecord) -> str:
    """Encode a single record as one line.

    Raises:
        EncodingError: If the record is malformed
    """
    if not record.name:
        raise EncodingError("Metric record has an empty name")
    if not record.fields:
        raise EncodingError(f"Metric record {record.name!r} has no fields")

    parts = [escape_measurement(record.name)]
    for key in sorted(record.tags):
        tag_value = record.tags[key]
        if not key:
            raise EncodingError(f"Metric record {record.name!r} has an empty tag key")
        if tag_value is None or tag_value == "":
            continue
        parts.append(f",{escape_key(key)}={escape_key(str(tag_value))}")

    fields = []
    for key, value in record.fields.items():
        if not key:
            raise EncodingError(f"Metric record {record.name!r} has an empty field key")
        try:
            fields.append(f"{escape_key(key)}={format_field_value(value)}")
        except EncodingError as e:
            raise EncodingError(f"Metric record {record.name!r}, field {key!r}: {e}") from e

    return f"{''.join(parts)} {','.join(fields)} {int(record.timestamp)}"


def encode_snapshot(snapshot: Iterable[MetricRecord]) -> list[str]:
    """Encode a snapshot into an ordered batch of lines, one per record."""
    return [encode_record(record) for record in snapshot]


def partition(lines: Sequence[str], batch_size: int) -> Iterator[list[str]]:
    """Split a batch into chunks of at most ``batch_size`` lines."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, len(lines), batch_size):
        yield list(lines[start:start + batch_size])
