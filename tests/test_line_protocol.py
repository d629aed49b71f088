# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for line protocol encoding."""

import math

import pytest

from influx_publisher import EncodingError, MetricRecord, encode_record, encode_snapshot
from influx_publisher.line_protocol import (
    escape_key,
    escape_measurement,
    format_field_value,
    partition,
)


class TestFormatFieldValue:
    """Tests for numeric field formatting."""

    @pytest.mark.parametrize("value,expected", [
        (0.0, "0"),
        (42.0, "42"),
        (-3.0, "-3"),
        (0.5, "0.5"),
        (math.pi, "3.141592653589793"),
        (1e-7, "1e-07"),
        (1e20, "1e+20"),
    ])
    def test_floats(self, value, expected):
        assert format_field_value(value) == expected

    @pytest.mark.parametrize("value,expected", [(0, "0i"), (7, "7i"), (-12, "-12i")])
    def test_integers_have_suffix(self, value, expected):
        assert format_field_value(value) == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value):
        with pytest.raises(EncodingError, match="not finite"):
            format_field_value(value)

    @pytest.mark.parametrize("value", [True, "1", None])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(EncodingError, match="not numeric"):
            format_field_value(value)


class TestEscaping:
    """Tests for reserved character escaping."""

    def test_measurement_escapes_comma_and_space(self):
        assert escape_measurement("http requests,total") == "http\\ requests\\,total"

    def test_measurement_keeps_equals(self):
        assert escape_measurement("a=b") == "a=b"

    def test_key_escapes_comma_equals_space(self):
        assert escape_key("a b,c=d") == "a\\ b\\,c\\=d"

    def test_newlines_replaced(self):
        assert escape_key("line1\nline2") == "line1\\ line2"


class TestEncodeRecord:
    """Tests for encoding a single record."""

    def test_counter_line(self, counter_record):
        assert encode_record(counter_record) == "my_counter,metric_type=counter value=0 1"

    def test_tags_sorted_by_key(self):
        record = MetricRecord("cpu", {"value": 1.5}, {"zone": "b", "host": "a", "metric_type": "gauge"}, 10)
        assert encode_record(record) == "cpu,host=a,metric_type=gauge,zone=b value=1.5 10"

    def test_fields_keep_record_order(self):
        record = MetricRecord(
            "latency",
            {"sum": 3.0, "count": 2, "mean": 1.5, "upper": 2.0},
            {"metric_type": "histogram"},
            5,
        )
        assert encode_record(record) == (
            "latency,metric_type=histogram sum=3,count=2i,mean=1.5,upper=2 5"
        )

    def test_no_tags(self):
        assert encode_record(MetricRecord("up", {"value": 1.0}, timestamp=3)) == "up value=1 3"

    def test_empty_tag_values_omitted(self):
        record = MetricRecord("up", {"value": 1.0}, {"host": "", "zone": "a"}, 3)
        assert encode_record(record) == "up,zone=a value=1 3"

    def test_reserved_characters_escaped(self):
        record = MetricRecord("my metric", {"field key": 1.0}, {"tag,key": "v=1 2"}, 7)
        assert encode_record(record) == "my\\ metric,tag\\,key=v\\=1\\ 2 field\\ key=1 7"

    def test_trailing_backslash_does_not_escape_separator(self):
        record = MetricRecord("m", {"value": 1.0}, {"path": "C:\\"}, 1)
        assert encode_record(record) == "m,path=C:\\\\ value=1 1"

    def test_backslashes_escaped_before_specials(self):
        record = MetricRecord("disk\\io", {"a\\b": 2.0}, {"dir": "C:\\temp dir"}, 1)
        assert encode_record(record) == "disk\\\\io,dir=C:\\\\temp\\ dir a\\\\b=2 1"

    def test_empty_name_rejected(self):
        with pytest.raises(EncodingError, match="empty name"):
            encode_record(MetricRecord("", {"value": 1.0}))

    def test_no_fields_rejected(self):
        with pytest.raises(EncodingError, match="has no fields"):
            encode_record(MetricRecord("up", {}))

    def test_bad_field_names_record_and_field(self):
        with pytest.raises(EncodingError, match="'up', field 'value'"):
            encode_record(MetricRecord("up", {"value": math.nan}))


class TestEncodeSnapshot:
    """Tests for encoding whole snapshots."""

    def test_empty_snapshot_produces_empty_batch(self):
        assert encode_snapshot([]) == []

    def test_one_line_per_record(self):
        snapshot = [MetricRecord(f"m{i}", {"value": float(i)}, timestamp=i) for i in range(5)]
        lines = encode_snapshot(snapshot)
        assert len(lines) == 5
        assert lines[3] == "m3 value=3 3"

    def test_deterministic(self):
        snapshot = [
            MetricRecord("a", {"value": 1.25}, {"z": "1", "y": "2", "x": "3"}, 100),
            MetricRecord("b", {"count": 4, "sum": 9.5}, {"k": "v"}, 100),
        ]
        assert "\n".join(encode_snapshot(snapshot)).encode() == "\n".join(encode_snapshot(snapshot)).encode()

    def test_tag_insertion_order_does_not_matter(self):
        first = MetricRecord("a", {"value": 1.0}, {"x": "1", "y": "2"}, 1)
        second = MetricRecord("a", {"value": 1.0}, {"y": "2", "x": "1"}, 1)
        assert encode_snapshot([first]) == encode_snapshot([second])


class TestPartition:
    """Tests for batch partitioning."""

    def test_splits_into_chunks(self):
        assert list(partition(["a", "b", "c", "d", "e"], 2)) == [["a", "b"], ["c", "d"], ["e"]]

    def test_single_chunk(self):
        assert list(partition(["a", "b"], 10)) == [["a", "b"]]

    def test_empty(self):
        assert list(partition([], 10)) == []

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            list(partition(["a"], 0))
