"""Unit tests for timestamp parsing and summary rendering."""

from datetime import timezone

import pytest

from gitlab_mcp.dates import format_timestamp, parse_timestamp


class TestParseTimestamp:
    def test_z_suffix_is_utc(self):
        parsed = parse_timestamp("2024-05-01T12:00:00.000Z")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset().total_seconds() == 0
        assert (parsed.hour, parsed.minute) == (12, 0)

    def test_naive_value_taken_as_utc(self):
        assert parse_timestamp("2024-05-01T12:00:00").tzinfo == timezone.utc

    def test_offset_preserved(self):
        parsed = parse_timestamp("2024-05-01T12:00:00+03:00")
        assert parsed.utcoffset().total_seconds() == 3 * 3600

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestFormatTimestamp:
    def test_converts_to_configured_zone(self):
        assert format_timestamp("2024-05-01T12:30:00Z", "Europe/Moscow") == "2024-05-01 15:30 MSK"

    def test_utc(self):
        assert format_timestamp("2024-05-01T12:30:00Z", "UTC") == "2024-05-01 12:30 UTC"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values(self, value):
        assert format_timestamp(value, "UTC") == ""

    def test_unparseable_returned_unchanged(self):
        assert format_timestamp("soon", "UTC") == "soon"
