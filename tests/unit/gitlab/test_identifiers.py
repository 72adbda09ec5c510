"""Unit tests for numeric/named identifiers."""

import pytest

from gitlab_mcp.gitlab.errors import GitLabValidationError
from gitlab_mcp.gitlab.identifiers import NamedId, NumericId, parse_identifier, parse_numeric_id


class TestParseIdentifier:
    def test_int(self):
        assert parse_identifier(42) == NumericId(42)

    def test_digit_string_is_numeric(self):
        assert parse_identifier(" 42 ") == NumericId(42)

    def test_path(self):
        assert parse_identifier("group/sub/app") == NamedId("group/sub/app")

    def test_already_parsed_passthrough(self):
        ident = NamedId("alice")
        assert parse_identifier(ident) is ident

    @pytest.mark.parametrize("raw", [0, -3, "", "   ", True, None, 1.5])
    def test_invalid(self, raw):
        with pytest.raises(GitLabValidationError) as exc_info:
            parse_identifier(raw, field="project")
        assert exc_info.value.field == "project"

    def test_path_segment_encodes_slashes(self):
        assert NamedId("group/sub app").path_segment() == "group%2Fsub%20app"
        assert NumericId(7).path_segment() == "7"

    def test_str(self):
        assert str(NamedId("group/app")) == "group/app"
        assert str(NumericId(9)) == "9"


class TestParseNumericId:
    def test_accepts_numbers(self):
        assert parse_numeric_id("15", field="iid") == NumericId(15)

    def test_rejects_names(self):
        with pytest.raises(GitLabValidationError) as exc_info:
            parse_numeric_id("abc", field="iid")
        assert exc_info.value.field == "iid"
        assert "must be a number" in exc_info.value.message
