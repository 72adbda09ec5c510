"""Unit tests for SemVer tag planning and tag-name validation."""

import pytest

from gitlab_mcp.gitlab.errors import GitLabValidationError
from gitlab_mcp.gitlab.versioning import (
    FALLBACK_CURRENT_TAG,
    FALLBACK_NEXT_TAG,
    TagVersionInfo,
    parse_release_tags,
    plan_next_tag,
    validate_tag_name,
)


class TestPlanNextTag:
    """Highest SemVer tag wins; next tag is its patch bump."""

    @pytest.mark.parametrize(
        "tags",
        [[], ["latest", "release-2024", "v1.2", "1.2.3.4"], ["vv1.0.0"]],
    )
    def test_no_valid_tags_uses_fallback(self, tags):
        assert plan_next_tag(tags) == TagVersionInfo("v0.1.0", "v0.1.1")
        assert (FALLBACK_CURRENT_TAG, FALLBACK_NEXT_TAG) == ("v0.1.0", "v0.1.1")

    def test_mixed_prefixes(self):
        info = plan_next_tag(["v1.2.3", "v1.3.0", "1.2.9"])
        assert info == TagVersionInfo(current_tag="v1.3.0", next_tag="v1.3.1")

    def test_prerelease_only(self):
        info = plan_next_tag(["v2.0.0-beta"])
        assert info.current_tag == "v2.0.0-beta"
        assert info.next_tag == "v2.0.1"

    def test_release_beats_its_prerelease(self):
        info = plan_next_tag(["v2.0.0-rc.1", "v2.0.0", "v1.9.9"])
        assert info.current_tag == "v2.0.0"

    def test_unprefixed_current_gets_v(self):
        assert plan_next_tag(["0.9.0"]).current_tag == "v0.9.0"

    def test_build_metadata_dropped_from_next(self):
        assert plan_next_tag(["v1.0.0+build.5"]).next_tag == "v1.0.1"

    def test_numeric_ordering_not_lexical(self):
        assert plan_next_tag(["v1.9.0", "v1.10.0"]).current_tag == "v1.10.0"

    def test_accepts_generator(self):
        assert plan_next_tag(t for t in ["v3.1.4"]).next_tag == "v3.1.5"


class TestParseReleaseTags:
    def test_sorted_highest_first_with_invalid_dropped(self):
        assert parse_release_tags(["1.0.0", "junk", "v2.0.0", "v1.5.0"]) == [
            "v2.0.0",
            "v1.5.0",
            "v1.0.0",
        ]


class TestValidateTagName:
    @pytest.mark.parametrize("tag", ["v1.2.3", "1.2.3", "v1.0.0-alpha.1", "2.0.0+meta"])
    def test_valid_names_returned_unchanged(self, tag):
        assert validate_tag_name(tag) == tag

    @pytest.mark.parametrize("tag", ["", "v1.2", "release", "V1.2.3", "v01.2.3"])
    def test_invalid_names_rejected(self, tag):
        with pytest.raises(GitLabValidationError) as exc_info:
            validate_tag_name(tag)
        assert exc_info.value.field == "tag_name"
        assert "SemVer" in exc_info.value.message
