"""SemVer release-tag planning.

Given whatever tags a repository has, pick the highest SemVer release and
suggest the next patch version. Tags may carry a leading "v"; anything that
is not SemVer 2.0.0 after removing it is ignored.
"""

from collections.abc import Iterable
from dataclasses import dataclass

import semver

from .errors import GitLabValidationError

__all__ = [
    "FALLBACK_CURRENT_TAG",
    "FALLBACK_NEXT_TAG",
    "TagVersionInfo",
    "parse_release_tags",
    "plan_next_tag",
    "validate_tag_name",
]

FALLBACK_CURRENT_TAG = "v0.1.0"
FALLBACK_NEXT_TAG = "v0.1.1"


@dataclass(frozen=True)
class TagVersionInfo:
    """Latest SemVer tag and the suggested next patch tag."""

    current_tag: str
    next_tag: str


def _with_v_prefix(tag: str) -> str:
    return tag if tag.startswith("v") else f"v{tag}"


def _parse_body(tag: str) -> semver.Version | None:
    body = tag[1:] if tag.startswith("v") else tag
    if not semver.Version.is_valid(body):
        return None
    return semver.Version.parse(body)


def parse_release_tags(tags: Iterable[str]) -> list[str]:
    """Return valid SemVer tags, "v"-prefixed, highest precedence first.

    Equal versions ("1.2.3" and "v1.2.3") both survive and sort adjacently.
    """
    versions: list[tuple[semver.Version, str]] = []
    for tag in tags:
        normalized = _with_v_prefix(tag)
        version = _parse_body(normalized)
        if version is not None:
            versions.append((version, normalized))

    versions.sort(key=lambda pair: pair[0], reverse=True)
    return [tag for _, tag in versions]


def plan_next_tag(tags: Iterable[str]) -> TagVersionInfo:
    """Suggest the next release tag from an unordered list of tag names.

    Args:
        tags: Tag names as returned by the repository

    Returns:
        TagVersionInfo. With no valid SemVer tags this is the documented
        fallback ("v0.1.0", "v0.1.1"). Otherwise current_tag is the highest
        tag and next_tag its patch bump, with pre-release and build metadata
        dropped ("v2.0.0-beta" -> "v2.0.1").
    """
    release_tags = parse_release_tags(tags)
    if not release_tags:
        return TagVersionInfo(FALLBACK_CURRENT_TAG, FALLBACK_NEXT_TAG)

    current_tag = release_tags[0]
    current = _parse_body(current_tag)
    next_version = current.bump_patch()
    return TagVersionInfo(current_tag=current_tag, next_tag=f"v{next_version}")


def validate_tag_name(tag_name: str) -> str:
    """Check a tag name is SemVer with an optional leading "v".

    Returns:
        The tag name unchanged, so callers create exactly what was asked.

    Raises:
        GitLabValidationError: If the body is not valid SemVer
    """
    if not tag_name or _parse_body(tag_name) is None:
        raise GitLabValidationError(
            f"Invalid tag name: '{tag_name}'. Tag name must follow SemVer format "
            "(e.g., 'v1.2.3' or '1.2.3').",
            field="tag_name",
        )
    return tag_name
