"""Project, group and user identifiers.

GitLab addresses most resources either by numeric id or by a path/name
string. Lookups dispatch on the variant explicitly instead of on runtime type
checks scattered through the client.
"""

from dataclasses import dataclass
from urllib.parse import quote

from .errors import GitLabValidationError

__all__ = ["Identifier", "NamedId", "NumericId", "parse_identifier", "parse_numeric_id"]


@dataclass(frozen=True)
class NumericId:
    """Globally unique numeric id."""

    value: int

    def path_segment(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class NamedId:
    """Path or name, e.g. "group/subgroup/project" or a username."""

    value: str

    def path_segment(self) -> str:
        # GitLab expects the full path URL-encoded as one segment
        return quote(self.value, safe="")

    def __str__(self) -> str:
        return self.value


Identifier = NumericId | NamedId


def parse_identifier(raw: int | str | NumericId | NamedId, field: str = "id") -> Identifier:
    """Convert tool input into an Identifier.

    Digit-only strings are treated as numeric ids, matching how GitLab
    resolves "/projects/42".

    Raises:
        GitLabValidationError: empty strings, non-positive ids, booleans
    """
    if isinstance(raw, (NumericId, NamedId)):
        return raw
    if isinstance(raw, bool):
        raise GitLabValidationError(f"Invalid {field}: {raw!r}", field=field)
    if isinstance(raw, int):
        if raw < 1:
            raise GitLabValidationError(f"Invalid {field}: {raw} (must be >= 1)", field=field)
        return NumericId(raw)
    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            raise GitLabValidationError(f"Invalid {field}: must not be empty", field=field)
        if value.isdigit():
            return parse_identifier(int(value), field)
        return NamedId(value)
    raise GitLabValidationError(f"Invalid {field}: {raw!r}", field=field)


def parse_numeric_id(raw: int | str | NumericId, field: str = "id") -> NumericId:
    """Like parse_identifier, but only numeric ids are accepted (iid, job id, ...)."""
    identifier = parse_identifier(raw, field)
    if not isinstance(identifier, NumericId):
        raise GitLabValidationError(f"Invalid {field}: '{raw}' (must be a number)", field=field)
    return identifier
