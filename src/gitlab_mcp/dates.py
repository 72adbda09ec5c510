"""Timestamp rendering for tool summaries.

GitLab returns ISO 8601 timestamps in UTC; summaries show them in the
configured timezone. Payloads keep the original strings untouched.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

DISPLAY_FORMAT = "%Y-%m-%d %H:%M %Z"


def parse_timestamp(value: str) -> datetime:
    """Parse a GitLab timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: str | None, tz_name: str) -> str:
    """Render a timestamp in tz_name, e.g. "2024-05-01 15:30 MSK".

    None or unparseable values are returned as-is ("" for None) so a
    summary line never fails because of a date.
    """
    if not value:
        return ""
    try:
        parsed = parse_timestamp(value)
    except ValueError:
        return value
    return parsed.astimezone(ZoneInfo(tz_name)).strftime(DISPLAY_FORMAT)
