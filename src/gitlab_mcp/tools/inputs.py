"""Input models for tool arguments GitLab would otherwise reject late."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TimeWindow(BaseModel):
    """ISO 8601 bounds accepted by list endpoints.

    Raises pydantic.ValidationError naming the offending argument, which
    tool_handler turns into a validation failure before any request is sent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    since: datetime | None = None
    until: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None


def check_time_window(**bounds: str | None) -> None:
    TimeWindow.model_validate({k: v for k, v in bounds.items() if v is not None})


__all__ = ["TimeWindow", "check_time_window"]
