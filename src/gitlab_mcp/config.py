"""Configuration management with pydantic-settings for the GitLab MCP server.

- Type-safe configuration loaded from environment variables and .env
- SecretStr for the access token
- Frozen config (immutable after load); reload builds a new snapshot

References:
- Pydantic Settings: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

import logging
from functools import lru_cache
from typing import Annotated
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_TIMEZONE",
    "GitLabConfig",
    "get_config",
    "reload_config",
    "reset_config",
]

DEFAULT_TIMEZONE = "Europe/Moscow"


class GitLabConfig(BaseSettings):
    """Configuration for the GitLab MCP server.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        url: GitLab instance base URL (e.g., https://gitlab.example.com)
        token: Personal/project access token sent as a Bearer credential
        read_only: Refuse mutating tools (tag creation) when True
        include_namespaces: Namespace path prefixes a project must match to be listed
        membership_only: Default for the projects listing "membership" filter
        timezone: IANA timezone used when rendering timestamps in tool summaries
        use_structured_content: Return structured payloads rather than text only
        request_timeout: Upper bound in seconds for a single HTTP request
        batch_concurrency: Maximum in-flight lookups in batch tools
    """

    model_config = SettingsConfigDict(
        env_prefix="GITLAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    url: str = Field(
        ...,
        min_length=1,
        description="GitLab instance URL, e.g. https://gitlab.example.com",
    )

    token: SecretStr = Field(
        ...,
        description="GitLab access token (needs 'api' scope for tag creation, 'read_api' otherwise)",
    )

    read_only: bool = Field(
        default=True,
        description="Disable mutating tools. Only GITLAB_READ_ONLY=false enables tag creation.",
    )

    include_namespaces: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Comma-separated namespace prefixes, e.g. 'platform/,tools/'. Empty = no filtering.",
    )

    membership_only: bool = Field(
        default=False,
        description="List only projects the token owner is a member of",
    )

    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA timezone for rendered timestamps",
    )

    use_structured_content: bool = Field(
        default=True,
        description="Return structured tool payloads (false = text fallback only)",
    )

    request_timeout: float = Field(
        default=30.0,
        ge=5.0,
        le=300.0,
        description="Per-request timeout in seconds",
    )

    batch_concurrency: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Concurrent lookups allowed in batch tools",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop trailing slashes."""
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"GITLAB_URL must be a valid http(s) URL, got '{v}'")
        return v.strip().rstrip("/")

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("GITLAB_TOKEN must not be empty")
        return v

    @field_validator("include_namespaces", mode="before")
    @classmethod
    def parse_include_namespaces(cls, v):
        """Parse comma-separated string into list for GITLAB_INCLUDE_NAMESPACES."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    @property
    def api_url(self) -> str:
        """Versioned REST namespace under the instance URL."""
        return f"{self.url}/api/v4"

    def summary(self) -> dict:
        """Non-secret view of the configuration for status tools and logs."""
        return {
            "gitlab_url": self.url,
            "token_present": bool(self.token.get_secret_value()),
            "read_only": self.read_only,
            "timezone": self.timezone,
            "filters": {
                "include_membership_only": self.membership_only,
                "include_namespaces": list(self.include_namespaces),
            },
        }


@lru_cache(maxsize=1)
def get_config() -> GitLabConfig:
    """Get the process-wide configuration snapshot.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are missing or invalid.
    """
    return GitLabConfig()


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    get_config.cache_clear()


def reload_config() -> GitLabConfig:
    """Build a fresh configuration snapshot and make it the cached one.

    The previous snapshot is never mutated; holders of the old object keep
    a consistent view until they fetch the new one.
    """
    reset_config()
    config = get_config()
    logger.info("gitlab_config_reloaded", extra=config.summary())
    return config
