"""GitLab MCP server.

A read-mostly gateway to the GitLab REST API (v4) exposed as MCP tools:
projects and tags, merge requests, users, pipelines, jobs and commits.
"""

from .__version__ import __version__
from .config import GitLabConfig, get_config, reload_config, reset_config
from .gitlab import GitLabClient

__all__ = [
    "GitLabClient",
    "GitLabConfig",
    "__version__",
    "get_config",
    "reload_config",
    "reset_config",
]
