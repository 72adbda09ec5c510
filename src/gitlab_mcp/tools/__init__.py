"""MCP tool handlers.

Each handler is a plain coroutine taking the GitLabClient first and the tool
arguments as keywords, returning a success or failure result dict. The
server module registers thin FastMCP wrappers around them.
"""

from . import commits, merge_requests, pipelines, projects, service, users
from .responses import ToolResult, tool_error, tool_handler, tool_success

__all__ = [
    "ToolResult",
    "commits",
    "merge_requests",
    "pipelines",
    "projects",
    "service",
    "tool_error",
    "tool_handler",
    "tool_success",
    "users",
]
