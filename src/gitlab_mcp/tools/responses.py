"""Structured results for MCP tool handlers.

Every tool returns one of two shapes:

- success: {"success": True, "payload": ..., "summary": ..., "fallback_text": ...}
- failure: {"success": False, "error": {"kind", "message", "status_code", "field"}}

Handlers are wrapped with @tool_handler, which turns classified gateway
errors and input validation errors into the failure shape. Anything else is
a bug and propagates to the MCP server.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from pydantic import ValidationError

from ..gitlab.errors import GitLabClientError

logger = logging.getLogger("gitlab_mcp.tools")

ToolResult = dict[str, Any]


def tool_success(
    payload: Any,
    summary: str,
    fallback_text: str | None = None,
    structured: bool = True,
) -> ToolResult:
    """Build a success result.

    Args:
        payload: JSON-serializable structured data
        summary: One-line description of what was fetched
        fallback_text: Human-readable rendering for clients without
                       structured content support (defaults to summary)
        structured: When False the payload is left out and only text is sent
    """
    result: ToolResult = {
        "success": True,
        "summary": summary,
        "fallback_text": fallback_text or summary,
    }
    if structured:
        result["payload"] = payload
    return result


def tool_error(error: GitLabClientError | ValidationError) -> ToolResult:
    """Build a failure result from a gateway or input validation error."""
    if isinstance(error, ValidationError):
        details = error.errors(include_url=False)
        field = ".".join(str(part) for part in details[0]["loc"]) if details else None
        return {
            "success": False,
            "error": {
                "kind": "validation",
                "message": "Invalid input",
                "status_code": None,
                "field": field,
                "details": details,
            },
        }
    return {"success": False, "error": error.to_dict()}


def tool_handler(func: Callable[..., Awaitable[ToolResult]]) -> Callable[..., Awaitable[ToolResult]]:
    """Decorator converting expected tool failures into failure results.

    Uses functools.wraps to preserve the handler's name and docstring.

    Example:
        @tool_handler
        async def project_details(client, project):
            project = await client.get_project(project)
            return tool_success(project.to_dict(), f"Project {project.name}")

        # A 404 from GitLab becomes {"success": False, "error": {"kind": "not_found", ...}}
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
        try:
            return await func(*args, **kwargs)
        except (GitLabClientError, ValidationError) as e:
            result = tool_error(e)
            logger.warning(
                "tool_failed",
                extra={
                    "tool": func.__name__,
                    "kind": result["error"]["kind"],
                    "error": result["error"]["message"],
                },
            )
            return result

    return wrapper


__all__ = ["ToolResult", "tool_error", "tool_handler", "tool_success"]
