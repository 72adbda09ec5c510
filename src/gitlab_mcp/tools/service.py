"""Server status tool."""

from ..__version__ import __version__
from ..gitlab.client import GitLabClient
from .responses import ToolResult, tool_handler, tool_success

SERVICE_NAME = "gitlab-mcp"


@tool_handler
async def service_info(client: GitLabClient) -> ToolResult:
    """Report server identity and the effective (non-secret) configuration.

    Makes no GitLab request, so it works without network access.
    """
    config = client.config.summary()
    mode = "read-only" if config["read_only"] else "read-write"
    namespaces = config["filters"]["include_namespaces"]
    lines = [
        f"{SERVICE_NAME} {__version__}",
        f"GitLab: {config['gitlab_url']} ({mode})",
        f"Token configured: {config['token_present']}",
        f"Timezone: {config['timezone']}",
        f"Namespace filter: {', '.join(namespaces) if namespaces else 'none'}",
        f"Membership only: {config['filters']['include_membership_only']}",
    ]
    return tool_success(
        {"name": SERVICE_NAME, "version": __version__, **config},
        f"{SERVICE_NAME} {__version__} connected to {config['gitlab_url']} ({mode})",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )
