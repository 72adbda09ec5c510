"""User and membership tools."""

from ..gitlab.client import GitLabClient
from ..gitlab.pagination import Page
from .responses import ToolResult, tool_handler, tool_success


@tool_handler
async def users(
    client: GitLabClient,
    search: str | None = None,
    username: str | None = None,
    active: bool | None = None,
    blocked: bool | None = None,
    external: bool | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    result = await client.get_users(
        search=search,
        username=username,
        active=active,
        blocked=blocked,
        external=external,
        page=page,
        per_page=per_page,
    )
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Users ({len(result.data)} items{more}):"]
    lines.extend(f"  - {u.username} ({u.name}) [{u.state}]" for u in result.data)
    return tool_success(
        {"users": [u.to_dict() for u in result.data], "pagination": result.pagination_dict()},
        f"Fetched {len(result.data)} users{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def user_details(client: GitLabClient, user: int | str) -> ToolResult:
    """Look up one user by numeric id or username."""
    found = await client.get_user(user)
    lines = [f"{found.username} ({found.name}) [{found.state}]", f"URL: {found.web_url}"]
    if found.public_email:
        lines.append(f"Email: {found.public_email}")
    return tool_success(
        {"user": found.to_dict()},
        f"User {found.username} ({found.state})",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def users_batch(client: GitLabClient, user_ids: list[int | str]) -> ToolResult:
    """Resolve up to 50 users; unknown keys are reported, not fatal."""
    result = await client.get_users_batch(user_ids)
    resolved = result.resolved
    not_found = result.not_found
    lines = [f"Found {len(resolved)} out of {len(user_ids)} users:"]
    lines.extend(f"  - {u.username} ({u.name}) [{u.state}]" for u in resolved)
    if not_found:
        lines.append(f"Not found: {', '.join(str(k) for k in not_found)}")
    summary = f"Found {len(resolved)} out of {len(user_ids)} users"
    if not_found:
        summary += f", {len(not_found)} not found"
    return tool_success(
        {
            "users": [u.to_dict() for u in resolved],
            "total": len(user_ids),
            "found": len(resolved),
            "not_found": not_found,
        },
        summary,
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def current_user(client: GitLabClient) -> ToolResult:
    me = await client.get_current_user()
    lines = [
        f"Authenticated as {me.username} ({me.name})",
        f"Admin: {bool(me.is_admin)}",
        f"Can create projects: {bool(me.can_create_project)}",
        f"URL: {me.web_url}",
    ]
    return tool_success(
        {"user": me.to_dict()},
        f"Authenticated as {me.username}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


def _members_result(
    client: GitLabClient, owner: str, owner_id: int | None, result: Page
) -> ToolResult:
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Members of {owner} (page {result.pagination.page}, fetched {len(result.data)}):"]
    lines.extend(
        f"  - {m.username} ({m.name}) {m.access_level_description} (level {m.access_level})"
        for m in result.data
    )
    return tool_success(
        {
            "owner_id": owner_id,
            "owner_path": owner,
            "members": [m.to_dict() for m in result.data],
            "pagination": result.pagination_dict(),
        },
        f"Fetched {len(result.data)} members for {owner}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def project_members(
    client: GitLabClient,
    project: int | str,
    include_inherited: bool = True,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    details = await client.get_project(project)
    result = await client.get_project_members(
        details.id, include_inherited=include_inherited, page=page, per_page=per_page
    )
    return _members_result(client, details.path_with_namespace, details.id, result)


@tool_handler
async def group_members(
    client: GitLabClient,
    group: int | str,
    include_inherited: bool = True,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    result = await client.get_group_members(
        group, include_inherited=include_inherited, page=page, per_page=per_page
    )
    owner_id = group if isinstance(group, int) else None
    return _members_result(client, str(group), owner_id, result)
