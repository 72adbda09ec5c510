"""Project and tag tools."""

from ..dates import format_timestamp
from ..gitlab.client import GitLabClient
from ..gitlab.errors import ReadOnlyModeError
from ..gitlab.versioning import plan_next_tag, validate_tag_name
from .responses import ToolResult, tool_handler, tool_success

MAX_PREVIEW = 20


@tool_handler
async def projects(
    client: GitLabClient,
    search: str | None = None,
    membership: bool | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    result = await client.get_projects(
        search=search, membership=membership, page=page, per_page=per_page
    )
    tz = client.config.timezone
    items = []
    for project in result.data:
        data = project.to_dict()
        data["url"] = client.links.project(project.path_with_namespace)
        items.append(data)

    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Projects ({len(items)} items{more}):"]
    lines.extend(
        f"  - {p.path_with_namespace} (last activity {format_timestamp(p.last_activity_at, tz)})"
        for p in result.data[:MAX_PREVIEW]
    )
    return tool_success(
        {"projects": items, "pagination": result.pagination_dict()},
        f"Fetched {len(items)} projects{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def project_details(client: GitLabClient, project: int | str) -> ToolResult:
    details = await client.get_project(project)
    url = client.links.project(details.path_with_namespace)
    payload = {**details.to_dict(), "url": url}
    lines = [
        f"Project {details.path_with_namespace} (id {details.id})",
        f"Last activity: {format_timestamp(details.last_activity_at, client.config.timezone)}",
        f"URL: {url}",
    ]
    if details.description:
        lines.insert(1, details.description)
    return tool_success(
        {"project": payload},
        f"Project {details.path_with_namespace}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def projects_search(
    client: GitLabClient,
    query: str,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    result = await client.search_projects(query, page=page, per_page=per_page)
    items = [
        {**p.to_dict(), "url": client.links.project(p.path_with_namespace)} for p in result.data
    ]
    lines = [f"Projects matching '{query}' ({len(items)} items):"]
    lines.extend(f"  - {p.path_with_namespace}" for p in result.data[:MAX_PREVIEW])
    return tool_success(
        {"query": query, "projects": items, "pagination": result.pagination_dict()},
        f"Found {len(items)} projects matching '{query}'",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def project_tags(
    client: GitLabClient,
    project: int | str,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    """List tags and suggest the next patch release."""
    details = await client.get_project(project)
    result = await client.get_project_tags(details.id, page=page, per_page=per_page)
    version = plan_next_tag(tag.name for tag in result.data)
    create_url = client.links.new_tag(
        details.path_with_namespace, version.next_tag, details.default_branch or "master"
    )
    payload = {
        "project": details.path_with_namespace,
        "tags": [tag.to_dict() for tag in result.data],
        "version_info": {
            "current_tag": version.current_tag,
            "next_tag": version.next_tag,
            "create_tag_url": create_url,
        },
        "pagination": result.pagination_dict(),
    }
    lines = [f"Tags for {details.path_with_namespace}:"]
    lines.extend(f"  {tag.name} <- {tag.commit_id}" for tag in result.data)
    lines.append(f"Current: {version.current_tag}, suggested next: {version.next_tag}")
    lines.append(f"Create: {create_url}")
    return tool_success(
        payload,
        f"Found {len(result.data)} tags for {details.path_with_namespace}; "
        f"next tag {version.next_tag}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def project_tag_create(
    client: GitLabClient,
    project: int | str,
    tag_name: str,
    ref: str = "master",
    message: str | None = None,
    release_description: str | None = None,
) -> ToolResult:
    """Create a SemVer tag. Refused in read-only mode before any request."""
    # Checked before the project lookup so a refused call makes no request
    if client.config.read_only:
        raise ReadOnlyModeError("Tag creation")
    validate_tag_name(tag_name)

    details = await client.get_project(project)
    tag = await client.create_tag(
        details.id,
        tag_name,
        ref,
        message=message,
        release_description=release_description,
        project_path=details.path_with_namespace,
    )
    lines = [
        f"Tag created in {details.path_with_namespace}",
        f"Tag: {tag.name}",
        f"Target: {tag.target}",
        f"URL: {tag.url}",
    ]
    if tag.message:
        lines.append(f"Message: {tag.message}")
    return tool_success(
        {"project": details.path_with_namespace, "tag": tag.to_dict()},
        f"Created tag '{tag.name}' in {details.path_with_namespace} at {ref}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )
