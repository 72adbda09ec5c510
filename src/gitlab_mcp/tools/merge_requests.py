"""Merge request tools."""

from ..dates import format_timestamp
from ..gitlab.client import GitLabClient
from ..gitlab.pagination import Page
from .inputs import check_time_window
from .responses import ToolResult, tool_handler, tool_success


def _mr_line(mr, tz: str) -> str:
    return f"  !{mr.iid} [{mr.state}] {mr.title} (updated {format_timestamp(mr.updated_at, tz)})"


def _files_payload(project_path: str, iid: int, result: Page) -> dict:
    return {
        "project": project_path,
        "merge_request_iid": iid,
        "files": [f.to_dict() for f in result.data],
        "pagination": result.pagination_dict(),
    }


@tool_handler
async def merge_requests(
    client: GitLabClient,
    project: int | str,
    state: str = "all",
    updated_after: str | None = None,
    updated_before: str | None = None,
    target_branch: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    check_time_window(updated_after=updated_after, updated_before=updated_before)
    details = await client.get_project(project)
    result = await client.get_merge_requests(
        details.id,
        state=state,
        updated_after=updated_after,
        updated_before=updated_before,
        target_branch=target_branch,
        page=page,
        per_page=per_page,
    )
    items = [
        {**mr.to_dict(), "url": client.links.merge_request(details.path_with_namespace, mr.iid)}
        for mr in result.data
    ]
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Merge requests for {details.path_with_namespace} ({len(items)} items{more}):"]
    lines.extend(_mr_line(mr, client.config.timezone) for mr in result.data)
    return tool_success(
        {
            "project": details.path_with_namespace,
            "merge_requests": items,
            "pagination": result.pagination_dict(),
        },
        f"Fetched {len(items)} merge requests for {details.path_with_namespace}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def merge_request_details(client: GitLabClient, project: int | str, iid: int) -> ToolResult:
    """Single merge request with its web URL and freshness flag."""
    details = await client.get_project(project)
    mr = await client.get_merge_request(details.id, iid)
    url = client.links.merge_request(details.path_with_namespace, mr.iid)
    lines = [
        f"MR !{mr.iid} ({mr.state}) {mr.title}",
        f"{mr.source_branch} -> {mr.target_branch}",
        f"Updated: {format_timestamp(mr.updated_at, client.config.timezone)}",
        f"URL: {url}",
    ]
    if mr.merged_at:
        lines.insert(3, f"Merged: {format_timestamp(mr.merged_at, client.config.timezone)}")
    return tool_success(
        {"project": details.path_with_namespace, "merge_request": {**mr.to_dict(), "url": url}},
        f"MR !{mr.iid} ({mr.state})",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def merge_requests_search(
    client: GitLabClient,
    query: str,
    project: int | str | None = None,
    state: str | None = None,
    target_branch: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    result = await client.search_merge_requests(
        query,
        project=project,
        state=state,
        target_branch=target_branch,
        page=page,
        per_page=per_page,
    )
    lines = [f"Merge requests matching '{query}' ({len(result.data)} items):"]
    lines.extend(_mr_line(mr, client.config.timezone) for mr in result.data)
    return tool_success(
        {
            "query": query,
            "merge_requests": [mr.to_dict() for mr in result.data],
            "pagination": result.pagination_dict(),
        },
        f"Found {len(result.data)} merge requests matching '{query}'",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def merge_request_changes(
    client: GitLabClient,
    project: int | str,
    iid: int,
    brief_output: bool = True,
    include_paths: list[str] | None = None,
    exclude_paths: list[str] | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    """Changed files of a merge request, without diff text."""
    details = await client.get_project(project)
    result = await client.get_merge_request_diffs(
        details.id,
        iid,
        include_paths=include_paths,
        exclude_paths=exclude_paths,
        brief=brief_output,
        include_diff=False,
        page=page,
        per_page=per_page,
    )
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Changed files in MR !{iid} for {details.path_with_namespace} ({len(result.data)} files):"]
    lines.extend(f"  {f.change_marker} {f.new_path}" for f in result.data)
    return tool_success(
        _files_payload(details.path_with_namespace, iid, result),
        f"Fetched {len(result.data)} changed files for MR !{iid}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def merge_request_diff(
    client: GitLabClient,
    project: int | str,
    iid: int,
    file_path: str | None = None,
    include_paths: list[str] | None = None,
    exclude_paths: list[str] | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    """Full diff of a merge request; file_path overrides the path lists."""
    details = await client.get_project(project)
    result = await client.get_merge_request_diffs(
        details.id,
        iid,
        include_paths=include_paths,
        exclude_paths=exclude_paths,
        file_path=file_path,
        include_diff=True,
        page=page,
        per_page=per_page,
    )
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Full diff for MR !{iid} in {details.path_with_namespace} ({len(result.data)} files):"]
    for f in result.data:
        lines.append(f"  {f.change_marker} {f.new_path}")
        if f.diff:
            lines.append(f.diff)
    return tool_success(
        _files_payload(details.path_with_namespace, iid, result),
        f"Fetched full diff for {len(result.data)} files in MR !{iid}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )
