"""Repository commit tools."""

from ..dates import format_timestamp
from ..gitlab.client import GitLabClient
from .inputs import check_time_window
from .responses import ToolResult, tool_handler, tool_success

MAX_PREVIEW = 20


@tool_handler
async def commits(
    client: GitLabClient,
    project: int | str,
    ref_name: str | None = None,
    since: str | None = None,
    until: str | None = None,
    path: str | None = None,
    author: str | None = None,
    first_parent: bool | None = None,
    order: str | None = None,
    with_stats: bool = False,
    brief_output: bool = True,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    """List commits. Brief records carry id, short_id, title, author and date."""
    check_time_window(since=since, until=until)
    details = await client.get_project(project)
    result = await client.get_commits(
        details.id,
        ref_name=ref_name,
        since=since,
        until=until,
        path=path,
        author=author,
        first_parent=first_parent,
        order=order,
        with_stats=with_stats,
        brief=brief_output,
        page=page,
        per_page=per_page,
    )
    tz = client.config.timezone
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Commits in {details.path_with_namespace} ({len(result.data)} items{more}):"]
    lines.extend(
        f"  {c.short_id} {c.title} ({c.author_name}, {format_timestamp(c.created_at, tz)})"
        for c in result.data[:MAX_PREVIEW]
    )
    if len(result.data) > MAX_PREVIEW:
        lines.append(f"  ... and {len(result.data) - MAX_PREVIEW} more")
    return tool_success(
        {
            "project": details.path_with_namespace,
            "commits": [c.to_dict() for c in result.data],
            "pagination": result.pagination_dict(),
        },
        f"Fetched {len(result.data)} commits for {details.path_with_namespace}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def commit_details(
    client: GitLabClient, project: int | str, sha: str, stats: bool = True
) -> ToolResult:
    details = await client.get_project(project)
    commit = await client.get_commit(details.id, sha, stats=stats)
    lines = [
        f"Commit {commit.id}",
        f"Author: {commit.author_name} <{commit.author_email}>",
        f"Date: {format_timestamp(commit.authored_date, client.config.timezone)}",
        "",
        commit.message or commit.title,
    ]
    if commit.total is not None:
        lines.append(f"+{commit.additions} -{commit.deletions} ({commit.total} lines)")
    if commit.web_url:
        lines.append(f"URL: {commit.web_url}")
    return tool_success(
        {"project": details.path_with_namespace, "commit": commit.to_dict()},
        f"Commit {commit.short_id}: {commit.title}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def commit_diff(
    client: GitLabClient,
    project: int | str,
    sha: str,
    brief_output: bool = True,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    """Files changed by a commit; diff text only with brief_output=False."""
    details = await client.get_project(project)
    result = await client.get_commit_diff(
        details.id, sha, brief=brief_output, page=page, per_page=per_page
    )
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Diff of {sha[:8]} in {details.path_with_namespace} ({len(result.data)} files{more}):"]
    for f in result.data:
        lines.append(f"  {f.change_marker} {f.new_path}")
        if not brief_output and f.diff:
            lines.append(f.diff)
    return tool_success(
        {
            "project": details.path_with_namespace,
            "sha": sha,
            "files": [f.to_dict() for f in result.data],
            "pagination": result.pagination_dict(),
        },
        f"Fetched {len(result.data)} changed files for commit {sha[:8]}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def commit_statuses(
    client: GitLabClient,
    project: int | str,
    sha: str,
    all: bool | None = None,
    name: str | None = None,
    order_by: str | None = None,
    pipeline_id: int | None = None,
    ref: str | None = None,
    sort: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    details = await client.get_project(project)
    result = await client.get_commit_statuses(
        details.id,
        sha,
        all=all,
        name=name,
        order_by=order_by,
        pipeline_id=pipeline_id,
        ref=ref,
        sort=sort,
        page=page,
        per_page=per_page,
    )
    lines = [f"Statuses for {sha[:8]} in {details.path_with_namespace}:"]
    lines.extend(f"  {s.name}: {s.status}" for s in result.data)
    return tool_success(
        {
            "project": details.path_with_namespace,
            "sha": sha,
            "statuses": [s.to_dict() for s in result.data],
            "pagination": result.pagination_dict(),
        },
        f"Fetched {len(result.data)} statuses for commit {sha[:8]}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )
