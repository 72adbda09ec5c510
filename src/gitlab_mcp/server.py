"""GitLab MCP server: FastMCP instance and tool registrations.

Tool functions here only declare the argument schema and delegate to the
handlers in gitlab_mcp.tools, which hold the GitLab logic.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from .gitlab.client import GitLabClient
from .tools import commits, merge_requests, pipelines, projects, service, users
from .tools.responses import ToolResult

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Read-mostly access to a GitLab instance: projects, tags, merge requests, "
    "users, pipelines, jobs and commits. List tools are paginated; check "
    "pagination.has_more and pass page to continue. Tag creation is refused "
    "while the server runs in read-only mode."
)

ProjectArg = Annotated[int | str, Field(description="Project ID or full path, e.g. 'group/app'")]
PageArg = Annotated[int | None, Field(description="Page number (default 1)", ge=1)]
PerPageArg = Annotated[int | None, Field(description="Items per page (max 100)", ge=1, le=100)]
BriefArg = Annotated[bool, Field(description="Compact output without diff text or stats")]
PathsArg = Annotated[list[str] | None, Field(description="Exact file paths")]


def create_server(client: GitLabClient) -> FastMCP:
    """Build a FastMCP server whose tools share one GitLabClient.

    The client is closed when the server shuts down.
    """

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        logger.info("gitlab_mcp_started", extra=client.config.summary())
        try:
            yield {"client": client}
        finally:
            await client.close()
            logger.info("gitlab_mcp_stopped")

    mcp = FastMCP("GitLab MCP", instructions=INSTRUCTIONS, lifespan=lifespan)

    # --- Service ---

    @mcp.tool(name="service_info", description="Server version and effective configuration")
    async def service_info() -> ToolResult:
        return await service.service_info(client)

    # --- Projects and tags ---

    @mcp.tool(name="gitlab_projects", description="List projects visible to the token")
    async def gitlab_projects(
        search: Annotated[str | None, Field(description="Name or path substring")] = None,
        membership: Annotated[
            bool | None, Field(description="Only projects you are a member of")
        ] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await projects.projects(
            client, search=search, membership=membership, page=page, per_page=per_page
        )

    @mcp.tool(name="gitlab_project_details", description="Details of one project")
    async def gitlab_project_details(project: ProjectArg) -> ToolResult:
        return await projects.project_details(client, project)

    @mcp.tool(name="gitlab_projects_search", description="Search projects by name")
    async def gitlab_projects_search(
        query: Annotated[str, Field(description="Search text", min_length=1)],
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await projects.projects_search(client, query, page=page, per_page=per_page)

    @mcp.tool(
        name="gitlab_project_tags",
        description="List project tags and suggest the next SemVer patch tag",
    )
    async def gitlab_project_tags(
        project: ProjectArg, page: PageArg = None, per_page: PerPageArg = None
    ) -> ToolResult:
        return await projects.project_tags(client, project, page=page, per_page=per_page)

    @mcp.tool(
        name="gitlab_project_tag_create",
        description="Create a SemVer tag (X.Y.Z or vX.Y.Z). Disabled in read-only mode.",
    )
    async def gitlab_project_tag_create(
        project: ProjectArg,
        tag_name: Annotated[str, Field(description="Tag name, e.g. v1.2.3")],
        ref: Annotated[str, Field(description="Branch, tag or commit to tag")] = "master",
        message: Annotated[str | None, Field(description="Annotated tag message")] = None,
        release_description: Annotated[
            str | None, Field(description="Release notes to attach")
        ] = None,
    ) -> ToolResult:
        return await projects.project_tag_create(
            client,
            project,
            tag_name,
            ref=ref,
            message=message,
            release_description=release_description,
        )

    # --- Merge requests ---

    @mcp.tool(name="gitlab_merge_requests", description="List merge requests of a project")
    async def gitlab_merge_requests(
        project: ProjectArg,
        state: Annotated[str, Field(description="opened, closed, merged or all")] = "all",
        updated_after: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        updated_before: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        target_branch: Annotated[str | None, Field(description="Target branch name")] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await merge_requests.merge_requests(
            client,
            project,
            state=state,
            updated_after=updated_after,
            updated_before=updated_before,
            target_branch=target_branch,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_merge_request_details", description="Details of one merge request")
    async def gitlab_merge_request_details(
        project: ProjectArg, iid: Annotated[int, Field(description="Merge request IID", ge=1)]
    ) -> ToolResult:
        return await merge_requests.merge_request_details(client, project, iid)

    @mcp.tool(name="gitlab_merge_requests_search", description="Search merge requests")
    async def gitlab_merge_requests_search(
        query: Annotated[str, Field(description="Search text", min_length=1)],
        project: Annotated[
            int | str | None, Field(description="Limit to this project (ID or path)")
        ] = None,
        state: Annotated[str | None, Field(description="opened, closed, merged or all")] = None,
        target_branch: Annotated[str | None, Field(description="Target branch name")] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await merge_requests.merge_requests_search(
            client,
            query,
            project=project,
            state=state,
            target_branch=target_branch,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(
        name="gitlab_merge_request_changes",
        description="Files changed by a merge request, without diff text",
    )
    async def gitlab_merge_request_changes(
        project: ProjectArg,
        iid: Annotated[int, Field(description="Merge request IID", ge=1)],
        brief_output: BriefArg = True,
        include_paths: PathsArg = None,
        exclude_paths: PathsArg = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await merge_requests.merge_request_changes(
            client,
            project,
            iid,
            brief_output=brief_output,
            include_paths=include_paths,
            exclude_paths=exclude_paths,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_merge_request_diff", description="Full diff of a merge request")
    async def gitlab_merge_request_diff(
        project: ProjectArg,
        iid: Annotated[int, Field(description="Merge request IID", ge=1)],
        file_path: Annotated[
            str | None, Field(description="Single file; overrides the path lists")
        ] = None,
        include_paths: PathsArg = None,
        exclude_paths: PathsArg = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await merge_requests.merge_request_diff(
            client,
            project,
            iid,
            file_path=file_path,
            include_paths=include_paths,
            exclude_paths=exclude_paths,
            page=page,
            per_page=per_page,
        )

    # --- Users ---

    @mcp.tool(name="gitlab_users", description="List or search users")
    async def gitlab_users(
        search: Annotated[str | None, Field(description="Name, username or email")] = None,
        username: Annotated[str | None, Field(description="Exact username")] = None,
        active: bool | None = None,
        blocked: bool | None = None,
        external: bool | None = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await users.users(
            client,
            search=search,
            username=username,
            active=active,
            blocked=blocked,
            external=external,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_user_details", description="One user by numeric ID or username")
    async def gitlab_user_details(
        user: Annotated[int | str, Field(description="User ID or username")],
    ) -> ToolResult:
        return await users.user_details(client, user)

    @mcp.tool(
        name="gitlab_users_batch",
        description="Look up to 50 users by ID or username; missing users are listed separately",
    )
    async def gitlab_users_batch(
        user_ids: Annotated[list[int | str], Field(description="User IDs or usernames")],
    ) -> ToolResult:
        return await users.users_batch(client, user_ids)

    @mcp.tool(name="gitlab_current_user", description="The user the token belongs to")
    async def gitlab_current_user() -> ToolResult:
        return await users.current_user(client)

    @mcp.tool(name="gitlab_project_members", description="Members of a project")
    async def gitlab_project_members(
        project: ProjectArg,
        include_inherited: Annotated[
            bool, Field(description="Include members inherited from parent groups")
        ] = True,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await users.project_members(
            client, project, include_inherited=include_inherited, page=page, per_page=per_page
        )

    @mcp.tool(name="gitlab_group_members", description="Members of a group")
    async def gitlab_group_members(
        group: Annotated[int | str, Field(description="Group ID or full path")],
        include_inherited: Annotated[
            bool, Field(description="Include members inherited from parent groups")
        ] = True,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await users.group_members(
            client, group, include_inherited=include_inherited, page=page, per_page=per_page
        )

    # --- Pipelines and jobs ---

    @mcp.tool(name="gitlab_pipelines", description="List pipelines of a project")
    async def gitlab_pipelines(
        project: ProjectArg,
        ref: Annotated[str | None, Field(description="Branch or tag")] = None,
        status: Annotated[str | None, Field(description="e.g. running, success, failed")] = None,
        source: Annotated[str | None, Field(description="e.g. push, schedule, web")] = None,
        order_by: Annotated[
            str | None, Field(description="id, status, ref, updated_at or user_id")
        ] = None,
        sort: Annotated[str | None, Field(description="asc or desc")] = None,
        updated_after: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        updated_before: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        username: Annotated[str | None, Field(description="Triggering user")] = None,
        yaml_errors: Annotated[
            bool | None, Field(description="Only pipelines with invalid configs")
        ] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await pipelines.pipelines(
            client,
            project,
            ref=ref,
            status=status,
            source=source,
            order_by=order_by,
            sort=sort,
            updated_after=updated_after,
            updated_before=updated_before,
            username=username,
            yaml_errors=yaml_errors,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_pipeline_details", description="Details of one pipeline")
    async def gitlab_pipeline_details(
        project: ProjectArg, pipeline_id: Annotated[int, Field(ge=1)]
    ) -> ToolResult:
        return await pipelines.pipeline_details(client, project, pipeline_id)

    @mcp.tool(
        name="gitlab_latest_pipeline",
        description="Latest pipeline for a ref (default branch when omitted)",
    )
    async def gitlab_latest_pipeline(
        project: ProjectArg,
        ref: Annotated[str | None, Field(description="Branch or tag")] = None,
    ) -> ToolResult:
        return await pipelines.latest_pipeline(client, project, ref=ref)

    @mcp.tool(name="gitlab_pipeline_jobs", description="Jobs of a pipeline")
    async def gitlab_pipeline_jobs(
        project: ProjectArg,
        pipeline_id: Annotated[int, Field(ge=1)],
        scope: Annotated[
            list[str] | None, Field(description="Job statuses, e.g. ['failed']")
        ] = None,
        include_retried: Annotated[bool | None, Field(description="Include retried jobs")] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await pipelines.pipeline_jobs(
            client,
            project,
            pipeline_id,
            scope=scope,
            include_retried=include_retried,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_pipeline_variables", description="Variables of a pipeline")
    async def gitlab_pipeline_variables(
        project: ProjectArg,
        pipeline_id: Annotated[int, Field(ge=1)],
        brief_output: Annotated[bool, Field(description="Show keys only")] = True,
    ) -> ToolResult:
        return await pipelines.pipeline_variables(
            client, project, pipeline_id, brief_output=brief_output
        )

    @mcp.tool(name="gitlab_pipeline_test_report", description="Test report summary of a pipeline")
    async def gitlab_pipeline_test_report(
        project: ProjectArg,
        pipeline_id: Annotated[int, Field(ge=1)],
        brief_output: Annotated[bool, Field(description="Counts only, without suites")] = True,
    ) -> ToolResult:
        return await pipelines.pipeline_test_report(
            client, project, pipeline_id, brief_output=brief_output
        )

    @mcp.tool(name="gitlab_project_jobs", description="Jobs across a project")
    async def gitlab_project_jobs(
        project: ProjectArg,
        scope: Annotated[
            list[str] | None, Field(description="Job statuses, e.g. ['failed']")
        ] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await pipelines.project_jobs(
            client, project, scope=scope, page=page, per_page=per_page
        )

    @mcp.tool(name="gitlab_job_details", description="Details of one job")
    async def gitlab_job_details(
        project: ProjectArg, job_id: Annotated[int, Field(ge=1)]
    ) -> ToolResult:
        return await pipelines.job_details(client, project, job_id)

    @mcp.tool(name="gitlab_job_trace", description="A byte range of a job log")
    async def gitlab_job_trace(
        project: ProjectArg,
        job_id: Annotated[int, Field(ge=1)],
        from_byte: Annotated[int, Field(description="First byte to fetch", ge=0)] = 0,
        max_bytes: Annotated[
            int, Field(description="Bytes to fetch", ge=1, le=pipelines.MAX_TRACE_BYTES)
        ] = pipelines.DEFAULT_TRACE_BYTES,
        brief_output: Annotated[bool, Field(description="Only the first lines")] = True,
        preview_lines: Annotated[
            int, Field(description="Lines shown in brief output", ge=1, le=200)
        ] = pipelines.DEFAULT_PREVIEW_LINES,
    ) -> ToolResult:
        return await pipelines.job_trace(
            client,
            project,
            job_id,
            from_byte=from_byte,
            max_bytes=max_bytes,
            brief_output=brief_output,
            preview_lines=preview_lines,
        )

    # --- Commits ---

    @mcp.tool(name="gitlab_commits", description="List repository commits")
    async def gitlab_commits(
        project: ProjectArg,
        ref_name: Annotated[str | None, Field(description="Branch, tag or range")] = None,
        since: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        until: Annotated[str | None, Field(description="ISO 8601 timestamp")] = None,
        path: Annotated[str | None, Field(description="Only commits touching this path")] = None,
        author: Annotated[str | None, Field(description="Author name or email")] = None,
        first_parent: bool | None = None,
        order: Annotated[str | None, Field(description="default, topo or date")] = None,
        with_stats: bool = False,
        brief_output: BriefArg = True,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await commits.commits(
            client,
            project,
            ref_name=ref_name,
            since=since,
            until=until,
            path=path,
            author=author,
            first_parent=first_parent,
            order=order,
            with_stats=with_stats,
            brief_output=brief_output,
            page=page,
            per_page=per_page,
        )

    @mcp.tool(name="gitlab_commit_details", description="Details of one commit")
    async def gitlab_commit_details(
        project: ProjectArg,
        sha: Annotated[str, Field(description="Commit SHA (at least 7 characters)")],
        stats: bool = True,
    ) -> ToolResult:
        return await commits.commit_details(client, project, sha, stats=stats)

    @mcp.tool(name="gitlab_commit_diff", description="Files changed by a commit")
    async def gitlab_commit_diff(
        project: ProjectArg,
        sha: Annotated[str, Field(description="Commit SHA (at least 7 characters)")],
        brief_output: BriefArg = True,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await commits.commit_diff(
            client, project, sha, brief_output=brief_output, page=page, per_page=per_page
        )

    @mcp.tool(name="gitlab_commit_statuses", description="CI statuses reported for a commit")
    async def gitlab_commit_statuses(
        project: ProjectArg,
        sha: Annotated[str, Field(description="Commit SHA (at least 7 characters)")],
        all: Annotated[bool | None, Field(description="Include all statuses, not only latest")] = None,
        name: Annotated[str | None, Field(description="Status (job) name")] = None,
        order_by: Annotated[str | None, Field(description="id or updated_at")] = None,
        pipeline_id: Annotated[int | None, Field(ge=1)] = None,
        ref: Annotated[str | None, Field(description="Branch or tag")] = None,
        sort: Annotated[str | None, Field(description="asc or desc")] = None,
        page: PageArg = None,
        per_page: PerPageArg = None,
    ) -> ToolResult:
        return await commits.commit_statuses(
            client,
            project,
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

    return mcp


__all__ = ["INSTRUCTIONS", "create_server"]
