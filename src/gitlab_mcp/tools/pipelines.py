"""Pipeline and job tools."""

from ..dates import format_timestamp
from ..gitlab.client import GitLabClient
from ..gitlab.errors import GitLabValidationError
from .inputs import check_time_window
from .responses import ToolResult, tool_handler, tool_success

# Job logs can be huge; tools fetch a bounded byte range by default
DEFAULT_TRACE_BYTES = 64 * 1024
MAX_TRACE_BYTES = 5_000_000
DEFAULT_PREVIEW_LINES = 50
MAX_PREVIEW_LINES = 200


def _pipeline_line(pipeline, tz: str) -> str:
    return (
        f"  #{pipeline.id} [{pipeline.status}] {pipeline.ref} @ {pipeline.sha[:8]} "
        f"({format_timestamp(pipeline.created_at, tz)})"
    )


@tool_handler
async def pipelines(
    client: GitLabClient,
    project: int | str,
    ref: str | None = None,
    status: str | None = None,
    source: str | None = None,
    order_by: str | None = None,
    sort: str | None = None,
    updated_after: str | None = None,
    updated_before: str | None = None,
    username: str | None = None,
    yaml_errors: bool | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    check_time_window(updated_after=updated_after, updated_before=updated_before)
    details = await client.get_project(project)
    result = await client.get_pipelines(
        details.id,
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
    path = details.path_with_namespace
    items = [{**p.to_dict(), "url": client.links.pipeline(path, p.id)} for p in result.data]
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"Pipelines for {path} ({len(items)} items{more}):"]
    lines.extend(_pipeline_line(p, client.config.timezone) for p in result.data)
    return tool_success(
        {"project": path, "pipelines": items, "pagination": result.pagination_dict()},
        f"Fetched {len(items)} pipelines for {path}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def pipeline_details(client: GitLabClient, project: int | str, pipeline_id: int) -> ToolResult:
    details = await client.get_project(project)
    pipeline = await client.get_pipeline(details.id, pipeline_id)
    url = client.links.pipeline(details.path_with_namespace, pipeline.id)
    lines = [
        f"Pipeline #{pipeline.id} for {details.path_with_namespace}:",
        f"Status: {pipeline.status}",
        f"Ref: {pipeline.ref} @ {pipeline.sha}",
        f"Created: {format_timestamp(pipeline.created_at, client.config.timezone)}",
        f"URL: {url}",
    ]
    if pipeline.duration:
        lines.append(f"Duration: {pipeline.duration}s")
    return tool_success(
        {"project": details.path_with_namespace, "pipeline": {**pipeline.to_dict(), "url": url}},
        f"Pipeline #{pipeline.id} [{pipeline.status}]",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def latest_pipeline(
    client: GitLabClient, project: int | str, ref: str | None = None
) -> ToolResult:
    """Latest pipeline for a ref, or for the default branch."""
    details = await client.get_project(project)
    pipeline = await client.get_latest_pipeline(details.id, ref=ref)
    url = client.links.pipeline(details.path_with_namespace, pipeline.id)
    return tool_success(
        {"project": details.path_with_namespace, "pipeline": {**pipeline.to_dict(), "url": url}},
        f"Latest pipeline for {pipeline.ref}: #{pipeline.id} [{pipeline.status}]",
        f"Latest pipeline #{pipeline.id} on {pipeline.ref} [{pipeline.status}] -> {url}",
        structured=client.config.use_structured_content,
    )


def _jobs_result(client: GitLabClient, path: str, result, heading: str) -> ToolResult:
    items = [{**j.to_dict(), "url": client.links.job(path, j.id)} for j in result.data]
    more = " (more available)" if result.pagination.has_more else ""
    lines = [f"{heading} ({len(items)} items{more}):"]
    lines.extend(f"  #{j.id} {j.stage}/{j.name} [{j.status}]" for j in result.data)
    return tool_success(
        {"project": path, "jobs": items, "pagination": result.pagination_dict()},
        f"Fetched {len(items)} jobs for {path}{more}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def pipeline_jobs(
    client: GitLabClient,
    project: int | str,
    pipeline_id: int,
    scope: list[str] | None = None,
    include_retried: bool | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    details = await client.get_project(project)
    result = await client.get_pipeline_jobs(
        details.id,
        pipeline_id,
        scope=scope,
        include_retried=include_retried,
        page=page,
        per_page=per_page,
    )
    path = details.path_with_namespace
    return _jobs_result(client, path, result, f"Jobs of pipeline #{pipeline_id} in {path}")


@tool_handler
async def project_jobs(
    client: GitLabClient,
    project: int | str,
    scope: list[str] | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> ToolResult:
    details = await client.get_project(project)
    result = await client.get_project_jobs(details.id, scope=scope, page=page, per_page=per_page)
    path = details.path_with_namespace
    return _jobs_result(client, path, result, f"Jobs in {path}")


@tool_handler
async def job_details(client: GitLabClient, project: int | str, job_id: int) -> ToolResult:
    details = await client.get_project(project)
    job = await client.get_job(details.id, job_id)
    url = client.links.job(details.path_with_namespace, job.id)
    lines = [
        f"Job #{job.id} for {details.path_with_namespace}:",
        f"Name: {job.name}",
        f"Stage: {job.stage}",
        f"Status: {job.status}",
        f"Pipeline: #{job.pipeline_id}",
        f"URL: {url}",
    ]
    if job.duration:
        lines.append(f"Duration: {job.duration}s")
    return tool_success(
        {"project": details.path_with_namespace, "job": {**job.to_dict(), "url": url}},
        f"Job #{job.id} for {details.path_with_namespace}: {job.name} [{job.status}]",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def job_trace(
    client: GitLabClient,
    project: int | str,
    job_id: int,
    from_byte: int = 0,
    max_bytes: int = DEFAULT_TRACE_BYTES,
    brief_output: bool = True,
    preview_lines: int = DEFAULT_PREVIEW_LINES,
) -> ToolResult:
    """Fetch a byte range of a job log.

    Brief output returns the first preview_lines lines of the range; full
    output returns the whole range. The raw-log URL is always included.
    """
    if not 1 <= max_bytes <= MAX_TRACE_BYTES:
        raise GitLabValidationError(
            f"Invalid max_bytes: {max_bytes} (must be between 1 and {MAX_TRACE_BYTES})",
            field="max_bytes",
        )
    if not 1 <= preview_lines <= MAX_PREVIEW_LINES:
        raise GitLabValidationError(
            f"Invalid preview_lines: {preview_lines} (must be between 1 and {MAX_PREVIEW_LINES})",
            field="preview_lines",
        )

    details = await client.get_project(project)
    trace = await client.get_job_trace(
        details.id,
        job_id,
        from_byte=from_byte,
        max_bytes=max_bytes,
        project_path=details.path_with_namespace,
    )
    log_lines = trace.content.splitlines()
    content = "\n".join(log_lines[:preview_lines]) if brief_output else trace.content
    payload = {**trace.to_dict(), "project": details.path_with_namespace, "content": content}
    size = f"{trace.total_bytes} bytes total" if trace.total_bytes is not None else "size unknown"
    lines = [
        f"Trace for job #{job_id} in {details.path_with_namespace} "
        f"({'partial, ' if trace.partial else ''}{size}):",
        content,
        f"Raw log: {trace.raw_url}",
    ]
    return tool_success(
        payload,
        f"Fetched {len(trace.content.encode())} bytes of job #{job_id} trace"
        f"{' (partial)' if trace.partial else ''}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def pipeline_variables(
    client: GitLabClient, project: int | str, pipeline_id: int, brief_output: bool = True
) -> ToolResult:
    """Pipeline variables; brief text output shows keys only."""
    details = await client.get_project(project)
    variables = await client.get_pipeline_variables(details.id, pipeline_id)
    lines = [f"Variables for pipeline #{pipeline_id} in {details.path_with_namespace}:"]
    lines.extend(v.key if brief_output else f"{v.key}={v.value}" for v in variables)
    return tool_success(
        {
            "project": details.path_with_namespace,
            "pipeline_id": pipeline_id,
            "variables": [v.to_dict() for v in variables],
        },
        f"Fetched {len(variables)} variables for pipeline #{pipeline_id}",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )


@tool_handler
async def pipeline_test_report(
    client: GitLabClient, project: int | str, pipeline_id: int, brief_output: bool = True
) -> ToolResult:
    """Test report counts; suites are only included with brief_output=False."""
    details = await client.get_project(project)
    report = await client.get_pipeline_test_report(details.id, pipeline_id)
    summary = report.to_dict()
    suites = summary.pop("test_suites")
    payload = {
        "project": details.path_with_namespace,
        "pipeline_id": pipeline_id,
        "summary": summary,
    }
    if not brief_output:
        payload["test_suites"] = suites
    time_text = f"{report.total_time}s" if report.total_time is not None else "N/A"
    lines = [
        f"Test report for pipeline #{pipeline_id} in {details.path_with_namespace}:",
        f"Total: {report.total_count}, Passed: {report.success_count}, "
        f"Failed: {report.failed_count}, Skipped: {report.skipped_count}, "
        f"Errors: {report.error_count}, Time: {time_text}",
    ]
    if not brief_output:
        lines.extend(f"  {s.get('name')}: {s.get('failed_count', 0)} failed" for s in suites)
    return tool_success(
        payload,
        f"Test report for pipeline #{pipeline_id}: "
        f"{report.success_count}/{report.total_count} passed",
        "\n".join(lines),
        structured=client.config.use_structured_content,
    )
