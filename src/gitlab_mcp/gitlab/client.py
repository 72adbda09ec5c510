"""GitLab REST API client.

Provides an async httpx-based gateway to the GitLab REST API v4 with Bearer
token auth. Every list method follows the same shape: validate pagination and
filters, issue one request, read the pagination headers, apply any
client-side filter, and return a Page of normalized records.

Failures are classified into typed errors (see errors.py) and raised; this
layer never retries. Callers that want retries wrap the call themselves.

Reference: https://docs.gitlab.com/ee/api/rest/
"""

import logging
import re
import time
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any
from urllib.parse import quote

import httpx

from ..config import GitLabConfig
from ..dates import parse_timestamp
from ..metrics import (
    gitlab_request_duration_seconds,
    gitlab_request_failures_total,
    gitlab_requests_total,
)
from .batch import BatchResult, resolve_batch
from .errors import (
    GitLabNotFoundError,
    GitLabTransportError,
    GitLabValidationError,
    ReadOnlyModeError,
    error_from_response,
)
from .filters import filter_by_namespace, filter_diff_files
from .identifiers import Identifier, NumericId, parse_identifier, parse_numeric_id
from .links import WebLinks
from .mappers import (
    map_commit,
    map_commit_brief,
    map_commit_status,
    map_created_tag,
    map_current_user,
    map_diff_file,
    map_diff_file_brief,
    map_job,
    map_member,
    map_merge_request,
    map_pipeline,
    map_pipeline_variable,
    map_project,
    map_tag,
    map_test_report,
    map_user,
)
from .models import (
    Commit,
    CommitStatus,
    CommitStatusOrderBy,
    CreatedTag,
    CurrentUser,
    Job,
    JobScope,
    JobTrace,
    Member,
    MergeRequest,
    MergeRequestState,
    Pipeline,
    PipelineOrderBy,
    PipelineStatus,
    PipelineVariable,
    Project,
    SortOrder,
    Tag,
    TestReportSummary,
    User,
)
from .pagination import DIFF_PER_PAGE, Page, PaginationRequest, extract_pagination
from .versioning import validate_tag_name

logger = logging.getLogger("gitlab_mcp.gitlab.client")

UserKey = int | str

_CONTENT_RANGE_RE = re.compile(r"bytes\s+(\d+)-(\d+)/(\d+|\*)")


def parse_content_range(value: str | None) -> int | None:
    """Total size from a "bytes a-b/total" Content-Range; None when unknown."""
    if not value:
        return None
    match = _CONTENT_RANGE_RE.match(value.strip())
    if not match or match.group(3) == "*":
        return None
    return int(match.group(3))


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset query parameters; httpx would send None as an empty value."""
    return {key: value for key, value in params.items() if value is not None}


def _parse_choice(value: str | None, choices: type, field: str) -> str | None:
    if value is None:
        return None
    try:
        return choices(value).value
    except ValueError:
        allowed = ", ".join(c.value for c in choices)
        raise GitLabValidationError(
            f"Invalid {field}: '{value}' (expected one of: {allowed})", field=field
        ) from None


class GitLabClient:
    """GitLab REST API client using httpx with Bearer token auth.

    Uses a long-lived httpx.AsyncClient with connection pooling. The
    configuration snapshot is injected at construction and never mutated.

    Attributes:
        config: Frozen configuration snapshot
        links: Web UI URL builder for the configured instance

    Example:
        >>> async with GitLabClient(get_config()) as client:
        ...     page = await client.get_projects(search="api")
        ...     for project in page.data:
        ...         print(project.path_with_namespace)
    """

    # Timeout configuration; read timeout comes from config.request_timeout
    CONNECT_TIMEOUT = 5.0  # seconds
    POOL_TIMEOUT = 5.0  # seconds

    USER_AGENT = "gitlab-mcp/1.0"

    MERGE_REQUEST_FRESHNESS_HOURS = 24

    def __init__(
        self,
        config: GitLabConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitLab client with token authentication.

        Args:
            config: Configuration snapshot (URL, token, filters, read-only flag)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self.links = WebLinks(config.url)

        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers={
                "Authorization": f"Bearer {config.token.get_secret_value()}",
                "Accept": "application/json",
                "User-Agent": self.USER_AGENT,
            },
            timeout=httpx.Timeout(
                config.request_timeout,
                connect=self.CONNECT_TIMEOUT,
                pool=self.POOL_TIMEOUT,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> "GitLabClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit -- close httpx client."""
        await self.close()

    async def close(self) -> None:
        """Close the httpx client and release connections."""
        await self._client.aclose()

    # --- Projects ---

    async def get_projects(
        self,
        search: str | None = None,
        membership: bool | None = None,
        simple: bool = True,
        order_by: str = "last_activity_at",
        sort: str = "desc",
        namespace_whitelist: list[str] | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Project]:
        """List projects visible to the token.

        Args:
            search: Name/path substring
            membership: Only projects the user is a member of
                        (default: config.membership_only)
            simple: Ask GitLab for the reduced project representation
            order_by: Sort field (default: last_activity_at)
            sort: asc or desc
            namespace_whitelist: Path prefixes to keep
                                 (default: config.include_namespaces)
            page: Page number (default 1)
            per_page: Page size (default 50, max 100)

        Returns:
            Page of projects. The namespace filter runs after pagination, so
            a page may hold fewer than per_page items while has_more is True.
        """
        pagination = PaginationRequest.build(page, per_page)
        params = {
            "membership": self.config.membership_only if membership is None else membership,
            "simple": simple,
            "order_by": order_by,
            "sort": _parse_choice(sort, SortOrder, "sort"),
            "search": search,
        }
        result = await self._get_page("/projects", pagination, params, resource="projects")
        whitelist = self.config.include_namespaces if namespace_whitelist is None else namespace_whitelist
        filtered = filter_by_namespace(result.data, whitelist)
        return Page(data=[map_project(p) for p in filtered], pagination=result.pagination)

    async def search_projects(
        self,
        query: str,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Project]:
        """Global project search; the namespace whitelist still applies."""
        pagination = PaginationRequest.build(page, per_page)
        params = {"scope": "projects", "search": query}
        result = await self._get_page("/search", pagination, params, resource="search")
        filtered = filter_by_namespace(result.data, self.config.include_namespaces)
        return Page(data=[map_project(p) for p in filtered], pagination=result.pagination)

    async def get_project(self, project: int | str | Identifier) -> Project:
        """Fetch one project by numeric id or full path."""
        project_id = parse_identifier(project, field="project")
        data = await self._get_json(f"/projects/{project_id.path_segment()}", resource="projects")
        return map_project(data)

    # --- Tags ---

    async def get_project_tags(
        self,
        project: int | str | Identifier,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Tag]:
        """List repository tags, highest version first."""
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/repository/tags",
            pagination,
            {"order_by": "version", "sort": "desc"},
            resource="tags",
        )
        return result.map(map_tag)

    async def create_tag(
        self,
        project: int | str | Identifier,
        tag_name: str,
        ref: str,
        message: str | None = None,
        release_description: str | None = None,
        project_path: str | None = None,
    ) -> CreatedTag:
        """Create a repository tag.

        Refused before any request when read-only mode is on, or when the
        tag name is not SemVer (optional leading "v").

        Args:
            project: Project id or path
            tag_name: Tag to create, e.g. "v1.4.0"
            ref: Branch name or commit SHA to tag
            message: Annotation message (annotated tag when set)
            release_description: Release notes attached to the tag
            project_path: Full path used for the tag's web URL
                          (defaults to the path form of ``project``)

        Raises:
            ReadOnlyModeError: GITLAB_READ_ONLY is enabled
            GitLabValidationError: Invalid tag name or HTTP 400
            GitLabPermissionError: HTTP 403 (Developer role required)
            GitLabConflictError: Tag already exists
            GitLabUnprocessableError: ref does not exist
        """
        if self.config.read_only:
            raise ReadOnlyModeError("Tag creation")
        validate_tag_name(tag_name)
        if not ref:
            raise GitLabValidationError("Invalid ref: must not be empty", field="ref")

        project_id = parse_identifier(project, field="project")
        hints = {
            400: "Bad request: Invalid tag parameters",
            403: (
                f"Forbidden: Insufficient permissions to create tag '{tag_name}' in "
                f"project {project_id}. Requires at least Developer role."
            ),
            409: f"Conflict: Tag '{tag_name}' already exists in project {project_id}.",
            422: f"Unprocessable: Reference '{ref}' not found in repository for project {project_id}.",
        }
        body = _clean_params(
            {
                "tag_name": tag_name,
                "ref": ref,
                "message": message,
                "release_description": release_description,
            }
        )
        response = await self._request(
            "POST",
            f"/projects/{project_id.path_segment()}/repository/tags",
            json=body,
            resource="tags",
            hints=hints,
        )
        data = self._json(response)
        url = self.links.tag(project_path or str(project_id), data["name"])
        logger.info(
            "gitlab_tag_created",
            extra={"project": str(project_id), "tag_name": data["name"], "ref": ref},
        )
        return map_created_tag(data, url=url)

    # --- Merge requests ---

    async def get_merge_requests(
        self,
        project: int | str | Identifier,
        state: str = MergeRequestState.ALL.value,
        updated_after: str | None = None,
        updated_before: str | None = None,
        target_branch: str | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[MergeRequest]:
        """List a project's merge requests, most recently updated first."""
        pagination = PaginationRequest.build(page, per_page)
        state = _parse_choice(state, MergeRequestState, "state")
        project_id = parse_identifier(project, field="project")
        params = {
            "state": state,
            "updated_after": updated_after,
            "updated_before": updated_before,
            "target_branch": target_branch,
            "order_by": "updated_at",
        }
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/merge_requests",
            pagination,
            params,
            resource="merge_requests",
        )
        return result.map(map_merge_request)

    async def get_merge_request(self, project: int | str | Identifier, iid: int) -> MergeRequest:
        """Fetch one merge request, with its freshness flag set."""
        project_id = parse_identifier(project, field="project")
        iid = parse_numeric_id(iid, field="iid")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/merge_requests/{iid.path_segment()}",
            resource="merge_requests",
        )
        return map_merge_request(data, fresh=self.is_merge_request_fresh(data.get("merged_at")))

    async def search_merge_requests(
        self,
        query: str,
        project: int | str | Identifier | None = None,
        state: str | None = None,
        target_branch: str | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[MergeRequest]:
        """Search merge requests globally or within one project."""
        pagination = PaginationRequest.build(page, per_page)
        state = _parse_choice(state, MergeRequestState, "state")
        params: dict[str, Any] = {"scope": "merge_requests", "search": query}
        if target_branch:
            params["target_branch"] = target_branch
        if state and state != MergeRequestState.ALL.value:
            params["state"] = state

        if project is None:
            path = "/search"
        else:
            project_id = parse_identifier(project, field="project")
            path = f"/projects/{project_id.path_segment()}/search"
        result = await self._get_page(path, pagination, params, resource="search")
        return result.map(map_merge_request)

    async def get_merge_request_diffs(
        self,
        project: int | str | Identifier,
        iid: int,
        include_paths: list[str] | None = None,
        exclude_paths: list[str] | None = None,
        file_path: str | None = None,
        brief: bool = False,
        include_diff: bool = True,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page:
        """List a merge request's changed files.

        Args:
            project: Project id or path
            iid: Merge request IID
            include_paths: Keep only files whose old or new path is listed
            exclude_paths: Drop files whose old or new path is listed
            file_path: Single exact path; overrides include/exclude
            brief: Return paths and change flags only
            include_diff: Include diff text (ignored when brief)
            page: Page number (default 1)
            per_page: Files per page (default 20, max 100)

        Returns:
            Page of DiffFile (or DiffFileBrief when brief). Path filters run
            client-side on the fetched page.
        """
        pagination = PaginationRequest.build(page, per_page, default_per_page=DIFF_PER_PAGE)
        project_id = parse_identifier(project, field="project")
        iid = parse_numeric_id(iid, field="iid")
        if file_path:
            include_paths, exclude_paths = [file_path], None

        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/merge_requests/{iid.path_segment()}/diffs",
            pagination,
            {},
            resource="merge_request_diffs",
        )
        files = filter_diff_files(result.data, include_paths, exclude_paths)
        mapper = map_diff_file_brief if brief else partial(map_diff_file, include_diff=include_diff)
        return Page(data=[mapper(f) for f in files], pagination=result.pagination)

    def is_merge_request_fresh(
        self,
        merged_at: str | None,
        now: datetime | None = None,
        threshold_hours: int = MERGE_REQUEST_FRESHNESS_HOURS,
    ) -> bool:
        """True when the merge request is unmerged or merged within the threshold."""
        if not merged_at:
            return True
        now = now or datetime.now(timezone.utc)
        return now - parse_timestamp(merged_at) <= timedelta(hours=threshold_hours)

    # --- Users ---

    async def get_users(
        self,
        search: str | None = None,
        username: str | None = None,
        active: bool | None = None,
        blocked: bool | None = None,
        external: bool | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[User]:
        pagination = PaginationRequest.build(page, per_page)
        params = {
            "search": search or None,
            "username": username or None,
            "active": active,
            "blocked": blocked,
            "external": external,
        }
        result = await self._get_page("/users", pagination, params, resource="users")
        return result.map(lambda u: map_user(u, web_url=self.links.user(u["username"])))

    async def get_user(self, user: UserKey | Identifier) -> User:
        """Fetch one user by numeric id or username.

        Raises:
            GitLabNotFoundError: Unknown id, or no user with that username
        """
        user_id = parse_identifier(user, field="user")
        if isinstance(user_id, NumericId):
            data = await self._get_json(f"/users/{user_id.value}", resource="users")
        else:
            # /users/:id only accepts numeric ids; usernames go through the filter
            matches = await self._get_json(
                "/users", params={"username": user_id.value}, resource="users"
            )
            if not matches:
                raise GitLabNotFoundError(
                    f"User not found: {user_id.value}", status_code=404, field="user"
                )
            data = matches[0]
        return map_user(data, web_url=self.links.user(data["username"]))

    async def get_users_batch(self, user_keys: list[UserKey]) -> BatchResult[UserKey, User]:
        """Resolve up to 50 users by id or username with bounded concurrency.

        Keys that 404 (or match no username) are reported in not_found with
        the key exactly as given; any other failure aborts the batch.
        """
        # Reject malformed keys before any lookup is issued
        for key in user_keys:
            parse_identifier(key, field="user_ids")
        return await resolve_batch(
            user_keys,
            self.get_user,
            concurrency_limit=self.config.batch_concurrency,
        )

    async def get_current_user(self) -> CurrentUser:
        data = await self._get_json("/user", resource="users")
        return map_current_user(data, web_url=self.links.user(data["username"]))

    # --- Members ---

    async def get_project_members(
        self,
        project: int | str | Identifier,
        include_inherited: bool = True,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Member]:
        project_id = parse_identifier(project, field="project")
        return await self._get_members(
            f"/projects/{project_id.path_segment()}", include_inherited, page, per_page
        )

    async def get_group_members(
        self,
        group: int | str | Identifier,
        include_inherited: bool = True,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Member]:
        group_id = parse_identifier(group, field="group")
        return await self._get_members(
            f"/groups/{group_id.path_segment()}", include_inherited, page, per_page
        )

    async def _get_members(
        self,
        owner_path: str,
        include_inherited: bool,
        page: int | None,
        per_page: int | None,
    ) -> Page[Member]:
        pagination = PaginationRequest.build(page, per_page)
        # members/all includes members inherited from ancestor groups
        path = f"{owner_path}/members/all" if include_inherited else f"{owner_path}/members"
        result = await self._get_page(path, pagination, {}, resource="members")
        return result.map(lambda m: map_member(m, web_url=self.links.user(m["username"])))

    # --- Pipelines & jobs ---

    async def get_pipelines(
        self,
        project: int | str | Identifier,
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
    ) -> Page[Pipeline]:
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        params = {
            "ref": ref,
            "status": _parse_choice(status, PipelineStatus, "status"),
            "source": source,
            "order_by": _parse_choice(order_by, PipelineOrderBy, "order_by"),
            "sort": _parse_choice(sort, SortOrder, "sort"),
            "updated_after": updated_after,
            "updated_before": updated_before,
            "username": username,
            "yaml_errors": yaml_errors,
        }
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/pipelines",
            pagination,
            params,
            resource="pipelines",
        )
        return result.map(map_pipeline)

    async def get_pipeline(self, project: int | str | Identifier, pipeline_id: int) -> Pipeline:
        project_id = parse_identifier(project, field="project")
        pipeline = parse_numeric_id(pipeline_id, field="pipeline_id")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/pipelines/{pipeline.path_segment()}",
            resource="pipelines",
        )
        return map_pipeline(data)

    async def get_latest_pipeline(
        self, project: int | str | Identifier, ref: str | None = None
    ) -> Pipeline:
        """Latest pipeline for a ref (default branch when ref is omitted)."""
        project_id = parse_identifier(project, field="project")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/pipelines/latest",
            params={"ref": ref},
            resource="pipelines",
        )
        return map_pipeline(data)

    async def get_pipeline_jobs(
        self,
        project: int | str | Identifier,
        pipeline_id: int,
        scope: list[str] | None = None,
        include_retried: bool | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Job]:
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        pipeline = parse_numeric_id(pipeline_id, field="pipeline_id")
        params = {
            "scope[]": self._job_scope(scope),
            "include_retried": include_retried,
        }
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/pipelines/{pipeline.path_segment()}/jobs",
            pagination,
            params,
            resource="jobs",
        )
        return result.map(map_job)

    async def get_project_jobs(
        self,
        project: int | str | Identifier,
        scope: list[str] | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[Job]:
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/jobs",
            pagination,
            {"scope[]": self._job_scope(scope)},
            resource="jobs",
        )
        return result.map(map_job)

    @staticmethod
    def _job_scope(scope: list[str] | None) -> list[str] | None:
        if not scope:
            return None
        return [_parse_choice(s, JobScope, "scope") for s in scope]

    async def get_job(self, project: int | str | Identifier, job_id: int) -> Job:
        project_id = parse_identifier(project, field="project")
        job = parse_numeric_id(job_id, field="job_id")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/jobs/{job.path_segment()}",
            resource="jobs",
        )
        return map_job(data)

    async def get_job_trace(
        self,
        project: int | str | Identifier,
        job_id: int,
        from_byte: int | None = None,
        max_bytes: int | None = None,
        project_path: str | None = None,
    ) -> JobTrace:
        """Fetch a job log, optionally a byte range of it.

        A Range header is sent only when from_byte or max_bytes is given
        ("bytes=start-" when only from_byte is set). The result is marked
        partial when GitLab answers 206 or sends a Content-Range header.

        Args:
            project: Project id or path
            job_id: Job id
            from_byte: First byte offset (>= 0)
            max_bytes: Maximum bytes to return (>= 1)
            project_path: Full path used for the raw-log web URL
        """
        if from_byte is not None and from_byte < 0:
            raise GitLabValidationError(
                f"Invalid from_byte: {from_byte} (must be >= 0)", field="from_byte"
            )
        if max_bytes is not None and max_bytes < 1:
            raise GitLabValidationError(
                f"Invalid max_bytes: {max_bytes} (must be >= 1)", field="max_bytes"
            )
        project_id = parse_identifier(project, field="project")
        job = parse_numeric_id(job_id, field="job_id")

        headers = {"Accept": "text/plain"}
        if from_byte is not None or max_bytes is not None:
            start = from_byte or 0
            end = "" if max_bytes is None else str(start + max_bytes - 1)
            headers["Range"] = f"bytes={start}-{end}"

        response = await self._request(
            "GET",
            f"/projects/{project_id.path_segment()}/jobs/{job.path_segment()}/trace",
            headers=headers,
            resource="job_trace",
        )
        content_range = response.headers.get("Content-Range")
        return JobTrace(
            job_id=job.value,
            content=response.text,
            partial=response.status_code == 206 or bool(content_range),
            content_range=content_range,
            total_bytes=parse_content_range(content_range),
            raw_url=self.links.job_raw_log(project_path or str(project_id), job.value),
        )

    async def get_pipeline_variables(
        self, project: int | str | Identifier, pipeline_id: int
    ) -> list[PipelineVariable]:
        project_id = parse_identifier(project, field="project")
        pipeline = parse_numeric_id(pipeline_id, field="pipeline_id")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/pipelines/{pipeline.path_segment()}/variables",
            resource="pipelines",
        )
        return [map_pipeline_variable(v) for v in data]

    async def get_pipeline_test_report(
        self, project: int | str | Identifier, pipeline_id: int
    ) -> TestReportSummary:
        project_id = parse_identifier(project, field="project")
        pipeline = parse_numeric_id(pipeline_id, field="pipeline_id")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/pipelines/{pipeline.path_segment()}/test_report",
            resource="pipelines",
        )
        return map_test_report(data)

    # --- Commits ---

    async def get_commits(
        self,
        project: int | str | Identifier,
        ref_name: str | None = None,
        since: str | None = None,
        until: str | None = None,
        path: str | None = None,
        author: str | None = None,
        first_parent: bool | None = None,
        order: str | None = None,
        with_stats: bool = False,
        brief: bool = True,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page:
        """List repository commits; brief records omit message and stats."""
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        if order is not None and order not in ("default", "topo", "date"):
            raise GitLabValidationError(
                f"Invalid order: '{order}' (expected one of: default, topo, date)", field="order"
            )
        params = {
            "ref_name": ref_name,
            "since": since,
            "until": until,
            "path": path,
            "author": author,
            "first_parent": first_parent,
            "order": order,
            "with_stats": with_stats or None,
        }
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/repository/commits",
            pagination,
            params,
            resource="commits",
        )
        return result.map(map_commit_brief if brief else map_commit)

    async def get_commit(
        self, project: int | str | Identifier, sha: str, stats: bool = True
    ) -> Commit:
        project_id = parse_identifier(project, field="project")
        data = await self._get_json(
            f"/projects/{project_id.path_segment()}/repository/commits/{self._sha(sha)}",
            params={"stats": stats},
            resource="commits",
        )
        return map_commit(data)

    async def get_commit_diff(
        self,
        project: int | str | Identifier,
        sha: str,
        brief: bool = True,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page:
        pagination = PaginationRequest.build(page, per_page, default_per_page=DIFF_PER_PAGE)
        project_id = parse_identifier(project, field="project")
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/repository/commits/{self._sha(sha)}/diff",
            pagination,
            {},
            resource="commits",
        )
        return result.map(map_diff_file_brief if brief else partial(map_diff_file, include_diff=True))

    async def get_commit_statuses(
        self,
        project: int | str | Identifier,
        sha: str,
        all: bool | None = None,
        name: str | None = None,
        order_by: str | None = None,
        pipeline_id: int | None = None,
        ref: str | None = None,
        sort: str | None = None,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[CommitStatus]:
        pagination = PaginationRequest.build(page, per_page)
        project_id = parse_identifier(project, field="project")
        params = {
            "all": all,
            "name": name,
            "order_by": _parse_choice(order_by, CommitStatusOrderBy, "order_by"),
            "pipeline_id": pipeline_id,
            "ref": ref,
            "sort": _parse_choice(sort, SortOrder, "sort"),
        }
        result = await self._get_page(
            f"/projects/{project_id.path_segment()}/repository/commits/{self._sha(sha)}/statuses",
            pagination,
            params,
            resource="commits",
        )
        return result.map(map_commit_status)

    @staticmethod
    def _sha(sha: str) -> str:
        value = (sha or "").strip()
        if len(value) < 7:
            raise GitLabValidationError(
                f"Invalid sha: '{sha}' (at least 7 characters required)", field="sha"
            )
        return quote(value, safe="")

    # --- Low-level request helpers ---

    async def _get_page(
        self,
        path: str,
        pagination: PaginationRequest,
        params: dict[str, Any],
        resource: str,
    ) -> Page[dict]:
        """GET one page of a list endpoint.

        Returns:
            Page of raw dicts with pagination read from the response headers
        """
        response = await self._request(
            "GET",
            path,
            params={**params, **pagination.as_params()},
            resource=resource,
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise GitLabTransportError(
                f"Unexpected response for GET {path}: expected a JSON list",
                status_code=response.status_code,
            )
        return Page(
            data=data,
            pagination=extract_pagination(response.headers, pagination.page, pagination.per_page),
        )

    async def _get_json(
        self,
        path: str,
        resource: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._request("GET", path, params=params, resource=resource)
        return self._json(response)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except (ValueError, UnicodeDecodeError) as e:
            raise GitLabTransportError(
                f"Invalid JSON in GitLab response: {e}", status_code=response.status_code
            ) from e

    async def _request(
        self,
        method: str,
        path: str,
        resource: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        hints: dict[int, str] | None = None,
    ) -> httpx.Response:
        """Issue one request and classify failures. No retries.

        Args:
            method: HTTP method (GET, POST)
            path: API path relative to /api/v4 (e.g., /projects/42)
            resource: Coarse resource name for metric labels
            params: Query parameters; None values are dropped
            json: JSON request body
            headers: Extra request headers (e.g., Range)
            hints: Per-status error messages (see error_from_response)

        Returns:
            Raw httpx.Response with a 2xx status

        Raises:
            GitLabClientError: Typed error for non-2xx statuses
            GitLabTransportError: Timeouts and connection failures
        """
        context = f"{method} {path}"
        start = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                path,
                params=_clean_params(params or {}),
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            self._record_failure(method, resource, "error", GitLabTransportError.kind)
            logger.warning("gitlab_request_timeout", extra={"method": method, "path": path})
            raise GitLabTransportError(f"Request timeout on {context}: {e}") from e
        except httpx.HTTPError as e:
            self._record_failure(method, resource, "error", GitLabTransportError.kind)
            logger.warning(
                "gitlab_request_error",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise GitLabTransportError(f"HTTP error on {context}: {e}") from e
        finally:
            gitlab_request_duration_seconds.labels(method=method, resource=resource).observe(
                time.perf_counter() - start
            )

        if response.is_success:
            gitlab_requests_total.labels(
                method=method, resource=resource, status=str(response.status_code)
            ).inc()
            return response

        error = error_from_response(response, context, hints)
        self._record_failure(method, resource, str(response.status_code), error.kind)
        logger.warning(
            "gitlab_request_failed",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "kind": error.kind,
            },
        )
        raise error

    @staticmethod
    def _record_failure(method: str, resource: str, status: str, kind: str) -> None:
        gitlab_requests_total.labels(method=method, resource=resource, status=status).inc()
        gitlab_request_failures_total.labels(kind=kind).inc()


__all__ = ["GitLabClient", "UserKey", "parse_content_range"]
