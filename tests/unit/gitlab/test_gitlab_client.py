"""Unit tests for the GitLab API gateway.

Tests GitLabClient with:
- Authentication (Bearer token) and /api/v4 base URL
- Pagination headers and client-side namespace filtering
- Tag creation: read-only gate, SemVer validation, status hints
- Merge request diffs with path filters, freshness flag
- User lookup by id or username, bounded batch lookups
- Job traces with byte ranges
- Error classification, timeouts, no retries
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from conftest import TOKEN, json_response

from gitlab_mcp.gitlab.client import GitLabClient, parse_content_range
from gitlab_mcp.gitlab.errors import (
    BatchSizeExceededError,
    GitLabConflictError,
    GitLabNotFoundError,
    GitLabPermissionError,
    GitLabRateLimitError,
    GitLabTransportError,
    GitLabUnprocessableError,
    GitLabValidationError,
    ReadOnlyModeError,
)
from gitlab_mcp.gitlab.models import CommitBrief, DiffFile, DiffFileBrief

API = "/api/v4"


def _project(pid: int, path: str) -> dict:
    return {"id": pid, "name": path.rsplit("/", 1)[-1], "path_with_namespace": path}


def _user(uid: int, username: str) -> dict:
    return {"id": uid, "username": username, "name": username.title(), "state": "active"}


# =============================================================================
# Connection
# =============================================================================


class TestConnection:
    """Auth headers and URL layout."""

    def test_bearer_token_in_headers(self, gitlab_client):
        assert gitlab_client._client.headers["Authorization"] == f"Bearer {TOKEN}"

    def test_accept_and_user_agent(self, gitlab_client):
        headers = gitlab_client._client.headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"].startswith("gitlab-mcp/")

    def test_base_url_is_versioned(self, gitlab_client):
        assert str(gitlab_client._client.base_url) == "https://gitlab.example.com/api/v4/"

    def test_timeout_from_config(self, make_client):
        client = make_client(request_timeout=12.5)
        assert client._client.timeout.read == 12.5
        assert client._client.timeout.connect == GitLabClient.CONNECT_TIMEOUT

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self, make_client):
        async with make_client() as client:
            assert not client._client.is_closed
        assert client._client.is_closed


# =============================================================================
# Projects
# =============================================================================


class TestProjects:
    @pytest.mark.asyncio
    async def test_list_reads_pagination_headers(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects",
            json_response(
                [_project(1, "a/one"), _project(2, "b/two")],
                headers={"X-Next-Page": "3", "X-Total": "120", "X-Prev-Page": "1"},
            ),
        )

        page = await gitlab_client.get_projects(page=2, per_page=2)

        assert [p.id for p in page.data] == [1, 2]
        assert page.pagination.has_more is True
        assert page.pagination.next_page == 3
        assert page.pagination.total == 120
        params = recorder.requests[0].url.params
        assert params["page"] == "2"
        assert params["per_page"] == "2"
        assert params["order_by"] == "last_activity_at"
        assert params["membership"] == "false"

    @pytest.mark.asyncio
    async def test_namespace_filter_after_pagination(self, make_client, recorder):
        client = make_client(include_namespaces="platform/,tools/")
        recorder.add(
            "GET",
            f"{API}/projects",
            json_response(
                [_project(1, "platform/api"), _project(2, "other/x"), _project(3, "tools/cli")],
                headers={"X-Next-Page": "2"},
            ),
        )

        page = await client.get_projects()

        assert [p.path_with_namespace for p in page.data] == ["platform/api", "tools/cli"]
        assert page.pagination.has_more is True

    @pytest.mark.asyncio
    async def test_explicit_whitelist_overrides_config(self, make_client, recorder):
        client = make_client(include_namespaces="platform/")
        recorder.add("GET", f"{API}/projects", json_response([_project(2, "other/x")]))

        page = await client.get_projects(namespace_whitelist=[])

        assert len(page.data) == 1

    @pytest.mark.asyncio
    async def test_membership_default_from_config(self, make_client, recorder):
        client = make_client(membership_only=True)
        recorder.add("GET", f"{API}/projects", json_response([]))

        await client.get_projects()

        assert recorder.requests[0].url.params["membership"] == "true"

    @pytest.mark.asyncio
    async def test_invalid_pagination_rejected_before_request(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError):
            await gitlab_client.get_projects(per_page=500)
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_search_uses_search_scope(self, make_client, recorder):
        client = make_client(include_namespaces="platform/")
        recorder.add(
            "GET",
            f"{API}/search",
            json_response([_project(1, "platform/api"), _project(2, "x/api")]),
        )

        page = await client.search_projects("api")

        assert [p.id for p in page.data] == [1]
        params = recorder.requests[0].url.params
        assert (params["scope"], params["search"]) == ("projects", "api")

    @pytest.mark.asyncio
    async def test_get_project_by_path_is_encoded(self, gitlab_client, recorder):
        recorder.add(
            "GET", f"{API}/projects/group%2Fsub%2Fapp", json_response(_project(9, "group/sub/app"))
        )

        project = await gitlab_client.get_project("group/sub/app")

        assert project.id == 9

    @pytest.mark.asyncio
    async def test_get_project_not_found(self, gitlab_client):
        with pytest.raises(GitLabNotFoundError) as exc_info:
            await gitlab_client.get_project(404404)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_list_endpoint_returning_object_is_transport_error(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/projects", json_response({"unexpected": True}))

        with pytest.raises(GitLabTransportError, match="expected a JSON list"):
            await gitlab_client.get_projects()


# =============================================================================
# Tags
# =============================================================================


class TestCreateTag:
    TAG_PATH = f"{API}/projects/42/repository/tags"

    @pytest.mark.asyncio
    async def test_read_only_refuses_without_request(self, make_client, recorder):
        client = make_client(read_only=True)

        with pytest.raises(ReadOnlyModeError) as exc_info:
            await client.create_tag(42, "v1.0.0", "main")

        assert exc_info.value.kind == "permission"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_invalid_name_refused_without_request(self, make_client, recorder):
        client = make_client(read_only=False)

        with pytest.raises(GitLabValidationError) as exc_info:
            await client.create_tag(42, "release-1", "main")

        assert exc_info.value.field == "tag_name"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_created(self, make_client, recorder):
        client = make_client(read_only=False)
        recorder.add(
            "POST",
            self.TAG_PATH,
            json_response(
                {"name": "v1.0.1", "target": "abc", "commit": {"id": "abc"}, "message": "Rel"},
                status_code=201,
            ),
        )

        tag = await client.create_tag(
            42, "v1.0.1", "main", message="Rel", project_path="team/app"
        )

        assert tag.name == "v1.0.1"
        assert tag.url == "https://gitlab.example.com/team/app/-/tags/v1.0.1"
        body = recorder.requests[0].read()
        assert b'"tag_name": "v1.0.1"' in body or b'"tag_name":"v1.0.1"' in body
        assert b"release_description" not in body

    @pytest.mark.parametrize(
        "status, error_cls, hint",
        [
            (403, GitLabPermissionError, "Requires at least Developer role"),
            (409, GitLabConflictError, "Tag 'v1.0.1' already exists"),
            (422, GitLabUnprocessableError, "Reference 'main' not found"),
            (400, GitLabValidationError, "Bad request: Invalid tag parameters"),
        ],
    )
    @pytest.mark.asyncio
    async def test_status_hints(self, make_client, recorder, status, error_cls, hint):
        client = make_client(read_only=False)
        recorder.add(
            "POST", self.TAG_PATH, json_response({"message": "nope"}, status_code=status)
        )

        with pytest.raises(error_cls) as exc_info:
            await client.create_tag(42, "v1.0.1", "main")

        assert hint in exc_info.value.message
        assert "(nope)" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_tags_listed_by_version(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            self.TAG_PATH,
            json_response([{"name": "v1.0.0", "commit": {"id": "abc"}}]),
        )

        page = await gitlab_client.get_project_tags(42)

        assert page.data[0].commit_id == "abc"
        params = recorder.requests[0].url.params
        assert (params["order_by"], params["sort"]) == ("version", "desc")


# =============================================================================
# Merge requests
# =============================================================================


class TestMergeRequests:
    MR = {
        "id": 1001,
        "iid": 12,
        "title": "Fix",
        "state": "merged",
        "created_at": "2024-05-01T00:00:00Z",
        "updated_at": "2024-05-02T00:00:00Z",
    }

    @pytest.mark.asyncio
    async def test_invalid_state(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_merge_requests(42, state="draft")
        assert exc_info.value.field == "state"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_iid_must_be_numeric(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError):
            await gitlab_client.get_merge_request(42, "abc")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_details_sets_freshness(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/merge_requests/12",
            json_response({**self.MR, "merged_at": "2000-01-01T00:00:00Z"}),
        )

        mr = await gitlab_client.get_merge_request(42, 12)

        assert mr.iid == 12
        assert mr.fresh is False

    def test_freshness_window(self, gitlab_client):
        now = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)
        assert gitlab_client.is_merge_request_fresh(None, now=now) is True
        assert gitlab_client.is_merge_request_fresh("2024-05-01T13:00:00Z", now=now) is True
        assert gitlab_client.is_merge_request_fresh("2024-05-01T11:00:00Z", now=now) is False

    @pytest.mark.asyncio
    async def test_search_within_project(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/projects/42/search", json_response([self.MR]))

        page = await gitlab_client.search_merge_requests("fix", project=42, state="all")

        assert page.data[0].iid == 12
        params = recorder.requests[0].url.params
        assert params["scope"] == "merge_requests"
        assert "state" not in params

    @pytest.mark.asyncio
    async def test_global_search(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/search", json_response([]))

        await gitlab_client.search_merge_requests("fix", state="opened")

        assert recorder.requests[0].url.params["state"] == "opened"


class TestMergeRequestDiffs:
    DIFFS_PATH = f"{API}/projects/42/merge_requests/12/diffs"
    FILES = [
        {"old_path": "a.ts", "new_path": "a.ts", "diff": "@@ a"},
        {"old_path": "b.ts", "new_path": "b.ts", "new_file": True, "diff": "@@ b"},
    ]

    @pytest.mark.asyncio
    async def test_default_page_size_is_20(self, gitlab_client, recorder):
        recorder.add("GET", self.DIFFS_PATH, json_response(self.FILES))

        await gitlab_client.get_merge_request_diffs(42, 12)

        assert recorder.requests[0].url.params["per_page"] == "20"

    @pytest.mark.asyncio
    async def test_brief_records(self, gitlab_client, recorder):
        recorder.add("GET", self.DIFFS_PATH, json_response(self.FILES))

        page = await gitlab_client.get_merge_request_diffs(42, 12, brief=True)

        assert all(type(f) is DiffFileBrief for f in page.data)

    @pytest.mark.asyncio
    async def test_full_records_with_diff(self, gitlab_client, recorder):
        recorder.add("GET", self.DIFFS_PATH, json_response(self.FILES))

        page = await gitlab_client.get_merge_request_diffs(42, 12)

        assert isinstance(page.data[0], DiffFile)
        assert page.data[0].diff == "@@ a"

    @pytest.mark.asyncio
    async def test_file_path_overrides_lists(self, gitlab_client, recorder):
        recorder.add("GET", self.DIFFS_PATH, json_response(self.FILES))

        page = await gitlab_client.get_merge_request_diffs(
            42, 12, file_path="b.ts", exclude_paths=["b.ts"]
        )

        assert [f.new_path for f in page.data] == ["b.ts"]

    @pytest.mark.asyncio
    async def test_exclude(self, gitlab_client, recorder):
        recorder.add("GET", self.DIFFS_PATH, json_response(self.FILES))

        page = await gitlab_client.get_merge_request_diffs(42, 12, exclude_paths=["a.ts"])

        assert [f.new_path for f in page.data] == ["b.ts"]


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    @pytest.mark.asyncio
    async def test_user_by_id(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/users/7", json_response(_user(7, "alice")))

        user = await gitlab_client.get_user(7)

        assert user.username == "alice"
        assert user.web_url == "https://gitlab.example.com/alice"

    @pytest.mark.asyncio
    async def test_user_by_username(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/users", json_response([_user(7, "alice")]))

        user = await gitlab_client.get_user("alice")

        assert user.id == 7
        assert recorder.requests[0].url.params["username"] == "alice"

    @pytest.mark.asyncio
    async def test_unknown_username_is_not_found(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/users", json_response([]))

        with pytest.raises(GitLabNotFoundError) as exc_info:
            await gitlab_client.get_user("ghost")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_batch_mixed(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/users/1", json_response(_user(1, "alice")))
        recorder.add("GET", f"{API}/users/2", json_response(_user(2, "bob")))

        def by_username(request):
            if request.url.params["username"] == "ghost":
                return json_response([])
            return json_response([_user(3, request.url.params["username"])])

        recorder.add("GET", f"{API}/users", by_username)

        result = await gitlab_client.get_users_batch([1, "ghost", 2])

        assert [u.username for u in result.resolved] == ["alice", "bob"]
        assert result.not_found == ["ghost"]

    @pytest.mark.asyncio
    async def test_batch_fatal_error_aborts(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/users/1", json_response(_user(1, "alice")))
        recorder.add("GET", f"{API}/users/2", json_response({"message": "403"}, status_code=403))

        with pytest.raises(GitLabPermissionError):
            await gitlab_client.get_users_batch([1, 2])

    @pytest.mark.asyncio
    async def test_batch_too_large_makes_no_request(self, gitlab_client, recorder):
        with pytest.raises(BatchSizeExceededError):
            await gitlab_client.get_users_batch(list(range(1, 52)))
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_batch_malformed_key_makes_no_request(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_users_batch([1, ""])
        assert exc_info.value.field == "user_ids"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_members_inherited(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/members/all",
            json_response([{**_user(7, "alice"), "access_level": 40}]),
        )

        page = await gitlab_client.get_project_members(42)

        assert page.data[0].access_level_description == "Maintainer"

    @pytest.mark.asyncio
    async def test_group_members_direct(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/groups/platform/members", json_response([]))

        page = await gitlab_client.get_group_members("platform", include_inherited=False)

        assert page.data == []


# =============================================================================
# Pipelines, jobs and traces
# =============================================================================


class TestPipelinesAndJobs:
    @pytest.mark.asyncio
    async def test_job_scope_sent_as_array(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/projects/42/pipelines/500/jobs", json_response([]))

        await gitlab_client.get_pipeline_jobs(42, 500, scope=["failed", "success"])

        assert recorder.requests[0].url.params.get_list("scope[]") == ["failed", "success"]

    @pytest.mark.asyncio
    async def test_invalid_job_scope(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_project_jobs(42, scope=["broken"])
        assert exc_info.value.field == "scope"
        assert recorder.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filters, field",
        [
            ({"status": "bogus"}, "status"),
            ({"order_by": "created_at"}, "order_by"),
            ({"sort": "sideways"}, "sort"),
        ],
    )
    async def test_invalid_pipeline_filters(self, gitlab_client, recorder, filters, field):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_pipelines(42, **filters)
        assert exc_info.value.field == field
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_pipeline_filters_sent(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/projects/42/pipelines", json_response([]))

        await gitlab_client.get_pipelines(
            42, status="waiting_for_resource", order_by="user_id", sort="asc"
        )

        params = recorder.requests[0].url.params
        assert (params["status"], params["order_by"], params["sort"]) == (
            "waiting_for_resource",
            "user_id",
            "asc",
        )

    @pytest.mark.asyncio
    async def test_pipelines_forbidden_names_required_access(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/pipelines",
            json_response({"message": "403 Forbidden"}, status_code=403),
        )

        with pytest.raises(GitLabPermissionError) as exc_info:
            await gitlab_client.get_pipelines(42)

        assert "read_api scope and at least Reporter access" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_latest_pipeline_without_ref(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/pipelines/latest",
            json_response({"id": 5, "status": "success", "ref": "main", "sha": "abc"}),
        )

        pipeline = await gitlab_client.get_latest_pipeline(42)

        assert pipeline.id == 5
        assert "ref" not in recorder.requests[0].url.params


class TestJobTrace:
    TRACE_PATH = f"{API}/projects/42/jobs/900/trace"

    @pytest.mark.asyncio
    async def test_partial_content(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            self.TRACE_PATH,
            httpx.Response(
                206,
                text="line 1\nline 2\n",
                headers={"Content-Range": "bytes 100-199/5000"},
            ),
        )

        trace = await gitlab_client.get_job_trace(
            42, 900, from_byte=100, max_bytes=100, project_path="team/app"
        )

        request = recorder.requests[0]
        assert request.headers["Range"] == "bytes=100-199"
        assert request.headers["Accept"] == "text/plain"
        assert trace.partial is True
        assert trace.total_bytes == 5000
        assert trace.content == "line 1\nline 2\n"
        assert trace.raw_url == "https://gitlab.example.com/team/app/-/jobs/900/raw"

    @pytest.mark.asyncio
    async def test_full_trace_without_range(self, gitlab_client, recorder):
        recorder.add("GET", self.TRACE_PATH, httpx.Response(200, text="all"))

        trace = await gitlab_client.get_job_trace(42, 900)

        assert "Range" not in recorder.requests[0].headers
        assert trace.partial is False
        assert trace.total_bytes is None

    @pytest.mark.asyncio
    async def test_open_ended_range(self, gitlab_client, recorder):
        recorder.add("GET", self.TRACE_PATH, httpx.Response(200, text="tail"))

        await gitlab_client.get_job_trace(42, 900, from_byte=10)

        assert recorder.requests[0].headers["Range"] == "bytes=10-"

    @pytest.mark.parametrize("kwargs", [{"from_byte": -1}, {"max_bytes": 0}])
    @pytest.mark.asyncio
    async def test_invalid_range(self, gitlab_client, recorder, kwargs):
        with pytest.raises(GitLabValidationError):
            await gitlab_client.get_job_trace(42, 900, **kwargs)
        assert recorder.requests == []


class TestParseContentRange:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("bytes 0-99/1000", 1000),
            ("bytes 0-99/*", None),
            ("garbage", None),
            (None, None),
            ("", None),
        ],
    )
    def test_total(self, value, expected):
        assert parse_content_range(value) == expected


# =============================================================================
# Commits
# =============================================================================


class TestCommits:
    @pytest.mark.asyncio
    async def test_brief_by_default(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/repository/commits",
            json_response([{"id": "0123456789", "short_id": "01234567", "title": "x"}]),
        )

        page = await gitlab_client.get_commits(42, ref_name="main")

        assert type(page.data[0]) is CommitBrief
        assert "with_stats" not in recorder.requests[0].url.params

    @pytest.mark.asyncio
    async def test_invalid_order(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_commits(42, order="random")
        assert exc_info.value.field == "order"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_short_sha_rejected(self, gitlab_client, recorder):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_commit(42, "abc")
        assert exc_info.value.field == "sha"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_commit_statuses(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/projects/42/repository/commits/0123456789/statuses",
            json_response([{"id": 1, "sha": "0123456789", "name": "ci", "status": "success"}]),
        )

        page = await gitlab_client.get_commit_statuses(42, "0123456789", all=True)

        assert page.data[0].status == "success"
        assert recorder.requests[0].url.params["all"] == "true"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filters, field",
        [({"order_by": "status"}, "order_by"), ({"sort": "sideways"}, "sort")],
    )
    async def test_invalid_commit_status_filters(self, gitlab_client, recorder, filters, field):
        with pytest.raises(GitLabValidationError) as exc_info:
            await gitlab_client.get_commit_statuses(42, "0123456789", **filters)
        assert exc_info.value.field == field
        assert recorder.requests == []


# =============================================================================
# Transport failures
# =============================================================================


class TestTransportFailures:
    """No retries: every failure surfaces after exactly one request."""

    @pytest.mark.asyncio
    async def test_rate_limited_not_retried(self, gitlab_client, recorder):
        recorder.add(
            "GET",
            f"{API}/user",
            json_response({"message": "slow down"}, status_code=429, headers={"Retry-After": "5"}),
        )

        with pytest.raises(GitLabRateLimitError) as exc_info:
            await gitlab_client.get_current_user()

        assert exc_info.value.retry_after == 5.0
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_transport(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/user", httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(GitLabTransportError) as exc_info:
            await gitlab_client.get_current_user()

        assert exc_info.value.status_code == 502
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self, gitlab_client):
        with patch.object(
            gitlab_client._client,
            "request",
            new=AsyncMock(side_effect=httpx.ReadTimeout("timed out")),
        ) as mock_request:
            with pytest.raises(GitLabTransportError, match="Request timeout"):
                await gitlab_client.get_current_user()

        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_connection_error(self, gitlab_client):
        with patch.object(
            gitlab_client._client,
            "request",
            new=AsyncMock(side_effect=httpx.ConnectError("refused")),
        ):
            with pytest.raises(GitLabTransportError, match="HTTP error"):
                await gitlab_client.get_current_user()

    @pytest.mark.asyncio
    async def test_invalid_json(self, gitlab_client, recorder):
        recorder.add("GET", f"{API}/user", httpx.Response(200, text="<html>"))

        with pytest.raises(GitLabTransportError, match="Invalid JSON"):
            await gitlab_client.get_current_user()
