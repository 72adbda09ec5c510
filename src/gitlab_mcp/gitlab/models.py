"""Normalized GitLab entity records.

Immutable snapshots produced by the mapper functions in
``gitlab_mcp.gitlab.mappers``. Field names follow GitLab's snake_case
naming except where a nested object is flattened (e.g. ``commit_id`` for
``commit.id``). Remote ids are kept as-is.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "AccessLevel",
    "Commit",
    "CommitBrief",
    "CommitStatus",
    "CommitStatusOrderBy",
    "CreatedTag",
    "CurrentUser",
    "DiffFile",
    "DiffFileBrief",
    "Job",
    "JobScope",
    "JobTrace",
    "Member",
    "MergeRequest",
    "MergeRequestState",
    "Pipeline",
    "PipelineOrderBy",
    "PipelineStatus",
    "PipelineVariable",
    "Project",
    "SortOrder",
    "Tag",
    "TagRelease",
    "TestReportSummary",
    "User",
    "UserRef",
]


class MergeRequestState(str, Enum):
    """State filter accepted by merge request listings."""

    OPENED = "opened"
    CLOSED = "closed"
    MERGED = "merged"
    ALL = "all"


class JobScope(str, Enum):
    """Job status values accepted by the jobs ``scope[]`` filter."""

    CREATED = "created"
    PENDING = "pending"
    RUNNING = "running"
    FAILED = "failed"
    SUCCESS = "success"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    MANUAL = "manual"


class PipelineStatus(str, Enum):
    CREATED = "created"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    PREPARING = "preparing"
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class PipelineOrderBy(str, Enum):
    ID = "id"
    STATUS = "status"
    REF = "ref"
    UPDATED_AT = "updated_at"
    USER_ID = "user_id"


class CommitStatusOrderBy(str, Enum):
    ID = "id"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    """Sort direction for ordered listings."""

    ASC = "asc"
    DESC = "desc"


class AccessLevel(int, Enum):
    """Member access levels."""

    NO_ACCESS = 0
    MINIMAL_ACCESS = 5
    GUEST = 10
    PLANNER = 15
    REPORTER = 20
    DEVELOPER = 30
    MAINTAINER = 40
    OWNER = 50


class _Record:
    """Mixin giving every record a plain-dict view for tool payloads."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserRef(_Record):
    """Embedded author/assignee/trigger user."""

    id: int
    username: str
    name: str = ""
    web_url: str | None = None


@dataclass(frozen=True)
class Project(_Record):
    id: int
    name: str
    name_with_namespace: str
    path_with_namespace: str
    description: str | None = None
    last_activity_at: str | None = None
    default_branch: str | None = None
    web_url: str | None = None


@dataclass(frozen=True)
class TagRelease(_Record):
    tag_name: str
    description: str | None = None


@dataclass(frozen=True)
class Tag(_Record):
    name: str
    commit_id: str
    authored_at: str | None = None
    message: str | None = None
    release: TagRelease | None = None


@dataclass(frozen=True)
class CreatedTag(_Record):
    """Tag returned by the create endpoint, plus its web URL."""

    name: str
    target: str
    commit_id: str
    message: str | None = None
    commit_message: str | None = None
    commit_created_at: str | None = None
    release: TagRelease | None = None
    url: str | None = None


@dataclass(frozen=True)
class MergeRequest(_Record):
    id: int
    iid: int
    title: str
    state: str  # opened, closed, merged, locked
    created_at: str
    updated_at: str
    project_id: int | None = None
    merged_at: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None
    author: UserRef | None = None
    assignee: UserRef | None = None
    description: str | None = None
    web_url: str | None = None
    fresh: bool | None = None  # Only set by detail lookups


@dataclass(frozen=True)
class User(_Record):
    id: int
    username: str
    name: str
    state: str  # active, blocked, ...
    web_url: str | None = None
    avatar_url: str | None = None
    created_at: str | None = None
    email: str | None = None
    public_email: str | None = None
    bio: str | None = None
    location: str | None = None
    organization: str | None = None
    is_admin: bool | None = None
    last_activity_on: str | None = None
    last_sign_in_at: str | None = None


@dataclass(frozen=True)
class CurrentUser(User):
    """The token owner, with account capabilities."""

    private_profile: bool | None = None
    can_create_group: bool | None = None
    can_create_project: bool | None = None
    two_factor_enabled: bool | None = None


@dataclass(frozen=True)
class Member(_Record):
    id: int
    username: str
    name: str
    state: str
    access_level: int
    access_level_description: str
    web_url: str | None = None
    expires_at: str | None = None


@dataclass(frozen=True)
class Pipeline(_Record):
    id: int
    status: str
    ref: str
    sha: str
    iid: int | None = None
    project_id: int | None = None
    source: str | None = None
    web_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    duration: float | None = None
    queued_duration: float | None = None
    coverage: str | None = None
    user: UserRef | None = None
    detailed_status: str | None = None  # detailed_status.text


@dataclass(frozen=True)
class Job(_Record):
    id: int
    name: str
    stage: str
    status: str
    ref: str | None = None
    tag: bool = False
    allow_failure: bool = False
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    duration: float | None = None
    queued_duration: float | None = None
    coverage: str | None = None
    web_url: str | None = None
    pipeline_id: int | None = None
    commit_sha: str | None = None
    commit_title: str | None = None
    user: UserRef | None = None
    runner_description: str | None = None
    tag_list: tuple[str, ...] = ()


@dataclass(frozen=True)
class JobTrace(_Record):
    """Slice of a job log fetched with a byte-range request."""

    job_id: int
    content: str
    partial: bool
    content_range: str | None = None
    total_bytes: int | None = None
    raw_url: str | None = None


@dataclass(frozen=True)
class CommitBrief(_Record):
    id: str
    short_id: str
    title: str
    author_name: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Commit(_Record):
    id: str
    short_id: str
    title: str
    message: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    authored_date: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None
    committed_date: str | None = None
    created_at: str | None = None
    parent_ids: tuple[str, ...] = ()
    web_url: str | None = None
    additions: int | None = None
    deletions: int | None = None
    total: int | None = None
    status: str | None = None  # Only on detail lookups
    last_pipeline_id: int | None = None


@dataclass(frozen=True)
class CommitStatus(_Record):
    id: int
    sha: str
    name: str
    status: str
    ref: str | None = None
    target_url: str | None = None
    description: str | None = None
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    allow_failure: bool | None = None
    coverage: float | None = None
    pipeline_id: int | None = None
    author: UserRef | None = None


@dataclass(frozen=True)
class DiffFileBrief(_Record):
    old_path: str
    new_path: str
    new_file: bool = False
    renamed_file: bool = False
    deleted_file: bool = False

    @property
    def change_marker(self) -> str:
        if self.new_file:
            return "[NEW]"
        if self.deleted_file:
            return "[DEL]"
        if self.renamed_file:
            return "[REN]"
        return "[MOD]"


@dataclass(frozen=True)
class DiffFile(DiffFileBrief):
    a_mode: str | None = None
    b_mode: str | None = None
    generated_file: bool | None = None
    diff: str | None = None  # Omitted unless requested


@dataclass(frozen=True)
class PipelineVariable(_Record):
    key: str
    value: str
    variable_type: str = "env_var"


@dataclass(frozen=True)
class TestReportSummary(_Record):
    """Counts from a pipeline test report."""

    __test__ = False  # not a pytest test class

    total_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    total_time: float | None = None
    test_suites: list[dict[str, Any]] = field(default_factory=list)
