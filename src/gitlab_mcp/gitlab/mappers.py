"""Mappers from GitLab REST API response dicts to normalized records.

Each mapper is a pure function of the response dict (plus optional
presentation extras such as a web URL). Missing optional keys become None;
required keys (ids, names) raise KeyError so malformed payloads are not
silently turned into empty records.
"""

from typing import Any

from .models import (
    AccessLevel,
    Commit,
    CommitBrief,
    CommitStatus,
    CreatedTag,
    CurrentUser,
    DiffFile,
    DiffFileBrief,
    Job,
    Member,
    MergeRequest,
    Pipeline,
    PipelineVariable,
    Project,
    Tag,
    TagRelease,
    TestReportSummary,
    User,
    UserRef,
)

_ACCESS_LEVEL_NAMES: dict[int, str] = {
    AccessLevel.NO_ACCESS.value: "No access",
    AccessLevel.MINIMAL_ACCESS.value: "Minimal access",
    AccessLevel.GUEST.value: "Guest",
    AccessLevel.PLANNER.value: "Planner",
    AccessLevel.REPORTER.value: "Reporter",
    AccessLevel.DEVELOPER.value: "Developer",
    AccessLevel.MAINTAINER.value: "Maintainer",
    AccessLevel.OWNER.value: "Owner",
}


def access_level_description(level: int) -> str:
    """Human name for a member access level, e.g. 30 -> "Developer"."""
    return _ACCESS_LEVEL_NAMES.get(level, f"Unknown ({level})")


def map_user_ref(user: dict | None) -> UserRef | None:
    if not user:
        return None
    return UserRef(
        id=user["id"],
        username=user["username"],
        name=user.get("name", ""),
        web_url=user.get("web_url"),
    )


def map_project(project: dict, web_url: str | None = None) -> Project:
    return Project(
        id=project["id"],
        name=project["name"],
        name_with_namespace=project.get("name_with_namespace", project["name"]),
        path_with_namespace=project["path_with_namespace"],
        description=project.get("description"),
        last_activity_at=project.get("last_activity_at"),
        default_branch=project.get("default_branch"),
        web_url=web_url or project.get("web_url"),
    )


def _map_release(release: dict | None) -> TagRelease | None:
    if not release:
        return None
    return TagRelease(tag_name=release["tag_name"], description=release.get("description"))


def map_tag(tag: dict) -> Tag:
    commit = tag.get("commit") or {}
    return Tag(
        name=tag["name"],
        commit_id=commit.get("id", tag.get("target", "")),
        authored_at=commit.get("authored_date"),
        message=tag.get("message"),
        release=_map_release(tag.get("release")),
    )


def map_created_tag(tag: dict, url: str | None = None) -> CreatedTag:
    commit = tag.get("commit") or {}
    return CreatedTag(
        name=tag["name"],
        target=tag.get("target", commit.get("id", "")),
        commit_id=commit.get("id", ""),
        message=tag.get("message"),
        commit_message=commit.get("message"),
        commit_created_at=commit.get("created_at"),
        release=_map_release(tag.get("release")),
        url=url,
    )


def map_merge_request(mr: dict, fresh: bool | None = None) -> MergeRequest:
    return MergeRequest(
        id=mr["id"],
        iid=mr["iid"],
        title=mr["title"],
        state=mr["state"],
        created_at=mr["created_at"],
        updated_at=mr["updated_at"],
        project_id=mr.get("project_id"),
        merged_at=mr.get("merged_at"),
        source_branch=mr.get("source_branch"),
        target_branch=mr.get("target_branch"),
        author=map_user_ref(mr.get("author")),
        assignee=map_user_ref(mr.get("assignee")),
        description=mr.get("description"),
        web_url=mr.get("web_url"),
        fresh=fresh,
    )


def _user_fields(user: dict, web_url: str | None) -> dict[str, Any]:
    return {
        "id": user["id"],
        "username": user["username"],
        "name": user["name"],
        "state": user.get("state", "active"),
        "web_url": web_url or user.get("web_url"),
        "avatar_url": user.get("avatar_url"),
        "created_at": user.get("created_at"),
        "email": user.get("email"),
        "public_email": user.get("public_email"),
        "bio": user.get("bio"),
        "location": user.get("location"),
        "organization": user.get("organization"),
        "is_admin": user.get("is_admin"),
        "last_activity_on": user.get("last_activity_on"),
        "last_sign_in_at": user.get("last_sign_in_at"),
    }


def map_user(user: dict, web_url: str | None = None) -> User:
    return User(**_user_fields(user, web_url))


def map_current_user(user: dict, web_url: str | None = None) -> CurrentUser:
    return CurrentUser(
        **_user_fields(user, web_url),
        private_profile=user.get("private_profile"),
        can_create_group=user.get("can_create_group"),
        can_create_project=user.get("can_create_project"),
        two_factor_enabled=user.get("two_factor_enabled"),
    )


def map_member(member: dict, web_url: str | None = None) -> Member:
    level = member["access_level"]
    return Member(
        id=member["id"],
        username=member["username"],
        name=member["name"],
        state=member.get("state", "active"),
        access_level=level,
        access_level_description=access_level_description(level),
        web_url=web_url or member.get("web_url"),
        expires_at=member.get("expires_at"),
    )


def map_pipeline(pipeline: dict) -> Pipeline:
    detailed = pipeline.get("detailed_status") or {}
    return Pipeline(
        id=pipeline["id"],
        status=pipeline["status"],
        ref=pipeline["ref"],
        sha=pipeline["sha"],
        iid=pipeline.get("iid"),
        project_id=pipeline.get("project_id"),
        source=pipeline.get("source"),
        web_url=pipeline.get("web_url"),
        created_at=pipeline.get("created_at"),
        updated_at=pipeline.get("updated_at"),
        started_at=pipeline.get("started_at"),
        finished_at=pipeline.get("finished_at"),
        duration=pipeline.get("duration"),
        queued_duration=pipeline.get("queued_duration"),
        coverage=pipeline.get("coverage"),
        user=map_user_ref(pipeline.get("user")),
        detailed_status=detailed.get("text"),
    )


def map_job(job: dict) -> Job:
    commit = job.get("commit") or {}
    pipeline = job.get("pipeline") or {}
    runner = job.get("runner") or {}
    return Job(
        id=job["id"],
        name=job["name"],
        stage=job["stage"],
        status=job["status"],
        ref=job.get("ref"),
        tag=bool(job.get("tag", False)),
        allow_failure=bool(job.get("allow_failure", False)),
        created_at=job.get("created_at"),
        started_at=job.get("started_at"),
        finished_at=job.get("finished_at"),
        duration=job.get("duration"),
        queued_duration=job.get("queued_duration"),
        coverage=job.get("coverage"),
        web_url=job.get("web_url"),
        pipeline_id=pipeline.get("id"),
        commit_sha=commit.get("id"),
        commit_title=commit.get("title"),
        user=map_user_ref(job.get("user")),
        runner_description=runner.get("description"),
        tag_list=tuple(job.get("tag_list") or ()),
    )


def map_commit_brief(commit: dict) -> CommitBrief:
    return CommitBrief(
        id=commit["id"],
        short_id=commit.get("short_id", commit["id"][:8]),
        title=commit.get("title", ""),
        author_name=commit.get("author_name"),
        created_at=commit.get("created_at"),
    )


def map_commit(commit: dict) -> Commit:
    stats = commit.get("stats") or {}
    last_pipeline = commit.get("last_pipeline") or {}
    return Commit(
        id=commit["id"],
        short_id=commit.get("short_id", commit["id"][:8]),
        title=commit.get("title", ""),
        message=commit.get("message"),
        author_name=commit.get("author_name"),
        author_email=commit.get("author_email"),
        authored_date=commit.get("authored_date"),
        committer_name=commit.get("committer_name"),
        committer_email=commit.get("committer_email"),
        committed_date=commit.get("committed_date"),
        created_at=commit.get("created_at"),
        parent_ids=tuple(commit.get("parent_ids") or ()),
        web_url=commit.get("web_url"),
        additions=stats.get("additions"),
        deletions=stats.get("deletions"),
        total=stats.get("total"),
        status=commit.get("status"),
        last_pipeline_id=last_pipeline.get("id"),
    )


def map_commit_status(status: dict) -> CommitStatus:
    return CommitStatus(
        id=status["id"],
        sha=status["sha"],
        name=status["name"],
        status=status["status"],
        ref=status.get("ref"),
        target_url=status.get("target_url"),
        description=status.get("description"),
        created_at=status.get("created_at"),
        started_at=status.get("started_at"),
        finished_at=status.get("finished_at"),
        allow_failure=status.get("allow_failure"),
        coverage=status.get("coverage"),
        pipeline_id=status.get("pipeline_id"),
        author=map_user_ref(status.get("author")),
    )


def map_diff_file_brief(diff_file: dict) -> DiffFileBrief:
    return DiffFileBrief(
        old_path=diff_file["old_path"],
        new_path=diff_file["new_path"],
        new_file=bool(diff_file.get("new_file", False)),
        renamed_file=bool(diff_file.get("renamed_file", False)),
        deleted_file=bool(diff_file.get("deleted_file", False)),
    )


def map_diff_file(diff_file: dict, include_diff: bool = False) -> DiffFile:
    """Full diff file record; the diff text itself only when include_diff."""
    return DiffFile(
        old_path=diff_file["old_path"],
        new_path=diff_file["new_path"],
        new_file=bool(diff_file.get("new_file", False)),
        renamed_file=bool(diff_file.get("renamed_file", False)),
        deleted_file=bool(diff_file.get("deleted_file", False)),
        a_mode=diff_file.get("a_mode"),
        b_mode=diff_file.get("b_mode"),
        generated_file=diff_file.get("generated_file"),
        diff=diff_file.get("diff") if include_diff else None,
    )


def map_pipeline_variable(variable: dict) -> PipelineVariable:
    return PipelineVariable(
        key=variable["key"],
        value=variable.get("value", ""),
        variable_type=variable.get("variable_type", "env_var"),
    )


def map_test_report(report: dict) -> TestReportSummary:
    return TestReportSummary(
        total_count=report.get("total_count", 0),
        success_count=report.get("success_count", 0),
        failed_count=report.get("failed_count", 0),
        skipped_count=report.get("skipped_count", 0),
        error_count=report.get("error_count", 0),
        total_time=report.get("total_time"),
        test_suites=list(report.get("test_suites") or []),
    )
