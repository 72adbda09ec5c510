"""Client-side result filters.

GitLab has no query parameter for either of these, so both run on the
fetched page:

- namespace prefix whitelist for project listings
- exact-path include/exclude lists for diff files
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

__all__ = ["filter_by_namespace", "filter_diff_files"]

T = TypeVar("T")


def _project_path(project: Any) -> str:
    if isinstance(project, dict):
        return project.get("path_with_namespace") or ""
    return getattr(project, "path_with_namespace", "") or ""


def _diff_paths(diff_file: Any) -> tuple[str | None, str | None]:
    if isinstance(diff_file, dict):
        return diff_file.get("old_path"), diff_file.get("new_path")
    return getattr(diff_file, "old_path", None), getattr(diff_file, "new_path", None)


def filter_by_namespace(
    projects: Sequence[T],
    namespace_whitelist: Sequence[str],
    path_of: Callable[[T], str] = _project_path,
) -> list[T]:
    """Keep projects whose full path starts with any whitelisted prefix.

    An empty whitelist disables filtering: the input is returned as-is.
    Matching is plain string prefix, so "team" also admits "teamwork/x";
    use "team/" to restrict to one namespace.
    """
    if not namespace_whitelist:
        return list(projects)
    return [
        project
        for project in projects
        if any(path_of(project).startswith(prefix) for prefix in namespace_whitelist)
    ]


def filter_diff_files(
    files: Sequence[T],
    include_paths: Sequence[str] | None = None,
    exclude_paths: Sequence[str] | None = None,
    paths_of: Callable[[T], tuple[str | None, str | None]] = _diff_paths,
) -> list[T]:
    """Filter diff files by exact old/new path.

    A file survives when (include is empty or its old or new path is
    included) and (exclude is empty or neither path is excluded). Include is
    applied first; both are exact string equality.
    """
    include = set(include_paths or ())
    exclude = set(exclude_paths or ())
    if not include and not exclude:
        return list(files)

    result: list[T] = []
    for diff_file in files:
        paths = {p for p in paths_of(diff_file) if p}
        if include and not paths & include:
            continue
        if exclude and paths & exclude:
            continue
        result.append(diff_file)
    return result
