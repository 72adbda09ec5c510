"""GitLab integration package.

Provides the async API gateway for the GitLab REST API v4, plus the pieces
it is built from: header-driven pagination, client-side namespace and diff
path filters, bounded batch lookups, SemVer tag planning, typed errors and
web deep links.
"""

from .batch import MAX_BATCH_SIZE, BatchResult, Fatal, NotFound, Resolved, resolve_batch
from .client import GitLabClient, parse_content_range
from .errors import (
    BatchSizeExceededError,
    GitLabClientError,
    GitLabConflictError,
    GitLabNotFoundError,
    GitLabPermissionError,
    GitLabRateLimitError,
    GitLabTransportError,
    GitLabUnprocessableError,
    GitLabValidationError,
    ReadOnlyModeError,
)
from .filters import filter_by_namespace, filter_diff_files
from .identifiers import Identifier, NamedId, NumericId, parse_identifier, parse_numeric_id
from .links import WebLinks
from .pagination import (
    DEFAULT_PER_PAGE,
    DIFF_PER_PAGE,
    MAX_PER_PAGE,
    Page,
    PaginationInfo,
    PaginationRequest,
    extract_pagination,
    normalize_headers,
)
from .versioning import TagVersionInfo, plan_next_tag, validate_tag_name

__all__ = [
    "BatchResult",
    "BatchSizeExceededError",
    "DEFAULT_PER_PAGE",
    "DIFF_PER_PAGE",
    "Fatal",
    "GitLabClient",
    "GitLabClientError",
    "GitLabConflictError",
    "GitLabNotFoundError",
    "GitLabPermissionError",
    "GitLabRateLimitError",
    "GitLabTransportError",
    "GitLabUnprocessableError",
    "GitLabValidationError",
    "Identifier",
    "MAX_BATCH_SIZE",
    "MAX_PER_PAGE",
    "NamedId",
    "NotFound",
    "NumericId",
    "Page",
    "PaginationInfo",
    "PaginationRequest",
    "ReadOnlyModeError",
    "Resolved",
    "TagVersionInfo",
    "WebLinks",
    "extract_pagination",
    "filter_by_namespace",
    "filter_diff_files",
    "normalize_headers",
    "parse_content_range",
    "parse_identifier",
    "parse_numeric_id",
    "plan_next_tag",
    "resolve_batch",
    "validate_tag_name",
]
