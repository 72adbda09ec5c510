"""Header-driven pagination for GitLab list endpoints.

GitLab paginates by page number and reports position through response
headers (X-Total, X-Total-Pages, X-Next-Page, X-Prev-Page). There is no
cursor in the body. Whether more results exist is decided only by the
X-Next-Page header: totals can be stale or omitted entirely (GitLab drops
them for large collections), so page < total_pages is never used.

Reference: https://docs.gitlab.com/ee/api/rest/#pagination
"""

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Generic, TypeVar

import httpx

from .errors import GitLabValidationError

__all__ = [
    "DEFAULT_PER_PAGE",
    "DIFF_PER_PAGE",
    "MAX_PER_PAGE",
    "Page",
    "PaginationInfo",
    "PaginationRequest",
    "extract_pagination",
    "normalize_headers",
]

T = TypeVar("T")
U = TypeVar("U")

# GitLab hard cap on per_page
MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 50
# Diff endpoints return large payloads per item
DIFF_PER_PAGE = 20

HEADER_TOTAL = "x-total"
HEADER_TOTAL_PAGES = "x-total-pages"
HEADER_NEXT_PAGE = "x-next-page"
HEADER_PREV_PAGE = "x-prev-page"

RawHeaders = httpx.Headers | Mapping[str, Any] | Iterable[tuple[str, Any]] | None
HeaderNumber = int | float


def normalize_headers(raw: RawHeaders) -> dict[str, str]:
    """Flatten response headers into a lower-cased key -> string map.

    Accepts httpx.Headers (repeated headers preserved via multi_items), plain
    mappings whose values may be strings or lists of strings, or an iterable
    of (key, value) pairs. Repeated values are joined with ", ". Never raises;
    None values are skipped.
    """
    if raw is None:
        return {}

    if isinstance(raw, httpx.Headers):
        items: Iterable[tuple[str, Any]] = raw.multi_items()
    elif isinstance(raw, Mapping):
        items = raw.items()
    else:
        items = raw

    collected: dict[str, list[str]] = {}
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            values = [str(v) for v in value if v is not None]
        else:
            values = [str(value)]
        collected.setdefault(str(key).lower(), []).extend(values)

    return {key: ", ".join(values) for key, values in collected.items()}


def _parse_header_number(headers: Mapping[str, str], name: str) -> HeaderNumber | None:
    """Read a numeric header; missing, empty, non-numeric or non-finite -> None.

    Integral values come back as int, other finite values as float.
    """
    raw = headers.get(name)
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


@dataclass(frozen=True)
class PaginationRequest:
    """Validated page/per_page pair sent as query parameters."""

    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise GitLabValidationError(
                f"Invalid page: {self.page!r} (must be an integer >= 1)", field="page"
            )
        if (
            isinstance(self.per_page, bool)
            or not isinstance(self.per_page, int)
            or not 1 <= self.per_page <= MAX_PER_PAGE
        ):
            raise GitLabValidationError(
                f"Invalid per_page: {self.per_page!r} (must be between 1 and {MAX_PER_PAGE})",
                field="per_page",
            )

    @classmethod
    def build(
        cls,
        page: int | None = None,
        per_page: int | None = None,
        default_per_page: int = DEFAULT_PER_PAGE,
    ) -> "PaginationRequest":
        """Apply defaults for omitted values, then validate."""
        return cls(
            page=1 if page is None else page,
            per_page=default_per_page if per_page is None else per_page,
        )

    def as_params(self) -> dict[str, int]:
        return {"page": self.page, "per_page": self.per_page}


@dataclass(frozen=True)
class PaginationInfo:
    """Position of a page within a result set, as reported by GitLab."""

    page: int
    per_page: int
    total: HeaderNumber | None = None
    total_pages: HeaderNumber | None = None
    next_page: HeaderNumber | None = None
    prev_page: HeaderNumber | None = None
    has_more: bool = False

    def to_dict(self, count: int | None = None) -> dict[str, Any]:
        data = asdict(self)
        if count is not None:
            data["count"] = count
        return data


def extract_pagination(
    headers: RawHeaders,
    requested_page: int,
    requested_per_page: int,
) -> PaginationInfo:
    """Build PaginationInfo from response headers and the requested page.

    Args:
        headers: Raw or already-normalized response headers
        requested_page: Page number that was requested
        requested_per_page: Page size that was requested

    Returns:
        PaginationInfo with absent headers left as None. has_more is True
        only when X-Next-Page is present and a finite number.
    """
    normalized = normalize_headers(headers)
    next_page = _parse_header_number(normalized, HEADER_NEXT_PAGE)

    return PaginationInfo(
        page=requested_page,
        per_page=requested_per_page,
        total=_parse_header_number(normalized, HEADER_TOTAL),
        total_pages=_parse_header_number(normalized, HEADER_TOTAL_PAGES),
        next_page=next_page,
        prev_page=_parse_header_number(normalized, HEADER_PREV_PAGE),
        has_more=next_page is not None,
    )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus its pagination descriptor."""

    data: list[T] = field(default_factory=list)
    pagination: PaginationInfo = field(default_factory=lambda: PaginationInfo(1, DEFAULT_PER_PAGE))

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        return Page(data=[fn(item) for item in self.data], pagination=self.pagination)

    def pagination_dict(self) -> dict[str, Any]:
        """Pagination descriptor with the item count of this page."""
        return self.pagination.to_dict(count=len(self.data))
