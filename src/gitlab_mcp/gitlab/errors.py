"""Typed errors raised by the GitLab API gateway.

Every failure surfaced to a caller is a GitLabClientError subclass carrying a
``kind`` (validation, permission, not_found, conflict, unprocessable,
rate_limited, transport), a human-readable message, and when known the HTTP
status code and the offending input field.
"""

from typing import Any

import httpx

__all__ = [
    "BatchSizeExceededError",
    "GitLabClientError",
    "GitLabConflictError",
    "GitLabNotFoundError",
    "GitLabPermissionError",
    "GitLabRateLimitError",
    "GitLabTransportError",
    "GitLabUnprocessableError",
    "GitLabValidationError",
    "ReadOnlyModeError",
    "error_from_response",
    "extract_error_message",
]


class GitLabClientError(Exception):
    """Base class for all gateway failures."""

    kind = "transport"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        field: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Structured failure handed back to tool callers."""
        return {
            "kind": self.kind,
            "message": self.message,
            "status_code": self.status_code,
            "field": self.field,
        }


class GitLabValidationError(GitLabClientError):
    """Malformed input; raised before any network call, or on HTTP 400."""

    kind = "validation"


class BatchSizeExceededError(GitLabValidationError):
    """Batch lookup called with more keys than allowed."""

    def __init__(self, size: int, maximum: int) -> None:
        self.size = size
        self.maximum = maximum
        super().__init__(
            f"Batch size {size} exceeds maximum of {maximum} items",
            field="keys",
        )


class GitLabPermissionError(GitLabClientError):
    """HTTP 401/403, or an operation refused locally for lack of capability."""

    kind = "permission"


class ReadOnlyModeError(GitLabPermissionError):
    """Mutating operation attempted while GITLAB_READ_ONLY is enabled."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation} is disabled in read-only mode. To enable it:\n"
            "1. Generate a GitLab token with 'api' scope\n"
            "2. Set GITLAB_READ_ONLY=false environment variable\n"
            "3. Ensure you have at least Developer role in the target project"
        )


class GitLabNotFoundError(GitLabClientError):
    """HTTP 404 or an empty lookup result."""

    kind = "not_found"


class GitLabConflictError(GitLabClientError):
    """HTTP 409, e.g. a tag with the same name already exists."""

    kind = "conflict"


class GitLabUnprocessableError(GitLabClientError):
    """HTTP 422, e.g. the ref to tag does not exist."""

    kind = "unprocessable"


class GitLabTransportError(GitLabClientError):
    """Network failure, timeout, server error or unexpected status."""

    kind = "transport"


class GitLabRateLimitError(GitLabTransportError):
    """HTTP 429. Not retried here; retry_after tells the caller how long to wait."""

    kind = "rate_limited"

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message, status_code=429)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


_STATUS_ERRORS: dict[int, type[GitLabClientError]] = {
    400: GitLabValidationError,
    401: GitLabPermissionError,
    403: GitLabPermissionError,
    404: GitLabNotFoundError,
    409: GitLabConflictError,
    422: GitLabUnprocessableError,
}

# Minimum capability named in permission failures that carry no specific hint
AUTH_HINT = "Authentication failed: check that GITLAB_TOKEN is valid and not expired"
READ_ACCESS_HINT = "Requires a token with read_api scope and at least Reporter access"
WRITE_ACCESS_HINT = "Requires a token with api scope and at least Developer access"


def extract_error_message(response: httpx.Response) -> str:
    """Pull GitLab's error text out of a response body.

    GitLab answers with {"message": ...} or {"error": ...}; message may be a
    string, list or a field->errors dict.
    """
    try:
        body = response.json() if response.content else {}
    except (ValueError, UnicodeDecodeError):
        return response.text
    if isinstance(body, dict):
        detail = body.get("message", body.get("error"))
        if isinstance(detail, dict):
            return "; ".join(
                f"{key}: {', '.join(map(str, value)) if isinstance(value, list) else value}"
                for key, value in detail.items()
            )
        if isinstance(detail, list):
            return "; ".join(map(str, detail))
        if detail is not None:
            return str(detail)
    return response.text


def error_from_response(
    response: httpx.Response,
    context: str,
    hints: dict[int, str] | None = None,
) -> GitLabClientError:
    """Classify a non-success response into a typed error.

    Args:
        response: The failed response
        context: What was being done, e.g. "GET /projects/42"
        hints: Per-status messages replacing the generic wording
               (e.g. the minimum role needed on 403). Without one, 401 and
               403 still name the token capability a GET or a write needs.

    Returns:
        The typed error; the caller raises it.
    """
    status = response.status_code
    detail = extract_error_message(response)

    if hints and status in hints:
        message = f"{hints[status]} ({detail})" if detail else hints[status]
    else:
        message = f"GitLab API error {status} on {context}: {detail}"
        if status == 401:
            message = f"{message}. {AUTH_HINT}"
        elif status == 403:
            access = READ_ACCESS_HINT if context.startswith("GET ") else WRITE_ACCESS_HINT
            message = f"{message}. {access}"

    if status == 429:
        retry_after_raw = response.headers.get("Retry-After")
        try:
            retry_after = float(retry_after_raw) if retry_after_raw else None
        except ValueError:
            retry_after = None
        return GitLabRateLimitError(message, retry_after=retry_after)

    error_cls = _STATUS_ERRORS.get(status, GitLabTransportError)
    return error_cls(message, status_code=status)
