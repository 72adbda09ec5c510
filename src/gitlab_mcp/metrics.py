"""
Prometheus metrics definitions for the GitLab MCP server.

Counters and histograms for outbound GitLab API traffic and batch lookups.
Naming: snake_case, gitlab_ prefix. Exposition is left to the host process.
"""

from prometheus_client import Counter, Histogram

# ==============================================================================
# COUNTERS
# ==============================================================================

gitlab_requests_total = Counter(
    "gitlab_requests_total",
    "Total GitLab API requests",
    ["method", "resource", "status"],
    # status: HTTP status code as string, or "error" for transport failures
)

gitlab_request_failures_total = Counter(
    "gitlab_request_failures_total",
    "GitLab API requests that ended in a classified error",
    ["kind"],
    # kind: validation, permission, not_found, conflict, unprocessable,
    #       rate_limited, transport
)

gitlab_batch_lookups_total = Counter(
    "gitlab_batch_lookups_total",
    "Individual lookups performed by batch tools",
    ["outcome"],
    # outcome: resolved, not_found
)

# ==============================================================================
# HISTOGRAMS
# ==============================================================================

gitlab_request_duration_seconds = Histogram(
    "gitlab_request_duration_seconds",
    "GitLab API request latency",
    ["method", "resource"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
