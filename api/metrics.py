"""Prometheus metrics for the notes REST API and HTTP bridge.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# Note operation metrics
# ---------------------------------------------------------------------------

NOTE_OPERATIONS = Counter(
    "notes_operations_total",
    "Total note store operations served over HTTP",
    ["operation", "status"],  # status: ok, not_found, invalid, error
)

NOTES_TOTAL = Gauge(
    "notes_total",
    "Number of notes in the store at the last listing",
)

# ---------------------------------------------------------------------------
# Bridge (JSON-RPC) metrics
# ---------------------------------------------------------------------------

BRIDGE_REQUESTS = Counter(
    "notes_bridge_requests_total",
    "Total JSON-RPC requests received by the bridge",
    ["method", "status"],  # status: ok, error
)

BRIDGE_TOOL_DURATION = Histogram(
    "notes_bridge_tool_duration_seconds",
    "Duration of bridge tool calls in seconds",
    ["tool_name"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0),
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "notes_http_requests_total",
    "Total HTTP requests",
    ["app", "method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "notes_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["app", "endpoint"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0, 15.0),
)
