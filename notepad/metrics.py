"""Prometheus metrics for the notepad service.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# Note store metrics
# ---------------------------------------------------------------------------

NOTE_OPERATIONS = Counter(
    "notepad_note_operations_total",
    "Note store operations",
    ["operation", "outcome"],  # outcome: applied, ignored, not_found
)

NOTES_TOTAL = Gauge(
    "notepad_notes",
    "Number of notes in the collection",
)

# ---------------------------------------------------------------------------
# Edit session metrics
# ---------------------------------------------------------------------------

CONTENT_COMMITS = Counter(
    "notepad_content_commits_total",
    "Debounced content commits issued by the edit session",
)

# ---------------------------------------------------------------------------
# Persistence metrics
# ---------------------------------------------------------------------------

PERSISTENCE_WRITES = Counter(
    "notepad_persistence_writes_total",
    "Snapshot writes to the key-value store",
    ["status"],  # ok, error
)

PERSISTENCE_LOADS = Counter(
    "notepad_persistence_loads_total",
    "Snapshot loads from the key-value store",
    ["status"],  # hydrated, empty, error
)

# ---------------------------------------------------------------------------
# Text utility metrics
# ---------------------------------------------------------------------------

TEXT_TRANSFORMS = Counter(
    "notepad_text_transforms_total",
    "Text utility invocations",
    ["operation"],
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "notepad_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "notepad_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)
