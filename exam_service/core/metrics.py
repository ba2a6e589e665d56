"""Application metrics (Prometheus client).

All metrics live here so there is one inventory of what the service
measures.  Modules import the metric they own and increment it at the
point of action.

HTTP traffic is measured by MetricsMiddleware; the exam-specific counters
below answer the questions the HTTP series can't:

  - How many submission attempts were turned away, and why?
      rate(exam_submissions_total{outcome="duplicate"}[5m])
    A spike of duplicates usually means a client retrying a submit that
    actually succeeded.

  - Is grading failing on broken question references?
      submission_gradings_total{result="integrity_error"}
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Submissions do one insert plus an optional grading pass; anything
    # past 1s means lock contention or a slow database.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Exam-specific metrics
# ---------------------------------------------------------------------------

SUBMISSION_ATTEMPTS = Counter(
    "exam_submissions_total",
    "Submission attempts by outcome",
    ["outcome"],  # accepted|duplicate|not_open|invalid
)

GRADING_OPERATIONS = Counter(
    "submission_gradings_total",
    "Grading passes by result",
    ["result"],  # graded|integrity_error
)
