"""Prometheus metric inventory for pkce-frontend.

Every metric the service exports is declared here; the modules that own
the behaviour import the one they need and update it in place.

  HTTP layer (MetricsMiddleware)
    http_requests_total, http_request_duration_seconds, http_active_requests

  Login flow (gateways)
    oauth_upstream_requests_total{call, outcome}
      call:    register | token | userinfo | update_name
      outcome: ok | http_error | transport_error | invalid_response

  Sessions (SessionStore)
    session_events_total{event}
      event: created | updated | deleted | expired
    sessions_active -- records currently held, expired-but-unread included
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics
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
    # Upper buckets cover a full upstream round-trip up to HTTP_TIMEOUT.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Outbound calls to the authorization / resource servers
# ---------------------------------------------------------------------------

UPSTREAM_REQUESTS = Counter(
    "oauth_upstream_requests_total",
    "Calls to the authorization and resource servers by outcome",
    ["call", "outcome"],
)

# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------

SESSION_EVENTS = Counter(
    "session_events_total",
    "Session store transitions",
    ["event"],
)

ACTIVE_SESSIONS = Gauge(
    "sessions_active",
    "Session records currently held in memory",
)
