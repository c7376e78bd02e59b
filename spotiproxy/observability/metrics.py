from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

UPSTREAM_REQUESTS = Counter(
    "spotiproxy_upstream_requests_total",
    "Calls made to the Spotify accounts service and Web API.",
    ["operation", "outcome"],
)
UPSTREAM_LATENCY = Histogram(
    "spotiproxy_upstream_request_seconds",
    "Latency of calls made to Spotify.",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, float("inf")),
)
TOKEN_REFRESHES = Counter(
    "spotiproxy_token_refresh_total",
    "Access token refresh attempts.",
    ["trigger", "outcome"],
)


@contextmanager
def observe_upstream_call(operation: str) -> Iterator[None]:
    """Time an upstream call and count it as ``success`` or ``error``."""
    started = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "success"
    finally:
        UPSTREAM_LATENCY.labels(operation=operation).observe(time.perf_counter() - started)
        UPSTREAM_REQUESTS.labels(operation=operation, outcome=outcome).inc()


def record_token_refresh(trigger: str, outcome: str) -> None:
    TOKEN_REFRESHES.labels(trigger=trigger, outcome=outcome).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
