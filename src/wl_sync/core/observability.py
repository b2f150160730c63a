"""三元组存储调用的 Prometheus 指标。"""
from __future__ import annotations

from prometheus_client import Counter, Histogram

TRIPLESTORE_REQUESTS = Counter(
    "wl_sync_triplestore_requests_total",
    "Triple-store update requests by HTTP status",
    ["operation", "status"],
)
TRIPLESTORE_FAILURES = Counter(
    "wl_sync_triplestore_failures_total",
    "Triple-store update failures by reason",
    ["operation", "reason"],
)
TRIPLESTORE_LATENCY = Histogram(
    "wl_sync_triplestore_request_seconds",
    "Triple-store update latency",
    ["operation"],
)


def observe_triplestore_response(operation: str, status_code: int, duration_seconds: float) -> None:
    """记录一次已收到响应的请求。"""

    TRIPLESTORE_REQUESTS.labels(operation=operation, status=str(status_code)).inc()
    TRIPLESTORE_LATENCY.labels(operation=operation).observe(duration_seconds)


def observe_triplestore_failure(operation: str, reason: str) -> None:
    """记录一次失败（非 200 或传输异常）。"""

    TRIPLESTORE_FAILURES.labels(operation=operation, reason=reason).inc()
