"""Prometheus metrics for API responses."""

from prometheus_client import Counter

api_responses_total = Counter(
    "api_responses_total",
    "Total API responses by operation and HTTP status",
    ["operation", "status"],
)

authorization_denials_total = Counter(
    "authorization_denials_total",
    "Requests refused by the access policy",
    ["operation", "kind"],
)


class PrometheusApiMetrics:
    """Prometheus-based API metrics implementation."""

    def record_response(self, operation: str, status_code: int) -> None:
        """Count one mapped response."""
        api_responses_total.labels(operation=operation, status=str(status_code)).inc()

    def inc_denial(self, operation: str, kind: str) -> None:
        """Count a not_found/forbidden refusal."""
        authorization_denials_total.labels(operation=operation, kind=kind).inc()
