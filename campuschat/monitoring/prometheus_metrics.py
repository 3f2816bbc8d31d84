"""
Prometheus metrics module for the chat service.

Service timings are fed by the @measure_operation decorator; the realtime
layer reports delivery outcomes and live socket counts. Everything lives in
a private registry exposed at ``/metrics``.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "campuschat_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "campuschat_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "campuschat_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

chat_broadcast_deliveries_total = Counter(
    "campuschat_chat_broadcast_deliveries_total",
    "Realtime deliveries to room members by outcome",
    ["outcome"],  # delivered | failed
    registry=REGISTRY,
)

chat_ws_connections = Gauge(
    "campuschat_chat_ws_connections",
    "Number of open chat WebSocket connections",
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'MessageService')
            operation: Operation/method name (e.g., 'create_message')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_broadcast_delivery(outcome: str, count: int = 1) -> None:
        """Count deliveries to room members ('delivered' or 'failed')."""
        if count > 0:
            chat_broadcast_deliveries_total.labels(outcome=outcome).inc(count)

    @staticmethod
    def ws_connection_opened() -> None:
        chat_ws_connections.inc()

    @staticmethod
    def ws_connection_closed() -> None:
        chat_ws_connections.dec()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
