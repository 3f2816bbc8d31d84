from typing import Dict

from ._strict_base import StrictModel


class OperationMetrics(StrictModel):
    count: int
    avg_time: float
    min_time: float
    max_time: float
    total_time: float
    success_rate: float
    success_count: int
    failure_count: int


class ServicePerformanceResponse(StrictModel):
    """Per-service operation timings recorded since start or the last reset."""

    services: Dict[str, Dict[str, OperationMetrics]]


class MetricsResetResponse(StrictModel):
    success: bool
    message: str
