"""
In-process request metrics for the /api/health endpoint.

Keeps the most recent N request outcomes in a fixed-size FIFO and computes
aggregates over that window only (last N requests, not a time window).
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class RequestMetric:
    method: str
    path: str
    status_code: int
    duration_ms: int
    client_ip: str
    user_agent: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PerformanceMonitor:
    """
    Bounded ring buffer of request metrics.

    Args:
        capacity: Maximum number of metrics retained; oldest dropped first
        slow_threshold_ms: Default threshold for slow_requests()
    """

    def __init__(self, capacity: int = 1000, slow_threshold_ms: int = 1000):
        self.capacity = capacity
        self.slow_threshold_ms = slow_threshold_ms
        self._metrics: deque[RequestMetric] = deque(maxlen=capacity)

    def record(self, metric: RequestMetric) -> None:
        self._metrics.append(metric)

    def metrics(self) -> list[RequestMetric]:
        """Retained metrics, oldest first."""
        return list(self._metrics)

    def average_latency(self) -> float:
        if not self._metrics:
            return 0
        return sum(m.duration_ms for m in self._metrics) / len(self._metrics)

    def error_rate(self) -> float:
        """Percentage (0-100) of retained requests with status >= 400."""
        if not self._metrics:
            return 0
        errors = sum(1 for m in self._metrics if m.status_code >= 400)
        return errors / len(self._metrics) * 100

    def slow_requests(self, threshold_ms: Optional[int] = None) -> list[RequestMetric]:
        threshold = self.slow_threshold_ms if threshold_ms is None else threshold_ms
        return [m for m in self._metrics if m.duration_ms > threshold]

    def summary(self) -> dict[str, Any]:
        return {
            "totalRequests": len(self._metrics),
            "averageResponseTime": self.average_latency(),
            "errorRate": self.error_rate(),
            "slowRequests": len(self.slow_requests()),
        }
