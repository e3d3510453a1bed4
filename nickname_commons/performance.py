"""
Latency measurement for store-bound operations
"""
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar
from .constants import TimeConstants
from .logger import logger


T = TypeVar('T')


@dataclass
class PerformanceMetric:
    operation: str
    duration: float
    success: bool
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)


class PerformanceMonitor:
    """
    Records how long operations take and flags slow ones

    Only the most recent max_metrics measurements are kept.
    """

    def __init__(self, slow_threshold: float = TimeConstants.SLOW_OPERATION_THRESHOLD,
                 max_metrics: int = TimeConstants.MAX_STORED_METRICS,
                 clock: Callable[[], float] = time.perf_counter):
        self.slow_threshold = slow_threshold
        self._clock = clock
        self._metrics: Deque[PerformanceMetric] = deque(maxlen=max_metrics)

    def record(self, operation: str, duration: float, success: bool = True, **metadata) -> PerformanceMetric:
        metric = PerformanceMetric(operation, duration, success, metadata=metadata)
        self._metrics.append(metric)
        if duration > self.slow_threshold:
            logger.warning("Slow operation", operation=operation,
                           duration_ms=round(duration * 1000, 2), success=success, **metadata)
        return metric

    async def measure(self, operation: str, func: Callable[[], Awaitable[T]], **metadata) -> T:
        """Await func and record its duration, whether it succeeds or raises"""
        start = self._clock()
        success = False
        try:
            result = await func()
            success = True
            return result
        finally:
            self.record(operation, self._clock() - start, success, **metadata)

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetric]:
        if operation is None:
            return list(self._metrics)
        return [metric for metric in self._metrics if metric.operation == operation]

    def get_stats(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """
        Aggregate recorded measurements

        Returns:
            count, average/min/max duration in seconds and success rate;
            an empty dict when nothing has been recorded
        """
        metrics = self.get_metrics(operation)
        if not metrics:
            return {}

        durations = [metric.duration for metric in metrics]
        successes = sum(1 for metric in metrics if metric.success)
        return {
            'count': len(metrics),
            'average': sum(durations) / len(durations),
            'min': min(durations),
            'max': max(durations),
            'success_rate': successes / len(metrics),
        }

    def report(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation stats for every operation seen"""
        operations = sorted({metric.operation for metric in self._metrics})
        return {operation: self.get_stats(operation) for operation in operations}

    def clear(self) -> None:
        self._metrics.clear()
