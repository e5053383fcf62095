"""
component_7_performance_tracker.py

Performance tracking for the resonance engines.

Functions:
- Named event counters (learn/predict calls, categories created, cache hits, ...)
- Running timing statistics per operation (calls, average, maximum)
- Thread-safe snapshots for get_statistics()

Each engine owns one tracker. ARTMAP owns its own tracker for the
map field counters and reports the trackers of both sides next to it.

Author: VARTA Team
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from component_8_logging_config import get_logger

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class OperationTiming:
    """Timing statistics for one operation type"""

    operation: str
    calls: int = 0
    total_time_ms: float = 0.0
    avg_time_ms: float = 0.0
    max_time_ms: float = 0.0
    last_used: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)

    def record(self, duration_ms: float) -> None:
        self.calls += 1
        self.total_time_ms += duration_ms
        self.avg_time_ms = self.total_time_ms / self.calls
        if duration_ms > self.max_time_ms:
            self.max_time_ms = duration_ms
        self.last_used = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calls": self.calls,
            "total_time_ms": self.total_time_ms,
            "avg_time_ms": self.avg_time_ms,
            "max_time_ms": self.max_time_ms,
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }


# ============================================================================
# Performance Tracker
# ============================================================================


class PerformanceTracker:
    """
    Thread-safe counters and timings for one engine.

    Example:
        tracker = PerformanceTracker("art_a")
        with tracker.timed("learn"):
            ...
        tracker.increment("categories_created")
        stats = tracker.get_statistics()
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)
        self._timings: Dict[str, OperationTiming] = {}
        self._started_at = datetime.now()

    def increment(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[counter] += amount

    def get_counter(self, counter: str) -> int:
        with self._lock:
            return self._counters.get(counter, 0)

    def record_timing(self, operation: str, duration_ms: float) -> None:
        with self._lock:
            timing = self._timings.get(operation)
            if timing is None:
                timing = self._timings[operation] = OperationTiming(operation)
            timing.record(duration_ms)

    def average_time_ms(self, operation: str) -> float:
        with self._lock:
            timing = self._timings.get(operation)
            return timing.avg_time_ms if timing else 0.0

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """Records the wall time of the block, also when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_timing(operation, (time.perf_counter() - start) * 1000.0)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Returns a snapshot:
            {"name", "started_at", "counters": {...}, "timings": {op: {...}}}
        """
        with self._lock:
            return {
                "name": self.name,
                "started_at": self._started_at.isoformat(),
                "counters": dict(self._counters),
                "timings": {op: t.to_dict() for op, t in self._timings.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._started_at = datetime.now()
        logger.debug("Performance statistics reset", extra={"tracker": self.name})
