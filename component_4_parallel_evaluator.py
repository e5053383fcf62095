"""
component_4_parallel_evaluator.py

Partitioned evaluation of large category stores across a bounded thread pool.

The snapshot is split into contiguous index ranges, one per worker. Each
worker scores its range with the same kernels as the sequential path and
returns its candidates already sorted by (activation desc, index asc).
The partial lists are merged with heapq.merge on that same key, so the
final order depends only on the data, never on worker count or completion
order.

Workers only read the immutable snapshot. The pool is created lazily and
owned by one engine; close() shuts it down.

Author: VARTA Team
"""

import heapq
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple

from component_5_resonance_data_structures import RankedCandidate, rank_key
from component_8_logging_config import get_logger
from varta_exceptions import EngineClosedError

logger = get_logger(__name__)

RangeScorer = Callable[[int, int], List[RankedCandidate]]


def partition_ranges(count: int, parts: int) -> List[Tuple[int, int]]:
    """
    Splits [0, count) into at most `parts` contiguous, near-equal ranges.

    Example:
        partition_ranges(10, 3) -> [(0, 4), (4, 7), (7, 10)]
    """
    if count <= 0:
        return []
    parts = max(1, min(parts, count))
    base, extra = divmod(count, parts)
    ranges = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


class ParallelEvaluator:
    """
    Fixed-size worker pool for the Evaluate step.

    Attributes:
        parallelism_level: Number of worker threads
    """

    def __init__(self, parallelism_level: int, name: str = "varta-eval"):
        if parallelism_level < 1:
            raise ValueError(f"parallelism_level must be >= 1, got {parallelism_level}")

        self.parallelism_level = parallelism_level
        self.name = name
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._closed = False

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._closed:
                raise EngineClosedError(
                    f"ParallelEvaluator '{self.name}' is closed", engine_name=self.name
                )
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.parallelism_level,
                    thread_name_prefix=self.name,
                )
                logger.debug(
                    "Worker pool started",
                    extra={"pool": self.name, "workers": self.parallelism_level},
                )
            return self._executor

    def evaluate(
        self,
        count: int,
        score_range: RangeScorer,
        parts: Optional[int] = None,
    ) -> List[RankedCandidate]:
        """
        Scores all `count` categories and returns them fully ranked.

        Args:
            count: Number of categories in the snapshot
            score_range: Callable(start, stop) returning the sorted candidates
                of that index range
            parts: Number of partitions (default: parallelism_level)

        Returns:
            All candidates ordered by (activation desc, index asc)
        """
        ranges = partition_ranges(count, parts or self.parallelism_level)
        if len(ranges) <= 1:
            return score_range(0, count) if count else []

        executor = self._get_executor()
        futures = {
            executor.submit(score_range, start, stop): (start, stop)
            for start, stop in ranges
        }

        partials: List[List[RankedCandidate]] = []
        for future in as_completed(futures):
            # Exceptions from a worker propagate to the caller
            partials.append(future.result())

        return list(heapq.merge(*partials, key=rank_key))

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Shuts down the pool. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            executor, self._executor = self._executor, None

        if executor is not None:
            executor.shutdown(wait=True)
            logger.debug("Worker pool stopped", extra={"pool": self.name})
