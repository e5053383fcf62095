"""
component_5_resonance_engine.py

Fuzzy ART resonance search engine.

One learn/predict call runs the search as a small state machine:

1. Start:     validate and complement-code the pattern
2. Evaluate:  score every category (scalar, batched, or partitioned across
              the worker pool)
3. Rank:      order by (activation desc, index asc)
4. Vigilance: the first candidate with match_fraction >= rho resonates
5. Learn:     update the resonant category, or create a new one if none
              resonated and capacity allows

predict() stops after step 4 and never mutates. learn() holds the engine's
write lock from Rank to Learn, so concurrent learns are serialized while
predicts read immutable store snapshots without locking.

Author: VARTA Team
"""

import threading
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from component_1_vector_kernels import (
    as_pattern,
    batch_choice_and_match,
    complement_values,
    l1_norm,
    scalar_choice_and_match,
    should_vectorize,
)
from component_2_category_store import Category, CategorySnapshot, CategoryStore
from component_3_learning_rule import apply_learning_rule
from component_4_parallel_evaluator import ParallelEvaluator
from component_5_resonance_data_structures import (
    ActivationResult,
    CapacityExceeded,
    NoMatch,
    RankedCandidate,
    Success,
    rank_key,
)
from component_7_performance_tracker import PerformanceTracker
from component_8_logging_config import PerformanceLogger, get_logger
from infrastructure.cache_manager import ActivationCache, fingerprint
from infrastructure.interfaces import BaseResonanceNetwork
from varta_config import ARTConfig
from varta_exceptions import (
    DimensionMismatchError,
    EngineClosedError,
    InvalidConfigError,
)

logger = get_logger(__name__)

ConfigLike = Union[ARTConfig, Mapping[str, Any], None]


class FuzzyARTEngine(BaseResonanceNetwork):
    """
    Unsupervised Fuzzy ART network.

    Args:
        config: Engine configuration (default: ARTConfig())
        dimension: Pattern length n. If omitted it is fixed by the first
            learn() and released again by clear().
        name: Name used in logs, statistics and worker thread names

    Example:
        with FuzzyARTEngine(ARTConfig(vigilance=0.8)) as engine:
            engine.learn([0.8, 0.2])
            result = engine.predict([0.75, 0.25])
            if result.is_success:
                print(result.category_index)
    """

    def __init__(
        self,
        config: ConfigLike = None,
        dimension: Optional[int] = None,
        name: str = "art",
    ):
        self.config = self._coerce_config(config) or ARTConfig()
        if dimension is not None and (
            isinstance(dimension, bool) or not isinstance(dimension, int) or dimension < 1
        ):
            raise InvalidConfigError(
                "dimension must be a positive integer", parameter="dimension", value=dimension
            )

        self.name = name
        self._dimension: Optional[int] = dimension
        self._dimension_inferred = dimension is None

        self._store = CategoryStore(self.config.max_categories)
        self._cache = ActivationCache(name, self.config.max_cache_size)
        self._evaluator = ParallelEvaluator(
            self.config.parallelism_level, name=f"varta-{name}"
        )
        self._tracker = PerformanceTracker(name)

        # Serializes Rank -> Learn of concurrent learns
        self._write_lock = threading.RLock()
        self._closed = False

        logger.info(
            "FuzzyARTEngine initialized",
            extra={
                "engine": name,
                "vigilance": self.config.vigilance,
                "learning_rate": self.config.learning_rate,
                "max_categories": self.config.max_categories,
                "dimension": dimension,
            },
        )

    # ========================================================================
    # Properties & Helpers
    # ========================================================================

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def total_activations(self) -> int:
        """Number of successful learns (resonant updates plus creations)."""
        return self._tracker.get_counter("successful_learns")

    @property
    def store_version(self) -> int:
        return self._store.version

    def write_lock(self) -> threading.RLock:
        """The engine's write lock, for callers composing several writes."""
        return self._write_lock

    @staticmethod
    def _coerce_config(config: ConfigLike) -> Optional[ARTConfig]:
        if config is None or isinstance(config, ARTConfig):
            return config
        if isinstance(config, Mapping):
            return ARTConfig.from_dict(config)
        raise InvalidConfigError(
            "config must be an ARTConfig or a mapping",
            parameter="config",
            value=type(config).__name__,
        )

    def resolve_config(self, config: ConfigLike = None) -> ARTConfig:
        """Per-call config, falling back to the engine config."""
        return self._coerce_config(config) or self.config

    def _ensure_open(self) -> None:
        if self._closed:
            raise EngineClosedError(
                f"Engine '{self.name}' is closed", engine_name=self.name
            )

    def _check_dimension(self, values: np.ndarray, fix: bool) -> None:
        actual = values.shape[0]
        if self._dimension is None:
            if fix:
                self._dimension = actual
                logger.debug(
                    "Dimension fixed by first pattern",
                    extra={"engine": self.name, "dimension": actual},
                )
            return
        if actual != self._dimension:
            raise DimensionMismatchError(
                f"Pattern has {actual} features, engine '{self.name}' expects {self._dimension}",
                expected=self._dimension,
                actual=actual,
            )

    def encode(self, pattern: Any, fix_dimension: bool = False) -> np.ndarray:
        """
        Validates a pattern against the engine and complement-codes it.

        Args:
            pattern: Sequence of n values in [0, 1]
            fix_dimension: Adopt the pattern length if no dimension is set yet
                (callers must hold the write lock)

        Raises:
            InvalidPatternError: Malformed pattern
            DimensionMismatchError: Length differs from the engine dimension
        """
        values = as_pattern(pattern)
        self._check_dimension(values, fix_dimension)
        return complement_values(values)

    # ========================================================================
    # Evaluate & Rank
    # ========================================================================

    def _score_range(
        self,
        snapshot: CategorySnapshot,
        encoded: np.ndarray,
        input_norm: float,
        cfg: ARTConfig,
        start: int,
        stop: int,
    ) -> List[RankedCandidate]:
        """Scores categories [start, stop) and returns them sorted."""
        count = stop - start
        if should_vectorize(encoded.shape[0], count, cfg):
            activations, matches = batch_choice_and_match(
                encoded, snapshot.weight_matrix[start:stop], cfg.alpha, input_norm
            )
            activations, matches = activations.tolist(), matches.tolist()
            self._tracker.increment("vectorized_evaluations")
        else:
            activations, matches = scalar_choice_and_match(
                encoded, snapshot.weight_lists[start:stop], cfg.alpha, input_norm
            )
            self._tracker.increment("scalar_evaluations")

        candidates = [
            RankedCandidate(start + i, t, m)
            for i, (t, m) in enumerate(zip(activations, matches))
        ]
        candidates.sort(key=rank_key)
        return candidates

    def rank_encoded(
        self,
        encoded: np.ndarray,
        cfg: ARTConfig,
        snapshot: Optional[CategorySnapshot] = None,
        use_cache: bool = True,
    ) -> Tuple[RankedCandidate, ...]:
        """
        Evaluate and Rank steps for an already encoded input.

        Returns:
            All categories of the snapshot ordered by (activation desc, index asc)
        """
        snapshot = snapshot if snapshot is not None else self._store.snapshot()
        count = len(snapshot)
        if count == 0:
            return ()

        key = encoded_bytes = None
        if use_cache and self._cache.enabled:
            key = fingerprint(encoded, cfg.alpha)
            encoded_bytes = encoded.tobytes()
            cached = self._cache.get(key, encoded_bytes, snapshot.version)
            if cached is not None:
                self._tracker.increment("cache_hits")
                return cached
            self._tracker.increment("cache_misses")

        input_norm = l1_norm(encoded)

        def score_range(start: int, stop: int) -> List[RankedCandidate]:
            return self._score_range(snapshot, encoded, input_norm, cfg, start, stop)

        if count > cfg.parallel_threshold and cfg.parallelism_level > 1:
            ranked = tuple(
                self._evaluator.evaluate(count, score_range, parts=cfg.parallelism_level)
            )
            self._tracker.increment("parallel_evaluations")
        else:
            ranked = tuple(score_range(0, count))

        if key is not None:
            self._cache.set(key, encoded_bytes, snapshot.version, ranked)
        return ranked

    def rank_candidates(
        self, pattern: Any, config: ConfigLike = None
    ) -> List[RankedCandidate]:
        """
        Scores a pattern against every category without learning.

        Returns:
            Candidates ordered by (activation desc, index asc); empty when no
            categories exist
        """
        self._ensure_open()
        cfg = self.resolve_config(config)
        if self._dimension is None:
            as_pattern(pattern)
            return []
        return list(self.rank_encoded(self.encode(pattern), cfg))

    # ========================================================================
    # Learn
    # ========================================================================

    def resonate(
        self,
        encoded: np.ndarray,
        index: int,
        activation_value: float,
        config: ConfigLike = None,
    ) -> Success:
        """
        Applies the learning rule to an existing category.

        The caller is expected to have found `index` via rank_encoded() on the
        current snapshot while holding the write lock.
        """
        cfg = self.resolve_config(config)
        with self._write_lock:
            old = self._store.get(index)
            updated = apply_learning_rule(encoded, old.weight, cfg.learning_rate)
            category = self._store.replace_weight(index, updated)
            self._cache.invalidate()
            self._tracker.increment("successful_learns")

        logger.debug(
            "Category updated",
            extra={
                "engine": self.name,
                "category_index": index,
                "activation": activation_value,
                "usage_count": category.usage_count,
            },
        )
        return Success(category_index=index, activation_value=activation_value)

    def create_category(
        self, encoded: np.ndarray, config: ConfigLike = None
    ) -> Union[Success, CapacityExceeded]:
        """
        Appends a category initialized to the encoded input.

        Returns:
            Success(new_index, 1.0), or CapacityExceeded when the store is full
        """
        cfg = self.resolve_config(config)
        with self._write_lock:
            limit = min(self._store.max_categories, cfg.max_categories)
            if not self._store.has_capacity(limit):
                self._tracker.increment("capacity_rejections")
                logger.warning(
                    "Category capacity reached",
                    extra={
                        "engine": self.name,
                        "max_categories": limit,
                        "category_count": self._store.count,
                    },
                )
                return CapacityExceeded(
                    max_categories=limit, category_count=self._store.count
                )

            # I ^ I = I, so the learning rule leaves a new weight unchanged
            category = self._store.append(np.array(encoded, dtype=np.float64), limit)
            self._cache.invalidate()
            self._tracker.increment("categories_created")
            self._tracker.increment("successful_learns")

        logger.debug(
            "Category created",
            extra={
                "engine": self.name,
                "category_index": category.index,
                "category_count": category.index + 1,
            },
        )
        return Success(category_index=category.index, activation_value=1.0)

    def learn(self, pattern: Any, config: ConfigLike = None) -> ActivationResult:
        """
        Presents one pattern and learns it.

        Returns:
            Success with the resonant or newly created category, or
            CapacityExceeded if nothing resonated and the store is full

        Raises:
            InvalidPatternError, DimensionMismatchError, EngineClosedError
        """
        self._ensure_open()
        cfg = self.resolve_config(config)

        with self._tracker.timed("learn"), self._write_lock:
            self._ensure_open()
            self._tracker.increment("learn_calls")
            encoded = self.encode(pattern, fix_dimension=True)
            snapshot = self._store.snapshot()

            for candidate in self.rank_encoded(encoded, cfg, snapshot, use_cache=False):
                if candidate.match_fraction >= cfg.vigilance:
                    return self.resonate(encoded, candidate.index, candidate.activation, cfg)

            logger.debug(
                "No resonant category",
                extra={
                    "engine": self.name,
                    "vigilance": cfg.vigilance,
                    "category_count": len(snapshot),
                },
            )
            return self.create_category(encoded, cfg)

    def learn_batch(
        self, patterns: Iterable[Any], config: ConfigLike = None
    ) -> List[ActivationResult]:
        """Learns patterns in order. Stops at the first precondition error."""
        self._ensure_open()
        pattern_list = list(patterns)
        with PerformanceLogger(
            logger, f"{self.name}.learn_batch", size=len(pattern_list)
        ):
            return [self.learn(pattern, config) for pattern in pattern_list]

    # ========================================================================
    # Predict
    # ========================================================================

    def predict(self, pattern: Any, config: ConfigLike = None) -> ActivationResult:
        """
        Classifies a pattern without learning.

        Returns:
            Success with the first ranked category passing vigilance, else NoMatch
        """
        self._ensure_open()
        cfg = self.resolve_config(config)

        with self._tracker.timed("predict"):
            self._tracker.increment("predict_calls")
            snapshot = self._store.snapshot()

            if len(snapshot) == 0:
                values = as_pattern(pattern)
                if self._dimension is not None:
                    self._check_dimension(values, fix=False)
                return NoMatch("category store is empty")

            encoded = self.encode(pattern)
            for candidate in self.rank_encoded(encoded, cfg, snapshot):
                if candidate.match_fraction >= cfg.vigilance:
                    return Success(
                        category_index=candidate.index,
                        activation_value=candidate.activation,
                    )

            return NoMatch(f"no category passed vigilance {cfg.vigilance}")

    def predict_batch(
        self, patterns: Iterable[Any], config: ConfigLike = None
    ) -> List[ActivationResult]:
        self._ensure_open()
        pattern_list = list(patterns)
        with PerformanceLogger(
            logger, f"{self.name}.predict_batch", size=len(pattern_list)
        ):
            return [self.predict(pattern, config) for pattern in pattern_list]

    # ========================================================================
    # Introspection
    # ========================================================================

    def category_count(self) -> int:
        return self._store.count

    def get_category(self, index: int) -> Category:
        """
        Raises:
            CategoryNotFoundError: Unknown index
        """
        return self._store.get(index)

    def categories(self) -> Sequence[Category]:
        """All categories of the current snapshot, ordered by index."""
        return self._store.snapshot().categories

    def get_category_usage_count(self, index: int) -> int:
        return self._store.get(index).usage_count

    def get_statistics(self) -> dict:
        stats = self._tracker.get_statistics()
        counters = stats["counters"]
        return {
            "name": self.name,
            "category_count": self.category_count(),
            "dimension": self._dimension,
            "total_activations": counters.get("successful_learns", 0),
            "learn_calls": counters.get("learn_calls", 0),
            "predict_calls": counters.get("predict_calls", 0),
            "categories_created": counters.get("categories_created", 0),
            "capacity_rejections": counters.get("capacity_rejections", 0),
            "scalar_evaluations": counters.get("scalar_evaluations", 0),
            "vectorized_evaluations": counters.get("vectorized_evaluations", 0),
            "parallel_evaluations": counters.get("parallel_evaluations", 0),
            "cache_hits": counters.get("cache_hits", 0),
            "cache_misses": counters.get("cache_misses", 0),
            "store_version": self.store_version,
            "avg_learn_time_ms": self._tracker.average_time_ms("learn"),
            "avg_predict_time_ms": self._tracker.average_time_ms("predict"),
            "cache": self._cache.get_stats(),
            "config": self.config.to_dict(),
        }

    def reset_statistics(self) -> None:
        self._tracker.reset()
        self._cache.reset_statistics()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def clear(self) -> None:
        """Removes all categories. An inferred dimension is released."""
        self._ensure_open()
        with self._write_lock:
            removed = self._store.clear()
            self._cache.invalidate()
            if self._dimension_inferred:
                self._dimension = None

        logger.info(
            "Engine cleared", extra={"engine": self.name, "categories_removed": removed}
        )

    def close(self) -> None:
        """Shuts down the worker pool and drops the cache. Idempotent."""
        with self._write_lock:
            if self._closed:
                return
            self._closed = True

        self._evaluator.close()
        self._cache.close()
        logger.info(
            "Engine closed",
            extra={"engine": self.name, "category_count": self.category_count()},
        )
