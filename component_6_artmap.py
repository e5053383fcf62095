"""
component_6_artmap.py

Supervised ARTMAP with match tracking.

Two Fuzzy ART engines are coupled through a map field:
- ART_a clusters the inputs
- ART_b clusters the targets
- The map field associates each ART_a category with one ART_b category

Training one (input, target) pair:

1. ART_b learns the target -> category B
2. ART_a ranks its categories for the input; the cursor starts at the first
   candidate whose match fraction passes rho_a
3. Map field test: the candidate passes if it has no association or is
   already associated with B. On a pass the association is recorded, the
   candidate learns, and the call succeeds.
4. On a conflict rho_a is raised by vigilance_increment (capped at
   max_vigilance) and the cursor advances to the next candidate that passes
   the raised rho_a. With no candidate left a new ART_a category is created,
   which always passes the map field test.
5. After max_search_attempts map field tests the call gives up with
   SearchExhausted.
6. rho_a is reset to its starting value whatever the outcome.

Prediction runs ART_a only and follows its winner's association.

Author: VARTA Team
"""

import threading
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from component_1_vector_kernels import as_pattern
from component_5_resonance_data_structures import (
    ActivationResult,
    CapacityExceeded,
    NoMatch,
    SearchExhausted,
    Success,
    describe_result,
)
from component_5_resonance_engine import FuzzyARTEngine
from component_6_artmap_data_structures import (
    MapFieldPrediction,
    MatchTrackingStep,
    TrainingReport,
)
from component_6_map_field import MapField
from component_7_performance_tracker import PerformanceTracker
from component_8_logging_config import PerformanceLogger, get_logger
from infrastructure.interfaces import BaseResonanceNetwork
from varta_config import ARTMAPConfig
from varta_exceptions import InvalidConfigError, InvalidPatternError

logger = get_logger(__name__)

ARTMAPConfigLike = Union[ARTMAPConfig, Mapping[str, Any], None]


class ARTMAP(BaseResonanceNetwork):
    """
    Supervised dual-network ART classifier.

    Args:
        config: ARTMAPConfig or mapping (default: ARTMAPConfig())
        input_dimension: Optional fixed input length for ART_a
        target_dimension: Optional fixed target length for ART_b

    Example:
        with ARTMAP() as artmap:
            artmap.train([0.1, 0.2], [1.0, 0.0])
            artmap.train([0.1, 0.2], [0.0, 1.0])
            print(artmap.category_count())  # 2
    """

    def __init__(
        self,
        config: ARTMAPConfigLike = None,
        input_dimension: Optional[int] = None,
        target_dimension: Optional[int] = None,
    ):
        if config is None:
            config = ARTMAPConfig()
        elif isinstance(config, Mapping):
            config = ARTMAPConfig.from_dict(config)
        elif not isinstance(config, ARTMAPConfig):
            raise InvalidConfigError(
                "config must be an ARTMAPConfig or a mapping",
                parameter="config",
                value=type(config).__name__,
            )
        self.config: ARTMAPConfig = config

        self.art_a = FuzzyARTEngine(config.art_a_config, input_dimension, name="art_a")
        self.art_b = FuzzyARTEngine(config.art_b_config, target_dimension, name="art_b")
        self.map_field = MapField()

        self._initial_vigilance = config.initial_vigilance
        self._current_vigilance = self._initial_vigilance
        self._predict_config = config.art_a_config.with_vigilance(self._initial_vigilance)

        self._tracker = PerformanceTracker("artmap")
        # One training call at a time: B learn, A search and map field update
        self._train_lock = threading.RLock()
        self._closed = False

        logger.info(
            "ARTMAP initialized",
            extra={
                "map_vigilance": config.map_vigilance,
                "initial_vigilance": self._initial_vigilance,
                "vigilance_increment": config.vigilance_increment,
                "max_vigilance": config.max_vigilance,
                "max_search_attempts": config.max_search_attempts,
            },
        )

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def current_vigilance(self) -> float:
        """rho_a; differs from the baseline only while a training call runs."""
        return self._current_vigilance

    @property
    def baseline_vigilance(self) -> float:
        return self._initial_vigilance

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ========================================================================
    # Training
    # ========================================================================

    def train(self, input_pattern: Any, target_pattern: Any) -> ActivationResult:
        """
        Learns one input/target pair.

        Returns:
            Success(art_a_index, activation), CapacityExceeded from either
            side, or SearchExhausted

        Raises:
            InvalidPatternError, DimensionMismatchError, EngineClosedError
        """
        return self.train_with_report(input_pattern, target_pattern).result

    def train_with_report(
        self, input_pattern: Any, target_pattern: Any
    ) -> TrainingReport:
        """Like train(), but returns the full match tracking trace."""
        with self._tracker.timed("train"), self._train_lock:
            self._tracker.increment("training_calls")

            # Reject a bad input before ART_b learns anything
            input_values = as_pattern(input_pattern)
            if self.art_a.dimension is not None:
                self.art_a.encode(input_values)

            report = TrainingReport(
                result=NoMatch("not trained"),
                initial_vigilance=self._initial_vigilance,
                final_vigilance=self._initial_vigilance,
            )

            result_b = self.art_b.learn(target_pattern)
            if not isinstance(result_b, Success):
                report.result = result_b
                logger.warning(
                    "ART_b could not learn target",
                    extra={"result": describe_result(result_b)},
                )
                return report
            report.art_b_index = result_b.category_index

            try:
                self._match_track(input_values, result_b.category_index, report)
            finally:
                self._current_vigilance = self._initial_vigilance

            self._record_report(report)
            return report

    def _match_track(
        self, input_values: Any, art_b_index: int, report: TrainingReport
    ) -> None:
        cfg = self.config
        cfg_a = self.art_a.config
        rho_a = self._initial_vigilance
        self._current_vigilance = rho_a

        with self.art_a.write_lock():
            encoded = self.art_a.encode(input_values, fix_dimension=True)
            ranked = self.art_a.rank_encoded(encoded, cfg_a, use_cache=False)

            cursor = self._next_candidate(ranked, -1, rho_a)
            attempts = 0

            while True:
                if attempts >= cfg.max_search_attempts:
                    report.result = SearchExhausted(
                        attempts=attempts, final_vigilance=rho_a
                    )
                    report.final_vigilance = rho_a
                    self._tracker.increment("search_exhaustions")
                    logger.warning(
                        "Match tracking exhausted",
                        extra={"result": describe_result(report.result)},
                    )
                    return

                attempts += 1

                if cursor is None:
                    created = self.art_a.create_category(encoded, cfg_a)
                    if isinstance(created, CapacityExceeded):
                        report.result = created
                        report.final_vigilance = rho_a
                        return

                    report.steps.append(
                        MatchTrackingStep(
                            step=attempts,
                            vigilance=rho_a,
                            art_a_index=created.category_index,
                            activation=created.activation_value,
                            match_fraction=1.0,
                            map_consistent=True,
                            created=True,
                        )
                    )
                    report.was_new_mapping = self.map_field.associate(
                        created.category_index, art_b_index
                    )
                    report.result = created
                    report.art_a_index = created.category_index
                    report.final_vigilance = rho_a
                    return

                candidate = ranked[cursor]
                consistent = (
                    self.map_field.map_match(candidate.index, art_b_index)
                    >= cfg.map_vigilance
                )
                report.steps.append(
                    MatchTrackingStep(
                        step=attempts,
                        vigilance=rho_a,
                        art_a_index=candidate.index,
                        activation=candidate.activation,
                        match_fraction=candidate.match_fraction,
                        map_consistent=consistent,
                    )
                )

                if consistent:
                    report.was_new_mapping = self.map_field.associate(
                        candidate.index, art_b_index
                    )
                    report.result = self.art_a.resonate(
                        encoded, candidate.index, candidate.activation, cfg_a
                    )
                    report.art_a_index = candidate.index
                    report.final_vigilance = rho_a
                    return

                # Match tracking
                rho_a = min(rho_a + cfg.vigilance_increment, cfg.max_vigilance)
                self._current_vigilance = rho_a
                logger.debug(
                    "Map field conflict, raising vigilance",
                    extra={
                        "art_a_index": candidate.index,
                        "associated": self.map_field.lookup(candidate.index),
                        "target": art_b_index,
                        "vigilance": rho_a,
                    },
                )
                cursor = self._next_candidate(ranked, cursor, rho_a)

    @staticmethod
    def _next_candidate(
        ranked: Sequence[Any], after: int, vigilance: float
    ) -> Optional[int]:
        """Position of the first ranked candidate after `after` passing vigilance."""
        for position in range(after + 1, len(ranked)):
            if ranked[position].match_fraction >= vigilance:
                return position
        return None

    def _record_report(self, report: TrainingReport) -> None:
        mismatches = report.mismatches
        self._tracker.increment("total_search_depth", report.search_depth)
        if mismatches:
            self._tracker.increment("match_tracking_searches")
            self._tracker.increment("map_field_mismatches", mismatches)
        if report.was_new_mapping:
            self._tracker.increment("new_mappings")

    def fit(
        self, inputs: Iterable[Any], targets: Iterable[Any]
    ) -> List[ActivationResult]:
        """Trains on aligned sequences of inputs and targets, in order."""
        input_list = list(inputs)
        target_list = list(targets)
        if len(input_list) != len(target_list):
            raise InvalidPatternError(
                "inputs and targets must have the same length",
                context={"inputs": len(input_list), "targets": len(target_list)},
            )

        with PerformanceLogger(logger, "artmap.fit", size=len(input_list)):
            return [
                self.train(input_pattern, target_pattern)
                for input_pattern, target_pattern in zip(input_list, target_list)
            ]

    # ========================================================================
    # Prediction
    # ========================================================================

    def explain_prediction(self, input_pattern: Any) -> Optional[MapFieldPrediction]:
        """
        ART_a winner and its association, or None when either is missing.
        """
        result_a = self.art_a.predict(input_pattern, self._predict_config)
        if not isinstance(result_a, Success):
            return None
        if result_a.category_index not in self.map_field:
            return None
        art_b_index = self.map_field.lookup(result_a.category_index)
        return MapFieldPrediction(
            art_a_index=result_a.category_index,
            art_b_index=art_b_index,
            art_a_activation=result_a.activation_value,
        )

    def predict(self, input_pattern: Any) -> ActivationResult:
        """
        Predicts the ART_b category of an input. Never learns.

        Returns:
            Success(art_b_index, art_a_activation), or NoMatch
        """
        with self._tracker.timed("predict"):
            self._tracker.increment("prediction_calls")
            result_a = self.art_a.predict(input_pattern, self._predict_config)
            if not isinstance(result_a, Success):
                return result_a

            art_b_index = self.map_field.lookup(result_a.category_index)
            if art_b_index is None:
                return NoMatch(
                    f"ART_a category {result_a.category_index} has no association"
                )
            return Success(
                category_index=art_b_index, activation_value=result_a.activation_value
            )

    def predict_batch(self, inputs: Iterable[Any]) -> List[ActivationResult]:
        input_list = list(inputs)
        with PerformanceLogger(logger, "artmap.predict_batch", size=len(input_list)):
            return [self.predict(input_pattern) for input_pattern in input_list]

    # ========================================================================
    # Introspection
    # ========================================================================

    def category_count(self) -> int:
        """Number of ART_a categories."""
        return self.art_a.category_count()

    def categories_for_target(self, art_b_index: int) -> frozenset:
        return self.map_field.categories_for_target(art_b_index)

    def get_association(self, art_a_index: int) -> Optional[int]:
        return self.map_field.lookup(art_a_index)

    def get_association_usage_count(self, art_a_index: int) -> int:
        return self.map_field.usage_count(art_a_index)

    def get_statistics(self) -> dict:
        stats = self._tracker.get_statistics()
        counters = stats["counters"]
        training_calls = counters.get("training_calls", 0)
        total_depth = counters.get("total_search_depth", 0)
        return {
            "training_calls": training_calls,
            "prediction_calls": counters.get("prediction_calls", 0),
            "match_tracking_searches": counters.get("match_tracking_searches", 0),
            "map_field_mismatches": counters.get("map_field_mismatches", 0),
            "search_exhaustions": counters.get("search_exhaustions", 0),
            "new_mappings": counters.get("new_mappings", 0),
            "average_search_depth": total_depth / training_calls if training_calls else 0.0,
            "avg_train_time_ms": self._tracker.average_time_ms("train"),
            "avg_predict_time_ms": self._tracker.average_time_ms("predict"),
            "associations": len(self.map_field),
            "current_vigilance": self._current_vigilance,
            "art_a": self.art_a.get_statistics(),
            "art_b": self.art_b.get_statistics(),
        }

    def reset_statistics(self) -> None:
        self._tracker.reset()
        self.art_a.reset_statistics()
        self.art_b.reset_statistics()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def clear(self) -> None:
        with self._train_lock:
            self.art_a.clear()
            self.art_b.clear()
            removed = self.map_field.clear()
            self._current_vigilance = self._initial_vigilance
        logger.info("ARTMAP cleared", extra={"associations_removed": removed})

    def close(self) -> None:
        """Closes both engines. Idempotent."""
        with self._train_lock:
            if self._closed:
                return
            self._closed = True
        self.art_a.close()
        self.art_b.close()
        logger.info("ARTMAP closed")
