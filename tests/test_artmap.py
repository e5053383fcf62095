"""
tests/test_artmap.py

Test suite for supervised ARTMAP (component_6_artmap.py, component_6_map_field.py)

Tests:
1. Match tracking on a conflicting label
2. Skipping to the next ranked candidate
3. Search exhaustion
4. Capacity on either side
5. Validation before ART_b learns
6. Prediction and explanation
7. Map field bookkeeping
8. Statistics, clear and close

Author: VARTA Team
"""

import logging

import pytest

from component_5_resonance_data_structures import (
    CapacityExceeded,
    NoMatch,
    ResultKind,
    SearchExhausted,
    Success,
    describe_result,
)
from component_6_artmap import ARTMAP
from component_6_map_field import MapField
from varta_config import ARTConfig, ARTMAPConfig
from varta_exceptions import (
    DimensionMismatchError,
    EngineClosedError,
    InvalidConfigError,
    InvalidPatternError,
    SearchExhaustedError,
)

TARGET_X = [1.0, 0.0]
TARGET_Y = [0.0, 1.0]

# ==================== FIXTURES ====================


@pytest.fixture
def artmap():
    artmap = ARTMAP()
    yield artmap
    artmap.close()


def make_artmap(**overrides):
    return ARTMAP(ARTMAPConfig(**overrides))


# ==================== MATCH TRACKING ====================


class TestMatchTracking:
    def test_conflicting_label_creates_category(self, artmap):
        """Test 1: Same input, different label -> new ART_a category"""
        first = artmap.train([0.1, 0.2], TARGET_X)
        report = artmap.train_with_report([0.1, 0.2], TARGET_Y)

        assert first == Success(category_index=0, activation_value=1.0)
        assert report.result == Success(category_index=1, activation_value=1.0)
        assert report.art_b_index == 1
        assert report.search_depth == 2
        assert report.mismatches == 1
        assert report.steps[0].art_a_index == 0
        assert not report.steps[0].map_consistent
        assert report.steps[1].created
        assert report.initial_vigilance == pytest.approx(0.7)
        assert report.final_vigilance == pytest.approx(0.75)
        assert report.was_new_mapping
        assert artmap.category_count() == 2

    def test_repeated_pair_converges(self, artmap):
        """Test 1a: Retraining the same pair does not add categories"""
        for _ in range(5):
            result = artmap.train([0.3, 0.6], TARGET_X)
            assert result.category_index == 0

        assert artmap.category_count() == 1
        assert artmap.get_association_usage_count(0) == 5

    def test_vigilance_reset_after_training(self, artmap):
        """Test 1b: rho_a returns to its baseline after a search"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.train([0.1, 0.2], TARGET_Y)

        assert artmap.current_vigilance == pytest.approx(0.7)
        assert artmap.baseline_vigilance == pytest.approx(0.7)

    def test_prediction_after_conflict(self, artmap):
        """Test 1c: Tied duplicates resolve to the lower index"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.train([0.1, 0.2], TARGET_Y)

        result = artmap.predict([0.1, 0.2])

        assert isinstance(result, Success)
        assert result.category_index == 0

    def test_skip_to_next_candidate(self):
        """Test 2: A conflict advances to the next candidate passing raised rho"""
        with make_artmap(art_a_config=ARTConfig(vigilance=0.6)) as artmap:
            artmap.train([0.25], TARGET_X)
            artmap.train([0.75], TARGET_Y)
            report = artmap.train_with_report([0.5], TARGET_Y)

            assert isinstance(report.result, Success)
            assert report.result.category_index == 1
            assert report.result.activation_value == pytest.approx(0.75 / 1.001)
            assert [step.art_a_index for step in report.steps] == [0, 1]
            assert [step.map_consistent for step in report.steps] == [False, True]
            assert report.steps[1].vigilance == pytest.approx(0.65)
            assert not report.was_new_mapping
            assert artmap.category_count() == 2
            assert artmap.get_association_usage_count(1) == 2

    def test_candidate_matching_raised_vigilance_is_accepted(self):
        """Test 2b: A candidate whose match equals the raised rho_a resonates"""
        config = ARTMAPConfig(
            art_a_config=ARTConfig(vigilance=0.5), vigilance_increment=0.25
        )
        with ARTMAP(config) as artmap:
            artmap.train([0.25], TARGET_X)
            artmap.train([0.75], TARGET_Y)
            report = artmap.train_with_report([0.5], TARGET_Y)

            assert isinstance(report.result, Success)
            assert report.result.category_index == 1
            assert [step.art_a_index for step in report.steps] == [0, 1]
            assert [step.map_consistent for step in report.steps] == [False, True]
            assert report.steps[1].vigilance == 0.75
            assert report.steps[1].match_fraction == 0.75
            assert artmap.category_count() == 2

    def test_search_exhausted(self, caplog):
        """Test 3: max_search_attempts=1 gives up after the first conflict"""
        with make_artmap(max_search_attempts=1) as artmap:
            artmap.train([0.1, 0.2], TARGET_X)
            with caplog.at_level(logging.WARNING, logger="component_6_artmap"):
                result = artmap.train([0.1, 0.2], TARGET_Y)

            (warning,) = [
                r for r in caplog.records if r.getMessage() == "Match tracking exhausted"
            ]
            assert warning.extra_info["result"] == describe_result(result)

            assert isinstance(result, SearchExhausted)
            assert result.kind is ResultKind.SEARCH_EXHAUSTED
            assert result.attempts == 1
            assert result.final_vigilance == pytest.approx(0.75)
            assert artmap.category_count() == 1
            assert artmap.current_vigilance == pytest.approx(0.7)
            assert artmap.get_statistics()["search_exhaustions"] == 1
            with pytest.raises(SearchExhaustedError):
                result.unwrap()

    def test_vigilance_capped(self):
        """Test 3b: rho_a never exceeds max_vigilance"""
        config = ARTMAPConfig(vigilance_increment=0.5, max_vigilance=0.9)
        with ARTMAP(config) as artmap:
            artmap.train([0.1, 0.2], TARGET_X)
            report = artmap.train_with_report([0.1, 0.2], TARGET_Y)

            assert report.final_vigilance == pytest.approx(0.9)

    def test_baseline_above_art_a_vigilance(self):
        """Test 3c: Baseline vigilance raises the starting rho_a"""
        with make_artmap(baseline_vigilance=0.8) as artmap:
            assert artmap.current_vigilance == pytest.approx(0.8)


# ==================== CAPACITY & VALIDATION ====================


class TestCapacity:
    def test_art_a_full(self):
        """Test 4: Conflict with a full ART_a store"""
        config = ARTMAPConfig(art_a_config=ARTConfig(vigilance=0.7, max_categories=1))
        with ARTMAP(config) as artmap:
            artmap.train([0.1, 0.2], TARGET_X)
            result = artmap.train([0.1, 0.2], TARGET_Y)

            assert result == CapacityExceeded(max_categories=1, category_count=1)
            assert artmap.current_vigilance == pytest.approx(0.7)

    def test_art_b_full(self):
        """Test 4b: ART_b capacity failure is returned unchanged"""
        config = ARTMAPConfig(art_b_config=ARTConfig(vigilance=0.8, max_categories=1))
        with ARTMAP(config) as artmap:
            artmap.train([0.1, 0.2], TARGET_X)
            result = artmap.train([0.9, 0.9], TARGET_Y)

            assert isinstance(result, CapacityExceeded)
            assert artmap.category_count() == 1


class TestValidation:
    def test_invalid_input_leaves_art_b_untouched(self, artmap):
        """Test 5: Bad input is rejected before ART_b learns"""
        with pytest.raises(InvalidPatternError):
            artmap.train([1.5, 0.2], TARGET_X)

        assert artmap.art_b.category_count() == 0

    def test_dimension_mismatch_before_art_b(self, artmap):
        """Test 5b: Wrong input width is rejected before ART_b learns"""
        artmap.train([0.1, 0.2], TARGET_X)

        with pytest.raises(DimensionMismatchError):
            artmap.train([0.1, 0.2, 0.3], TARGET_Y)

        assert artmap.art_b.category_count() == 1

    def test_fit_length_mismatch(self, artmap):
        """Test 5c: fit() requires aligned sequences"""
        with pytest.raises(InvalidPatternError):
            artmap.fit([[0.1], [0.2]], [TARGET_X])

    def test_invalid_config(self):
        """Test 5d: Unsupported config objects are rejected"""
        with pytest.raises(InvalidConfigError):
            ARTMAP(config="strict")


# ==================== PREDICTION ====================


class TestPrediction:
    def test_predict_untrained(self, artmap):
        """Test 6: Untrained ARTMAP predicts NoMatch"""
        assert isinstance(artmap.predict([0.5, 0.5]), NoMatch)
        assert artmap.explain_prediction([0.5, 0.5]) is None

    def test_predict_never_learns(self, artmap):
        """Test 6b: predict() leaves both sides unchanged"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.predict([0.9, 0.9])

        assert artmap.category_count() == 1
        assert artmap.art_b.category_count() == 1

    def test_fit_and_predict_batch(self, artmap):
        """Test 6c: Separable classes are recovered"""
        inputs = [[0.1, 0.1], [0.15, 0.1], [0.9, 0.85], [0.85, 0.9]]
        targets = [TARGET_X, TARGET_X, TARGET_Y, TARGET_Y]

        results = artmap.fit(inputs, targets)
        predictions = artmap.predict_batch(inputs)

        assert all(r.is_success for r in results)
        assert [p.category_index for p in predictions] == [0, 0, 1, 1]

    def test_explain_prediction(self, artmap):
        """Test 6d: Explanation names both winners"""
        artmap.train([0.1, 0.2], TARGET_X)

        explanation = artmap.explain_prediction([0.1, 0.2])

        assert explanation.art_a_index == 0
        assert explanation.art_b_index == 0
        assert 0.0 < explanation.art_a_activation <= 1.0

    @pytest.mark.parametrize(
        "result, expected",
        [
            (Success(3, 0.5), "success: category 3 (activation 0.5000)"),
            (NoMatch(), "no match: no resonant category"),
            (
                CapacityExceeded(max_categories=4, category_count=4),
                "capacity exceeded: 4/4 categories in use",
            ),
            (
                SearchExhausted(attempts=2, final_vigilance=0.8),
                "search exhausted after 2 attempts (vigilance 0.800)",
            ),
        ],
    )
    def test_describe_result(self, result, expected):
        """Test 6e: One-line descriptions of every result kind"""
        assert describe_result(result) == expected

    def test_describe_unknown_result(self):
        """Test 6f: Non-result objects are rejected"""
        with pytest.raises(TypeError):
            describe_result("success")


# ==================== MAP FIELD ====================


class TestMapField:
    def test_associate_and_lookup(self):
        """Test 7: New associations and confirmations"""
        field = MapField()

        assert field.associate(0, 2)
        assert not field.associate(0, 2)
        assert field.lookup(0) == 2
        assert field.usage_count(0) == 2
        assert 0 in field
        assert len(field) == 1

    def test_map_match(self):
        """Test 7b: 1.0 when free or equal, 0.0 on conflict"""
        field = MapField()
        field.associate(0, 1)

        assert field.map_match(0, 1) == 1.0
        assert field.map_match(0, 2) == 0.0
        assert field.map_match(5, 2) == 1.0

    def test_reassociation_updates_reverse_index(self):
        """Test 7c: Reassigning moves the category between targets"""
        field = MapField()
        field.associate(0, 1)
        field.associate(3, 1)
        field.associate(0, 2)

        assert field.categories_for_target(1) == frozenset({3})
        assert field.categories_for_target(2) == frozenset({0})
        assert field.usage_count(0) == 1
        assert field.associations() == {0: 2, 3: 1}
        assert field.clear() == 2

    def test_categories_for_target(self, artmap):
        """Test 7d: Reverse lookup through ARTMAP"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.train([0.1, 0.2], TARGET_Y)

        assert artmap.categories_for_target(0) == frozenset({0})
        assert artmap.categories_for_target(1) == frozenset({1})
        assert artmap.get_association(1) == 1


# ==================== STATISTICS & LIFECYCLE ====================


class TestStatisticsAndLifecycle:
    def test_statistics(self, artmap):
        """Test 8: Counters of a run with one conflict"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.train([0.1, 0.2], TARGET_Y)
        artmap.predict([0.1, 0.2])

        stats = artmap.get_statistics()
        assert stats["training_calls"] == 2
        assert stats["prediction_calls"] == 1
        assert stats["match_tracking_searches"] == 1
        assert stats["map_field_mismatches"] == 1
        assert stats["new_mappings"] == 2
        assert stats["average_search_depth"] == pytest.approx(1.5)
        assert stats["associations"] == 2
        assert stats["art_a"]["category_count"] == 2
        assert stats["art_b"]["category_count"] == 2

        artmap.reset_statistics()
        assert artmap.get_statistics()["training_calls"] == 0

    def test_clear(self, artmap):
        """Test 8b: clear() empties both sides and the map field"""
        artmap.train([0.1, 0.2], TARGET_X)
        artmap.clear()

        assert artmap.category_count() == 0
        assert artmap.art_b.category_count() == 0
        assert artmap.get_association(0) is None
        assert isinstance(artmap.predict([0.1, 0.2]), NoMatch)

    def test_close(self):
        """Test 8c: close() closes both engines and is idempotent"""
        artmap = ARTMAP({"artAConfig": {"vigilance": 0.6}})
        artmap.close()
        artmap.close()

        assert artmap.is_closed
        assert artmap.art_a.is_closed and artmap.art_b.is_closed
        with pytest.raises(EngineClosedError):
            artmap.predict([0.1, 0.2])
