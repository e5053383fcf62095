"""
tests/test_vector_kernels.py

Tests for the Fuzzy ART vector kernels (component_1_vector_kernels.py)

Tests:
1. Complement coding layout and norm
2. Encoded vectors are read-only
3. Pattern validation (None, empty, 2-D, NaN, out of range, non-numeric)
4. Fuzzy AND and L1 norm
5. Activation and match fraction formulas
6. Scalar and batched kernels agree exactly
7. Vectorization thresholds

Author: VARTA Team
"""

import numpy as np
import pytest

from common.constants import EQUIVALENCE_TOLERANCE
from component_1_vector_kernels import (
    activation,
    as_pattern,
    batch_choice_and_match,
    choice_and_match,
    complement_code,
    complement_values,
    fuzzy_and,
    l1_norm,
    match_fraction,
    scalar_choice_and_match,
    should_vectorize,
)
from varta_config import ARTConfig
from varta_exceptions import InvalidPatternError

# ==================== FIXTURES ====================


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def weight_matrix(rng):
    """50 random categories over 8 features (16 encoded components)."""
    return np.asfortranarray(rng.random((50, 16)))


# ==================== COMPLEMENT CODING ====================


class TestComplementCode:
    """Tests for complement coding and pattern validation"""

    def test_layout(self):
        """Test 1: [x, 1 - x] layout"""
        encoded = complement_code([0.25, 0.5, 1.0])

        np.testing.assert_array_equal(encoded, [0.25, 0.5, 1.0, 0.75, 0.5, 0.0])
        assert encoded.dtype == np.float64

    def test_norm_equals_dimension(self, rng):
        """Test 1b: |[x, 1 - x]| is n"""
        pattern = rng.random(20)
        assert l1_norm(complement_code(pattern)) == pytest.approx(20.0)

    def test_read_only(self):
        """Test 2: Encoded vectors cannot be modified"""
        encoded = complement_code([0.2, 0.4])

        assert not encoded.flags.writeable
        with pytest.raises(ValueError):
            encoded[0] = 0.9

    def test_input_not_aliased(self):
        """Test 2b: Validated pattern is a private copy"""
        source = np.array([0.1, 0.2])
        values = as_pattern(source)
        source[0] = 0.9

        assert values[0] == 0.1

    @pytest.mark.parametrize(
        "pattern",
        [
            None,
            [],
            [[0.1, 0.2], [0.3, 0.4]],
            [0.1, float("nan")],
            [0.1, float("inf")],
            [0.5, 1.5],
            [-0.1, 0.5],
            ["a", "b"],
        ],
    )
    def test_invalid_patterns(self, pattern):
        """Test 3: Invalid patterns raise InvalidPatternError"""
        with pytest.raises(InvalidPatternError):
            complement_code(pattern)

    def test_boundaries_accepted(self):
        """Test 3b: 0 and 1 are valid values"""
        encoded = complement_code([0.0, 1.0])
        np.testing.assert_array_equal(encoded, [0.0, 1.0, 1.0, 0.0])

    def test_complement_values_of_validated_pattern(self):
        """Test 3c: complement_values skips validation but encodes identically"""
        values = as_pattern([0.25, 0.6])
        encoded = complement_values(values)

        np.testing.assert_array_equal(encoded, complement_code([0.25, 0.6]))
        assert not encoded.flags.writeable


# ==================== SCALAR KERNELS ====================


class TestScalarKernels:
    """Tests for fuzzy AND, norm, activation and match fraction"""

    def test_fuzzy_and(self):
        """Test 4: Component-wise minimum"""
        result = fuzzy_and(np.array([0.2, 0.9, 0.5]), np.array([0.4, 0.1, 0.5]))
        np.testing.assert_array_equal(result, [0.2, 0.1, 0.5])

    def test_l1_norm_sequential(self, rng):
        """Test 4b: L1 norm accumulates left to right"""
        values = rng.random(100)
        expected = 0.0
        for v in values.tolist():
            expected += v

        assert l1_norm(values) == expected
        assert l1_norm([1.0, 2.0, 3.0]) == 6.0

    def test_activation_identical_vectors(self):
        """Test 5: T = |I| / (alpha + |I|) when w == I"""
        encoded = complement_code([0.8, 0.2])

        assert activation(encoded, encoded, 0.001) == pytest.approx(2.0 / 2.001)
        assert match_fraction(encoded, encoded) == pytest.approx(1.0)

    def test_match_fraction_partial_overlap(self):
        """Test 5b: Match of (0.75, 0.25) against prototype (0.8, 0.2)"""
        encoded = complement_code([0.75, 0.25])
        weight = complement_code([0.8, 0.2])

        assert match_fraction(encoded, weight) == pytest.approx(0.95)
        assert activation(encoded, weight, 0.001) == pytest.approx(1.9 / 2.001)

    def test_choice_and_match_single_pass(self):
        """Test 5c: Combined kernel returns both values"""
        encoded = complement_code([0.5])
        weight = complement_code([0.25])

        t, m = choice_and_match(encoded, weight, 0.001, l1_norm(encoded))

        assert t == pytest.approx(0.75 / 1.001)
        assert m == pytest.approx(0.75)

    def test_activation_bounded(self, rng):
        """Test 5d: Activations and matches stay in [0, 1]"""
        for _ in range(50):
            encoded = complement_code(rng.random(6))
            weight = rng.random(12)
            t, m = choice_and_match(encoded, weight, 0.001, l1_norm(encoded))
            assert 0.0 <= t <= 1.0
            assert 0.0 <= m <= 1.0


# ==================== SCALAR / BATCHED EQUIVALENCE ====================


class TestBatchedEquivalence:
    """The batched kernel must reproduce the scalar kernel"""

    def test_exact_agreement(self, rng, weight_matrix):
        """Test 6: Bit-identical activations and matches"""
        encoded = complement_code(rng.random(8))
        norm = l1_norm(encoded)

        batch_t, batch_m = batch_choice_and_match(encoded, weight_matrix, 0.001, norm)
        scalar_t, scalar_m = scalar_choice_and_match(
            encoded, list(weight_matrix), 0.001, norm
        )

        assert batch_t.tolist() == scalar_t
        assert batch_m.tolist() == scalar_m

    def test_agreement_within_tolerance(self, rng, weight_matrix):
        """Test 6b: Differences stay below 1e-9 over many inputs"""
        for _ in range(20):
            encoded = complement_code(rng.random(8))
            norm = l1_norm(encoded)
            batch_t, _ = batch_choice_and_match(encoded, weight_matrix, 0.01, norm)
            scalar_t, _ = scalar_choice_and_match(encoded, list(weight_matrix), 0.01, norm)

            assert np.max(np.abs(batch_t - np.array(scalar_t))) < EQUIVALENCE_TOLERANCE

    def test_row_slice_matches_full_matrix(self, rng, weight_matrix):
        """Test 6c: Scoring a partition gives the same values as the full matrix"""
        encoded = complement_code(rng.random(8))
        norm = l1_norm(encoded)

        full_t, _ = batch_choice_and_match(encoded, weight_matrix, 0.001, norm)
        part_t, _ = batch_choice_and_match(encoded, weight_matrix[10:30], 0.001, norm)

        assert part_t.tolist() == full_t[10:30].tolist()

    def test_c_ordered_matrix(self, rng, weight_matrix):
        """Test 6d: Memory layout does not change results"""
        encoded = complement_code(rng.random(8))
        norm = l1_norm(encoded)

        fortran_t, _ = batch_choice_and_match(encoded, weight_matrix, 0.001, norm)
        c_t, _ = batch_choice_and_match(
            encoded, np.ascontiguousarray(weight_matrix), 0.001, norm
        )

        assert fortran_t.tolist() == c_t.tolist()


# ==================== VECTORIZATION THRESHOLDS ====================


class TestShouldVectorize:
    """Tests for kernel selection"""

    def test_thresholds(self):
        """Test 7: Both minimums must be reached"""
        config = ARTConfig(vectorization_min_dimension=8, vectorization_min_categories=16)

        assert should_vectorize(8, 16, config)
        assert not should_vectorize(6, 100, config)
        assert not should_vectorize(100, 15, config)

    def test_disabled(self):
        """Test 7b: enable_vectorization=False forces scalar"""
        config = ARTConfig(enable_vectorization=False)
        assert not should_vectorize(1000, 1000, config)
