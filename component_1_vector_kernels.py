"""
component_1_vector_kernels.py

Numeric kernels of the Fuzzy ART resonance search.

All functions are pure. Two evaluation paths exist:

- Scalar: one category at a time (choice_and_match)
- Batched: all categories of a snapshot at once (batch_choice_and_match),
  operating on a column-major (k, 2n) weight matrix

Both paths accumulate |I ^ w| and |w| component by component in index
order and then divide, so for the same inputs they return bit-identical
activations and match fractions. numpy's own sum/dot reductions use
pairwise summation and are deliberately not used for norms here.

Formulas:
    complement_code(x) = [x, 1 - x]
    activation T_j     = |I ^ w_j| / (alpha + |w_j|)
    match_fraction M_j = |I ^ w_j| / |I|

Author: VARTA Team
"""

from typing import Any, List, Sequence, Tuple

import numpy as np

from varta_exceptions import InvalidPatternError, wrap_exception


# ============================================================================
# Pattern Handling
# ============================================================================


def as_pattern(pattern: Any) -> np.ndarray:
    """
    Validates a raw input pattern and returns it as a read-only float64 vector.

    Args:
        pattern: Sequence or array of n values in [0, 1]

    Returns:
        1-D float64 array (a private, read-only copy)

    Raises:
        InvalidPatternError: None, empty, not 1-D, not numeric, NaN/inf, or
            any value outside [0, 1]
    """
    if pattern is None:
        raise InvalidPatternError("Pattern must not be None")

    try:
        values = np.array(pattern, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise wrap_exception(e, InvalidPatternError, "Pattern is not numeric") from e

    if values.ndim != 1:
        raise InvalidPatternError(
            "Pattern must be one-dimensional", pattern_shape=values.shape
        )
    if values.size == 0:
        raise InvalidPatternError("Pattern must not be empty", pattern_shape=values.shape)
    if not np.all(np.isfinite(values)):
        raise InvalidPatternError(
            "Pattern contains NaN or infinite values", pattern_shape=values.shape
        )
    if values.min() < 0.0 or values.max() > 1.0:
        raise InvalidPatternError(
            "Pattern values must lie in [0, 1]",
            pattern_shape=values.shape,
            context={"min": float(values.min()), "max": float(values.max())},
        )

    values.setflags(write=False)
    return values


def complement_code(pattern: Any) -> np.ndarray:
    """
    Complement-codes a pattern: [x, 1 - x].

    The result has length 2n and an L1 norm of (numerically) n for any
    valid input.
    """
    return complement_values(as_pattern(pattern))


def complement_values(values: np.ndarray) -> np.ndarray:
    """[x, 1 - x] of an already validated vector, returned read-only."""
    encoded = np.concatenate((values, 1.0 - values))
    encoded.setflags(write=False)
    return encoded


# ============================================================================
# Scalar Kernels
# ============================================================================


def fuzzy_and(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Component-wise minimum of two equally sized vectors."""
    return np.minimum(a, b)


def l1_norm(vector: Sequence[float]) -> float:
    """Sum of components, accumulated left to right."""
    values = vector.tolist() if isinstance(vector, np.ndarray) else vector
    total = 0.0
    for v in values:
        total += v
    return total


def choice_and_match(
    encoded: Sequence[float],
    weight: Sequence[float],
    alpha: float,
    input_norm: float,
) -> Tuple[float, float]:
    """
    Scalar activation and match fraction of one category in a single pass.

    Args:
        encoded: Complement-coded input (list of floats or array)
        weight: Category weight of the same length
        alpha: Choice parameter (> 0)
        input_norm: l1_norm(encoded), precomputed by the caller

    Returns:
        (activation, match_fraction)
    """
    x = encoded.tolist() if isinstance(encoded, np.ndarray) else encoded
    w = weight.tolist() if isinstance(weight, np.ndarray) else weight

    overlap = 0.0
    weight_norm = 0.0
    for xi, wi in zip(x, w):
        overlap += xi if xi < wi else wi
        weight_norm += wi

    activation_value = overlap / (alpha + weight_norm)
    match_value = overlap / input_norm if input_norm > 0.0 else 0.0
    return activation_value, match_value


def activation(encoded: np.ndarray, weight: np.ndarray, alpha: float) -> float:
    """Choice function |I ^ w| / (alpha + |w|)."""
    return choice_and_match(encoded, weight, alpha, l1_norm(encoded))[0]


def match_fraction(encoded: np.ndarray, weight: np.ndarray) -> float:
    """Match function |I ^ w| / |I|; 0.0 for a zero-norm input."""
    # alpha does not enter the match fraction
    return choice_and_match(encoded, weight, 1.0, l1_norm(encoded))[1]


# ============================================================================
# Batched Kernels
# ============================================================================


def batch_choice_and_match(
    encoded: np.ndarray,
    weights: np.ndarray,
    alpha: float,
    input_norm: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Activations and match fractions of all k categories at once.

    Args:
        encoded: Complement-coded input, shape (2n,)
        weights: Weight matrix, shape (k, 2n); column-major layout is fastest
        alpha: Choice parameter (> 0)
        input_norm: l1_norm(encoded), precomputed by the caller

    Returns:
        (activations, match_fractions), each of shape (k,)
    """
    k = weights.shape[0]
    overlap = np.zeros(k, dtype=np.float64)
    weight_norm = np.zeros(k, dtype=np.float64)
    column_min = np.empty(k, dtype=np.float64)

    for j, xj in enumerate(encoded.tolist()):
        column = weights[:, j]
        np.minimum(column, xj, out=column_min)
        overlap += column_min
        weight_norm += column

    activations = overlap / (alpha + weight_norm)
    if input_norm > 0.0:
        matches = overlap / input_norm
    else:
        matches = np.zeros(k, dtype=np.float64)
    return activations, matches


def scalar_choice_and_match(
    encoded: Sequence[float],
    weights: Sequence[Sequence[float]],
    alpha: float,
    input_norm: float,
) -> Tuple[List[float], List[float]]:
    """Scalar counterpart of batch_choice_and_match over a sequence of weights."""
    x = encoded.tolist() if isinstance(encoded, np.ndarray) else encoded
    activations: List[float] = []
    matches: List[float] = []
    for weight in weights:
        t, m = choice_and_match(x, weight, alpha, input_norm)
        activations.append(t)
        matches.append(m)
    return activations, matches


def should_vectorize(encoded_dimension: int, category_count: int, config: Any) -> bool:
    """
    Decides between the scalar and batched kernels.

    Batching is used only when enabled and both the encoded dimension and the
    category count reach their configured minimums.
    """
    return (
        config.enable_vectorization
        and encoded_dimension >= config.vectorization_min_dimension
        and category_count >= config.vectorization_min_categories
    )
