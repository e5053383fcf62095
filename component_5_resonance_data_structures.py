"""
component_5_resonance_data_structures.py

Data structures for the resonance search engine.

Provides:
- ResultKind enum
- Success / NoMatch / CapacityExceeded / SearchExhausted result variants
- ActivationResult union of the variants
- RankedCandidate dataclass and its ordering key

Every learn/predict/train call returns exactly one variant. Callers either
branch on ``result.kind`` (or isinstance) or call ``result.unwrap()``, which
returns the Success or raises the exception matching the failure.

Author: VARTA Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from varta_exceptions import (
    CapacityExceededError,
    NoResonanceError,
    SearchExhaustedError,
)


class ResultKind(Enum):
    """Tag of an ActivationResult variant."""

    SUCCESS = "success"
    NO_MATCH = "no_match"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    SEARCH_EXHAUSTED = "search_exhausted"


@dataclass(frozen=True)
class Success:
    """
    A category resonated (or was created).

    Attributes:
        category_index: Winning category. For ARTMAP predictions this is the
            associated ART_b category.
        activation_value: Choice function value of the winner in [0, 1]; a
            freshly created category reports 1.0
    """

    category_index: int
    activation_value: float

    kind = ResultKind.SUCCESS
    is_success = True

    def unwrap(self) -> "Success":
        return self


@dataclass(frozen=True)
class NoMatch:
    """No category passed the vigilance test (predict only)."""

    reason: str = "no resonant category"

    kind = ResultKind.NO_MATCH
    is_success = False

    def unwrap(self) -> Success:
        raise NoResonanceError(self.reason)


@dataclass(frozen=True)
class CapacityExceeded:
    """Learning needed a new category but the store is full."""

    max_categories: int
    category_count: int

    kind = ResultKind.CAPACITY_EXCEEDED
    is_success = False

    def unwrap(self) -> Success:
        raise CapacityExceededError(
            "No resonant category and the category store is full",
            max_categories=self.max_categories,
            category_count=self.category_count,
        )


@dataclass(frozen=True)
class SearchExhausted:
    """ARTMAP match tracking ran out of attempts or candidates."""

    attempts: int
    final_vigilance: float

    kind = ResultKind.SEARCH_EXHAUSTED
    is_success = False

    def unwrap(self) -> Success:
        raise SearchExhaustedError(
            "Match tracking exhausted without a consistent category",
            attempts=self.attempts,
            final_vigilance=self.final_vigilance,
        )


ActivationResult = Union[Success, NoMatch, CapacityExceeded, SearchExhausted]


def describe_result(result: ActivationResult) -> str:
    """One-line human readable description of a result."""
    if isinstance(result, Success):
        return (
            f"success: category {result.category_index} "
            f"(activation {result.activation_value:.4f})"
        )
    if isinstance(result, NoMatch):
        return f"no match: {result.reason}"
    if isinstance(result, CapacityExceeded):
        return (
            f"capacity exceeded: {result.category_count}/{result.max_categories} "
            f"categories in use"
        )
    if isinstance(result, SearchExhausted):
        return (
            f"search exhausted after {result.attempts} attempts "
            f"(vigilance {result.final_vigilance:.3f})"
        )
    raise TypeError(f"Unknown result type: {type(result).__name__}")


@dataclass(frozen=True)
class RankedCandidate:
    """
    One category scored against an input.

    Attributes:
        index: Category index
        activation: Choice function value T_j
        match_fraction: |I ^ w_j| / |I|
    """

    index: int
    activation: float
    match_fraction: float


def rank_key(candidate: RankedCandidate) -> Tuple[float, int]:
    """Sort key: activation descending, then index ascending."""
    return (-candidate.activation, candidate.index)
