"""
component_2_category_store.py

Bounded, append-indexed store of category prototypes.

The store publishes its contents as immutable CategorySnapshot objects.
Writers build a new snapshot and swap the reference under a lock; readers
grab the current reference and never lock. A predict running concurrently
with a learn therefore sees either the state before or after that learn,
never a half-written weight.

Indices are assigned 0, 1, 2, ... in creation order and stay stable until
clear(). There is no per-category deletion.

Author: VARTA Team
"""

import threading
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Tuple

import numpy as np

from component_8_logging_config import get_logger
from varta_exceptions import CapacityExceededError, CategoryNotFoundError

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass(frozen=True, eq=False)
class Category:
    """
    One learned prototype.

    Equality compares the weight values; categories are unhashable because
    the weight is an array.

    Attributes:
        index: Position in the store, stable until clear()
        weight: Complement-coded prototype (read-only float64 array)
        usage_count: Number of learning updates applied, creation included
        creation_index: Monotonic creation sequence number over the store lifetime
    """

    index: int
    weight: np.ndarray
    usage_count: int
    creation_index: int

    __hash__ = None

    def __post_init__(self):
        if self.weight.flags.writeable:
            frozen = np.array(self.weight, dtype=np.float64)
            frozen.setflags(write=False)
            object.__setattr__(self, "weight", frozen)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return (
            self.index == other.index
            and self.usage_count == other.usage_count
            and self.creation_index == other.creation_index
            and bool(np.array_equal(self.weight, other.weight))
        )


@dataclass(frozen=True)
class CategorySnapshot:
    """
    Immutable view of the store at one version.

    Attributes:
        categories: Categories ordered by index
        version: Incremented on every write
        dimension: Encoded width (2n), None while empty
    """

    categories: Tuple[Category, ...]
    version: int
    dimension: Optional[int]

    def __len__(self) -> int:
        return len(self.categories)

    @cached_property
    def weight_matrix(self) -> np.ndarray:
        """(k, 2n) column-major matrix of all weights, built on first use."""
        if not self.categories:
            return np.empty((0, self.dimension or 0), dtype=np.float64, order="F")
        matrix = np.asfortranarray(np.stack([c.weight for c in self.categories]))
        matrix.setflags(write=False)
        return matrix

    @cached_property
    def weight_lists(self) -> Tuple[List[float], ...]:
        """Weights as plain float lists for the scalar kernels."""
        return tuple(c.weight.tolist() for c in self.categories)


_EMPTY_SNAPSHOT = CategorySnapshot(categories=(), version=0, dimension=None)


# ============================================================================
# Category Store
# ============================================================================


class CategoryStore:
    """
    Copy-on-write category storage with a capacity limit.

    Thread Safety:
        snapshot(), count and get() read a single published reference.
        append(), replace_weight() and clear() are serialized by an RLock.
    """

    def __init__(self, max_categories: int):
        self.max_categories = max_categories
        self._lock = threading.RLock()
        self._snapshot: CategorySnapshot = _EMPTY_SNAPSHOT
        self._next_creation_index = 0

    def snapshot(self) -> CategorySnapshot:
        return self._snapshot

    @property
    def count(self) -> int:
        return len(self._snapshot.categories)

    @property
    def version(self) -> int:
        return self._snapshot.version

    def has_capacity(self, limit: Optional[int] = None) -> bool:
        """True if one more category fits under min(max_categories, limit)."""
        effective = self.max_categories if limit is None else min(self.max_categories, limit)
        return self.count < effective

    def get(self, index: int) -> Category:
        categories = self._snapshot.categories
        if isinstance(index, bool) or not 0 <= index < len(categories):
            raise CategoryNotFoundError(
                f"Category {index} does not exist",
                category_index=index,
                context={"category_count": len(categories)},
            )
        return categories[index]

    def append(self, weight: np.ndarray, limit: Optional[int] = None) -> Category:
        """
        Adds a new category with usage_count 1.

        Raises:
            CapacityExceededError: Store already holds the maximum
        """
        with self._lock:
            current = self._snapshot
            if not self.has_capacity(limit):
                raise CapacityExceededError(
                    "Category store is full",
                    max_categories=self.max_categories if limit is None else min(self.max_categories, limit),
                    category_count=len(current.categories),
                )

            category = Category(
                index=len(current.categories),
                weight=weight,
                usage_count=1,
                creation_index=self._next_creation_index,
            )
            self._next_creation_index += 1
            self._publish(
                current.categories + (category,),
                current.dimension if current.dimension is not None else len(weight),
            )
            return category

    def replace_weight(self, index: int, weight: np.ndarray) -> Category:
        """Stores a learned weight for an existing category and bumps its usage."""
        with self._lock:
            current = self._snapshot
            old = self.get(index)
            updated = Category(
                index=index,
                weight=weight,
                usage_count=old.usage_count + 1,
                creation_index=old.creation_index,
            )
            categories = list(current.categories)
            categories[index] = updated
            self._publish(tuple(categories), current.dimension)
            return updated

    def clear(self) -> int:
        """Removes all categories. Returns the number removed."""
        with self._lock:
            removed = len(self._snapshot.categories)
            self._snapshot = CategorySnapshot(
                categories=(), version=self._snapshot.version + 1, dimension=None
            )
            logger.debug("Category store cleared", extra={"removed": removed})
            return removed

    def _publish(self, categories: Tuple[Category, ...], dimension: Optional[int]) -> None:
        self._snapshot = CategorySnapshot(
            categories=categories,
            version=self._snapshot.version + 1,
            dimension=dimension,
        )
