"""
component_6_map_field.py

ARTMAP map field: the association table between ART_a and ART_b categories.

Each ART_a category maps to at most one ART_b category. The table also keeps
per-association usage counts and the reverse index (ART_b -> set of ART_a)
for introspection.

Map field match of an ART_a category against a target ART_b category:
    1.0  no association yet, or the association equals the target
    0.0  the category is associated with a different ART_b category

Author: VARTA Team
"""

import threading
from typing import Dict, FrozenSet, Optional, Set

from component_8_logging_config import get_logger

logger = get_logger(__name__)


class MapField:
    """Thread-safe ART_a -> ART_b association table."""

    def __init__(self):
        self._lock = threading.RLock()
        self._associations: Dict[int, int] = {}
        self._usage: Dict[int, int] = {}
        self._reverse: Dict[int, Set[int]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._associations)

    def __contains__(self, art_a_index: int) -> bool:
        with self._lock:
            return art_a_index in self._associations

    def lookup(self, art_a_index: int) -> Optional[int]:
        """ART_b category associated with art_a_index, or None."""
        with self._lock:
            return self._associations.get(art_a_index)

    def map_match(self, art_a_index: int, art_b_index: int) -> float:
        with self._lock:
            current = self._associations.get(art_a_index)
        if current is None or current == art_b_index:
            return 1.0
        return 0.0

    def associate(self, art_a_index: int, art_b_index: int) -> bool:
        """
        Records or refreshes Association[art_a_index] = art_b_index.

        Returns:
            True if the association did not exist before
        """
        with self._lock:
            previous = self._associations.get(art_a_index)
            if previous is not None and previous != art_b_index:
                self._reverse[previous].discard(art_a_index)
                if not self._reverse[previous]:
                    del self._reverse[previous]
                self._usage[art_a_index] = 0

            self._associations[art_a_index] = art_b_index
            self._usage[art_a_index] = self._usage.get(art_a_index, 0) + 1
            self._reverse.setdefault(art_b_index, set()).add(art_a_index)

        if previous is None:
            logger.debug(
                "New map field association",
                extra={"art_a_index": art_a_index, "art_b_index": art_b_index},
            )
        return previous is None

    def usage_count(self, art_a_index: int) -> int:
        """Number of times the association of art_a_index was confirmed."""
        with self._lock:
            return self._usage.get(art_a_index, 0)

    def categories_for_target(self, art_b_index: int) -> FrozenSet[int]:
        """All ART_a categories that map to art_b_index."""
        with self._lock:
            return frozenset(self._reverse.get(art_b_index, ()))

    def associations(self) -> Dict[int, int]:
        """Copy of the association table."""
        with self._lock:
            return dict(self._associations)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._associations)
            self._associations.clear()
            self._usage.clear()
            self._reverse.clear()
            return removed
