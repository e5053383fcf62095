"""
infrastructure/cache_manager.py

Activation cache for the resonance engines.

Memoizes the rank-ordered candidate list of an encoded input so that a
repeated predict on an unchanged store skips the Evaluate and Rank steps.
The cache is strictly derived data: every entry is tagged with the store
version it was computed against and the owning engine invalidates the
whole cache on every write.

Features:
- Per-engine instance (no process-wide singleton), released via close()
- LRU eviction via cachetools.LRUCache, bounded by max_cache_size
- maxsize 0 disables caching entirely
- Thread-safe operations with RLock protection
- Statistics tracking (hits, misses, stale entries, hit rate)

Usage:
    from infrastructure.cache_manager import ActivationCache, fingerprint

    cache = ActivationCache("art_a", maxsize=1000)
    key = fingerprint(encoded, alpha)

    ranked = cache.get(key, encoded_bytes, version)
    if ranked is None:
        ranked = evaluate_and_rank(...)
        cache.set(key, encoded_bytes, version, ranked)

    cache.invalidate()  # after any category write

Thread Safety:
- All public methods protected by RLock
- A reader that computed a ranking against an old snapshot cannot publish it
  as current: entries with a stale version are dropped on lookup
"""

import hashlib
import threading
from cachetools import LRUCache
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional

import numpy as np

from component_8_logging_config import get_logger

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class CacheStatistics:
    """Statistics for a single activation cache."""

    cache_name: str
    hits: int = 0
    misses: int = 0
    sets: int = 0
    stale: int = 0
    invalidations: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_requests(self) -> int:
        """Total cache requests (hits + misses)."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0-1.0)."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


class CacheEntry(NamedTuple):
    """Cached ranking together with the data needed to validate it."""

    encoded_bytes: bytes
    version: int
    value: Any


def fingerprint(encoded: np.ndarray, alpha: float) -> str:
    """
    Cache key for an encoded input under a given choice parameter.

    The digest only selects the slot; lookups compare the full encoded bytes,
    so a digest collision degrades to a miss and never to a wrong result.
    """
    digest = hashlib.md5(usedforsecurity=False)
    digest.update(np.ascontiguousarray(encoded, dtype=np.float64).tobytes())
    digest.update(repr(float(alpha)).encode("ascii"))
    return digest.hexdigest()


# ============================================================================
# Activation Cache
# ============================================================================


class ActivationCache:
    """
    LRU cache of ranked candidate lists for one engine.

    Attributes:
        name: Cache name used in logs and statistics
        maxsize: Maximum number of entries (0 = disabled)
        statistics: Hit/miss counters
    """

    def __init__(self, name: str, maxsize: int):
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")

        self.name = name
        self.maxsize = maxsize
        self._cache: Optional[LRUCache] = LRUCache(maxsize=maxsize) if maxsize > 0 else None
        self.statistics = CacheStatistics(cache_name=name)
        self._cache_lock = threading.RLock()

        logger.debug(
            "Activation cache created",
            extra={"cache_name": name, "maxsize": maxsize, "enabled": self.enabled},
        )

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    def __len__(self) -> int:
        with self._cache_lock:
            return len(self._cache) if self._cache is not None else 0

    def get(self, key: str, encoded_bytes: bytes, version: int) -> Optional[Any]:
        """
        Returns the cached value, or None on a miss.

        An entry computed against another store version or for different
        input bytes is treated as a miss; stale entries are evicted.
        """
        if self._cache is None:
            return None

        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                self.statistics.misses += 1
                return None

            if entry.version != version:
                del self._cache[key]
                self.statistics.stale += 1
                self.statistics.misses += 1
                return None

            if entry.encoded_bytes != encoded_bytes:
                self.statistics.misses += 1
                return None

            self.statistics.hits += 1
            return entry.value

    def set(self, key: str, encoded_bytes: bytes, version: int, value: Any) -> None:
        if self._cache is None:
            return

        with self._cache_lock:
            self._cache[key] = CacheEntry(encoded_bytes, version, value)
            self.statistics.sets += 1

    def invalidate(self) -> int:
        """
        Clears every entry.

        Returns:
            Number of entries invalidated
        """
        if self._cache is None:
            return 0

        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
            self.statistics.invalidations += count
            if count:
                logger.debug(
                    "Cache CLEARED", extra={"cache_name": self.name, "entries": count}
                )
            return count

    def get_stats(self) -> Dict[str, Any]:
        """
        Returns a statistics snapshot.

        Keys: cache_name, enabled, hits, misses, sets, stale, invalidations,
        total_requests, hit_rate, size, maxsize, created_at
        """
        with self._cache_lock:
            stats = self.statistics
            return {
                "cache_name": stats.cache_name,
                "enabled": self.enabled,
                "hits": stats.hits,
                "misses": stats.misses,
                "sets": stats.sets,
                "stale": stats.stale,
                "invalidations": stats.invalidations,
                "total_requests": stats.total_requests,
                "hit_rate": stats.hit_rate,
                "size": len(self._cache) if self._cache is not None else 0,
                "maxsize": self.maxsize,
                "created_at": stats.created_at.isoformat(),
            }

    def reset_statistics(self) -> None:
        """Resets counters without clearing data."""
        with self._cache_lock:
            self.statistics = CacheStatistics(cache_name=self.name)

    def close(self) -> None:
        """Releases all entries. The cache stays usable but empty."""
        with self._cache_lock:
            if self._cache is not None:
                self._cache.clear()
