"""
infrastructure package

Shared infrastructure components for the VARTA resonance engines.
Provides the base network interface and the activation cache.

Modules:
    - interfaces: Base interface for resonance networks
    - cache_manager: Per-engine LRU activation cache
"""

from infrastructure.interfaces import BaseResonanceNetwork
from infrastructure.cache_manager import ActivationCache, CacheStatistics, fingerprint

__all__ = [
    "BaseResonanceNetwork",
    "ActivationCache",
    "CacheStatistics",
    "fingerprint",
]
