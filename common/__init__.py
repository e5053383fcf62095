"""
Common constants for the VARTA project.

This package provides the centralized default values used by the configuration
objects and resonance engines.
"""

from common.constants import *

__all__ = [
    # Resonance Search
    "DEFAULT_VIGILANCE",
    "DEFAULT_LEARNING_RATE",
    "DEFAULT_ALPHA",
    # Category Store
    "DEFAULT_MAX_CATEGORIES",
    # Activation Cache
    "DEFAULT_MAX_CACHE_SIZE",
    # Parallel Evaluation
    "DEFAULT_PARALLELISM_LEVEL",
    "DEFAULT_PARALLEL_THRESHOLD",
    # Vectorization
    "DEFAULT_VECTORIZATION_MIN_DIMENSION",
    "DEFAULT_VECTORIZATION_MIN_CATEGORIES",
    # ARTMAP Match Tracking
    "DEFAULT_MAP_VIGILANCE",
    "DEFAULT_BASELINE_VIGILANCE",
    "DEFAULT_VIGILANCE_INCREMENT",
    "DEFAULT_MAX_VIGILANCE",
    "DEFAULT_MAX_SEARCH_ATTEMPTS",
    "DEFAULT_ART_A_VIGILANCE",
    "DEFAULT_ART_B_VIGILANCE",
    # Numerics
    "EQUIVALENCE_TOLERANCE",
]
