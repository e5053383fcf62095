"""
Centralized constants for the VARTA (Vectorized Adaptive Resonance Theory Architecture) project.

This module provides a single source of truth for the default values of every tunable
parameter used by the resonance engines. Configuration objects (varta_config) read their
defaults from here, so tuning a default in one place changes it everywhere.

Organization:
    - Resonance Search: vigilance, learning rate, choice parameter
    - Category Store: capacity limits
    - Activation Cache: LRU cache sizing
    - Parallel Evaluation: worker pool sizing and thresholds
    - Vectorization: batched kernel thresholds
    - ARTMAP Match Tracking: map field vigilance and search limits

Usage:
    from common.constants import DEFAULT_VIGILANCE, DEFAULT_ALPHA

Note:
    These constants define default values. Engines accept an ARTConfig / ARTMAPConfig
    object that overrides any of them per instance or per call.
"""

# =============================================================================
# Resonance Search
# =============================================================================

DEFAULT_VIGILANCE: float = 0.75
"""
Default vigilance (rho) for a single resonance engine.

- match_fraction >= 0.75: candidate resonates and is updated
- match_fraction <  0.75: candidate is reset, search continues

Tuning:
    - Higher values (e.g., 0.95): many narrow categories
    - Lower values (e.g., 0.5): few broad categories
"""

DEFAULT_LEARNING_RATE: float = 1.0
"""
Default learning rate (beta). 1.0 is fast learning: the winner snaps onto
fuzzy_and(input, weight) in a single step.
"""

DEFAULT_ALPHA: float = 0.001
"""
Choice parameter (alpha) of the activation function |I ^ w| / (alpha + |w|).

Keeps the denominator positive and biases ranking against large-norm (general)
categories. Must be strictly positive.
"""

# =============================================================================
# Category Store
# =============================================================================

DEFAULT_MAX_CATEGORIES: int = 10000
"""Upper bound on the number of categories one engine may create."""

# =============================================================================
# Activation Cache
# =============================================================================

DEFAULT_MAX_CACHE_SIZE: int = 1000
"""
Maximum number of ranked candidate lists memoized per engine (LRU eviction).
0 disables the cache entirely.
"""

# =============================================================================
# Parallel Evaluation
# =============================================================================

DEFAULT_PARALLELISM_LEVEL: int = 4
"""Number of worker threads used to evaluate category partitions."""

DEFAULT_PARALLEL_THRESHOLD: int = 256
"""
Category count above which evaluation is fanned out to the worker pool.

Below this size the thread hand-off costs more than it saves.
"""

# =============================================================================
# Vectorization
# =============================================================================

DEFAULT_VECTORIZATION_MIN_DIMENSION: int = 8
"""Minimum encoded dimension (2n) before batched kernels are used."""

DEFAULT_VECTORIZATION_MIN_CATEGORIES: int = 16
"""Minimum category count before batched kernels are used."""

# =============================================================================
# ARTMAP Match Tracking
# =============================================================================

DEFAULT_MAP_VIGILANCE: float = 0.9
"""
Map field vigilance (rho_map). With one-to-one associations the map field match is
1.0 (consistent) or 0.0 (conflict), so any value in (0, 1] rejects conflicts.
"""

DEFAULT_BASELINE_VIGILANCE: float = 0.0
"""
Baseline input-side vigilance. Each training call starts at
max(baseline, art_a vigilance) and is reset there afterwards.
"""

DEFAULT_VIGILANCE_INCREMENT: float = 0.05
"""Amount rho_a is raised after every map field conflict."""

DEFAULT_MAX_VIGILANCE: float = 0.95
"""Ceiling for rho_a during match tracking."""

DEFAULT_MAX_SEARCH_ATTEMPTS: int = 10
"""Hard cap on map field tests per training call before SearchExhausted."""

DEFAULT_ART_A_VIGILANCE: float = 0.7
"""Default vigilance of the input-side (ART_a) engine."""

DEFAULT_ART_B_VIGILANCE: float = 0.8
"""Default vigilance of the target-side (ART_b) engine."""

# =============================================================================
# Numerics
# =============================================================================

EQUIVALENCE_TOLERANCE: float = 1e-9
"""
Absolute tolerance allowed between scalar and batched kernel results.
The kernels accumulate in the same order, so in practice they agree exactly.
"""
