"""
varta_config.py

Immutable configuration objects for the resonance engines.

ARTConfig configures a single Fuzzy ART engine; ARTMAPConfig configures the
supervised map field and embeds one ARTConfig per side. Both are frozen
dataclasses validated on construction, so an engine never sees an
out-of-range parameter. Defaults come from common.constants.

Usage:
    from varta_config import ARTConfig, ARTMAPConfig

    config = ARTConfig(vigilance=0.85)
    strict = config.with_vigilance(0.99)

    artmap_config = ARTMAPConfig.from_dict(
        {"mapVigilance": 0.95, "artAConfig": {"vigilance": 0.6}}
    )
"""

import math
import numbers
import re
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping

from common.constants import (
    DEFAULT_ALPHA,
    DEFAULT_ART_A_VIGILANCE,
    DEFAULT_ART_B_VIGILANCE,
    DEFAULT_BASELINE_VIGILANCE,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAP_VIGILANCE,
    DEFAULT_MAX_CACHE_SIZE,
    DEFAULT_MAX_CATEGORIES,
    DEFAULT_MAX_SEARCH_ATTEMPTS,
    DEFAULT_MAX_VIGILANCE,
    DEFAULT_PARALLEL_THRESHOLD,
    DEFAULT_PARALLELISM_LEVEL,
    DEFAULT_VECTORIZATION_MIN_CATEGORIES,
    DEFAULT_VECTORIZATION_MIN_DIMENSION,
    DEFAULT_VIGILANCE,
    DEFAULT_VIGILANCE_INCREMENT,
)
from varta_exceptions import InvalidConfigError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _check_unit_interval(
    name: str, value: Any, allow_zero: bool = False
) -> None:
    """Validates value in (0, 1], or [0, 1] when allow_zero is set."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfigError(
            f"{name} must be a number", parameter=name, value=value
        )
    if not math.isfinite(value):
        raise InvalidConfigError(f"{name} must be finite", parameter=name, value=value)
    lower_ok = value >= 0.0 if allow_zero else value > 0.0
    if not lower_ok or value > 1.0:
        interval = "[0, 1]" if allow_zero else "(0, 1]"
        raise InvalidConfigError(
            f"{name} must be in {interval}", parameter=name, value=value
        )


def _check_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigError(
            f"{name} must be an integer", parameter=name, value=value
        )
    if value < minimum:
        raise InvalidConfigError(
            f"{name} must be >= {minimum}", parameter=name, value=value
        )


def _normalize_keys(
    cls_name: str, mapping: Mapping[str, Any], allowed: Any
) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in mapping.items():
        snake = _to_snake_case(key)
        if snake not in allowed:
            raise InvalidConfigError(
                f"Unknown {cls_name} option '{key}'", parameter=key, value=value
            )
        normalized[snake] = value
    return normalized


@dataclass(frozen=True)
class ARTConfig:
    """
    Parameters of one Fuzzy ART engine.

    Attributes:
        vigilance: Minimum match fraction for resonance, in (0, 1]
        learning_rate: beta in (0, 1]; 1.0 is fast learning
        alpha: Choice parameter, > 0
        max_categories: Store capacity, >= 1
        max_cache_size: Activation cache entries, 0 disables the cache
        parallelism_level: Worker threads for partitioned evaluation, >= 1
        parallel_threshold: Category count above which evaluation runs in parallel
        enable_vectorization: Allows the batched numpy kernels
        vectorization_min_dimension: Encoded width below which kernels stay scalar
        vectorization_min_categories: Category count below which kernels stay scalar
    """

    vigilance: float = DEFAULT_VIGILANCE
    learning_rate: float = DEFAULT_LEARNING_RATE
    alpha: float = DEFAULT_ALPHA
    max_categories: int = DEFAULT_MAX_CATEGORIES
    max_cache_size: int = DEFAULT_MAX_CACHE_SIZE
    parallelism_level: int = DEFAULT_PARALLELISM_LEVEL
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD
    enable_vectorization: bool = True
    vectorization_min_dimension: int = DEFAULT_VECTORIZATION_MIN_DIMENSION
    vectorization_min_categories: int = DEFAULT_VECTORIZATION_MIN_CATEGORIES

    def __post_init__(self):
        _check_unit_interval("vigilance", self.vigilance)
        _check_unit_interval("learning_rate", self.learning_rate)

        if (
            isinstance(self.alpha, bool)
            or not isinstance(self.alpha, numbers.Real)
            or not math.isfinite(self.alpha)
            or self.alpha <= 0.0
        ):
            raise InvalidConfigError(
                "alpha must be a finite number > 0", parameter="alpha", value=self.alpha
            )

        _check_int("max_categories", self.max_categories, 1)
        _check_int("max_cache_size", self.max_cache_size, 0)
        _check_int("parallelism_level", self.parallelism_level, 1)
        _check_int("parallel_threshold", self.parallel_threshold, 0)
        _check_int("vectorization_min_dimension", self.vectorization_min_dimension, 1)
        _check_int(
            "vectorization_min_categories", self.vectorization_min_categories, 1
        )

        if not isinstance(self.enable_vectorization, bool):
            raise InvalidConfigError(
                "enable_vectorization must be a bool",
                parameter="enable_vectorization",
                value=self.enable_vectorization,
            )

    def with_changes(self, **changes: Any) -> "ARTConfig":
        """Returns a validated copy with the given fields replaced."""
        return replace(self, **changes)

    def with_vigilance(self, vigilance: float) -> "ARTConfig":
        return replace(self, vigilance=vigilance)

    @property
    def cache_enabled(self) -> bool:
        return self.max_cache_size > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> "ARTConfig":
        """
        Builds a config from snake_case or camelCase option names.

        Raises:
            InvalidConfigError: Unknown option or invalid value
        """
        allowed = {f.name for f in fields(cls)}
        return cls(**_normalize_keys(cls.__name__, mapping, allowed))


def _default_art_a_config() -> ARTConfig:
    return ARTConfig(vigilance=DEFAULT_ART_A_VIGILANCE)


def _default_art_b_config() -> ARTConfig:
    return ARTConfig(vigilance=DEFAULT_ART_B_VIGILANCE)


@dataclass(frozen=True)
class ARTMAPConfig:
    """
    Parameters of the supervised ARTMAP map field.

    Attributes:
        map_vigilance: Map field vigilance rho_map, in (0, 1]
        baseline_vigilance: Lower bound for rho_a at the start of each training call
        vigilance_increment: Raise of rho_a per map field conflict, in (0, 1]
        max_vigilance: Ceiling for rho_a during match tracking
        max_search_attempts: Map field tests per training call before giving up
        art_a_config: Input-side engine parameters
        art_b_config: Target-side engine parameters
    """

    map_vigilance: float = DEFAULT_MAP_VIGILANCE
    baseline_vigilance: float = DEFAULT_BASELINE_VIGILANCE
    vigilance_increment: float = DEFAULT_VIGILANCE_INCREMENT
    max_vigilance: float = DEFAULT_MAX_VIGILANCE
    max_search_attempts: int = DEFAULT_MAX_SEARCH_ATTEMPTS
    art_a_config: ARTConfig = field(default_factory=_default_art_a_config)
    art_b_config: ARTConfig = field(default_factory=_default_art_b_config)

    def __post_init__(self):
        _check_unit_interval("map_vigilance", self.map_vigilance)
        _check_unit_interval("baseline_vigilance", self.baseline_vigilance, allow_zero=True)
        _check_unit_interval("vigilance_increment", self.vigilance_increment)
        _check_unit_interval("max_vigilance", self.max_vigilance)
        _check_int("max_search_attempts", self.max_search_attempts, 1)

        if self.baseline_vigilance > self.max_vigilance:
            raise InvalidConfigError(
                "baseline_vigilance must not exceed max_vigilance",
                parameter="baseline_vigilance",
                value=self.baseline_vigilance,
                context={"max_vigilance": self.max_vigilance},
            )

        for name in ("art_a_config", "art_b_config"):
            if not isinstance(getattr(self, name), ARTConfig):
                raise InvalidConfigError(
                    f"{name} must be an ARTConfig",
                    parameter=name,
                    value=getattr(self, name),
                )

    @property
    def initial_vigilance(self) -> float:
        """rho_a at the start of every training call."""
        return max(self.baseline_vigilance, self.art_a_config.vigilance)

    def with_changes(self, **changes: Any) -> "ARTMAPConfig":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> "ARTMAPConfig":
        """
        Builds a config from snake_case or camelCase option names.

        The nested ``art_a_config`` / ``art_b_config`` entries may be
        ARTConfig instances or mappings understood by ARTConfig.from_dict.
        """
        allowed = {f.name for f in fields(cls)}
        values = _normalize_keys(cls.__name__, mapping, allowed)
        for name in ("art_a_config", "art_b_config"):
            nested = values.get(name)
            if isinstance(nested, Mapping):
                values[name] = ARTConfig.from_dict(nested)
        return cls(**values)
