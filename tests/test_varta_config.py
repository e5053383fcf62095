"""
tests/test_varta_config.py

Tests for the configuration objects (varta_config.py)
"""

import numpy as np
import pytest

from common.constants import DEFAULT_MAX_CATEGORIES, DEFAULT_VIGILANCE
from varta_config import ARTConfig, ARTMAPConfig
from varta_exceptions import InvalidConfigError


class TestARTConfig:
    def test_defaults(self):
        """Test 1: Defaults come from common.constants"""
        config = ARTConfig()

        assert config.vigilance == DEFAULT_VIGILANCE
        assert config.max_categories == DEFAULT_MAX_CATEGORIES
        assert config.cache_enabled

    @pytest.mark.parametrize(
        "overrides",
        [
            {"vigilance": 0.0},
            {"vigilance": 1.5},
            {"vigilance": float("nan")},
            {"learning_rate": 0.0},
            {"alpha": 0.0},
            {"alpha": -1.0},
            {"max_categories": 0},
            {"max_categories": 2.5},
            {"max_categories": True},
            {"max_cache_size": -1},
            {"parallelism_level": 0},
            {"parallel_threshold": -1},
            {"vectorization_min_dimension": 0},
            {"enable_vectorization": "yes"},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test 2: Out-of-range values raise InvalidConfigError"""
        with pytest.raises(InvalidConfigError):
            ARTConfig(**overrides)

    def test_numpy_scalars_accepted(self):
        """Test 3: numpy numbers pass validation"""
        config = ARTConfig(vigilance=np.float64(0.9), max_categories=np.int64(5))

        assert config.max_categories == 5

    def test_immutable_copies(self):
        """Test 4: with_vigilance returns a validated copy"""
        config = ARTConfig()
        strict = config.with_vigilance(0.99)

        assert strict.vigilance == 0.99
        assert config.vigilance == DEFAULT_VIGILANCE
        with pytest.raises(InvalidConfigError):
            config.with_changes(alpha=0.0)

    def test_from_dict_camel_case(self):
        """Test 5: camelCase and snake_case keys"""
        config = ARTConfig.from_dict(
            {"vigilance": 0.8, "maxCategories": 50, "learning_rate": 0.5}
        )

        assert config.max_categories == 50
        assert config.learning_rate == 0.5
        assert ARTConfig.from_dict(config.to_dict()) == config

    def test_from_dict_unknown_key(self):
        """Test 5b: Unknown options are rejected"""
        with pytest.raises(InvalidConfigError) as exc_info:
            ARTConfig.from_dict({"vigilence": 0.8})

        assert exc_info.value.context["parameter"] == "vigilence"


class TestARTMAPConfig:
    def test_defaults(self):
        """Test 6: Side configs and initial vigilance"""
        config = ARTMAPConfig()

        assert config.art_a_config.vigilance == 0.7
        assert config.art_b_config.vigilance == 0.8
        assert config.initial_vigilance == 0.7

    def test_initial_vigilance_uses_baseline(self):
        """Test 6b: Baseline above ART_a vigilance wins"""
        assert ARTMAPConfig(baseline_vigilance=0.9).initial_vigilance == 0.9

    def test_baseline_above_max(self):
        """Test 7: baseline_vigilance must not exceed max_vigilance"""
        with pytest.raises(InvalidConfigError):
            ARTMAPConfig(baseline_vigilance=0.96, max_vigilance=0.95)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"map_vigilance": 0.0},
            {"vigilance_increment": 0.0},
            {"max_search_attempts": 0},
            {"art_a_config": {"vigilance": 0.5}},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test 7b: Invalid ARTMAP parameters"""
        with pytest.raises(InvalidConfigError):
            ARTMAPConfig(**overrides)

    def test_from_dict_nested(self):
        """Test 8: Nested mappings become ARTConfig objects"""
        config = ARTMAPConfig.from_dict(
            {"mapVigilance": 0.95, "artAConfig": {"vigilance": 0.6}}
        )

        assert config.map_vigilance == 0.95
        assert isinstance(config.art_a_config, ARTConfig)
        assert config.art_a_config.vigilance == 0.6
        assert config.art_b_config.vigilance == 0.8
