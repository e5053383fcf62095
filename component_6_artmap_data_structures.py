"""
component_6_artmap_data_structures.py

Data structures for ARTMAP training and prediction reports.

Provides:
- MatchTrackingStep: one map field test during a training call
- TrainingReport: full trace of one train() call
- MapFieldPrediction: explanation of one predict() call

Author: VARTA Team
"""

from dataclasses import dataclass, field
from typing import List, Optional

from component_5_resonance_data_structures import ActivationResult


@dataclass(frozen=True)
class MatchTrackingStep:
    """
    One map field test.

    Attributes:
        step: 1-based attempt number
        vigilance: rho_a in effect when the candidate was selected
        art_a_index: Tested ART_a category
        activation: Its activation (1.0 for a newly created category)
        match_fraction: Its match fraction (1.0 for a newly created category)
        map_consistent: Whether the map field test passed
        created: Whether the category was created for this step
    """

    step: int
    vigilance: float
    art_a_index: int
    activation: float
    match_fraction: float
    map_consistent: bool
    created: bool = False


@dataclass
class TrainingReport:
    """
    Trace of one ARTMAP training call.

    Attributes:
        result: Outcome of the call (Success carries the ART_a category)
        art_a_index: Final ART_a category, None on failure
        art_b_index: ART_b category of the target, None if ART_b failed
        initial_vigilance: rho_a at the start of the call
        final_vigilance: rho_a when the call terminated (before the reset)
        steps: Every map field test in order
        was_new_mapping: Whether a new association was recorded
    """

    result: ActivationResult
    art_a_index: Optional[int] = None
    art_b_index: Optional[int] = None
    initial_vigilance: float = 0.0
    final_vigilance: float = 0.0
    steps: List[MatchTrackingStep] = field(default_factory=list)
    was_new_mapping: bool = False

    @property
    def search_depth(self) -> int:
        return len(self.steps)

    @property
    def mismatches(self) -> int:
        return sum(1 for step in self.steps if not step.map_consistent)


@dataclass(frozen=True)
class MapFieldPrediction:
    """Winning ART_a category of a prediction and its associated ART_b category."""

    art_a_index: int
    art_b_index: int
    art_a_activation: float
