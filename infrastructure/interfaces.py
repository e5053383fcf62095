"""
infrastructure/interfaces.py

Base interface for all resonance networks in the VARTA system.

Interface Contract:
    Both the unsupervised Fuzzy ART engine and the supervised ARTMAP network
    implement BaseResonanceNetwork. This ensures:
    - A uniform predict() returning an ActivationResult variant
    - Category counting and wholesale clearing
    - Scoped teardown via close() and the context manager protocol
    - Statistics snapshots for monitoring

Usage:
    from infrastructure.interfaces import BaseResonanceNetwork

    with FuzzyARTEngine(ARTConfig(vigilance=0.8)) as engine:
        engine.learn([0.2, 0.4])
        result = engine.predict([0.2, 0.4])
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Dict, Literal, Optional, Type

from component_5_resonance_data_structures import ActivationResult


class BaseResonanceNetwork(ABC):
    """
    Abstract base class for resonance networks.

    Thread Safety:
        Implementations MUST allow concurrent predict() calls without locking
        and MUST serialize all mutating calls internally.
    """

    @abstractmethod
    def predict(self, pattern: Any) -> ActivationResult:
        """
        Classifies a pattern without modifying the network.

        Args:
            pattern: Sequence of n values in [0, 1]

        Returns:
            Success with the winning category, or NoMatch

        Raises:
            PreconditionException: Invalid pattern or closed network
        """

    @abstractmethod
    def category_count(self) -> int:
        """Number of categories currently held (input side for ARTMAP)."""

    @abstractmethod
    def clear(self) -> None:
        """Removes all learned state."""

    @abstractmethod
    def close(self) -> None:
        """
        Releases worker pools and caches.

        Must be idempotent. Any later learn/predict raises EngineClosedError.
        """

    @abstractmethod
    def get_statistics(self) -> Dict[str, Any]:
        """Returns a snapshot of the performance counters."""

    def __enter__(self) -> "BaseResonanceNetwork":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        self.close()
        return False
