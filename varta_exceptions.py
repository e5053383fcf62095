"""
varta_exceptions.py

Central exception hierarchy for the VARTA resonance engines.
Defines specialized exception classes for the different failure scenarios.

Exception hierarchy:
    VARTAException (base)
    ├── PreconditionException
    │   ├── InvalidPatternError
    │   ├── DimensionMismatchError
    │   └── EngineClosedError
    ├── ConfigurationException
    │   └── InvalidConfigError
    ├── ResonanceException
    │   ├── CapacityExceededError
    │   ├── NoResonanceError
    │   └── CategoryNotFoundError
    └── MapFieldException
        └── SearchExhaustedError

Precondition and configuration errors are raised immediately. Capacity and
search exhaustion are reported as result variants (see
component_5_resonance_data_structures) and only become exceptions when the
caller asks for it via ``result.unwrap()``.

Usage:
    from varta_exceptions import DimensionMismatchError, VARTAException

    try:
        engine.learn(pattern)
    except DimensionMismatchError as e:
        logger.error(f"Pattern rejected: {e}")
        logger.error(f"Context: {e.context}")
"""

from typing import Any, Dict, Optional


class VARTAException(Exception):
    """
    Base exception for all VARTA-specific errors.

    All VARTA exceptions support:
    - A detailed error message
    - Contextual information (dict)
    - Chaining of the original exception
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# PRECONDITION EXCEPTIONS
# ============================================================================


class PreconditionException(VARTAException):
    """Base exception for invalid arguments passed to an engine."""


class InvalidPatternError(PreconditionException):
    """
    Input pattern is unusable.

    Causes:
    - Pattern is None or empty
    - Pattern is not one-dimensional
    - Values are NaN/inf or outside [0, 1]
    """

    def __init__(self, message: str, pattern_shape: Optional[Any] = None, **kwargs):
        context = kwargs.get("context", {})
        context["pattern_shape"] = pattern_shape
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class DimensionMismatchError(PreconditionException):
    """
    Pattern length differs from the dimension the engine was fixed to.

    Causes:
    - Mixing feature sets of different widths in one engine
    - Passing an already complement-coded vector
    """

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["expected"] = expected
        context["actual"] = actual
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class EngineClosedError(PreconditionException):
    """Operation on an engine after close() was called."""

    def __init__(self, message: str, engine_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["engine_name"] = engine_name
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(VARTAException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid configuration.

    Causes:
    - Parameter outside its documented range
    - Unknown option name
    - Inconsistent settings (e.g. baseline above max vigilance)
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["parameter"] = parameter
        context["value"] = value
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# RESONANCE EXCEPTIONS
# ============================================================================


class ResonanceException(VARTAException):
    """Base exception for resonance search outcomes converted to errors."""


class CapacityExceededError(ResonanceException):
    """
    No category resonated and the store is full.

    Causes:
    - max_categories too small for the data
    - Vigilance too high, so every pattern wants its own category
    """

    def __init__(
        self,
        message: str,
        max_categories: Optional[int] = None,
        category_count: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["max_categories"] = max_categories
        context["category_count"] = category_count
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class NoResonanceError(ResonanceException):
    """
    Prediction found no resonant category.

    Causes:
    - Engine has not learned anything yet
    - Pattern is too far from every learned prototype
    - No map field association for the winning input category
    """


class CategoryNotFoundError(ResonanceException):
    """Lookup of a category index that does not exist in the store."""

    def __init__(self, message: str, category_index: Optional[int] = None, **kwargs):
        context = kwargs.get("context", {})
        context["category_index"] = category_index
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# MAP FIELD EXCEPTIONS
# ============================================================================


class MapFieldException(VARTAException):
    """Base exception for ARTMAP map field errors."""


class SearchExhaustedError(MapFieldException):
    """
    Match tracking gave up before a consistent input category was found.

    Causes:
    - max_search_attempts reached
    - max_vigilance reached and the store is full
    """

    def __init__(
        self,
        message: str,
        attempts: Optional[int] = None,
        final_vigilance: Optional[float] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["attempts"] = attempts
        context["final_vigilance"] = final_vigilance
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    exc: Exception, varta_exception_class: type[VARTAException], message: str, **context
) -> VARTAException:
    """
    Converts a generic exception into a VARTA-specific exception.

    Args:
        exc: Original exception
        varta_exception_class: Target exception class (e.g. InvalidPatternError)
        message: Custom error message
        **context: Additional context information

    Returns:
        VARTA-specific exception chained to the original

    Example:
        try:
            values = np.asarray(pattern, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise wrap_exception(e, InvalidPatternError, "Pattern is not numeric")
    """
    return varta_exception_class(
        message=message, context=context, original_exception=exc
    )


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Builds a readable error message from an exception.

    Args:
        exc: Exception object
        include_details: Whether technical details should be appended

    Returns:
        Human readable error message
    """
    friendly_messages = {
        InvalidPatternError: "[ERROR] The input pattern is invalid. Values must be finite and within [0, 1].",
        DimensionMismatchError: "[ERROR] The input pattern has the wrong number of features for this engine.",
        EngineClosedError: "[ERROR] The engine has been closed and can no longer be used.",
        InvalidConfigError: "[ERROR] Invalid configuration. Please check the parameters.",
        CapacityExceededError: "[ERROR] The category store is full. Increase max_categories or lower the vigilance.",
        NoResonanceError: "[INFO] No learned category matches this pattern.",
        CategoryNotFoundError: "[ERROR] The requested category does not exist.",
        SearchExhaustedError: "[ERROR] Match tracking could not find a consistent category.",
    }

    default_message = "[ERROR] An unexpected error occurred."

    exc_type = type(exc)
    user_message = friendly_messages.get(exc_type, default_message)

    if isinstance(exc, DimensionMismatchError) and exc.context.get("expected"):
        user_message = (
            f"[ERROR] Expected {exc.context['expected']} features, "
            f"got {exc.context.get('actual', '?')}."
        )

    elif isinstance(exc, CapacityExceededError) and exc.context.get("max_categories"):
        user_message = (
            f"[ERROR] The category store is full ({exc.context['max_categories']} categories). "
            f"Increase max_categories or lower the vigilance."
        )

    elif (
        isinstance(exc, SearchExhaustedError)
        and exc.context.get("attempts") is not None
    ):
        user_message = (
            f"[ERROR] Match tracking gave up after {exc.context['attempts']} attempts."
        )

    if include_details and isinstance(exc, VARTAException):
        user_message += f"\n\nTechnical details: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message


if __name__ == "__main__":
    print("=== Testing VARTA Exception Hierarchy ===\n")

    # Test 1: base exception
    try:
        raise VARTAException("Generic failure", context={"test": "value"})
    except VARTAException as e:
        print(f"1. {e}\n")

    # Test 2: dimension mismatch with context
    try:
        raise DimensionMismatchError("Wrong width", expected=4, actual=3)
    except DimensionMismatchError as e:
        print(f"2. {e}\n")

    # Test 3: wrapping
    try:
        try:
            float("invalid")
        except ValueError as original:
            raise wrap_exception(
                original, InvalidPatternError, "Pattern is not numeric", value="invalid"
            )
    except InvalidPatternError as e:
        print(f"3. {e}\n")

    # Test 4: friendly message
    print(f"4. {get_user_friendly_message(SearchExhaustedError('x', attempts=10))}\n")

    print("=== All tests passed ===")
