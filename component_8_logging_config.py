"""
component_8_logging_config.py

Central logging system for VARTA.
Provides structured logging with consistent formatting across all components.

Features:
- Console and optional rotating file logging
- Standard log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Structured formatting with timestamps and component names
- Performance tracking for critical operations (separate "varta.performance" logger)
- Contextual key/value information via extra={...}

The library never installs handlers on import. Applications call
setup_logging() once; otherwise records propagate to whatever the host
application configured.

Usage:
    from component_8_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Category created", extra={"category_index": 3, "count": 4})
    logger.warning("Capacity reached", extra={"max_categories": 100})
"""

import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

DEFAULT_LOG_DIR: Path = Path("logs")

ERROR_LOG_NAME: str = "varta_errors.log"
PERFORMANCE_LOG_NAME: str = "varta_performance.log"
PERFORMANCE_LOGGER_NAME: str = "varta.performance"

DEFAULT_LOG_LEVEL: int = logging.INFO
CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG


class VARTALogFormatter(logging.Formatter):
    """
    Formatter for structured log output.
    Adds colours for console output (optional).
    """

    # ANSI colour codes for console output
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # Format: [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            if extra_str:
                log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            log_message = f"{color}{log_message}{reset}"

        return log_message


class PerformanceLogger:
    """
    Context manager for timing critical operations.

    Usage:
        with PerformanceLogger(logger, "learn_batch", size=len(patterns)):
            engine.learn_batch(patterns)
    """

    def __init__(
        self, logger: logging.LoggerAdapter, operation_name: str, **context: Any
    ) -> None:
        self.logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None
        self.duration_ms: float = 0.0

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(f"START: {self.operation_name}", extra=self.context)
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert (
            self.start_time is not None
        ), "PerformanceLogger was not entered correctly"
        self.duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={**self.context, "duration_ms": self.duration_ms},
            )

            perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
            perf_logger.info(
                f"{self.operation_name}: {self.duration_ms:.2f}ms",
                extra={
                    "extra_info": {**self.context, "duration_ms": self.duration_ms}
                },
            )
        else:
            self.logger.error(
                f"FAILED: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={
                    **self.context,
                    "duration_ms": self.duration_ms,
                    "error": str(exc_val),
                },
            )

        # Propagate the exception
        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that carries structured extra information.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # Store the 'extra' dict as 'extra_info' on the LogRecord
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs

    def log_exception(self, exc: Exception, message: str = "", **context: Any) -> None:
        """
        Logs an exception with full traceback and context.
        """
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        self.error(
            f"{message}: {type(exc).__name__}: {str(exc)}\n{tb_str}", extra=context
        )


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = False,
) -> None:
    """
    Configures the global logging system for VARTA.

    Args:
        console_level: Log level for console output
        file_level: Log level for file output
        log_file: Path of the main log file. File handlers (main, errors and
            performance) are only installed when a path is given; the error and
            performance logs are placed next to it.
        enable_performance_logging: Enables the separate performance log file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter per handler

    # Avoid duplicate handlers on repeated setup
    root_logger.handlers.clear()

    # === Console handler ===
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(VARTALogFormatter(use_colors=True, include_extra=True))
    root_logger.addHandler(console_handler)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    perf_logger.handlers.clear()
    perf_logger.propagate = True

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # === Main log file ===
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"  # 10 MB
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(VARTALogFormatter(use_colors=False, include_extra=True))
        root_logger.addHandler(file_handler)

        # === Error-only log file ===
        error_handler = logging.handlers.RotatingFileHandler(
            log_path.parent / ERROR_LOG_NAME,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(VARTALogFormatter(use_colors=False, include_extra=True))
        root_logger.addHandler(error_handler)

        # === Performance logger ===
        if enable_performance_logging:
            perf_logger.setLevel(logging.INFO)
            perf_logger.propagate = False  # Avoid duplicates in the root logger

            perf_handler = logging.handlers.RotatingFileHandler(
                log_path.parent / PERFORMANCE_LOG_NAME,
                maxBytes=5 * 1024 * 1024,  # 5 MB
                backupCount=3,
                encoding="utf-8",
            )
            perf_handler.setFormatter(
                VARTALogFormatter(use_colors=False, include_extra=True)
            )
            perf_logger.addHandler(perf_handler)

    logger = get_logger("varta.logging_config")
    logger.info(
        "Logging initialised",
        extra={
            "console_level": logging.getLevelName(console_level),
            "file_level": logging.getLevelName(file_level),
            "log_file": str(log_file) if log_file is not None else None,
            "performance_logging": enable_performance_logging,
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Creates a structured logger for a component.

    Args:
        name: Component name (usually __name__)

    Returns:
        StructuredLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Search finished", extra={"winner": 2})
    """
    base_logger = logging.getLogger(name)
    return StructuredLogger(base_logger, {})


if __name__ == "__main__":
    setup_logging(console_level=logging.DEBUG)

    logger = get_logger("test_component")

    logger.debug("Debug message", extra={"test_param": "value1"})
    logger.info("Info message", extra={"category_index": 0})
    logger.warning("Warning message")

    with PerformanceLogger(logger, "demo_operation", size=3):
        sum(range(1000))

    try:
        raise ValueError("Test exception")
    except ValueError as e:
        logger.log_exception(e, message="Demo failure", step="demo")
