"""
Performance logging utilities.

Provides a timing context manager and decorator for automatic
performance logging. All timing logs include the current cycle ID
for correlation.

Usage:
    # Context manager
    with log_timing("oi_momentum_analysis") as ctx:
        ctx["samples"] = len(samples)
        result = analyzer.analyze(samples)

    # Decorator
    @timed("report_build")
    def build_report(...):
        ...

Do not wrap per-point work (a single classification) with log_timing;
time whole analysis runs only.
"""

from __future__ import annotations

import functools
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from .trace_context import get_cycle_id

# Performance logger - uses 'oimomentum.perf' category
_perf_logger: Optional[logging.Logger] = None


def get_perf_logger() -> logging.Logger:
    """Get or create the performance logger."""
    global _perf_logger
    if _perf_logger is None:
        _perf_logger = logging.getLogger("oimomentum.perf")
    return _perf_logger


def set_perf_logger(logger: logging.Logger) -> None:
    """Set the performance logger (for testing or custom configuration)."""
    global _perf_logger
    _perf_logger = logger


@contextmanager
def log_timing(
    operation: str,
    warn_threshold_ms: float = 250.0,
    error_threshold_ms: float = 1000.0,
    extra: Optional[dict] = None,
) -> Generator[dict, None, None]:
    """
    Context manager to log operation timing.

    Logs timing to the perf category with cycle ID. Escalates the log
    level based on duration thresholds.

    Args:
        operation: Name of the operation being timed.
        warn_threshold_ms: Duration above which to log as WARNING.
        error_threshold_ms: Duration above which to log as ERROR.
        extra: Additional data to include in the log.

    Yields:
        Dict that can be updated with additional context during execution.
    """
    logger = get_perf_logger()
    context = extra.copy() if extra else {}
    start_time = time.perf_counter()

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        log_data = {
            "cycle": get_cycle_id(),
            "operation": operation,
            "duration_ms": round(duration_ms, 2),
            **context,
        }

        # Per-sample cost makes windows of different length comparable
        samples = context.get("samples")
        if isinstance(samples, int) and samples > 0:
            log_data["us_per_sample"] = round(duration_ms * 1000 / samples, 2)

        _emit(logger, operation, duration_ms, log_data, warn_threshold_ms, error_threshold_ms)


def _emit(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    log_data: dict,
    warn_threshold_ms: float,
    error_threshold_ms: float,
) -> None:
    """Log a timing record at a level chosen by duration."""
    cycle_id = log_data["cycle"]
    if duration_ms >= error_threshold_ms:
        logger.error(f"[{cycle_id}] SLOW {operation}: {duration_ms:.1f}ms", extra={"data": log_data})
    elif duration_ms >= warn_threshold_ms:
        logger.warning(f"[{cycle_id}] {operation}: {duration_ms:.1f}ms (slow)", extra={"data": log_data})
    else:
        logger.debug(f"[{cycle_id}] {operation}: {duration_ms:.1f}ms", extra={"data": log_data})


def timed(
    operation: Optional[str] = None,
    warn_threshold_ms: float = 250.0,
    error_threshold_ms: float = 1000.0,
) -> Callable:
    """
    Decorator form of log_timing.

    Args:
        operation: Operation name (defaults to the function's qualified name).
        warn_threshold_ms: Duration above which to log as WARNING.
        error_threshold_ms: Duration above which to log as ERROR.
    """

    def decorator(func: Callable) -> Callable:
        op_name = operation or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_timing(op_name, warn_threshold_ms, error_threshold_ms):
                return func(*args, **kwargs)

        return wrapper

    return decorator
