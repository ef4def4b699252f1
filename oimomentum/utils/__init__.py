"""Utility modules."""

from .logging_setup import (
    flush_all_loggers,
    get_current_timestamp,
    get_logger,
    reset_session_run_number,
    set_log_timezone,
    set_verbose_mode,
    setup_category_logging,
    setup_logging,
    shutdown_logging,
)
from .perf_logger import log_timing, timed
from .trace_context import (
    generate_cycle_id,
    get_cycle_id,
    get_cycle_label,
    new_cycle,
    set_cycle_id,
)

__all__ = [
    # Logging setup
    "setup_category_logging",
    "setup_logging",
    "shutdown_logging",
    "flush_all_loggers",
    "reset_session_run_number",
    "set_log_timezone",
    "get_current_timestamp",
    "get_logger",
    "set_verbose_mode",
    # Trace context
    "get_cycle_id",
    "get_cycle_label",
    "set_cycle_id",
    "new_cycle",
    "generate_cycle_id",
    # Performance logging
    "log_timing",
    "timed",
]
