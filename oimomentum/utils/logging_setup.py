"""
Logging setup with categories, file output, and cycle ID support.

Provides:
- 4 log categories: system, signal, data, perf
- Automatic module → category routing
- Cycle ID correlation in all logs
- File logging through a non-blocking queue
- Console output (when requested or in verbose mode)
- JSON or standard text formatting
- Configurable timezone for log timestamps

Categories:
- system: Startup, config, CLI runner, errors
- signal: Classification, alerts, scoring, guidance
- data: Sample loading and validation, cache
- perf: Timing, performance diagnostics
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Dict, List, Optional
from zoneinfo import ZoneInfo

from .trace_context import get_cycle_id, get_cycle_label

if TYPE_CHECKING:
    from config.models import LoggingConfig

# =============================================================================
# GLOBAL STATE
# =============================================================================

# Global run number for this session (determined at startup)
_session_run_number: Optional[int] = None

# Global timezone setting for log timestamps (None = local time)
_log_timezone: Optional[ZoneInfo] = None

# Global verbose flag (set via --verbose CLI flag)
_verbose_mode: bool = False

# Global log level override (set via --log-level CLI flag)
_log_level_override: Optional[str] = None

# Configured category loggers
_category_loggers: Dict[str, logging.Logger] = {}

# Queue listeners for async file logging (one per category)
_queue_listeners: List[logging.handlers.QueueListener] = []

# =============================================================================
# LOG CATEGORIES AND ROUTING
# =============================================================================

ROOT_LOGGER_NAME = "oimomentum"

CATEGORIES = ["system", "signal", "data", "perf"]

CATEGORY_SUFFIXES = {
    "system": "sys",
    "signal": "sig",
    "data": "dat",
    "perf": "prf",
}

# Module path → category routing
# More specific paths should come first
MODULE_ROUTING: List[tuple[str, str]] = [
    ("oimomentum.domain.oi_momentum.compute", "data"),
    ("oimomentum.domain.oi_momentum.cache", "data"),
    ("oimomentum.domain.oi_momentum", "signal"),
    ("oimomentum.utils.perf_logger", "perf"),
    ("oimomentum.runners", "system"),
    ("config", "system"),
    # Default fallback
    ("oimomentum", "system"),
]


def get_category_for_module(module_name: str) -> str:
    """
    Determine the log category for a given module name.

    Args:
        module_name: Full module path (e.g., "oimomentum.domain.oi_momentum.alerts").

    Returns:
        Category name (system, signal, data, or perf).
    """
    for prefix, category in MODULE_ROUTING:
        if module_name.startswith(prefix):
            return category
    return "system"


# =============================================================================
# TIMEZONE SUPPORT
# =============================================================================

def set_log_timezone(tz: Optional[str] = None) -> None:
    """
    Set the timezone for log timestamps.

    Args:
        tz: Timezone name (e.g., "UTC", "Asia/Bangkok"). None or "local"
            uses local system time.
    """
    global _log_timezone
    if tz is None or tz == "local":
        _log_timezone = None
    else:
        _log_timezone = ZoneInfo(tz)


def get_current_timestamp() -> str:
    """ISO format timestamp in the configured log timezone."""
    if _log_timezone is not None:
        return datetime.now(_log_timezone).isoformat()
    return datetime.now().isoformat()


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

def set_verbose_mode(enabled: bool) -> None:
    """Enable or disable verbose mode (DEBUG level logging)."""
    global _verbose_mode
    _verbose_mode = enabled


def set_log_level_override(level: Optional[str]) -> None:
    """Set a global log level override."""
    global _log_level_override
    _log_level_override = level.upper() if level else None


def get_effective_log_level() -> str:
    """Get the effective log level (considering verbose mode and overrides)."""
    if _verbose_mode:
        return "DEBUG"
    if _log_level_override:
        return _log_level_override
    return "INFO"


# =============================================================================
# FORMATTERS
# =============================================================================

class CycleContextFilter(logging.Filter):
    """
    Stamp cycle ID and instrument label onto records in the calling thread.

    File output is formatted on the queue listener thread, where the
    caller's context variables are not visible.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "cycle_id"):
            record.cycle_id = get_cycle_id()
            record.cycle_label = get_cycle_label()
        return True


def _record_cycle(record: logging.LogRecord) -> tuple[str, Optional[str]]:
    """Cycle ID and label stamped on the record, else the current context."""
    if hasattr(record, "cycle_id"):
        return record.cycle_id, getattr(record, "cycle_label", None)
    return get_cycle_id(), get_cycle_label()


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging with cycle ID support.

    Formats log records as single-line JSON with timestamp, level,
    category (derived from logger name), cycle ID and instrument label,
    message and any extra data attached via ``extra={"data": {...}}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        cycle_id, label = _record_cycle(record)
        log_entry = {
            "ts": get_current_timestamp(),
            "level": record.levelname,
            "cat": self._get_category(record.name),
            "cycle": cycle_id,
            "msg": record.getMessage(),
        }

        if label:
            log_entry["sym"] = label

        if hasattr(record, "data") and record.data:
            log_entry["data"] = record.data

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)

    def _get_category(self, logger_name: str) -> str:
        """Extract category from logger name."""
        if logger_name.startswith(f"{ROOT_LOGGER_NAME}."):
            parts = logger_name.split(".")
            if len(parts) >= 2 and parts[1] in CATEGORIES:
                return parts[1]
        return "system"


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with cycle ID and color support.

    Format: [LEVEL] [cycle] message, or [LEVEL] [cycle SYMBOL] message
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        cycle_id, label = _record_cycle(record)
        if label:
            cycle_id = f"{cycle_id} {label}"
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            return f"{color}[{level:7}]{self.RESET} [{cycle_id}] {record.getMessage()}"
        return f"[{level:7}] [{cycle_id}] {record.getMessage()}"


# =============================================================================
# LOGGER FACTORY
# =============================================================================

def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for the given module, routed to the correct category.

    Args:
        module_name: Module name (typically __name__).

    Returns:
        Logger instance for the module's category.

    Example:
        from oimomentum.utils.logging_setup import get_logger
        logger = get_logger(__name__)
        logger.info("Classifying...")
    """
    category = get_category_for_module(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")


# =============================================================================
# RUN NUMBER MANAGEMENT
# =============================================================================

def _get_next_run_number(log_dir: str, env: str, date_str: str) -> int:
    """Find the next available run number for today's date."""
    log_path = Path(log_dir) / date_str
    if not log_path.exists():
        return 1

    # Pattern: oi_momentum_{env}_{category}_{date}_{N}.log
    suffixes = "|".join(CATEGORY_SUFFIXES.values())
    pattern = re.compile(
        rf'^oi_momentum_{re.escape(env)}_(?:{suffixes})_{re.escape(date_str)}_(\d+)\.log$'
    )

    max_num = 0
    for filename in os.listdir(log_path):
        match = pattern.match(filename)
        if match:
            max_num = max(max_num, int(match.group(1)))

    return max_num + 1


def _get_session_run_number(log_dir: str, env: str) -> int:
    """Get or initialize the session run number."""
    global _session_run_number

    if _session_run_number is None:
        date_str = datetime.now().strftime('%Y-%m-%d')
        _session_run_number = _get_next_run_number(log_dir, env, date_str)

    return _session_run_number


def reset_session_run_number() -> None:
    """Reset the session run number (for testing)."""
    global _session_run_number
    _session_run_number = None


# =============================================================================
# CATEGORY LOGGING SETUP
# =============================================================================

def setup_category_logging(
    env: str,
    log_dir: str = "./logs",
    level: str = "INFO",
    console: bool = False,
    verbose: bool = False,
) -> Dict[str, logging.Logger]:
    """
    Set up separate log files for each category.

    Creates log files in a date-specific subdirectory:
    - logs/{date}/oi_momentum_{env}_sys_{date}_{run}.log - System events
    - logs/{date}/oi_momentum_{env}_sig_{date}_{run}.log - Signal events
    - logs/{date}/oi_momentum_{env}_dat_{date}_{run}.log - Data events
    - logs/{date}/oi_momentum_{env}_prf_{date}_{run}.log - Performance events

    Args:
        env: Environment name (dev/prod/test).
        log_dir: Base directory for log files.
        level: Default logging level.
        console: Enable console output.
        verbose: Enable verbose (DEBUG) mode.

    Returns:
        Dict mapping category name to logger.
    """
    global _category_loggers

    shutdown_logging()
    for category in CATEGORIES:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    set_verbose_mode(verbose)
    if not verbose:
        set_log_level_override(level)

    date_str = datetime.now().strftime('%Y-%m-%d')
    log_path = Path(log_dir) / date_str
    log_path.mkdir(parents=True, exist_ok=True)

    run_number = _get_session_run_number(log_dir, env)
    effective_level = getattr(logging, get_effective_log_level(), logging.INFO)

    for category in CATEGORIES:
        suffix = CATEGORY_SUFFIXES[category]
        filename = f"oi_momentum_{env}_{suffix}_{date_str}_{run_number}.log"

        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")
        logger.setLevel(effective_level)
        logger.propagate = False

        file_handler = logging.FileHandler(
            filename=str(log_path / filename),
            mode='a',
            encoding='utf-8',
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(effective_level)

        # QueueHandler keeps file writes off the caller's thread
        log_queue: Queue = Queue(-1)
        queue_handler = logging.handlers.QueueHandler(log_queue)
        queue_handler.addFilter(CycleContextFilter())
        logger.addHandler(queue_handler)

        listener = logging.handlers.QueueListener(
            log_queue, file_handler, respect_handler_level=True
        )
        listener.start()
        _queue_listeners.append(listener)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter(use_colors=sys.stderr.isatty()))
            console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
            logger.addHandler(console_handler)

        _category_loggers[category] = logger

    return _category_loggers


def flush_all_loggers() -> None:
    """Flush all handlers to ensure logs are written to disk."""
    for category in CATEGORIES:
        for handler in logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}").handlers:
            handler.flush()


def shutdown_logging() -> None:
    """Stop all queue listeners (call during application shutdown)."""
    for listener in _queue_listeners:
        listener.stop()
    _queue_listeners.clear()


def setup_logging(
    config: LoggingConfig,
    env: str = "dev",
    verbose: bool = False,
) -> Dict[str, logging.Logger]:
    """
    Configure logging from a LoggingConfig section.

    File logging is used when ``config.file_enabled`` is set; otherwise only
    the console handler is attached. ``verbose`` drops every category and
    console handler to DEBUG.
    """
    set_log_timezone(config.timezone)

    if config.file_enabled:
        return setup_category_logging(
            env=env,
            log_dir=config.log_dir,
            level=config.level,
            console=config.console,
            verbose=verbose,
        )

    shutdown_logging()
    set_verbose_mode(verbose)
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)
    formatter: logging.Formatter
    if config.json:
        formatter = JSONFormatter()
    else:
        formatter = ConsoleFormatter(use_colors=sys.stderr.isatty())

    for category in CATEGORIES:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        if config.console:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.propagate = False
        _category_loggers[category] = logger

    return _category_loggers
