"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence

import pytest

from oimomentum.domain.oi_momentum.models import OISample
from oimomentum.utils.logging_setup import (
    CATEGORIES,
    ROOT_LOGGER_NAME,
    reset_session_run_number,
    set_log_level_override,
    set_log_timezone,
    set_verbose_mode,
    shutdown_logging,
)

HOUR_MS = 3_600_000


def make_samples(values: Sequence[float], step_ms: int = HOUR_MS, start_ms: int = 0) -> List[OISample]:
    """Evenly spaced OI samples starting at ``start_ms``."""
    return [OISample(timestamp=start_ms + i * step_ms, value=float(v)) for i, v in enumerate(values)]


@pytest.fixture
def trend_samples() -> List[OISample]:
    """Accelerating hourly OI build-up; last point is an extreme trend continuation."""
    return make_samples([1000, 1020, 1050, 1100, 1180])


@pytest.fixture
def unwind_samples() -> List[OISample]:
    """Flat OI followed by two sharp hourly drops."""
    return make_samples([1000, 1000, 1000, 970, 900])


@pytest.fixture
def accumulation_samples() -> List[OISample]:
    """Linear OI rise: small positive momentum, slightly negative acceleration."""
    return make_samples([1000, 1010, 1020, 1030, 1040])


@pytest.fixture
def distribution_samples() -> List[OISample]:
    """Linear OI decline: small negative momentum, flat acceleration."""
    return make_samples([1000, 990, 980, 970, 960])


@pytest.fixture
def reversal_samples() -> List[OISample]:
    """Sharp rise followed by a much smaller one."""
    return make_samples([1000, 1050, 1060])


@pytest.fixture(autouse=True)
def restore_logging_state() -> Iterator[None]:
    """Undo handler and global state changes made by logging setup calls."""
    names = [ROOT_LOGGER_NAME] + [f"{ROOT_LOGGER_NAME}.{c}" for c in CATEGORIES]
    saved = {}
    for name in names:
        lg = logging.getLogger(name)
        saved[name] = (list(lg.handlers), lg.propagate, lg.level)

    yield

    shutdown_logging()
    for name, (handlers, propagate, level) in saved.items():
        lg = logging.getLogger(name)
        for handler in lg.handlers[:]:
            if handler not in handlers:
                handler.close()
                lg.removeHandler(handler)
        lg.propagate = propagate
        lg.setLevel(level)

    set_verbose_mode(False)
    set_log_level_override(None)
    set_log_timezone(None)
    reset_session_run_number()
