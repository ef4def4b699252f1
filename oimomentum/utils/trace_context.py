"""
Analysis-cycle context for correlating log lines.

Every analysis run gets a short hex cycle ID, optionally labelled with the
instrument it is analysing. Both values live in context variables so they
follow the call without being passed around, and formatters read them to
stamp each record.

Usage:
    with new_cycle(label="BTCUSDT"):
        result = analyzer.analyze(samples)

    # anywhere below
    from oimomentum.utils.trace_context import get_cycle_id, get_cycle_label
"""

from __future__ import annotations

import secrets
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

NO_CYCLE = "------"

_cycle_id: ContextVar[Optional[str]] = ContextVar("oi_cycle_id", default=None)
_cycle_label: ContextVar[Optional[str]] = ContextVar("oi_cycle_label", default=None)


def generate_cycle_id() -> str:
    """6-character hex ID, e.g. "a7f3b2"."""
    return secrets.token_hex(3)


def get_cycle_id() -> str:
    """Current cycle ID, or ``NO_CYCLE`` outside a cycle."""
    return _cycle_id.get() or NO_CYCLE


def set_cycle_id(cycle_id: str) -> None:
    _cycle_id.set(cycle_id)


def clear_cycle_id() -> None:
    _cycle_id.set(None)
    _cycle_label.set(None)


def get_cycle_label() -> Optional[str]:
    """Instrument label of the current cycle, if any."""
    return _cycle_label.get()


@contextmanager
def new_cycle(label: Optional[str] = None) -> Generator[str, None, None]:
    """
    Run the enclosed block under a fresh cycle ID.

    Args:
        label: Instrument label (e.g. symbol). When omitted, the enclosing
            cycle's label is kept, so a runner can label the whole request
            and the analyzer's inner cycles inherit it.

    Yields:
        The new cycle ID. Previous ID and label are restored on exit.
    """
    cycle_id = generate_cycle_id()
    id_token = _cycle_id.set(cycle_id)
    label_token = _cycle_label.set(label) if label else None

    try:
        yield cycle_id
    finally:
        _cycle_id.reset(id_token)
        if label_token is not None:
            _cycle_label.reset(label_token)
