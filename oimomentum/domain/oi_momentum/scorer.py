"""Signal confidence scoring.

score = min(round(base[signal] * multiplier[strength] + bonus), 100)
bonus = min((|momentum| + |acceleration|) / 2, 10)

Rounding is half-up (2.5 → 3), not Python's banker's rounding.
"""

from __future__ import annotations

import math
from typing import Optional

from .config import ScoringConfig
from .models import ClassifiedPoint


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def magnitude_bonus(momentum: float, acceleration: float, cap: float = 10.0) -> float:
    """Bonus for derivative magnitude, capped."""
    return min((abs(momentum) + abs(acceleration)) / 2, cap)


def calculate_signal_score(point: ClassifiedPoint, config: Optional[ScoringConfig] = None) -> int:
    """Convert a classified point into a 0-100 confidence score.

    Args:
        point: Classified point.
        config: Base scores, strength multipliers and caps.

    Returns:
        Integer score, at most ``config.max_score``.
    """
    cfg = config or ScoringConfig()
    base = cfg.base_scores.get(point.signal.value, 0)
    multiplier = cfg.strength_multipliers.get(point.strength.value, 1.0)
    bonus = magnitude_bonus(point.momentum, point.acceleration, cfg.magnitude_bonus_cap)

    return min(round_half_up(base * multiplier + bonus), cfg.max_score)
