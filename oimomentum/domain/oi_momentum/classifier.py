"""
Signal classification as an ordered rule table.

Each point is classified from (oi, previous oi, momentum, acceleration,
trailing momentum average). Predicates overlap, so rules are evaluated in
a fixed order and the first match wins:

    1. TREND_CONTINUATION   oi_change > 0, m > 0, a > 0
    2. SWING_REVERSAL       m > 0, a < 0, |a| > 1
    3. FORCED_UNWIND        oi_change < -1, m < -2, a < -2
    4. POST_LIQ_BOUNCE      avg(last 10 m) < -1, m > 0, a > 1
    5. ACCUMULATION         oi_change > 0, m > 0, |a| < 0.5
    6. DISTRIBUTION         oi_change < 0, m < 0, |a| < 0.5
    7. FAKE_BUILDUP         oi_change > 0.5, 0 < m < 1, |a| < 0.3
    8. NEUTRAL              otherwise

The trailing average includes the current point. For the first points of a
series the window holds fewer than 10 values and the average is over what
is available.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from oimomentum.utils.logging_setup import get_logger

from .config import ClassifierThresholds
from .models import ClassifiedPoint, OISample, SignalKind, StrengthKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuleContext:
    """Inputs every rule predicate and strength function sees."""

    oi_change: float  # percent change vs previous OI
    momentum: float
    acceleration: float
    avg_momentum: float  # trailing window average, current point included

    @property
    def abs_acceleration(self) -> float:
        return abs(self.acceleration)


@dataclass(frozen=True)
class SignalRule:
    """One row of the ordered decision list."""

    name: str
    signal: SignalKind
    predicate: Callable[[RuleContext], bool]
    strength: Callable[[RuleContext], StrengthKind]


class MomentumWindow:
    """Bounded rolling buffer of the most recent momentum values.

    Replaces re-slicing the full growing history on every point; the mean
    equals the mean of the last ``size`` entries of that history.
    """

    def __init__(self, size: int = 10, initial: Iterable[float] = ()):
        self._values: deque[float] = deque(initial, maxlen=size)

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def mean(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    def __len__(self) -> int:
        return len(self._values)


def build_signal_rules(t: ClassifierThresholds) -> List[SignalRule]:
    """Build the ordered rule table from thresholds."""
    tc = t.trend_continuation
    sr = t.swing_reversal
    fu = t.forced_unwind
    pl = t.post_liq_bounce
    flat = t.flat_flow
    fb = t.fake_buildup

    def trend_continuation_strength(c: RuleContext) -> StrengthKind:
        if c.momentum > tc.extreme_momentum and c.acceleration > tc.extreme_acceleration:
            return StrengthKind.EXTREME
        if c.momentum > tc.strong_momentum and c.acceleration > tc.strong_acceleration:
            return StrengthKind.STRONG
        if c.momentum > tc.moderate_momentum:
            return StrengthKind.MODERATE
        return StrengthKind.WEAK

    def swing_reversal_strength(c: RuleContext) -> StrengthKind:
        if c.abs_acceleration > sr.strong_abs_acceleration:
            return StrengthKind.STRONG
        if c.abs_acceleration > sr.moderate_abs_acceleration:
            return StrengthKind.MODERATE
        return StrengthKind.WEAK

    def forced_unwind_strength(c: RuleContext) -> StrengthKind:
        if c.momentum < fu.extreme_momentum and c.acceleration < fu.extreme_acceleration:
            return StrengthKind.EXTREME
        if c.momentum < fu.strong_momentum:
            return StrengthKind.STRONG
        return StrengthKind.MODERATE

    def post_liq_bounce_strength(c: RuleContext) -> StrengthKind:
        if c.acceleration > pl.strong_acceleration:
            return StrengthKind.STRONG
        return StrengthKind.MODERATE

    return [
        SignalRule(
            name="trend_continuation",
            signal=SignalKind.TREND_CONTINUATION,
            predicate=lambda c: c.oi_change > 0 and c.momentum > 0 and c.acceleration > 0,
            strength=trend_continuation_strength,
        ),
        SignalRule(
            name="swing_reversal",
            signal=SignalKind.SWING_REVERSAL,
            predicate=lambda c: (
                c.momentum > 0
                and c.acceleration < 0
                and c.abs_acceleration > sr.min_abs_acceleration
            ),
            strength=swing_reversal_strength,
        ),
        SignalRule(
            name="forced_unwind",
            signal=SignalKind.FORCED_UNWIND,
            predicate=lambda c: (
                c.oi_change < fu.max_oi_change
                and c.momentum < fu.max_momentum
                and c.acceleration < fu.max_acceleration
            ),
            strength=forced_unwind_strength,
        ),
        SignalRule(
            name="post_liq_bounce",
            signal=SignalKind.POST_LIQ_BOUNCE,
            predicate=lambda c: (
                c.avg_momentum < pl.max_avg_momentum
                and c.momentum > 0
                and c.acceleration > pl.min_acceleration
            ),
            strength=post_liq_bounce_strength,
        ),
        SignalRule(
            name="accumulation",
            signal=SignalKind.ACCUMULATION,
            predicate=lambda c: (
                c.oi_change > 0 and c.momentum > 0 and c.abs_acceleration < flat.max_abs_acceleration
            ),
            strength=lambda c: StrengthKind.MODERATE,
        ),
        SignalRule(
            name="distribution",
            signal=SignalKind.DISTRIBUTION,
            predicate=lambda c: (
                c.oi_change < 0 and c.momentum < 0 and c.abs_acceleration < flat.max_abs_acceleration
            ),
            strength=lambda c: StrengthKind.MODERATE,
        ),
        SignalRule(
            name="fake_buildup",
            signal=SignalKind.FAKE_BUILDUP,
            predicate=lambda c: (
                c.oi_change > fb.min_oi_change
                and 0 < c.momentum < fb.max_momentum
                and c.abs_acceleration < fb.max_abs_acceleration
            ),
            strength=lambda c: StrengthKind.WEAK,
        ),
    ]


class SignalClassifier:
    """Evaluates the ordered rule table for single points or a full series."""

    def __init__(
        self,
        thresholds: Optional[ClassifierThresholds] = None,
        momentum_window: int = 10,
    ) -> None:
        self._thresholds = thresholds or ClassifierThresholds()
        self._rules = build_signal_rules(self._thresholds)
        self._momentum_window = momentum_window

    @property
    def rules(self) -> List[SignalRule]:
        return list(self._rules)

    def evaluate(self, context: RuleContext) -> tuple[SignalKind, StrengthKind]:
        """Return (signal, strength) of the first matching rule."""
        for rule in self._rules:
            if rule.predicate(context):
                return rule.signal, rule.strength(context)
        return SignalKind.NEUTRAL, StrengthKind.WEAK

    def classify(
        self,
        oi: float,
        prev_oi: float,
        momentum: float,
        acceleration: float,
        momentum_history: Iterable[float],
    ) -> tuple[SignalKind, StrengthKind]:
        """Classify one point.

        Args:
            oi: Current OI.
            prev_oi: Previous OI (equal to ``oi`` for the first point).
            momentum: Current momentum (%/hour).
            acceleration: Current acceleration.
            momentum_history: Momentum values up to and including this point,
                any iterable (list, deque, array); only the last
                ``momentum_window`` entries are used.
        """
        window = MomentumWindow(self._momentum_window, momentum_history)
        context = RuleContext(
            oi_change=(oi - prev_oi) / prev_oi * 100,
            momentum=float(momentum),
            acceleration=float(acceleration),
            avg_momentum=window.mean(),
        )
        return self.evaluate(context)

    def classify_series(
        self,
        samples: Sequence[OISample],
        momentum: np.ndarray,
        acceleration: np.ndarray,
    ) -> List[ClassifiedPoint]:
        """Classify every sample in order using a rolling momentum window."""
        window = MomentumWindow(self._momentum_window)
        points: List[ClassifiedPoint] = []

        for i, sample in enumerate(samples):
            prev_oi = samples[i - 1].value if i > 0 else sample.value
            m = float(momentum[i])
            a = float(acceleration[i])
            window.push(m)

            context = RuleContext(
                oi_change=(sample.value - prev_oi) / prev_oi * 100,
                momentum=m,
                acceleration=a,
                avg_momentum=window.mean(),
            )
            signal, strength = self.evaluate(context)
            points.append(
                ClassifiedPoint(
                    timestamp=sample.timestamp,
                    oi=sample.value,
                    momentum=m,
                    acceleration=a,
                    signal=signal,
                    strength=strength,
                )
            )

        if points:
            last = points[-1]
            logger.debug(
                f"Classified {len(points)} points, latest {last.signal.value}/{last.strength.value}"
            )
        return points


def classify_signal(
    oi: float,
    prev_oi: float,
    momentum: float,
    acceleration: float,
    momentum_history: Iterable[float],
    thresholds: Optional[ClassifierThresholds] = None,
) -> tuple[SignalKind, StrengthKind]:
    """Functional form of ``SignalClassifier.classify`` with default window."""
    return SignalClassifier(thresholds).classify(
        oi, prev_oi, momentum, acceleration, momentum_history
    )
