"""Trend and regime aggregation over classified points.

- determine_trend: BULLISH / BEARISH / NEUTRAL from the mean of the most
  recent momentum values (fewer than the window → whatever is available)
- calculate_statistics: signal counts and averages over the most recent
  points, with a TRENDING / RANGING / MIXED regime label
"""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from .config import RegimeThresholds, TrendThresholds
from .models import ClassifiedPoint, MomentumStatistics, Regime, SignalKind, TrendDirection

TREND_SIGNALS = (SignalKind.TREND_CONTINUATION, SignalKind.ACCUMULATION)
DISTRIBUTION_SIGNALS = (SignalKind.DISTRIBUTION, SignalKind.SWING_REVERSAL)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def determine_trend(
    momentum: Sequence[float],
    window: int = 10,
    thresholds: Optional[TrendThresholds] = None,
) -> TrendDirection:
    """Coarse trend from the average of the last ``window`` momentum values."""
    t = thresholds or TrendThresholds()
    avg = _mean([float(m) for m in momentum[-window:]])

    if avg > t.bullish_momentum:
        return TrendDirection.BULLISH
    if avg < t.bearish_momentum:
        return TrendDirection.BEARISH
    return TrendDirection.NEUTRAL


def classify_regime(trend_ratio: float, thresholds: Optional[RegimeThresholds] = None) -> Regime:
    """Map a trend-bar percentage to a regime label."""
    t = thresholds or RegimeThresholds()
    if trend_ratio > t.trending_ratio:
        return Regime.TRENDING
    if trend_ratio < t.ranging_ratio:
        return Regime.RANGING
    return Regime.MIXED


def calculate_statistics(
    series: Sequence[ClassifiedPoint],
    window: int = 30,
    thresholds: Optional[RegimeThresholds] = None,
) -> MomentumStatistics:
    """Summarize the last ``window`` classified points.

    Args:
        series: Classified points in time order (non-empty).
        window: Number of most recent points to summarize.
        thresholds: Regime cutoffs.

    Returns:
        MomentumStatistics for the window.
    """
    if not series:
        raise ValueError("calculate_statistics requires at least one classified point")

    recent = list(series[-window:])
    counts = Counter(p.signal for p in recent)
    total = len(recent)

    trend_bars = sum(counts[s] for s in TREND_SIGNALS)
    distribution_bars = sum(counts[s] for s in DISTRIBUTION_SIGNALS)
    trend_ratio = trend_bars / total * 100

    return MomentumStatistics(
        trend_bars=trend_bars,
        distribution_bars=distribution_bars,
        neutral_bars=counts[SignalKind.NEUTRAL],
        avg_momentum=_mean([p.momentum for p in recent]),
        avg_acceleration=_mean([p.acceleration for p in recent]),
        trend_ratio=trend_ratio,
        regime=classify_regime(trend_ratio, thresholds),
        total=total,
    )
