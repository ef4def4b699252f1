"""
OI Momentum Domain Models.

Defines the input sample, the per-point classification, and the analysis
outputs consumed by presentation layers:
- OISample: Raw open-interest observation
- ClassifiedPoint: Sample with momentum, acceleration, signal and strength
- AnalysisResult: Full series plus latest point, trend, summary and alerts
- TradingInterpretation / RiskModeSuggestion / MomentumStatistics /
  CalculationMetadata / MomentumReport: guidance and report bundle

Field names returned by ``to_dict()`` and enum values are consumed by
dashboards and chat-context builders. Do not rename them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class SignalKind(Enum):
    """Market-behaviour category for a classified OI point."""

    TREND_CONTINUATION = "TREND_CONTINUATION"  # OI up, momentum up, accel > 0
    SWING_REVERSAL = "SWING_REVERSAL"  # momentum positive but decelerating hard
    FORCED_UNWIND = "FORCED_UNWIND"  # sharp OI drop with strongly negative accel
    POST_LIQ_BOUNCE = "POST_LIQ_BOUNCE"  # recovery after a run of negative momentum
    ACCUMULATION = "ACCUMULATION"  # slow steady OI rise
    DISTRIBUTION = "DISTRIBUTION"  # slow steady OI decline
    FAKE_BUILDUP = "FAKE_BUILDUP"  # OI rising without momentum (arbitrage)
    NEUTRAL = "NEUTRAL"


class StrengthKind(Enum):
    """
    Ordinal strength grade.

    Ordering is only meaningful within one signal category.
    """

    WEAK = "WEAK"
    MODERATE = "MODERATE"
    STRONG = "STRONG"
    EXTREME = "EXTREME"

    @property
    def rank(self) -> int:
        """Ordinal position (WEAK=0 ... EXTREME=3)."""
        return _STRENGTH_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StrengthKind):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, StrengthKind):
            return NotImplemented
        return self.rank <= other.rank


_STRENGTH_RANK = {"WEAK": 0, "MODERATE": 1, "STRONG": 2, "EXTREME": 3}


class TrendDirection(Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class Regime(Enum):
    """Coarse regime from the share of trend bars in the recent window."""

    TRENDING = "TRENDING"
    RANGING = "RANGING"
    MIXED = "MIXED"


class AlertSeverity(Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class OISample:
    """Raw open-interest observation supplied by the fetch layer."""

    timestamp: int  # epoch milliseconds
    value: float
    symbol: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OISample:
        """Build from a ``{"timestamp", "value"}`` mapping (extra keys ignored)."""
        return cls(
            timestamp=int(data["timestamp"]),
            value=float(data["value"]),
            symbol=str(data.get("symbol", "") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"timestamp": self.timestamp, "value": self.value}
        if self.symbol:
            result["symbol"] = self.symbol
        return result


@dataclass(frozen=True)
class ClassifiedPoint:
    """One OI sample after derivative computation and classification."""

    timestamp: int
    oi: float
    momentum: float  # %/hour
    acceleration: float  # change in momentum vs previous point
    signal: SignalKind
    strength: StrengthKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "oi": self.oi,
            "momentum": self.momentum,
            "acceleration": self.acceleration,
            "signal": self.signal.value,
            "strength": self.strength.value,
        }


@dataclass(frozen=True)
class SignalSummary:
    """Presence flags for the latest classified point."""

    trend_continuation: bool
    swing_reversal: bool
    forced_unwind: bool
    post_liq_bounce: bool
    fake_oi: bool

    @classmethod
    def from_point(cls, point: ClassifiedPoint) -> SignalSummary:
        return cls(
            trend_continuation=point.signal is SignalKind.TREND_CONTINUATION,
            swing_reversal=point.signal is SignalKind.SWING_REVERSAL,
            forced_unwind=point.signal is SignalKind.FORCED_UNWIND,
            post_liq_bounce=point.signal is SignalKind.POST_LIQ_BOUNCE,
            fake_oi=point.signal is SignalKind.FAKE_BUILDUP,
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "trendContinuation": self.trend_continuation,
            "swingReversal": self.swing_reversal,
            "forcedUnwind": self.forced_unwind,
            "postLiqBounce": self.post_liq_bounce,
            "fakeOI": self.fake_oi,
        }


@dataclass(frozen=True)
class Alert:
    """Fixed-confidence alert derived from the latest point."""

    severity: AlertSeverity
    message: str
    confidence: int  # 0-100, fixed per rule

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Result of one analysis run.

    ``series`` has exactly one point per input sample, in input order, and
    ``current`` is its last element.
    """

    current: ClassifiedPoint
    trend: TrendDirection
    series: List[ClassifiedPoint]
    signals: SignalSummary
    alerts: List[Alert]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "trend": self.trend.value,
            "series": [p.to_dict() for p in self.series],
            "signals": self.signals.to_dict(),
            "alerts": [a.to_dict() for a in self.alerts],
        }


@dataclass(frozen=True)
class TradingInterpretation:
    action: str
    reasoning: str
    risk: RiskLevel

    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action, "reasoning": self.reasoning, "risk": self.risk.value}


@dataclass(frozen=True)
class RiskModeSuggestion:
    """Position-size multiplier in R units with its label."""

    multiplier: float  # 0.0 - 1.5
    label: str
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {"multiplier": self.multiplier, "label": self.label, "reasoning": self.reasoning}


@dataclass(frozen=True)
class MomentumStatistics:
    """Rolling counts and averages over the most recent classified points."""

    trend_bars: int
    distribution_bars: int
    neutral_bars: int
    avg_momentum: float
    avg_acceleration: float
    trend_ratio: float  # percent of window
    regime: Regime
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trendBars": self.trend_bars,
            "distributionBars": self.distribution_bars,
            "neutralBars": self.neutral_bars,
            "avgMomentum": self.avg_momentum,
            "avgAcceleration": self.avg_acceleration,
            "trendRatio": self.trend_ratio,
            "regime": self.regime.value,
            "total": self.total,
        }


@dataclass(frozen=True)
class CalculationMetadata:
    """Describes how the numbers were produced, for transparency panels."""

    lookback_period: int
    lookback_display: str
    interval: str
    momentum_unit: str = "%/hr (normalized by time)"
    smoothing: str = "None (raw derivative)"
    formula: Dict[str, str] = field(
        default_factory=lambda: {
            "momentum": "First Derivative: d(OI%) / dt",
            "acceleration": "Second Derivative: d(Momentum) / dt",
        }
    )
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lookbackPeriod": self.lookback_period,
            "lookbackDisplay": self.lookback_display,
            "interval": self.interval,
            "momentumUnit": self.momentum_unit,
            "smoothing": self.smoothing,
            "formula": dict(self.formula),
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class MomentumReport:
    """Everything a dashboard card needs for one instrument and interval."""

    analysis: AnalysisResult
    score: int
    interpretation: TradingInterpretation
    statistics: MomentumStatistics
    strategy: str
    risk_mode: RiskModeSuggestion
    metadata: CalculationMetadata
    symbol: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "analysis": self.analysis.to_dict(),
            "score": self.score,
            "interpretation": self.interpretation.to_dict(),
            "statistics": self.statistics.to_dict(),
            "strategy": self.strategy,
            "riskMode": self.risk_mode.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
