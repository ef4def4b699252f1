"""OI momentum analysis pipeline.

Runs the full computation for one sample window. Pure domain logic, no I/O:

    1. Validate samples (count, positive values, strictly increasing time)
    2. Momentum + acceleration series
    3. Per-point classification with a rolling momentum window
    4. Trend from the most recent momentum values
    5. Signal summary + alerts for the latest point
    6. (report) score, statistics/regime, interpretation, strategy,
       risk mode and calculation metadata

Every call recomputes from scratch; nothing is retained between calls.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from oimomentum.utils.logging_setup import get_logger
from oimomentum.utils.perf_logger import log_timing, timed
from oimomentum.utils.trace_context import new_cycle

from .alerts import AlertGenerator
from .classifier import SignalClassifier
from .compute import compute_derivatives
from .config import OIMomentumConfig
from .guidance import get_risk_mode_suggestion, get_strategy_recommendation, get_trading_interpretation
from .models import AnalysisResult, CalculationMetadata, MomentumReport, OISample, SignalSummary
from .scorer import calculate_signal_score
from .trend import calculate_statistics, determine_trend

logger = get_logger(__name__)

# Interval label -> hours per bar
INTERVAL_HOURS: dict[str, float] = {
    "1m": 1 / 60,
    "5m": 5 / 60,
    "15m": 15 / 60,
    "30m": 0.5,
    "1h": 1,
    "2h": 2,
    "4h": 4,
    "1d": 24,
}


def get_calculation_metadata(data_points: int, interval: str) -> CalculationMetadata:
    """Describe lookback and formulas for a window of ``data_points`` bars.

    Unknown intervals are treated as 1h.
    """
    hours = INTERVAL_HOURS.get(interval, 1) * data_points
    if hours >= 24:
        lookback_display = f"{int(hours / 24 + 0.5)}d"
    else:
        lookback_display = f"{int(hours + 0.5)}h"

    return CalculationMetadata(
        lookback_period=data_points,
        lookback_display=lookback_display,
        interval=interval,
        notes=[
            "Momentum is normalized per hour for cross-timeframe comparison",
            "Acceleration shows rate of change in momentum",
            "Signals require minimum 3 data points for calculation",
        ],
    )


class OIMomentumAnalyzer:
    """
    Open-interest momentum / acceleration classifier.

    Stateless apart from its configuration; safe to share between threads.
    """

    def __init__(self, config: OIMomentumConfig | dict[str, Any] | None = None) -> None:
        if config is None:
            self._config = OIMomentumConfig()
        elif isinstance(config, dict):
            self._config = OIMomentumConfig.from_dict(config)
        else:
            self._config = config

        self._classifier = SignalClassifier(
            self._config.classifier,
            momentum_window=self._config.windows.momentum_window,
        )
        self._alerts = AlertGenerator(self._config.alerts)

    @property
    def config(self) -> OIMomentumConfig:
        return self._config

    def analyze(self, samples: Sequence[OISample]) -> AnalysisResult:
        """
        Run the classification pipeline over a sample window.

        Args:
            samples: OI samples ascending by timestamp.

        Returns:
            AnalysisResult with one classified point per sample.

        Raises:
            InsufficientDataError: Fewer than ``windows.min_samples`` samples.
            InvalidSampleError: Non-positive value or non-increasing timestamp.
        """
        label = samples[0].symbol if samples else None
        with new_cycle(label=label), log_timing(
            "oi_momentum_analysis", extra={"samples": len(samples)}
        ):
            return self._analyze(samples)

    def _analyze(self, samples: Sequence[OISample]) -> AnalysisResult:
        cfg = self._config
        samples = tuple(samples)

        momentum, acceleration = compute_derivatives(samples, cfg.windows.min_samples)
        series = self._classifier.classify_series(samples, momentum, acceleration)

        trend = determine_trend(momentum, cfg.windows.trend_window, cfg.trend)
        current = series[-1]
        alerts = self._alerts.generate(series)

        logger.info(
            f"OI momentum: {len(series)} points, current={current.signal.value}/"
            f"{current.strength.value}, trend={trend.value}, alerts={len(alerts)}"
        )

        return AnalysisResult(
            current=current,
            trend=trend,
            series=series,
            signals=SignalSummary.from_point(current),
            alerts=alerts,
        )

    @timed("oi_momentum_report")
    def build_report(
        self,
        samples: Sequence[OISample],
        interval: str = "1h",
        symbol: Optional[str] = None,
        analysis: Optional[AnalysisResult] = None,
    ) -> MomentumReport:
        """
        Analyze and assemble the full guidance bundle for one instrument.

        Args:
            samples: OI samples ascending by timestamp.
            interval: Bar interval label used for lookback metadata.
            symbol: Instrument symbol, passed through to the report.
            analysis: Result already computed for ``samples`` (e.g. from a
                cache). Recomputed when omitted.
        """
        cfg = self._config
        if analysis is None:
            analysis = self.analyze(samples)
        current = analysis.current

        statistics = calculate_statistics(
            analysis.series, cfg.windows.statistics_window, cfg.regime
        )

        return MomentumReport(
            analysis=analysis,
            score=calculate_signal_score(current, cfg.scoring),
            interpretation=get_trading_interpretation(current, analysis.trend),
            statistics=statistics,
            strategy=get_strategy_recommendation(current.signal, current.strength, statistics.regime),
            risk_mode=get_risk_mode_suggestion(current, statistics.regime, cfg.position_sizing),
            metadata=get_calculation_metadata(len(analysis.series), interval),
            symbol=symbol,
        )


def analyze_oi_momentum(
    samples: Sequence[OISample], config: OIMomentumConfig | dict[str, Any] | None = None
) -> AnalysisResult:
    """Convenience wrapper: ``OIMomentumAnalyzer(config).analyze(samples)``."""
    return OIMomentumAnalyzer(config).analyze(samples)
