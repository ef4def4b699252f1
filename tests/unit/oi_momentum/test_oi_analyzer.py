"""End-to-end tests for the OI momentum analyzer and report builder.

Uses small hand-computed hourly series so the expected classifications
can be checked against the momentum and acceleration values directly.
"""

from __future__ import annotations

import json

import pytest

from oimomentum.domain.exceptions import InsufficientDataError, InvalidSampleError
from oimomentum.domain.oi_momentum.analyzer import (
    OIMomentumAnalyzer,
    analyze_oi_momentum,
    get_calculation_metadata,
)
from oimomentum.domain.oi_momentum.config import OIMomentumConfig
from oimomentum.domain.oi_momentum.models import (
    AlertSeverity,
    OISample,
    Regime,
    RiskLevel,
    SignalKind,
    StrengthKind,
    TrendDirection,
)

HOUR_MS = 3_600_000


@pytest.fixture
def analyzer() -> OIMomentumAnalyzer:
    return OIMomentumAnalyzer()


# ── Scenarios ─────────────────────────────────────────────────────────


class TestTrendScenario:
    def test_derivatives(self, analyzer: OIMomentumAnalyzer, trend_samples: list[OISample]) -> None:
        result = analyzer.analyze(trend_samples)
        assert [p.momentum for p in result.series] == pytest.approx([0.0, 2.0, 2.941, 4.762, 7.273], abs=1e-3)
        assert [p.acceleration for p in result.series] == pytest.approx(
            [0.0, 2.0, 0.941, 1.821, 2.511], abs=1e-3
        )

    def test_latest_point(self, analyzer: OIMomentumAnalyzer, trend_samples: list[OISample]) -> None:
        result = analyzer.analyze(trend_samples)
        assert result.current is result.series[-1]
        assert result.current.signal is SignalKind.TREND_CONTINUATION
        assert result.current.strength is StrengthKind.EXTREME
        assert result.trend is TrendDirection.BULLISH
        assert result.signals.trend_continuation
        # Only STRONG trend continuation alerts
        assert result.alerts == []

    def test_report(self, analyzer: OIMomentumAnalyzer, trend_samples: list[OISample]) -> None:
        report = analyzer.build_report(trend_samples, interval="1h", symbol="BTCUSDT")
        assert report.symbol == "BTCUSDT"
        assert report.score == 89
        assert report.statistics.trend_bars == 4
        assert report.statistics.regime is Regime.TRENDING
        assert report.risk_mode.multiplier == 1.5
        assert report.risk_mode.label == "1.5R (Boosted)"
        assert report.strategy.endswith("Breakout entries / Trend following")
        assert report.interpretation.risk is RiskLevel.LOW
        assert report.metadata.lookback_display == "5h"


class TestForcedUnwindScenario:
    def test_classification_and_alert(self, analyzer: OIMomentumAnalyzer, unwind_samples: list[OISample]) -> None:
        result = analyzer.analyze(unwind_samples)
        current = result.current
        assert current.momentum < -5
        assert current.acceleration < -4
        assert (current.signal, current.strength) == (SignalKind.FORCED_UNWIND, StrengthKind.EXTREME)
        assert result.series[3].signal is SignalKind.FORCED_UNWIND
        assert result.series[3].strength is StrengthKind.MODERATE
        assert result.trend is TrendDirection.BEARISH
        assert result.signals.forced_unwind

        assert len(result.alerts) == 1
        assert result.alerts[0].severity is AlertSeverity.CRITICAL
        assert result.alerts[0].confidence == 95

    def test_report(self, analyzer: OIMomentumAnalyzer, unwind_samples: list[OISample]) -> None:
        report = analyzer.build_report(unwind_samples)
        assert report.score == 100
        assert report.risk_mode.multiplier == 0.0
        assert report.risk_mode.label == "0R (Flat)"
        assert report.statistics.regime is Regime.RANGING
        assert report.statistics.neutral_bars == 3
        assert report.interpretation.risk is RiskLevel.HIGH


class TestAccumulationScenario:
    def test_accumulation_wins_over_fake_buildup(
        self, analyzer: OIMomentumAnalyzer, accumulation_samples: list[OISample]
    ) -> None:
        result = analyzer.analyze(accumulation_samples)
        for point in result.series[2:]:
            assert 0 < point.momentum < 1
            assert abs(point.acceleration) < 0.5
            assert point.signal is SignalKind.ACCUMULATION
            assert point.strength is StrengthKind.MODERATE
        assert result.trend is TrendDirection.NEUTRAL
        assert [a.confidence for a in result.alerts] == [65]

    def test_report(self, analyzer: OIMomentumAnalyzer, accumulation_samples: list[OISample]) -> None:
        report = analyzer.build_report(accumulation_samples)
        assert report.score == 60
        assert report.statistics.regime is Regime.TRENDING
        # momentum below 1 → not the 1R accumulation case
        assert report.risk_mode.multiplier == 0.7


class TestDistributionScenario:
    def test_report(self, analyzer: OIMomentumAnalyzer, distribution_samples: list[OISample]) -> None:
        report = analyzer.build_report(distribution_samples)
        current = report.analysis.current
        assert current.signal is SignalKind.DISTRIBUTION
        assert report.analysis.alerts == []
        assert report.score == 56
        assert report.statistics.distribution_bars == 3
        assert report.statistics.regime is Regime.RANGING
        assert report.risk_mode.multiplier == 0.5
        assert report.strategy.endswith("Mean-reversion / Counter-trend scalps")


class TestSwingReversalScenario:
    def test_critical_alert(self, analyzer: OIMomentumAnalyzer, reversal_samples: list[OISample]) -> None:
        result = analyzer.analyze(reversal_samples)
        assert result.series[1].signal is SignalKind.TREND_CONTINUATION
        assert (result.current.signal, result.current.strength) == (
            SignalKind.SWING_REVERSAL,
            StrengthKind.STRONG,
        )
        assert result.signals.swing_reversal
        assert [(a.severity, a.confidence) for a in result.alerts] == [(AlertSeverity.CRITICAL, 85)]


# ── Input contract ────────────────────────────────────────────────────


class TestInputContract:
    def test_insufficient_data(self, analyzer: OIMomentumAnalyzer) -> None:
        samples = [OISample(0, 1000.0), OISample(HOUR_MS, 1010.0)]
        with pytest.raises(InsufficientDataError, match="Need at least 3 data points"):
            analyzer.analyze(samples)

    def test_zero_time_delta(self, analyzer: OIMomentumAnalyzer) -> None:
        samples = [OISample(0, 1000.0), OISample(0, 1010.0), OISample(HOUR_MS, 1020.0)]
        with pytest.raises(InvalidSampleError):
            analyzer.analyze(samples)

    def test_zero_value(self, analyzer: OIMomentumAnalyzer) -> None:
        samples = [OISample(0, 0.0), OISample(HOUR_MS, 1010.0), OISample(2 * HOUR_MS, 1020.0)]
        with pytest.raises(InvalidSampleError):
            analyzer.analyze(samples)

    def test_configured_minimum(self, trend_samples: list[OISample]) -> None:
        analyzer = OIMomentumAnalyzer({"windows": {"min_samples": 6}})
        with pytest.raises(InsufficientDataError):
            analyzer.analyze(trend_samples)


# ── Invariants ────────────────────────────────────────────────────────


class TestInvariants:
    def test_deterministic(self, analyzer: OIMomentumAnalyzer, unwind_samples: list[OISample]) -> None:
        first = analyzer.build_report(unwind_samples, symbol="ETHUSDT").to_dict()
        second = analyzer.build_report(unwind_samples, symbol="ETHUSDT").to_dict()
        assert first == second

    def test_no_state_between_calls(
        self,
        analyzer: OIMomentumAnalyzer,
        trend_samples: list[OISample],
        unwind_samples: list[OISample],
    ) -> None:
        before = analyzer.analyze(trend_samples).to_dict()
        analyzer.analyze(unwind_samples)
        assert analyzer.analyze(trend_samples).to_dict() == before

    def test_at_most_one_summary_flag(
        self,
        analyzer: OIMomentumAnalyzer,
        trend_samples: list[OISample],
        unwind_samples: list[OISample],
        accumulation_samples: list[OISample],
    ) -> None:
        for samples in (trend_samples, unwind_samples, accumulation_samples):
            flags = analyzer.analyze(samples).signals.to_dict()
            assert sum(flags.values()) <= 1

    def test_longer_window(self, analyzer: OIMomentumAnalyzer) -> None:
        values = [1000 + 5 * i + (12 if i % 4 == 0 else 0) for i in range(60)]
        samples = [OISample(i * HOUR_MS, float(v)) for i, v in enumerate(values)]
        report = analyzer.build_report(samples)
        assert len(report.analysis.series) == 60
        assert report.statistics.total == 30
        assert 0 <= report.score <= 100
        assert report.metadata.lookback_display == "3d"

    def test_report_is_json_serializable(self, analyzer: OIMomentumAnalyzer, trend_samples: list[OISample]) -> None:
        payload = json.loads(json.dumps(analyzer.build_report(trend_samples).to_dict()))
        assert payload["analysis"]["current"]["signal"] == "TREND_CONTINUATION"
        assert set(payload["analysis"]["signals"]) == {
            "trendContinuation",
            "swingReversal",
            "forcedUnwind",
            "postLiqBounce",
            "fakeOI",
        }
        assert payload["riskMode"]["label"] == "1.5R (Boosted)"
        assert payload["metadata"]["lookbackPeriod"] == 5

    def test_functional_form(self, trend_samples: list[OISample]) -> None:
        assert analyze_oi_momentum(trend_samples).to_dict() == OIMomentumAnalyzer().analyze(trend_samples).to_dict()

    def test_config_object_accepted(self, trend_samples: list[OISample]) -> None:
        config = OIMomentumConfig()
        assert OIMomentumAnalyzer(config).config is config


# ── Calculation metadata ──────────────────────────────────────────────


class TestCalculationMetadata:
    @pytest.mark.parametrize(
        "points, interval, display",
        [
            (5, "1h", "5h"),
            (12, "5m", "1h"),
            (24, "1h", "1d"),
            (36, "1h", "2d"),
            (30, "4h", "5d"),
            (10, "unknown", "10h"),
        ],
    )
    def test_lookback_display(self, points: int, interval: str, display: str) -> None:
        meta = get_calculation_metadata(points, interval)
        assert meta.lookback_display == display
        assert meta.lookback_period == points
        assert meta.interval == interval

    def test_fixed_descriptions(self) -> None:
        meta = get_calculation_metadata(10, "1h").to_dict()
        assert meta["momentumUnit"] == "%/hr (normalized by time)"
        assert meta["smoothing"] == "None (raw derivative)"
        assert set(meta["formula"]) == {"momentum", "acceleration"}
        assert len(meta["notes"]) == 3
