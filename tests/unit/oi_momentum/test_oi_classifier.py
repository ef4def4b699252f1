"""Tests for the ordered signal rule table and series classification."""

from __future__ import annotations

from collections import deque

import pytest

from oimomentum.domain.oi_momentum.classifier import (
    MomentumWindow,
    RuleContext,
    SignalClassifier,
    build_signal_rules,
    classify_signal,
)
from oimomentum.domain.oi_momentum.compute import compute_derivatives
from oimomentum.domain.oi_momentum.config import ClassifierThresholds, FlatFlowThresholds
from oimomentum.domain.oi_momentum.models import OISample, SignalKind, StrengthKind


def _ctx(oi_change: float, m: float, a: float, avg: float = 0.0) -> RuleContext:
    return RuleContext(oi_change=oi_change, momentum=m, acceleration=a, avg_momentum=avg)


@pytest.fixture
def classifier() -> SignalClassifier:
    return SignalClassifier()


# ── Rule table ────────────────────────────────────────────────────────


class TestRuleTable:
    def test_rule_order(self) -> None:
        names = [r.name for r in build_signal_rules(ClassifierThresholds())]
        assert names == [
            "trend_continuation",
            "swing_reversal",
            "forced_unwind",
            "post_liq_bounce",
            "accumulation",
            "distribution",
            "fake_buildup",
        ]

    def test_no_match_is_neutral_weak(self, classifier: SignalClassifier) -> None:
        assert classifier.evaluate(_ctx(0.0, 0.0, 0.0)) == (SignalKind.NEUTRAL, StrengthKind.WEAK)

    def test_rules_property_is_a_copy(self, classifier: SignalClassifier) -> None:
        rules = classifier.rules
        rules.clear()
        assert len(classifier.rules) == 7


class TestTrendContinuation:
    @pytest.mark.parametrize(
        "m, a, expected",
        [
            (5.5, 2.5, StrengthKind.EXTREME),
            (5.5, 1.5, StrengthKind.STRONG),
            (3.5, 1.5, StrengthKind.STRONG),
            (3.5, 0.5, StrengthKind.MODERATE),
            (1.5, 0.2, StrengthKind.MODERATE),
            (0.8, 0.2, StrengthKind.WEAK),
        ],
    )
    def test_strength_grades(self, classifier: SignalClassifier, m: float, a: float, expected: StrengthKind) -> None:
        signal, strength = classifier.evaluate(_ctx(1.0, m, a))
        assert signal is SignalKind.TREND_CONTINUATION
        assert strength is expected

    def test_boundaries_are_strict(self, classifier: SignalClassifier) -> None:
        # momentum exactly 5 with accel exactly 2 is not EXTREME
        _, strength = classifier.evaluate(_ctx(1.0, 5.0, 2.0))
        assert strength is StrengthKind.STRONG

    def test_wins_over_post_liq_bounce(self, classifier: SignalClassifier) -> None:
        signal, _ = classifier.evaluate(_ctx(1.0, 0.5, 1.5, avg=-3.0))
        assert signal is SignalKind.TREND_CONTINUATION


class TestSwingReversal:
    @pytest.mark.parametrize(
        "a, expected",
        [(-3.5, StrengthKind.STRONG), (-2.0, StrengthKind.MODERATE), (-1.2, StrengthKind.WEAK)],
    )
    def test_strength_grades(self, classifier: SignalClassifier, a: float, expected: StrengthKind) -> None:
        signal, strength = classifier.evaluate(_ctx(1.0, 2.0, a))
        assert signal is SignalKind.SWING_REVERSAL
        assert strength is expected

    def test_small_deceleration_is_not_reversal(self, classifier: SignalClassifier) -> None:
        signal, _ = classifier.evaluate(_ctx(1.0, 2.0, -0.8))
        assert signal is not SignalKind.SWING_REVERSAL


class TestForcedUnwind:
    @pytest.mark.parametrize(
        "m, a, expected",
        [
            (-6.0, -4.5, StrengthKind.EXTREME),
            (-6.0, -3.0, StrengthKind.STRONG),
            (-3.5, -4.5, StrengthKind.STRONG),
            (-2.5, -2.5, StrengthKind.MODERATE),
        ],
    )
    def test_strength_grades(self, classifier: SignalClassifier, m: float, a: float, expected: StrengthKind) -> None:
        signal, strength = classifier.evaluate(_ctx(-3.0, m, a))
        assert signal is SignalKind.FORCED_UNWIND
        assert strength is expected

    def test_requires_oi_drop_beyond_one_percent(self, classifier: SignalClassifier) -> None:
        signal, _ = classifier.evaluate(_ctx(-0.5, -6.0, -4.5))
        assert signal is not SignalKind.FORCED_UNWIND


class TestPostLiqBounce:
    def test_bounce_after_negative_run(self, classifier: SignalClassifier) -> None:
        signal, strength = classifier.evaluate(_ctx(0.0, 0.5, 1.5, avg=-2.0))
        assert signal is SignalKind.POST_LIQ_BOUNCE
        assert strength is StrengthKind.MODERATE

    def test_strong_bounce(self, classifier: SignalClassifier) -> None:
        _, strength = classifier.evaluate(_ctx(0.0, 0.5, 2.5, avg=-2.0))
        assert strength is StrengthKind.STRONG

    def test_uses_last_ten_momentum_values_only(self, classifier: SignalClassifier) -> None:
        history = [-10.0] * 5 + [1.0] * 9 + [0.5]
        signal, _ = classifier.classify(1000.0, 1000.0, 0.5, 1.5, history)
        assert signal is SignalKind.NEUTRAL

    def test_short_history_averages_what_is_available(self, classifier: SignalClassifier) -> None:
        # Two values: mean(-3, 0.5) = -1.25 < -1
        signal, _ = classifier.classify(1000.0, 1000.0, 0.5, 1.5, [-3.0, 0.5])
        assert signal is SignalKind.POST_LIQ_BOUNCE

    def test_padding_history_changes_the_average(self, classifier: SignalClassifier) -> None:
        # Same last two values diluted by eight zeros: mean = -0.25
        history = [0.0] * 8 + [-3.0, 0.5]
        signal, _ = classifier.classify(1000.0, 1000.0, 0.5, 1.5, history)
        assert signal is SignalKind.NEUTRAL

    def test_deque_history(self, classifier: SignalClassifier) -> None:
        signal, _ = classifier.classify(1000.0, 1000.0, 0.5, 1.5, deque([-3.0, 0.5]))
        assert signal is SignalKind.POST_LIQ_BOUNCE

        # Last ten of a longer deque: (6 * 0.0 - 9.0 + 0.5) / 10 = -0.85
        history = deque([-10.0] * 20 + [0.0] * 6 + [-3.0, -3.0, -3.0, 0.5], maxlen=30)
        signal, _ = classifier.classify(1000.0, 1000.0, 0.5, 1.5, history)
        assert signal is SignalKind.NEUTRAL


class TestFlatFlowSignals:
    def test_accumulation_before_fake_buildup(self, classifier: SignalClassifier) -> None:
        # Satisfies both ACCUMULATION and FAKE_BUILDUP predicates
        signal, strength = classifier.evaluate(_ctx(0.8, 0.6, -0.1))
        assert signal is SignalKind.ACCUMULATION
        assert strength is StrengthKind.MODERATE

    def test_distribution(self, classifier: SignalClassifier) -> None:
        signal, strength = classifier.evaluate(_ctx(-0.5, -0.5, -0.2))
        assert signal is SignalKind.DISTRIBUTION
        assert strength is StrengthKind.MODERATE

    def test_fake_buildup_when_flat_band_is_narrower(self) -> None:
        thresholds = ClassifierThresholds(flat_flow=FlatFlowThresholds(max_abs_acceleration=0.1))
        classifier = SignalClassifier(thresholds)
        signal, strength = classifier.evaluate(_ctx(0.8, 0.6, -0.2))
        assert signal is SignalKind.FAKE_BUILDUP
        assert strength is StrengthKind.WEAK


# ── MomentumWindow ────────────────────────────────────────────────────


class TestMomentumWindow:
    def test_empty_mean_is_zero(self) -> None:
        assert MomentumWindow().mean() == 0.0

    def test_bounded(self) -> None:
        window = MomentumWindow(size=3)
        for v in [1.0, 2.0, 3.0, 4.0]:
            window.push(v)
        assert len(window) == 3
        assert window.mean() == pytest.approx(3.0)

    def test_initial_values_respect_size(self) -> None:
        window = MomentumWindow(size=2, initial=[10.0, 1.0, 3.0])
        assert window.mean() == pytest.approx(2.0)


# ── Series classification ─────────────────────────────────────────────


class TestClassifySeries:
    def _classify(self, classifier: SignalClassifier, samples: list[OISample]):
        momentum, acceleration = compute_derivatives(samples)
        return classifier.classify_series(samples, momentum, acceleration)

    def test_one_point_per_sample(self, classifier: SignalClassifier, trend_samples: list[OISample]) -> None:
        series = self._classify(classifier, trend_samples)
        assert len(series) == len(trend_samples)
        assert [p.timestamp for p in series] == [s.timestamp for s in trend_samples]
        assert [p.oi for p in series] == [s.value for s in trend_samples]

    def test_first_point_is_neutral(self, classifier: SignalClassifier, trend_samples: list[OISample]) -> None:
        first = self._classify(classifier, trend_samples)[0]
        assert first.momentum == 0.0
        assert first.acceleration == 0.0
        assert (first.signal, first.strength) == (SignalKind.NEUTRAL, StrengthKind.WEAK)

    def test_trend_series_grades(self, classifier: SignalClassifier, trend_samples: list[OISample]) -> None:
        series = self._classify(classifier, trend_samples)
        assert [(p.signal, p.strength) for p in series[1:]] == [
            (SignalKind.TREND_CONTINUATION, StrengthKind.MODERATE),
            (SignalKind.TREND_CONTINUATION, StrengthKind.MODERATE),
            (SignalKind.TREND_CONTINUATION, StrengthKind.STRONG),
            (SignalKind.TREND_CONTINUATION, StrengthKind.EXTREME),
        ]

    def test_series_matches_pointwise_classify(
        self, classifier: SignalClassifier, unwind_samples: list[OISample]
    ) -> None:
        momentum, acceleration = compute_derivatives(unwind_samples)
        series = classifier.classify_series(unwind_samples, momentum, acceleration)
        for i, point in enumerate(series):
            prev_oi = unwind_samples[i - 1].value if i > 0 else unwind_samples[i].value
            expected = classifier.classify(
                unwind_samples[i].value, prev_oi, momentum[i], acceleration[i], list(momentum[: i + 1])
            )
            assert (point.signal, point.strength) == expected

    def test_functional_form(self) -> None:
        assert classify_signal(1100.0, 1000.0, 6.0, 3.0, [6.0]) == (
            SignalKind.TREND_CONTINUATION,
            StrengthKind.EXTREME,
        )
