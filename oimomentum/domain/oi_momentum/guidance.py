"""
Trading guidance lookup tables.

Deterministic mappings from the latest classified point (plus trend or
regime) to:
- a human-readable interpretation (action, reasoning, risk level)
- a strategy label
- a position-size multiplier in R units

The strategy and risk-mode tables are ordered decision lists evaluated
first-match-wins.
"""

from __future__ import annotations

from typing import Optional

from .config import PositionSizing
from .models import (
    ClassifiedPoint,
    Regime,
    RiskLevel,
    RiskModeSuggestion,
    SignalKind,
    StrengthKind,
    TradingInterpretation,
    TrendDirection,
)

_STRONG_OR_EXTREME = (StrengthKind.STRONG, StrengthKind.EXTREME)

# =============================================================================
# INTERPRETATION
# =============================================================================

_INTERPRETATIONS: dict[str, TradingInterpretation] = {
    "trend_continuation_strong": TradingInterpretation(
        action="New positions are building with positive OI momentum. Breakouts have higher probability to continue.",
        reasoning="Strong directional OI expansion indicates real money flow, not arbitrage. This supports trend continuation.",
        risk=RiskLevel.LOW,
    ),
    "trend_continuation": TradingInterpretation(
        action="Moderate OI expansion detected. Consider adding to positions on pullbacks.",
        reasoning="OI momentum is positive but not extreme. Wait for confirmation before aggressive entries.",
        risk=RiskLevel.MEDIUM,
    ),
    "swing_reversal": TradingInterpretation(
        action="OI momentum is fading with negative acceleration. Watch for mean-reversion and fake breakouts.",
        reasoning="Position builders are slowing down. Trend exhaustion likely. Prepare for consolidation or reversal.",
        risk=RiskLevel.HIGH,
    ),
    "forced_unwind_extreme": TradingInterpretation(
        action="CRITICAL: Massive position unwinding in progress. Close longs immediately or prepare for sharp move.",
        reasoning="Extreme OI decline indicates forced liquidations. Price volatility will spike. Risk management critical.",
        risk=RiskLevel.HIGH,
    ),
    "forced_unwind": TradingInterpretation(
        action="Position unwinding detected. Reduce exposure and wait for stabilization.",
        reasoning="OI contraction suggests players exiting. Low conviction environment. Better to stay flat.",
        risk=RiskLevel.MEDIUM,
    ),
    "post_liq_bounce": TradingInterpretation(
        action="Recovery phase after liquidation cascade. Short-term bounce likely, but confirm with price action.",
        reasoning="OI stabilizing after sharp decline. Weak hands flushed. Potential mean-reversion setup.",
        risk=RiskLevel.MEDIUM,
    ),
    "accumulation": TradingInterpretation(
        action="Steady OI buildup indicates smart money accumulation. Good for position building over time.",
        reasoning="Slow, steady OI increase without volatility suggests professional accumulation, not retail FOMO.",
        risk=RiskLevel.LOW,
    ),
    "distribution": TradingInterpretation(
        action="OI declining steadily. Smart money may be exiting. Avoid new longs.",
        reasoning="Gradual OI reduction suggests distribution phase. Trend losing steam.",
        risk=RiskLevel.MEDIUM,
    ),
    "fake_buildup": TradingInterpretation(
        action="OI increasing but momentum weak. Likely arbitrage activity, not directional. Do not chase.",
        reasoning="OI expansion without momentum indicates non-directional flow (funding arb, spread trades). Not tradeable.",
        risk=RiskLevel.HIGH,
    ),
    "neutral": TradingInterpretation(
        action="OI flow is weak and choppy. Better to reduce size or wait for clearer signal.",
        reasoning="No clear directional conviction in OI. Market in consolidation. Low probability setups.",
        risk=RiskLevel.MEDIUM,
    ),
}


def get_trading_interpretation(
    point: ClassifiedPoint, trend: TrendDirection = TrendDirection.NEUTRAL
) -> TradingInterpretation:
    """Human-language reading of the latest point.

    ``trend`` is part of the call contract but does not change the text.
    """
    signal, strength = point.signal, point.strength

    if signal is SignalKind.TREND_CONTINUATION:
        if strength in _STRONG_OR_EXTREME:
            return _INTERPRETATIONS["trend_continuation_strong"]
        return _INTERPRETATIONS["trend_continuation"]
    if signal is SignalKind.FORCED_UNWIND:
        if strength is StrengthKind.EXTREME:
            return _INTERPRETATIONS["forced_unwind_extreme"]
        return _INTERPRETATIONS["forced_unwind"]

    return _INTERPRETATIONS.get(signal.value.lower(), _INTERPRETATIONS["neutral"])


# =============================================================================
# STRATEGY
# =============================================================================

STRATEGY_PREFIX = "Best suited for: "


def get_strategy_recommendation(
    signal: SignalKind,
    strength: StrengthKind,
    regime: Regime,
) -> str:
    """Strategy label for a signal in a regime (first match wins)."""
    if signal is SignalKind.TREND_CONTINUATION and regime is Regime.TRENDING:
        label = "Breakout entries / Trend following"
    elif signal in (SignalKind.SWING_REVERSAL, SignalKind.DISTRIBUTION):
        label = "Mean-reversion / Counter-trend scalps"
    elif signal is SignalKind.FORCED_UNWIND:
        label = "Wait for stabilization / Avoid new entries"
    elif signal is SignalKind.POST_LIQ_BOUNCE:
        label = "Quick bounce scalps / Reduced size"
    elif signal is SignalKind.ACCUMULATION and regime is Regime.RANGING:
        label = "Pullback entries in range / Position building"
    elif signal is SignalKind.FAKE_BUILDUP:
        label = "Stay out / Wait for real directional flow"
    elif regime is Regime.RANGING:
        label = "Range trading / Avoid trend strategies"
    else:
        label = "Wait for clearer signal / Reduce position size"

    return STRATEGY_PREFIX + label


# =============================================================================
# RISK MODE (POSITION SIZING)
# =============================================================================

def _r_label(multiplier: float, tag: str) -> str:
    return f"{multiplier:g}R ({tag})"


def get_risk_mode_suggestion(
    point: ClassifiedPoint,
    regime: Regime,
    sizing: Optional[PositionSizing] = None,
) -> RiskModeSuggestion:
    """
    Position-size multiplier from signal, strength, momentum and regime.

    Ordered checks, first match wins:
        1.5  TREND_CONTINUATION + EXTREME + TRENDING
        1.2  TREND_CONTINUATION + STRONG/EXTREME
        1.0  ACCUMULATION + TRENDING + momentum > 1
        0.6  POST_LIQ_BOUNCE
        0.5  SWING_REVERSAL
        0.0  FORCED_UNWIND
        0.0  FAKE_BUILDUP
        0.5  RANGING regime
        0.7  MIXED regime or WEAK/MODERATE strength
        0.5  DISTRIBUTION (STRONG/EXTREME only)
        1.0  otherwise
    """
    s = sizing or PositionSizing()
    signal, strength = point.signal, point.strength

    if (
        signal is SignalKind.TREND_CONTINUATION
        and strength is StrengthKind.EXTREME
        and regime is Regime.TRENDING
    ):
        return RiskModeSuggestion(
            s.boosted,
            _r_label(s.boosted, "Boosted"),
            "Extreme OI expansion with strong trend - High conviction setup",
        )

    if signal is SignalKind.TREND_CONTINUATION and strength in _STRONG_OR_EXTREME:
        return RiskModeSuggestion(
            s.increased,
            _r_label(s.increased, "Increased"),
            "Strong directional OI flow - Above normal size appropriate",
        )

    if (
        signal is SignalKind.ACCUMULATION
        and regime is Regime.TRENDING
        and point.momentum > s.accumulation_min_momentum
    ):
        return RiskModeSuggestion(
            s.normal,
            _r_label(s.normal, "Normal"),
            "Steady accumulation in trend - Standard position size",
        )

    if signal is SignalKind.POST_LIQ_BOUNCE:
        return RiskModeSuggestion(
            s.bounce,
            _r_label(s.bounce, "Reduced"),
            "Bounce trade after liquidation - Take profit quickly with smaller size",
        )

    if signal is SignalKind.SWING_REVERSAL:
        return RiskModeSuggestion(
            s.reduced,
            _r_label(s.reduced, "Reduced"),
            "OI momentum fading - Reduce size for mean-reversion play",
        )

    if signal is SignalKind.FORCED_UNWIND:
        return RiskModeSuggestion(
            s.flat,
            _r_label(s.flat, "Flat"),
            "Forced liquidation in progress - Stay flat and wait",
        )

    if signal is SignalKind.FAKE_BUILDUP:
        return RiskModeSuggestion(
            s.flat,
            _r_label(s.flat, "Flat"),
            "Fake OI (arbitrage) - No directional edge, stay out",
        )

    if regime is Regime.RANGING:
        return RiskModeSuggestion(
            s.reduced,
            _r_label(s.reduced, "Reduced"),
            "Market in range - Reduce size, avoid trend strategies",
        )

    if regime is Regime.MIXED or strength in (StrengthKind.WEAK, StrengthKind.MODERATE):
        return RiskModeSuggestion(
            s.cautious,
            _r_label(s.cautious, "Cautious"),
            "Mixed signals or weak momentum - Trade cautiously with reduced size",
        )

    # Reached only by DISTRIBUTION graded STRONG or EXTREME
    if signal is SignalKind.DISTRIBUTION:
        return RiskModeSuggestion(
            s.reduced,
            _r_label(s.reduced, "Reduced"),
            "OI declining steadily - Avoid longs, reduce exposure",
        )

    return RiskModeSuggestion(
        s.normal,
        _r_label(s.normal, "Normal"),
        "Standard market conditions - Normal position size",
    )
