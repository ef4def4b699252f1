"""
OI Alert Generator - Derives alerts from the latest classified point.

Alerts are independent: every rule that matches fires, in table order.
Confidence values are fixed per rule, not computed.

| Rule                                | Severity | Confidence |
|-------------------------------------|----------|------------|
| FORCED_UNWIND + EXTREME             | CRITICAL | 95         |
| SWING_REVERSAL + STRONG             | CRITICAL | 85         |
| POST_LIQ_BOUNCE (any strength)      | WARNING  | 75         |
| FAKE_BUILDUP (any strength)         | WARNING  | 70         |
| TREND_CONTINUATION + STRONG         | INFO     | 80         |
| ACCUMULATION (any strength)         | INFO     | 65         |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from oimomentum.utils.logging_setup import get_logger

from .config import AlertConfidence
from .models import Alert, AlertSeverity, ClassifiedPoint, SignalKind, StrengthKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class AlertRule:
    """Matches a signal and, optionally, one exact strength."""

    signal: SignalKind
    strength: Optional[StrengthKind]
    severity: AlertSeverity
    confidence_key: str  # attribute of AlertConfidence
    message: str

    def matches(self, point: ClassifiedPoint) -> bool:
        if point.signal is not self.signal:
            return False
        return self.strength is None or point.strength is self.strength


ALERT_RULES: tuple[AlertRule, ...] = (
    AlertRule(
        signal=SignalKind.FORCED_UNWIND,
        strength=StrengthKind.EXTREME,
        severity=AlertSeverity.CRITICAL,
        confidence_key="forced_unwind",
        message="EXTREME FORCED UNWIND - Large positions being closed rapidly",
    ),
    AlertRule(
        signal=SignalKind.SWING_REVERSAL,
        strength=StrengthKind.STRONG,
        severity=AlertSeverity.CRITICAL,
        confidence_key="swing_reversal",
        message="SWING REVERSAL DETECTED - Momentum turning negative",
    ),
    AlertRule(
        signal=SignalKind.POST_LIQ_BOUNCE,
        strength=None,
        severity=AlertSeverity.WARNING,
        confidence_key="post_liq_bounce",
        message="POST-LIQ BOUNCE - Recovery after liquidation cascade",
    ),
    AlertRule(
        signal=SignalKind.FAKE_BUILDUP,
        strength=None,
        severity=AlertSeverity.WARNING,
        confidence_key="fake_buildup",
        message="FAKE OI BUILDUP - Likely arbitrage activity, not directional",
    ),
    AlertRule(
        signal=SignalKind.TREND_CONTINUATION,
        strength=StrengthKind.STRONG,
        severity=AlertSeverity.INFO,
        confidence_key="trend_continuation",
        message="STRONG TREND CONTINUATION - OI expanding with momentum",
    ),
    AlertRule(
        signal=SignalKind.ACCUMULATION,
        strength=None,
        severity=AlertSeverity.INFO,
        confidence_key="accumulation",
        message="ACCUMULATION PHASE - Steady OI buildup",
    ),
)


class AlertGenerator:
    """Evaluates the alert table against the latest classified point."""

    def __init__(self, confidence: Optional[AlertConfidence] = None):
        self._confidence = confidence or AlertConfidence()

    def generate(self, series: Sequence[ClassifiedPoint]) -> List[Alert]:
        """
        Generate alerts for the last point of ``series``.

        Args:
            series: Classified points in time order.

        Returns:
            Alerts in table order; empty when nothing matches or the series
            is empty.
        """
        if not series:
            return []

        current = series[-1]
        alerts = [
            Alert(
                severity=rule.severity,
                message=rule.message,
                confidence=int(getattr(self._confidence, rule.confidence_key)),
            )
            for rule in ALERT_RULES
            if rule.matches(current)
        ]

        for alert in alerts:
            if alert.severity is AlertSeverity.CRITICAL:
                logger.warning(f"OI alert [{alert.severity.value}] {alert.message} ({alert.confidence}%)")
            else:
                logger.info(f"OI alert [{alert.severity.value}] {alert.message} ({alert.confidence}%)")

        return alerts


def generate_alerts(
    series: Sequence[ClassifiedPoint], confidence: Optional[AlertConfidence] = None
) -> List[Alert]:
    """Functional form of ``AlertGenerator.generate``."""
    return AlertGenerator(confidence).generate(series)
