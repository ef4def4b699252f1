"""Typed configuration for the OI momentum engine.

Every threshold and lookup table the engine uses lives here. Defaults are
the production values; YAML overrides are validated at load time and
unknown keys are ignored.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import ConfigurationError

# Per-hour normalization constant (milliseconds in one hour)
MS_PER_HOUR = 3_600_000


@dataclass
class WindowConfig:
    """Sample count requirements and trailing window sizes."""

    min_samples: int = 3
    momentum_window: int = 10  # POST_LIQ_BOUNCE trailing average
    trend_window: int = 10
    statistics_window: int = 30


@dataclass
class TrendContinuationThresholds:
    extreme_momentum: float = 5.0
    extreme_acceleration: float = 2.0
    strong_momentum: float = 3.0
    strong_acceleration: float = 1.0
    moderate_momentum: float = 1.0


@dataclass
class SwingReversalThresholds:
    min_abs_acceleration: float = 1.0
    strong_abs_acceleration: float = 3.0
    moderate_abs_acceleration: float = 1.5


@dataclass
class ForcedUnwindThresholds:
    max_oi_change: float = -1.0
    max_momentum: float = -2.0
    max_acceleration: float = -2.0
    extreme_momentum: float = -5.0
    extreme_acceleration: float = -4.0
    strong_momentum: float = -3.0


@dataclass
class PostLiqBounceThresholds:
    max_avg_momentum: float = -1.0
    min_acceleration: float = 1.0
    strong_acceleration: float = 2.0


@dataclass
class FlatFlowThresholds:
    """Shared by ACCUMULATION and DISTRIBUTION."""

    max_abs_acceleration: float = 0.5


@dataclass
class FakeBuildupThresholds:
    min_oi_change: float = 0.5
    max_momentum: float = 1.0
    max_abs_acceleration: float = 0.3


@dataclass
class ClassifierThresholds:
    """Thresholds for the ordered signal rule table."""

    trend_continuation: TrendContinuationThresholds = field(
        default_factory=TrendContinuationThresholds
    )
    swing_reversal: SwingReversalThresholds = field(default_factory=SwingReversalThresholds)
    forced_unwind: ForcedUnwindThresholds = field(default_factory=ForcedUnwindThresholds)
    post_liq_bounce: PostLiqBounceThresholds = field(default_factory=PostLiqBounceThresholds)
    flat_flow: FlatFlowThresholds = field(default_factory=FlatFlowThresholds)
    fake_buildup: FakeBuildupThresholds = field(default_factory=FakeBuildupThresholds)


@dataclass
class TrendThresholds:
    bullish_momentum: float = 1.0
    bearish_momentum: float = -1.0


@dataclass
class RegimeThresholds:
    """Trend-ratio cutoffs (percent of window) for regime labels."""

    trending_ratio: float = 60.0
    ranging_ratio: float = 30.0


def _default_base_scores() -> dict[str, float]:
    return {
        "TREND_CONTINUATION": 70,
        "SWING_REVERSAL": 80,
        "FORCED_UNWIND": 90,
        "POST_LIQ_BOUNCE": 75,
        "ACCUMULATION": 60,
        "DISTRIBUTION": 55,
        "FAKE_BUILDUP": 30,
        "NEUTRAL": 0,
    }


def _default_strength_multipliers() -> dict[str, float]:
    return {
        "EXTREME": 1.2,
        "STRONG": 1.1,
        "MODERATE": 1.0,
        "WEAK": 0.8,
    }


@dataclass
class ScoringConfig:
    base_scores: dict[str, float] = field(default_factory=_default_base_scores)
    strength_multipliers: dict[str, float] = field(default_factory=_default_strength_multipliers)
    magnitude_bonus_cap: float = 10.0
    max_score: int = 100


@dataclass
class AlertConfidence:
    """Fixed confidence values (0-100) per alert rule."""

    forced_unwind: int = 95
    swing_reversal: int = 85
    post_liq_bounce: int = 75
    fake_buildup: int = 70
    trend_continuation: int = 80
    accumulation: int = 65


@dataclass
class PositionSizing:
    """Position-size multipliers (in R) for the risk-mode table."""

    boosted: float = 1.5
    increased: float = 1.2
    normal: float = 1.0
    bounce: float = 0.6
    reduced: float = 0.5
    flat: float = 0.0
    cautious: float = 0.7
    accumulation_min_momentum: float = 1.0


@dataclass
class OIMomentumConfig:
    """Complete OI momentum engine configuration."""

    windows: WindowConfig = field(default_factory=WindowConfig)
    classifier: ClassifierThresholds = field(default_factory=ClassifierThresholds)
    trend: TrendThresholds = field(default_factory=TrendThresholds)
    regime: RegimeThresholds = field(default_factory=RegimeThresholds)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    alerts: AlertConfidence = field(default_factory=AlertConfidence)
    position_sizing: PositionSizing = field(default_factory=PositionSizing)

    @classmethod
    def from_yaml(cls, path: Path) -> OIMomentumConfig:
        """Load and validate config from YAML file."""
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> OIMomentumConfig:
        """Build typed config from raw dict, using defaults for missing keys."""
        if not isinstance(raw, dict):
            raise ConfigurationError(f"OI momentum config must be a mapping, got {type(raw).__name__}")

        classifier_raw = raw.get("classifier") or {}
        classifier = ClassifierThresholds(
            trend_continuation=_build_dataclass(
                TrendContinuationThresholds, classifier_raw.get("trend_continuation", {})
            ),
            swing_reversal=_build_dataclass(
                SwingReversalThresholds, classifier_raw.get("swing_reversal", {})
            ),
            forced_unwind=_build_dataclass(
                ForcedUnwindThresholds, classifier_raw.get("forced_unwind", {})
            ),
            post_liq_bounce=_build_dataclass(
                PostLiqBounceThresholds, classifier_raw.get("post_liq_bounce", {})
            ),
            flat_flow=_build_dataclass(FlatFlowThresholds, classifier_raw.get("flat_flow", {})),
            fake_buildup=_build_dataclass(
                FakeBuildupThresholds, classifier_raw.get("fake_buildup", {})
            ),
        )

        # Partial score tables override individual entries only
        scoring_raw = dict(raw.get("scoring") or {})
        scoring_raw["base_scores"] = {
            **_default_base_scores(),
            **(scoring_raw.get("base_scores") or {}),
        }
        scoring_raw["strength_multipliers"] = {
            **_default_strength_multipliers(),
            **(scoring_raw.get("strength_multipliers") or {}),
        }

        config = cls(
            windows=_build_dataclass(WindowConfig, raw.get("windows", {})),
            classifier=classifier,
            trend=_build_dataclass(TrendThresholds, raw.get("trend", {})),
            regime=_build_dataclass(RegimeThresholds, raw.get("regime", {})),
            scoring=_build_dataclass(ScoringConfig, scoring_raw),
            alerts=_build_dataclass(AlertConfidence, raw.get("alerts", {})),
            position_sizing=_build_dataclass(PositionSizing, raw.get("position_sizing", {})),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Reject values the engine cannot run with."""
        w = self.windows
        if w.min_samples < 3:
            raise ConfigurationError(f"windows.min_samples must be >= 3, got {w.min_samples}")
        for name in ("momentum_window", "trend_window", "statistics_window"):
            if getattr(w, name) < 1:
                raise ConfigurationError(f"windows.{name} must be >= 1, got {getattr(w, name)}")

        if self.regime.ranging_ratio > self.regime.trending_ratio:
            raise ConfigurationError(
                "regime.ranging_ratio must not exceed regime.trending_ratio "
                f"({self.regime.ranging_ratio} > {self.regime.trending_ratio})"
            )

        for name, value in dataclasses.asdict(self.alerts).items():
            if not 0 <= value <= 100:
                raise ConfigurationError(f"alerts.{name} must be in [0, 100], got {value}")

        for name, value in dataclasses.asdict(self.position_sizing).items():
            if name != "accumulation_min_momentum" and value < 0:
                raise ConfigurationError(f"position_sizing.{name} must be >= 0, got {value}")

        missing = set(_default_base_scores()) - set(self.scoring.base_scores)
        if missing:
            raise ConfigurationError(f"scoring.base_scores missing signals: {sorted(missing)}")


def _coerce_number(label: str, value: Any, kind: type) -> Any:
    """Cast a YAML scalar to the int/float type of its default."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{label} must be a number, got {value!r}") from e


def _build_dataclass(cls: type, data: dict[str, Any]) -> Any:
    """Build a dataclass from dict, ignoring unknown keys.

    Numeric fields are cast to the type of their default, so quoted YAML
    values such as ``"10"`` load and ``"ten"`` raises ConfigurationError.
    Number tables (score maps) have each entry cast to float.
    """
    fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {}
    for key, value in (data or {}).items():
        f = fields.get(key)
        if f is None:
            continue
        label = f"{cls.__name__}.{key}"
        if f.default_factory is not dataclasses.MISSING:
            default = f.default_factory()
        else:
            default = f.default
        if isinstance(default, bool):
            filtered[key] = value
        elif isinstance(default, (int, float)):
            filtered[key] = _coerce_number(label, value, type(default))
        elif isinstance(default, dict) and isinstance(value, dict):
            filtered[key] = {k: _coerce_number(f"{label}.{k}", v, float) for k, v in value.items()}
        else:
            filtered[key] = value
    try:
        return cls(**filtered)
    except TypeError as e:
        raise ConfigurationError(f"Invalid {cls.__name__} section: {e}") from e
