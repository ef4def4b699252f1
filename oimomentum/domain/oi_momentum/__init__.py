"""Open-interest momentum / acceleration classification domain."""

from .alerts import AlertGenerator, generate_alerts
from .analyzer import OIMomentumAnalyzer, analyze_oi_momentum, get_calculation_metadata
from .cache import (
    AnalysisCache,
    CachedAnalyzer,
    InMemoryAnalysisCache,
    create_analysis_cache,
    fingerprint_samples,
)
from .classifier import MomentumWindow, SignalClassifier, classify_signal
from .compute import compute_acceleration, compute_derivatives, compute_momentum, validate_samples
from .config import OIMomentumConfig
from .guidance import get_risk_mode_suggestion, get_strategy_recommendation, get_trading_interpretation
from .models import (
    Alert,
    AlertSeverity,
    AnalysisResult,
    CalculationMetadata,
    ClassifiedPoint,
    MomentumReport,
    MomentumStatistics,
    OISample,
    Regime,
    RiskLevel,
    RiskModeSuggestion,
    SignalKind,
    SignalSummary,
    StrengthKind,
    TradingInterpretation,
    TrendDirection,
)
from .scorer import calculate_signal_score
from .trend import calculate_statistics, determine_trend

__all__ = [
    "OIMomentumAnalyzer",
    "OIMomentumConfig",
    "analyze_oi_momentum",
    "get_calculation_metadata",
    "AnalysisCache",
    "CachedAnalyzer",
    "InMemoryAnalysisCache",
    "create_analysis_cache",
    "fingerprint_samples",
    "AlertGenerator",
    "generate_alerts",
    "MomentumWindow",
    "SignalClassifier",
    "classify_signal",
    "compute_momentum",
    "compute_acceleration",
    "compute_derivatives",
    "validate_samples",
    "get_trading_interpretation",
    "get_strategy_recommendation",
    "get_risk_mode_suggestion",
    "calculate_signal_score",
    "calculate_statistics",
    "determine_trend",
    "Alert",
    "AlertSeverity",
    "AnalysisResult",
    "CalculationMetadata",
    "ClassifiedPoint",
    "MomentumReport",
    "MomentumStatistics",
    "OISample",
    "Regime",
    "RiskLevel",
    "RiskModeSuggestion",
    "SignalKind",
    "SignalSummary",
    "StrengthKind",
    "TradingInterpretation",
    "TrendDirection",
]
