"""Configuration data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from oimomentum.domain.oi_momentum.config import OIMomentumConfig


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json: bool = True
    console: bool = True
    file_enabled: bool = False
    log_dir: str = "./logs"
    timezone: str = "local"  # Timezone for log timestamps (e.g., "UTC", "Asia/Bangkok", or "local")


@dataclass
class CacheConfig:
    """Analysis cache configuration (used by callers that inject a cache)."""
    enabled: bool = False
    max_entries: int = 128


@dataclass
class AppConfig:
    """Complete application configuration."""
    logging: LoggingConfig
    analysis: OIMomentumConfig
    cache: CacheConfig
    raw: Dict[str, Any]  # Merged raw config dict
