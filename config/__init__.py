"""Configuration management."""

from .models import AppConfig, CacheConfig, LoggingConfig
from .config_manager import ConfigManager

__all__ = ["ConfigManager", "AppConfig", "CacheConfig", "LoggingConfig"]
