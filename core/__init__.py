"""
Core Module - Foundation components for Wellness Companion
==========================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

from .config import Config, EngineConfig, StorageConfig, load_config, save_config
from .exceptions import (
    WellnessError,
    ConfigError,
    DatabaseError,
    ValidationError,
    NotFoundError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "EngineConfig",
    "StorageConfig",
    "load_config",
    "save_config",
    "WellnessError",
    "ConfigError",
    "DatabaseError",
    "ValidationError",
    "NotFoundError",
    "setup_logging",
    "get_logger",
]
