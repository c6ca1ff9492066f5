"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


KEYWORD_MATCH_MODES = ("prefix", "substring")
STORAGE_BACKENDS = ("sqlite", "memory")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class EngineConfig:
    """
    Response engine configuration.

    Controls how replies and follow-up questions are chosen and
    which pattern table is loaded.
    """
    # A follow-up is attached when a uniform draw exceeds the threshold
    follow_up_threshold: float = 0.6
    general_follow_up_threshold: float = 0.5

    # Number of previous user messages passed as context
    context_window: int = 5

    # "prefix" keeps token-prefix matching, "substring" uses only containment
    keyword_match: str = "prefix"

    # Patterns file, relative to the config directory unless absolute.
    # The built-in table is used while the file does not exist.
    patterns_file: str = "patterns.yaml"

    def validate(self) -> None:
        """Validate engine configuration parameters."""
        for name in ("follow_up_threshold", "general_follow_up_threshold"):
            value = getattr(self, name)
            if not _is_number(value):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if not 0 <= value <= 1:
                raise ConfigError(f"{name} must be between 0 and 1, got {value}")

        if isinstance(self.context_window, bool) or not isinstance(self.context_window, int):
            raise ConfigError(f"context_window must be an integer, got {self.context_window!r}")
        if self.context_window < 0:
            raise ConfigError(f"context_window cannot be negative, got {self.context_window}")

        if self.keyword_match not in KEYWORD_MATCH_MODES:
            raise ConfigError(
                f"Invalid keyword_match mode: {self.keyword_match}",
                {"allowed": list(KEYWORD_MATCH_MODES)}
            )

        if not isinstance(self.patterns_file, str) or not self.patterns_file:
            raise ConfigError(f"patterns_file must be a file name, got {self.patterns_file!r}")


@dataclass
class StorageConfig:
    """
    Storage configuration.

    Selects the record store backend and where its data lives.
    """
    backend: str = "sqlite"  # sqlite, memory
    database_file: str = "wellness.db"

    def validate(self) -> None:
        """Validate storage configuration."""
        if self.backend not in STORAGE_BACKENDS:
            raise ConfigError(
                f"Invalid storage backend: {self.backend}",
                {"allowed": list(STORAGE_BACKENDS)}
            )
        if self.backend == "sqlite" and not self.database_file:
            raise ConfigError("database_file is required for the sqlite backend")
        if not isinstance(self.database_file, str):
            raise ConfigError(f"database_file must be a file name, got {self.database_file!r}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object.
    """
    app_name: str = "Wellness Companion"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    engine: EngineConfig = field(default_factory=EngineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.engine.validate()
        self.storage.validate()

    @property
    def database_path(self) -> str:
        path = Path(self.storage.database_file)
        if path.is_absolute():
            return str(path)
        return str(Path(self.data_dir) / path)

    @property
    def patterns_path(self) -> str:
        path = Path(self.engine.patterns_file)
        if path.is_absolute():
            return str(path)
        return str(Path(self.config_dir) / path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "log_level": self.log_level,
            "engine": asdict(self.engine),
            "storage": asdict(self.storage),
        }


def get_default_config_dir() -> Path:
    """Resolve the configuration directory."""
    if "WELLNESS_CONFIG_DIR" in os.environ:
        return Path(os.environ["WELLNESS_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "wellness-companion"

    return Path.home() / ".config" / "wellness-companion"


def get_default_data_dir() -> Path:
    """Resolve the data directory."""
    if "WELLNESS_DATA_DIR" in os.environ:
        return Path(os.environ["WELLNESS_DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "wellness-companion"

    return Path.home() / ".local" / "share" / "wellness-companion"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    Values are applied in this order:
    1. Default values from the dataclasses
    2. Values from the YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to apply environment variable overrides

    Returns:
        Validated Config object

    Raises:
        ConfigError: If configuration is invalid or cannot be read
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """Apply YAML configuration values to a Config object."""
    for key in ("app_name", "version", "debug", "log_level", "data_dir", "log_dir"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in ("engine", "storage"):
        values = yaml_config.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigError(
                f"Config section '{section}' must be a mapping, got {type(values).__name__}"
            )
        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to a Config object.

    Variables follow the pattern WELLNESS_SECTION_KEY,
    for example WELLNESS_STORAGE_BACKEND or WELLNESS_ENGINE_KEYWORD_MATCH.
    """
    env_mappings = {
        "WELLNESS_DEBUG": (None, "debug", bool),
        "WELLNESS_LOG_LEVEL": (None, "log_level"),

        "WELLNESS_ENGINE_FOLLOW_UP_THRESHOLD": ("engine", "follow_up_threshold", float),
        "WELLNESS_ENGINE_GENERAL_FOLLOW_UP_THRESHOLD": (
            "engine", "general_follow_up_threshold", float
        ),
        "WELLNESS_ENGINE_CONTEXT_WINDOW": ("engine", "context_window", int),
        "WELLNESS_ENGINE_KEYWORD_MATCH": ("engine", "keyword_match"),
        "WELLNESS_ENGINE_PATTERNS_FILE": ("engine", "patterns_file"),

        "WELLNESS_STORAGE_BACKEND": ("storage", "backend"),
        "WELLNESS_STORAGE_DATABASE_FILE": ("storage", "database_file"),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str
        target = getattr(config, section) if section else config

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}")

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to a YAML file.

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})
