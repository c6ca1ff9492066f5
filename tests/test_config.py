"""
Test Configuration Module
========================

Unit tests for configuration loading and validation.
"""

import os
import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import (
    Config, EngineConfig, StorageConfig, load_config, save_config
)
from core.exceptions import ConfigError, WellnessError


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """Point config and data directories at a temporary location."""
    for name in list(os.environ):
        if name.startswith("WELLNESS_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("WELLNESS_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("WELLNESS_DATA_DIR", str(tmp_path / "data"))
    return tmp_path


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = EngineConfig()
        assert config.follow_up_threshold == 0.6
        assert config.general_follow_up_threshold == 0.5
        assert config.context_window == 5
        assert config.keyword_match == "prefix"

    def test_validation_valid(self):
        """Test valid configuration passes validation."""
        config = EngineConfig(keyword_match="substring")
        config.validate()  # Should not raise

    def test_validation_invalid_threshold(self):
        """Test out-of-range threshold raises error."""
        config = EngineConfig(follow_up_threshold=1.5)
        with pytest.raises(ConfigError):
            config.validate()

    def test_validation_negative_window(self):
        config = EngineConfig(context_window=-1)
        with pytest.raises(ConfigError):
            config.validate()

    def test_validation_unknown_match_mode(self):
        config = EngineConfig(keyword_match="fuzzy")
        with pytest.raises(ConfigError):
            config.validate()

    @pytest.mark.parametrize("value", ["0.7", None, True, [0.5]])
    def test_validation_threshold_type(self, value):
        """Thresholds that are not numbers raise ConfigError, not TypeError."""
        with pytest.raises(ConfigError):
            EngineConfig(follow_up_threshold=value).validate()
        with pytest.raises(ConfigError):
            EngineConfig(general_follow_up_threshold=value).validate()

    @pytest.mark.parametrize("value", ["5", 2.5, False, None])
    def test_validation_window_type(self, value):
        with pytest.raises(ConfigError):
            EngineConfig(context_window=value).validate()

    def test_validation_integer_threshold(self):
        EngineConfig(follow_up_threshold=1, general_follow_up_threshold=0).validate()

    def test_validation_patterns_file_type(self):
        with pytest.raises(ConfigError):
            EngineConfig(patterns_file=["a.yaml"]).validate()


class TestStorageConfig:
    """Tests for StorageConfig."""

    def test_default_values(self):
        config = StorageConfig()
        assert config.backend == "sqlite"
        assert config.database_file == "wellness.db"

    def test_validation_unknown_backend(self):
        config = StorageConfig(backend="postgres")
        with pytest.raises(ConfigError):
            config.validate()

    def test_validation_sqlite_needs_file(self):
        config = StorageConfig(database_file="")
        with pytest.raises(ConfigError):
            config.validate()

    def test_memory_needs_no_file(self):
        StorageConfig(backend="memory", database_file="").validate()

    def test_validation_database_file_type(self):
        with pytest.raises(ConfigError):
            StorageConfig(database_file=42).validate()


class TestConfig:
    """Tests for main Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = Config()
        assert config.app_name == "Wellness Companion"
        assert config.engine is not None
        assert config.storage is not None

    def test_to_dict(self):
        """Test conversion to dictionary."""
        d = Config().to_dict()
        assert "app_name" in d
        assert d["engine"]["keyword_match"] == "prefix"
        assert d["storage"]["backend"] == "sqlite"

    def test_paths(self, tmp_path):
        config = Config(config_dir=str(tmp_path / "c"), data_dir=str(tmp_path / "d"))
        assert config.database_path == str(tmp_path / "d" / "wellness.db")
        assert config.patterns_path == str(tmp_path / "c" / "patterns.yaml")

        config.storage.database_file = str(tmp_path / "elsewhere.db")
        assert config.database_path == str(tmp_path / "elsewhere.db")

    def test_config_error_is_wellness_error(self):
        assert issubclass(ConfigError, WellnessError)
        error = ConfigError("bad", {"key": "value"})
        assert str(error) == "bad | Details: {'key': 'value'}"


class TestLoadConfig:
    """Tests for load_config and save_config."""

    def test_defaults_without_file(self, config_env):
        config = load_config()
        assert config.config_dir == str(config_env / "config")
        assert config.data_dir == str(config_env / "data")
        assert config.log_dir == str(config_env / "data" / "logs")
        assert config.storage.backend == "sqlite"

    def test_yaml_values(self, config_env):
        path = config_env / "custom.yaml"
        path.write_text(
            "debug: true\n"
            "engine:\n"
            "  follow_up_threshold: 0.8\n"
            "  keyword_match: substring\n"
            "storage:\n"
            "  backend: memory\n"
        )

        config = load_config(str(path))

        assert config.debug is True
        assert config.engine.follow_up_threshold == 0.8
        assert config.engine.keyword_match == "substring"
        assert config.engine.context_window == 5
        assert config.storage.backend == "memory"

    def test_default_location(self, config_env):
        config_dir = config_env / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("log_level: DEBUG\n")

        assert load_config().log_level == "DEBUG"

    def test_env_overrides_yaml(self, config_env, monkeypatch):
        path = config_env / "custom.yaml"
        path.write_text("storage:\n  backend: sqlite\n")
        monkeypatch.setenv("WELLNESS_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("WELLNESS_ENGINE_CONTEXT_WINDOW", "3")
        monkeypatch.setenv("WELLNESS_DEBUG", "yes")

        config = load_config(str(path))

        assert config.storage.backend == "memory"
        assert config.engine.context_window == 3
        assert config.debug is True

    def test_env_ignored_when_disabled(self, config_env, monkeypatch):
        monkeypatch.setenv("WELLNESS_STORAGE_BACKEND", "memory")
        assert load_config(load_env=False).storage.backend == "sqlite"

    def test_invalid_env_value(self, config_env, monkeypatch):
        monkeypatch.setenv("WELLNESS_ENGINE_FOLLOW_UP_THRESHOLD", "often")
        with pytest.raises(ConfigError):
            load_config()

    def test_invalid_yaml(self, config_env):
        path = config_env / "broken.yaml"
        path.write_text("engine: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_yaml_not_mapping(self, config_env):
        path = config_env / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_invalid_values_rejected(self, config_env):
        path = config_env / "bad.yaml"
        path.write_text("storage:\n  backend: mongo\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_quoted_threshold_rejected(self, config_env):
        path = config_env / "quoted.yaml"
        path.write_text("engine:\n  follow_up_threshold: '0.7'\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_quoted_window_rejected(self, config_env):
        path = config_env / "window.yaml"
        path.write_text("engine:\n  context_window: \"5\"\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    @pytest.mark.parametrize("body", ["engine: [1, 2]\n", "storage: sqlite\n", "engine: 3\n"])
    def test_section_not_mapping(self, config_env, body):
        path = config_env / "section.yaml"
        path.write_text(body)
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_save_and_reload(self, config_env):
        config = load_config()
        config.engine.keyword_match = "substring"
        config.storage.backend = "memory"

        save_config(config)
        reloaded = load_config()

        assert reloaded.engine.keyword_match == "substring"
        assert reloaded.storage.backend == "memory"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
