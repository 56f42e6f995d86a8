"""
Unit tests for configuration loading and validation.

Tests defaults, strict validation and error handling.
"""

import logging
import os
import tempfile

import pytest
import yaml

from flowstate.config.loader import (
    AssistantConfig,
    FlowStateConfig,
    LoggingConfig,
    StorageConfig,
    default_config,
    load_config,
)


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_path = self._write_config({
            "storage": {"db_path": "/tmp/flowstate-test.db"},
            "assistant": {"model": "gpt-4o", "max_history": 5, "temperature": 0.2},
            "logging": {"level": "debug"}
        })

        config = load_config(config_path)

        assert config.storage.db_path == "/tmp/flowstate-test.db"
        assert config.assistant.model == "gpt-4o"
        assert config.assistant.max_history == 5
        assert config.assistant.temperature == 0.2
        assert config.logging.level == "DEBUG"
        assert config.logging.numeric_level == logging.DEBUG

    def test_no_path_gives_defaults(self):
        assert load_config(None) == default_config()

    def test_defaults(self):
        config = default_config()
        assert config.storage.db_path == "flowstate.db"
        assert config.assistant.model == "gpt-4o-mini"
        assert config.assistant.max_history == 20
        assert config.logging.level == "INFO"

    def test_partial_config_fills_defaults(self):
        config_path = self._write_config({"assistant": {"max_history": 3}})
        config = load_config(config_path)
        assert config.assistant.max_history == 3
        assert config.assistant.model == "gpt-4o-mini"
        assert config.storage == StorageConfig()

    def test_empty_file_gives_defaults(self):
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, 'w').close()
        assert load_config(config_path) == FlowStateConfig()

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(os.path.join(self.temp_dir, "missing.yaml"))

    def test_invalid_yaml(self):
        config_path = os.path.join(self.temp_dir, "bad.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("storage: [unclosed")
        with pytest.raises(yaml.YAMLError, match="Invalid YAML"):
            load_config(config_path)

    def test_unknown_top_level_key(self):
        config_path = self._write_config({"rates": {"shower": 3}})
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_config(config_path)

    def test_unknown_section_key(self):
        config_path = self._write_config({"storage": {"path": "x.db"}})
        with pytest.raises(ValueError, match="Unknown keys in storage"):
            load_config(config_path)

    def test_section_must_be_dictionary(self):
        config_path = self._write_config({"logging": "INFO"})
        with pytest.raises(ValueError, match="'logging' must be a dictionary"):
            load_config(config_path)

    def test_top_level_must_be_dictionary(self):
        config_path = self._write_config(["storage"])
        with pytest.raises(ValueError, match="must be a dictionary"):
            load_config(config_path)

    @pytest.mark.parametrize("section,key,value", [
        ("assistant", "max_history", "ten"),
        ("assistant", "max_history", True),
        ("assistant", "temperature", "hot"),
        ("storage", "db_path", 42),
        ("logging", "level", 10),
    ])
    def test_wrong_types_rejected(self, section, key, value):
        config_path = self._write_config({section: {key: value}})
        with pytest.raises(ValueError, match=f"'{key}' in {section} has the wrong type"):
            load_config(config_path)

    def test_unknown_log_level(self):
        config_path = self._write_config({"logging": {"level": "verbose"}})
        with pytest.raises(ValueError, match="level must be one of"):
            load_config(config_path)


class TestConfigValidation:
    """Test dataclass validation."""

    def test_empty_db_path(self):
        with pytest.raises(ValueError, match="db_path cannot be empty"):
            StorageConfig(db_path=" ")

    def test_negative_history(self):
        with pytest.raises(ValueError, match="max_history must be >= 0"):
            AssistantConfig(max_history=-1)

    def test_temperature_range(self):
        with pytest.raises(ValueError, match="temperature must be between 0 and 2"):
            AssistantConfig(temperature=3)

    def test_empty_model(self):
        with pytest.raises(ValueError, match="model cannot be empty"):
            AssistantConfig(model="")

    def test_config_is_immutable(self):
        config = LoggingConfig()
        with pytest.raises(AttributeError):
            config.level = "DEBUG"
