"""
Configuration management and loading.

Handles application settings read from a YAML file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from flowstate.storage.db import DEFAULT_DB_PATH


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class StorageConfig:
    """Where user data is stored."""
    db_path: str = DEFAULT_DB_PATH

    def __post_init__(self):
        """Validate the database path is not empty."""
        if not self.db_path or not self.db_path.strip():
            raise ValueError("db_path cannot be empty")


@dataclass(frozen=True)
class AssistantConfig:
    """Chat assistant settings."""
    model: str = "gpt-4o-mini"
    max_history: int = 20
    temperature: float = 0.7

    def __post_init__(self):
        """Validate assistant values."""
        if not self.model or not self.model.strip():
            raise ValueError("model cannot be empty")
        if self.max_history < 0:
            raise ValueError("max_history must be >= 0")
        if not 0 <= self.temperature <= 2:
            raise ValueError("temperature must be between 0 and 2")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"

    def __post_init__(self):
        """Validate the level is a standard logging level."""
        if self.level not in LOG_LEVELS:
            raise ValueError(f"level must be one of: {list(LOG_LEVELS)}")

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.level)


@dataclass(frozen=True)
class FlowStateConfig:
    """Complete application configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def default_config() -> FlowStateConfig:
    return FlowStateConfig()


def load_config(path: Optional[str] = None) -> FlowStateConfig:
    """Load and validate configuration from a YAML file.

    Every section is optional and falls back to its defaults, but unknown
    keys and wrongly typed values are rejected.

    Args:
        path: Path to YAML configuration file; None gives the defaults

    Returns:
        Validated FlowStateConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return default_config()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'storage', 'assistant', 'logging'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    storage_data = _section(raw_config, 'storage', {'db_path'})
    storage = StorageConfig(
        db_path=_typed(storage_data, 'db_path', str, 'storage', DEFAULT_DB_PATH)
    )

    assistant_data = _section(raw_config, 'assistant', {'model', 'max_history', 'temperature'})
    assistant = AssistantConfig(
        model=_typed(assistant_data, 'model', str, 'assistant', AssistantConfig.model),
        max_history=_typed(assistant_data, 'max_history', int, 'assistant', AssistantConfig.max_history),
        temperature=float(_typed(
            assistant_data, 'temperature', (int, float), 'assistant', AssistantConfig.temperature
        ))
    )

    logging_data = _section(raw_config, 'logging', {'level'})
    level = _typed(logging_data, 'level', str, 'logging', LoggingConfig.level)

    return FlowStateConfig(
        storage=storage,
        assistant=assistant,
        logging=LoggingConfig(level=level.upper())
    )


def _section(raw_config: Dict[str, Any], name: str, allowed_keys: set) -> Dict[str, Any]:
    """Get a config section, checking it is a dictionary without unknown keys.

    Raises:
        ValueError: If the section is invalid
    """
    data = raw_config.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _typed(data: Dict[str, Any], key: str, expected, path: str, default: Any) -> Any:
    if key not in data:
        return default
    value = data[key]
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ValueError(f"'{key}' in {path} has the wrong type")
    return value
