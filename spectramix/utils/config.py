"""
Configuration management for SpectraMix.

Loads and validates configuration from YAML files with environment
variable interpolation support.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from spectramix.utils.errors import ConfigurationError


EXECUTOR_KINDS = ("thread", "process")
LENGTH_POLICIES = ("zero_extend", "truncate")


class ConfigManager:
    """
    Manages application configuration loaded from YAML files.

    Features:
    - YAML configuration loading
    - Environment variable interpolation (${VAR_NAME})
    - Nested key access with dot notation
    - Default value support
    - Configuration validation
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration manager.

        Args:
            config_dict: Optional pre-loaded configuration dictionary
        """
        self._config: Dict[str, Any] = config_dict or {}
        self._env_pattern = re.compile(r'\$\{([^}]+)\}')

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Create ConfigManager from YAML file.

        Args:
            file_path: Path to YAML configuration file

        Returns:
            ConfigManager: Initialized with file contents

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        if not file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                config_key=str(file_path)
            )

        try:
            with open(file_path, 'r') as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration: {e}",
                config_key=str(file_path)
            ) from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping",
                config_key=str(file_path)
            )

        manager = cls(config_dict)
        manager._interpolate_env_vars()
        return manager

    def _interpolate_env_vars(self) -> None:
        """Replace ${ENV_VAR} patterns with environment variable values."""
        self._config = self._interpolate(self._config)

    def _interpolate(self, value: Any) -> Any:
        """Recursively interpolate environment variables in nested values."""
        if isinstance(value, dict):
            return {key: self._interpolate(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._interpolate(item) for item in value]
        if isinstance(value, str):
            return self._interpolate_string(value)
        return value

    def _interpolate_string(self, s: str) -> str:
        """Replace ${ENV_VAR} with environment variable value."""
        def replace(match: re.Match) -> str:
            value = os.environ.get(match.group(1))
            if value is None:
                return match.group(0)  # Keep original if not found
            return value

        return self._env_pattern.sub(replace, s)

    def get(
        self,
        key: str,
        default: Any = None,
        required: bool = False
    ) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (supports dot notation: "boundary.max_workers")
            default: Default value if key not found
            required: If True, raise error when key not found

        Returns:
            Configuration value or default

        Raises:
            ConfigurationError: If required key is not found
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                if required:
                    raise ConfigurationError(
                        f"Required configuration key not found: {key}",
                        config_key=key
                    )
                return default

        return value

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Dict[str, Any]) -> None:
        """
        Validate configuration against a schema.

        Schema format:
            {
                "boundary.max_workers": {"type": int, "required": True, "min": 1},
                "boundary.executor": {"type": str, "choices": ("thread", "process")}
            }

        Raises:
            ConfigurationError: If validation fails
        """
        for key, rules in schema.items():
            value = self.get(key)
            expected_type = rules.get("type")
            choices = rules.get("choices")

            if value is None:
                if rules.get("required", False):
                    raise ConfigurationError(
                        f"Required configuration missing: {key}",
                        config_key=key
                    )
                continue

            if expected_type and not isinstance(value, expected_type):
                type_name = getattr(expected_type, "__name__", str(expected_type))
                raise ConfigurationError(
                    f"Invalid type for {key}: expected {type_name}, "
                    f"got {type(value).__name__}",
                    config_key=key
                )

            minimum = rules.get("min")
            if minimum is not None and value < minimum:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r} (must be at least {minimum})",
                    config_key=key
                )

            if choices and value not in choices:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r} "
                    f"(expected one of {', '.join(map(str, choices))})",
                    config_key=key
                )


CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
    "transform.cache_enabled": {"type": bool},
    "transform.cache_max_sizes": {"type": int, "min": 1},
    "boundary.executor": {"type": str, "choices": EXECUTOR_KINDS},
    "boundary.max_workers": {"type": int, "min": 1},
    "boundary.timeout": {"type": (int, float), "min": 0},
    "combination.length_policy": {"type": str, "choices": LENGTH_POLICIES},
    "combination.combined_name": {"type": str},
    "audio.target_sample_rate": {"type": int, "min": 1},
    "audio.max_file_size": {"type": int, "min": 1},
    "logging.level": {"type": str},
    "logging.format": {"type": str, "choices": ("text", "json")},
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Values from the file are merged over the defaults, so a file only
    needs to name the keys it changes.

    Args:
        config_path: Optional path to config file.
                    If None, tries "config/config.yaml" and "spectramix.yaml"

    Returns:
        Dict[str, Any]: Validated configuration dictionary

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    if config_path is None:
        default_paths = [
            Path("config/config.yaml"),
            Path("spectramix.yaml"),
        ]

        for path in default_paths:
            if path.exists():
                config_path = str(path)
                break

    config = get_default_config()
    if config_path is not None:
        loaded = ConfigManager.from_file(Path(config_path)).to_dict()
        config = _merge(config, loaded)

    ConfigManager(config).validate(CONFIG_SCHEMA)
    return config


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge *override* into a copy of *base*."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "transform": {
            "cache_enabled": True,
            "cache_max_sizes": 32,
        },
        "boundary": {
            "executor": "thread",
            "max_workers": 4,
            "timeout": None,
        },
        "combination": {
            "length_policy": "zero_extend",
            "combined_name": "combined",
        },
        "audio": {
            "target_sample_rate": 44100,
            "supported_formats": [".wav", ".flac", ".aiff", ".aif", ".ogg"],
            "max_file_size": 104857600,  # 100MB
        },
        "logging": {
            "level": "INFO",
            "format": "text",
            "file": None,
        },
    }
