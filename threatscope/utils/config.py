"""
Configuration management for ThreatScope.

Settings come from built-in defaults, overlaid by an optional YAML file,
overlaid by ``TS_*`` environment variables.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError
from .logger import get_logger

logger = get_logger("config")


class Config:
    """
    Configuration manager with dot-notation access.

    Example::

        config = get_config()
        config.get("analysis.min_string_length")  # -> 5
    """

    _instance: Optional[Config] = None
    _lock: threading.Lock = threading.Lock()

    DEFAULTS: Dict[str, Any] = {
        "analysis": {
            "min_string_length": 5,
            "max_file_size": 104857600,  # 100MB
            "allowed_extensions": [".exe", ".dll"],
            "workers": 4,
        },
        "logging": {
            "level": "INFO",
            "file": None,
            "format": "pretty",
        },
    }

    # env var -> (config key, converter)
    ENV_OVERRIDES = {
        "TS_LOG_LEVEL": ("logging.level", str),
        "TS_LOG_FILE": ("logging.file", str),
        "TS_MIN_STRING_LENGTH": ("analysis.min_string_length", int),
        "TS_MAX_FILE_SIZE": ("analysis.max_file_size", int),
    }

    def __new__(cls, config_path: Optional[Path] = None) -> Config:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._config = {}
                    instance._config_path = None
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Load configuration.

        Args:
            config_path: Explicit YAML file. If None, the standard locations
                are searched and defaults are used when nothing is found.

        Raises:
            ConfigurationError: If the file is unreadable, malformed or
                holds invalid values
        """
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            self._config = self._deep_copy_dict(self.DEFAULTS)

            if config_path is not None:
                if not Path(config_path).is_file():
                    raise ConfigurationError(f"Config file not found: {config_path}")
                self._config_path = Path(config_path)
            else:
                self._config_path = self._find_config_file()

            if self._config_path:
                self._load_config()

            self._apply_env_overrides()
            self._expand_paths()
            self._validate()
            self._initialized = True

    def _deep_copy_dict(self, d: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                result[key] = self._deep_copy_dict(value)
            elif isinstance(value, list):
                result[key] = list(value)
            else:
                result[key] = value
        return result

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in standard locations."""
        search_paths = [
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
            Path.home() / ".threatscope" / "config.yaml",
            Path.cwd() / "config.yaml",
        ]

        for path in search_paths:
            try:
                if path.is_file():
                    return path
            except OSError:
                continue

        return None

    def _load_config(self) -> None:
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}")

        if not isinstance(loaded_config, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping: {self._config_path}"
            )

        self._merge_config(self._config, loaded_config)
        logger.info(f"Configuration loaded from: {self._config_path}")

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self) -> None:
        for env_var, (config_key, convert) in self.ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if not value:
                continue
            try:
                self.set(config_key, convert(value))
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {value!r}",
                    config_key=config_key,
                )
            logger.debug(f"Config override from env: {config_key}")

    def _expand_paths(self) -> None:
        value = self.get("logging.file")
        if value and isinstance(value, str):
            self.set("logging.file", os.path.expandvars(os.path.expanduser(value)))

    def _validate(self) -> None:
        min_length = self.get("analysis.min_string_length")
        if not isinstance(min_length, int) or min_length < 1:
            raise ConfigurationError(
                f"analysis.min_string_length must be a positive integer, got {min_length!r}",
                config_key="analysis.min_string_length",
            )

        max_size = self.get("analysis.max_file_size")
        if not isinstance(max_size, int) or max_size <= 0:
            raise ConfigurationError(
                f"analysis.max_file_size must be a positive integer, got {max_size!r}",
                config_key="analysis.max_file_size",
            )

        workers = self.get("analysis.workers")
        if not isinstance(workers, int) or workers < 1:
            raise ConfigurationError(
                f"analysis.workers must be a positive integer, got {workers!r}",
                config_key="analysis.workers",
            )

        extensions = self.get("analysis.allowed_extensions")
        if not isinstance(extensions, list) or not all(
            isinstance(ext, str) and ext.startswith(".") for ext in extensions
        ):
            raise ConfigurationError(
                "analysis.allowed_extensions must be a list like ['.exe', '.dll']",
                config_key="analysis.allowed_extensions",
            )

        if self.get("logging.format") not in ("pretty", "json"):
            raise ConfigurationError(
                "logging.format must be 'pretty' or 'json'",
                config_key="logging.format",
            )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "analysis.workers")
            default: Value returned when the key is missing or None
        """
        value: Any = self._config

        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            config = config.setdefault(k, {})

        config[keys[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        return self.get(section, {})

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def to_dict(self) -> Dict[str, Any]:
        return self._deep_copy_dict(self._config)


_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get global configuration instance."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config()
    return _config


def init_config(config_path: Optional[Path] = None) -> Config:
    """
    (Re)initialize global configuration, optionally from an explicit file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration instance
    """
    global _config
    with _config_lock:
        Config._instance = None
        _config = None
        _config = Config(config_path)
    return _config
