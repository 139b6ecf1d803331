"""
================================================================================
Shopauto Tools Common Utilities
================================================================================

This module provides shared configuration management and logging setup for
the automation framework.

Exports:
    - GlobalConfig: Singleton configuration manager
    - get_config: Convenience function to get configuration values
    - set_config: Convenience function to set configuration values at runtime
    - reset_config: Drop the cached configuration (tests, reloads)
    - init_logger: Function to initialize loguru logger with standard settings

Usage:
    from shopauto_tools.common import get_config, init_logger

    init_logger()
    max_retries = get_config("retry.max_retries", 3)

================================================================================
"""

import copy
import os
import sys
from typing import Any, Dict, Optional

import yaml
from loguru import logger

# ============================================================
# Configuration Management
# ============================================================

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{thread.name}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_DEFAULTS: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": DEFAULT_LOG_FORMAT,
        "file": None,
        "rotation": "10 MB",
        "retention": "7 days",
    },
    "retry": {
        "max_retries": 3,
        "initial_delay": 1.0,
        "multiplier": 2.0,
        "max_delay": 8.0,
        "allure_attachments": True,
    },
    "ui": {
        "base_url": "https://www.saucedemo.com",
        "timeout": 10,
    },
}

# Environment variables take precedence over YAML values
ENV_MAPPING: Dict[str, str] = {
    "RETRY_MAX_RETRIES": "retry.max_retries",
    "RETRY_INITIAL_DELAY": "retry.initial_delay",
    "RETRY_MULTIPLIER": "retry.multiplier",
    "RETRY_MAX_DELAY": "retry.max_delay",
    "RETRY_ALLURE_ATTACHMENTS": "retry.allure_attachments",
    "LOG_LEVEL": "logging.level",
    "LOG_FILE": "logging.file",
    "UI_BASE_URL": "ui.base_url",
    "UI_TIMEOUT": "ui.timeout",
}

CONFIG_PATHS = [
    "config/automation_config.yaml",
    os.path.join(os.path.dirname(__file__), "..", "..", "config", "automation_config.yaml"),
]


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class GlobalConfig:
    """
    Singleton class to manage global configuration for the framework.

    Built-in defaults are merged with the first YAML configuration file found,
    then environment variables are applied on top.
    """
    _instance: Optional["GlobalConfig"] = None
    _config: Dict[str, Any] = {}
    _initialized: bool = False

    def __new__(cls) -> "GlobalConfig":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._load_configs()
        self._initialized = True

    def _load_configs(self) -> None:
        """
        Loads configurations from YAML files and environment variables.
        """
        config = copy.deepcopy(_DEFAULTS)

        config_paths = list(CONFIG_PATHS)
        explicit_path = os.getenv("AUTOMATION_CONFIG")
        if explicit_path:
            config_paths.insert(0, explicit_path)

        for config_path in config_paths:
            if os.path.exists(config_path):
                try:
                    with open(config_path, "r", encoding="utf-8") as f:
                        file_config = yaml.safe_load(f) or {}
                    config = _deep_merge(config, file_config)
                    logger.debug(f"Loaded configuration from {config_path}")
                    break
                except yaml.YAMLError as e:
                    logger.warning(f"Failed to load config from {config_path}: {e}")

        self._config = config

        for env_key, config_key in ENV_MAPPING.items():
            if env_key in os.environ:
                self._set_nested(config_key, os.environ[env_key])

    def _set_nested(self, key: str, value: Any) -> None:
        """
        Sets a nested configuration value using dot notation.
        """
        keys = key.split(".")
        current = self._config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieves a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "retry.max_retries")
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Sets a configuration value.

        Args:
            key: Configuration key (e.g., "retry.max_delay")
            value: Value to set
        """
        self._set_nested(key, value)

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access reloads files and env."""
        cls._instance = None
        cls._config = {}
        cls._initialized = False


# Global config instance
_global_config: Optional[GlobalConfig] = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get a configuration value.

    Args:
        key: Configuration key using dot notation
        default: Default value if not found

    Returns:
        Configuration value or default

    Example:
        max_delay = get_config("retry.max_delay", 8.0)
    """
    global _global_config
    if _global_config is None:
        _global_config = GlobalConfig()
    return _global_config.get(key, default)


def set_config(key: str, value: Any) -> None:
    """
    Convenience function to set a configuration value.

    Args:
        key: Configuration key using dot notation
        value: Value to set
    """
    global _global_config
    if _global_config is None:
        _global_config = GlobalConfig()
    _global_config.set(key, value)


def reset_config() -> None:
    """Forget the loaded configuration; it is re-read on next access."""
    global _global_config
    GlobalConfig.reset()
    _global_config = None


def as_bool(value: Any) -> bool:
    """Interpret config values that may arrive as strings from the environment."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: str = None,
    format_string: str = None,
    log_file: str = None,
    force: bool = False,
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.
        force: Re-initialize even if the logger was already configured.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/automation.log")
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    # Remove default handler
    logger.remove()

    level = (level or get_config("logging.level", "INFO")).upper()
    format_string = format_string or get_config("logging.format", DEFAULT_LOG_FORMAT)

    # Add console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    # Add file handler if specified
    log_file = log_file or get_config("logging.file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            ensure_directory(log_dir)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


# ============================================================
# Common Utilities
# ============================================================

def ensure_directory(path: str) -> str:
    """
    Ensures a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    os.makedirs(path, exist_ok=True)
    return path


# Export public API
__all__ = [
    "GlobalConfig",
    "get_config",
    "set_config",
    "reset_config",
    "as_bool",
    "init_logger",
    "ensure_directory",
]
