"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default location of the configuration file; the CLI and tests override it
# through set_config_path().
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to the config.toml file

    Note:
        Any cached configuration is dropped, so the next call to
        get_config() reads the new file.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = config_path
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    """
    Load and validate the application configuration from a TOML file.

    A relative ``storage.data_dir`` is resolved against the directory that
    holds the configuration file.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the file is malformed
    """
    try:
        config_data = load_main_config(config_path)
        app_config = validate_app_config(config_data)

        data_dir = app_config.storage.data_dir
        if not data_dir.is_absolute():
            app_config.storage = replace(app_config.storage, data_dir=config_path.parent / data_dir)

        logger.info(
            f"Successfully loaded configuration: collecting every "
            f"{app_config.collection.interval_seconds}s, state file {app_config.storage.state_file}"
        )
        return app_config

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.

    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "state_file": str(_CONFIG.storage.state_file) if _CONFIG else None,
        "ext_stats_host": _CONFIG.collection.ext_stats_host if _CONFIG else None,
    }
