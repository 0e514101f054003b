"""
Configuration management for the rtmetrics package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    load_main_config,
    load_toml_file,
)
from .validators import (
    validate_app_config,
    validate_collection_config,
    validate_idle_config,
    validate_optimizer_config,
    validate_storage_config,
    validate_summary_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_app_config",
    "validate_collection_config",
    "validate_idle_config",
    "validate_optimizer_config",
    "validate_storage_config",
    "validate_summary_config",
]
