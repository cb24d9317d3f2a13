"""
Configuration management for the fleetexec package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_path,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    CONFIG_PATH_ENV_VAR,
    get_default_config_path,
    load_main_config,
    load_toml_file,
)
from .validators import validate_exec_config, validate_retry_config

__all__ = [
    # Main interface
    "get_config",
    "get_config_path",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    # Advanced interface
    "CONFIG_PATH_ENV_VAR",
    "get_default_config_path",
    "load_main_config",
    "load_toml_file",
    "validate_exec_config",
    "validate_retry_config",
]
