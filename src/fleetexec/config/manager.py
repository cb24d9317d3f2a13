"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..errors import ErrorSeverity, handle_config_error
from ..models.config import ExecConfig
from .loader import get_default_config_path, load_main_config
from .validators import validate_exec_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[ExecConfig] = None

# None means "resolve from FLEETEXEC_CONFIG or the per-user default on load".
_CONFIG_FILE_PATH: Optional[Path] = None


def set_config_path(config_path: Optional[Path]) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to a config.toml file, or None to go back to the
            default resolution

    Note:
        The cached configuration is dropped so the next get_config() call
        reads the new file.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = config_path
    _CONFIG = None
    logger.debug(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def get_config_path() -> Path:
    return _CONFIG_FILE_PATH if _CONFIG_FILE_PATH is not None else get_default_config_path()


def _load_config(config_path: Path) -> ExecConfig:
    """
    Load and validate the configuration file.

    Raises:
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    try:
        config_data = load_main_config(config_path)
        config = validate_exec_config(config_data)
        logger.debug(f"Loaded configuration from {config_path}")
        return config
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )


def get_config() -> ExecConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton ExecConfig instance

    Raises:
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(get_config_path())
    return _CONFIG


def is_config_loaded() -> bool:
    """
    Check if configuration has been loaded and cached.
    """
    return _CONFIG is not None
