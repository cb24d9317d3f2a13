"""
Configuration file loading utilities.

This module handles locating and parsing the TOML configuration file.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..errors import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "FLEETEXEC_CONFIG"


def get_default_config_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Resolve the configuration file path.

    FLEETEXEC_CONFIG wins when set; otherwise ~/.config/fleetexec/config.toml.
    """
    env = os.environ if env is None else env
    override = env.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "fleetexec" / "config.toml"


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.debug(f"Loading {description} from: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """
    Load the configuration file, or an empty mapping when there is none.

    A missing file is normal (nothing has been customised), so it yields
    the built-in defaults instead of an error.
    """
    if not config_path.exists():
        logger.debug(f"No configuration file at {config_path}, using defaults")
        return {}
    return load_toml_file(config_path, "main configuration file")
