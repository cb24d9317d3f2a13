"""
Configuration validation utilities.

Turns raw TOML data into a validated ExecConfig, filling in defaults for
anything the file leaves out.
"""

import logging
from typing import Any, Dict

from ..errors import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)
from ..models.config import DEFAULT_ELEVATION_MESSAGE, ExecConfig, RetryPolicy

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(
            f"[{name}] must be a table",
            field_name=name,
            value=section,
        )
    return section


def validate_retry_config(retry_data: Dict[str, Any]) -> RetryPolicy:
    """
    Validate the [retry] section.

    Args:
        retry_data: Raw [retry] table from TOML

    Returns:
        Validated RetryPolicy

    Raises:
        ValidationError: If validation fails
    """
    defaults = RetryPolicy()
    return RetryPolicy(
        max_attempts=validate_positive_integer(
            retry_data.get("max_attempts", defaults.max_attempts),
            min_value=1,
            max_value=100,
            field_name="retry.max_attempts",
        ),
        initial_delay_ms=validate_positive_float(
            retry_data.get("initial_delay_ms", defaults.initial_delay_ms),
            min_value=0.0,
            field_name="retry.initial_delay_ms",
        ),
        backoff_multiplier=validate_positive_float(
            retry_data.get("backoff_multiplier", defaults.backoff_multiplier),
            min_value=1.0,
            field_name="retry.backoff_multiplier",
        ),
        label=validate_non_empty_string(
            retry_data.get("label", defaults.label),
            field_name="retry.label",
        ),
    )


def validate_exec_config(config_data: Dict[str, Any]) -> ExecConfig:
    """
    Validate and create an ExecConfig from raw configuration data.

    Args:
        config_data: Parsed config.toml contents

    Returns:
        Validated ExecConfig instance

    Raises:
        ValidationError: If validation fails
    """
    execution = _section(config_data, "execution")
    elevation = _section(config_data, "elevation")

    config = ExecConfig(
        debug=validate_bool(execution.get("debug", False), field_name="execution.debug"),
        detect_shell=validate_bool(
            execution.get("detect_shell", False), field_name="execution.detect_shell"
        ),
        log_level=validate_enum_choice(
            execution.get("log_level", "INFO"),
            choices=LOG_LEVELS,
            field_name="execution.log_level",
            case_sensitive=False,
        ),
        retry=validate_retry_config(_section(config_data, "retry")),
        elevation_message=validate_non_empty_string(
            elevation.get("message", DEFAULT_ELEVATION_MESSAGE),
            field_name="elevation.message",
        ),
    )
    logger.debug(f"Validated configuration: {config}")
    return config
