"""
Error handling for the fleetexec package.

This package provides the exception taxonomy of the execution subsystem,
value validators and the retry-with-backoff orchestrator.
"""

# Core exception classes and error handling
from .exceptions import (
    AbnormalTerminationError,
    ElevationError,
    ErrorSeverity,
    ExecutableNotFoundError,
    ExpectedError,
    ProcessExecutionError,
    ProcessLaunchError,
    UnsupportedShellDialectError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

# Retry orchestration
from .backoff import delay, retry, retry_with_defaults, with_retry

# Validation functions
from .validators import (
    validate_bool,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Exceptions
    "AbnormalTerminationError",
    "ElevationError",
    "ErrorSeverity",
    "ExecutableNotFoundError",
    "ExpectedError",
    "ProcessExecutionError",
    "ProcessLaunchError",
    "UnsupportedShellDialectError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    # Retry
    "delay",
    "retry",
    "retry_with_defaults",
    "with_retry",
    # Validators
    "validate_bool",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
]
