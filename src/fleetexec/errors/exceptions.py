"""
Exception taxonomy and error handling helpers.

This module defines the structured exceptions raised by the execution
subsystem and the logging helpers used to report them consistently.

- ExpectedError: user-facing failures printed without a traceback
- ExecutableNotFoundError: a program is missing from the search path
- ProcessLaunchError / AbnormalTerminationError: subprocess failures
- ElevationError: the privileged re-invocation failed or was declined
- UnsupportedShellDialectError: escaping requested for an unknown dialect
- ValidationError: invalid input or configuration values
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation of an input or configuration value fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class ExpectedError(Exception):
    """
    A failure the user can act on (missing program, declined elevation).

    The CLI reports these as a single line, without a stack trace.
    """


class ExecutableNotFoundError(ExpectedError):
    """Raised when a program cannot be found on the executable search path."""

    def __init__(self, program: str):
        super().__init__(f"'{program}' program not found. Is it installed?")
        self.program = program


class UnsupportedShellDialectError(ValueError):
    """Raised when escaping is requested for a dialect that does not exist."""

    def __init__(self, dialect: Any):
        super().__init__(f"Unsupported shell dialect: {dialect!r}")
        self.dialect = dialect


class ProcessExecutionError(RuntimeError):
    """
    Base class for subprocess failures.

    Carries everything needed to reproduce the failure by hand: the name the
    caller asked for, the resolved path, the full argument vector and the
    exit code or termination signal when the child got that far.
    """

    def __init__(
        self,
        program_name: str,
        program_path: str,
        args: Sequence[str],
        exit_code: Optional[int] = None,
        signal: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.program_name = program_name
        self.program_path = program_path
        self.args_vector = tuple(args)
        self.exit_code = exit_code
        self.signal = signal
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        exit_code = "None" if self.exit_code is None else self.exit_code
        signal = "None" if self.signal is None else self.signal
        lines = [
            f"{self.program_name} failed with exit code={exit_code} signal={signal}:",
            f"[{', '.join([self.program_path, *self.args_vector])}]",
        ]
        if self.cause is not None:
            lines.append(f"{type(self.cause).__name__}: {self.cause}")
        return "\n".join(lines)


class ProcessLaunchError(ProcessExecutionError):
    """The child process could not be started at all."""


class AbnormalTerminationError(ProcessExecutionError):
    """The child exited non-zero or was killed by a signal."""


class ElevationError(ExpectedError):
    """
    Raised when a command could not be run with elevated privileges.

    This covers a declined credential prompt, a failed elevation helper and
    an elevated command that itself exited unsuccessfully.
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        exit_code: Optional[int] = None,
        signal: Optional[str] = None,
    ):
        super().__init__(message)
        self.command = tuple(command)
        self.exit_code = exit_code
        self.signal = signal


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Log a CLI-level failure and terminate the process.

    ExpectedError instances are printed as a plain message on stderr; anything
    else is logged through the usual severity mapping.
    """
    exit_code = kwargs.pop('exit_code', 1)
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)

    if isinstance(error, ExpectedError):
        print(str(error), file=sys.stderr)
    else:
        handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
