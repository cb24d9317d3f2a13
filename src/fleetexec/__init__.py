"""
fleetexec: privileged, cross-platform subprocess execution.

This package is the process-execution core of the fleet management CLI:
it locates executables, escapes arguments for POSIX shells and cmd.exe,
runs programs with uniform exit code / signal reporting, re-runs commands
with elevated privileges and retries transient failures with backoff.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- errors: Exception taxonomy, validators and retry orchestration
- system: Executable lookup, escaping, process running and proxy lookup
- elevation: Platform privilege elevation strategies
- ordering: Manually curated sort orders
- cli: Command-line interface

Usage:
    From command line:
        python -m fleetexec run ls -l

    Programmatically:
        from fleetexec import ExecutionContext, which_spawn
        context = ExecutionContext.from_environment()
        result = await which_spawn("ssh", ["-V"], context=context)
"""

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .elevation import get_elevator, sudo

# Model classes for external use
from .models import (
    CommandInvocation,
    ExecConfig,
    ExecutionContext,
    LocateResult,
    ProxyConfig,
    RetryPolicy,
    ShellDialect,
    SpawnOptions,
    SpawnResult,
    StdioMode,
    TunnelConfig,
)

# Errors and retry
from .errors import (
    AbnormalTerminationError,
    ElevationError,
    ExecutableNotFoundError,
    ExpectedError,
    ProcessExecutionError,
    ProcessLaunchError,
    UnsupportedShellDialectError,
    ValidationError,
    retry,
    with_retry,
)

# System utilities
from .system import (
    get_proxy_config,
    locate_executable,
    run_command,
    shell_escape,
    which,
    which_spawn,
)

from .ordering import get_manual_sort_compare_function, manual_sort_key

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "get_elevator",
    "sudo",
    # Models
    "CommandInvocation",
    "ExecConfig",
    "ExecutionContext",
    "LocateResult",
    "ProxyConfig",
    "RetryPolicy",
    "ShellDialect",
    "SpawnOptions",
    "SpawnResult",
    "StdioMode",
    "TunnelConfig",
    # Errors
    "AbnormalTerminationError",
    "ElevationError",
    "ExecutableNotFoundError",
    "ExpectedError",
    "ProcessExecutionError",
    "ProcessLaunchError",
    "UnsupportedShellDialectError",
    "ValidationError",
    "retry",
    "with_retry",
    # System utilities
    "get_proxy_config",
    "locate_executable",
    "run_command",
    "shell_escape",
    "which",
    "which_spawn",
    # Ordering
    "get_manual_sort_compare_function",
    "manual_sort_key",
]
