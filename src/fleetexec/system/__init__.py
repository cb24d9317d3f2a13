"""
System interaction utilities for running external programs.

This package provides the host-facing half of the execution subsystem:

- Executable lookup on the search path (which)
- Shell argument escaping for sh/bash and cmd.exe
- Spawning programs and normalising exit codes and signals
- Proxy configuration lookup
- Working out how to re-invoke the running CLI
"""

# Command execution
from .commands import normalize_returncode, run_command, which_spawn

# Shell escaping
from .escaping import (
    build_command_line,
    detect_shell_dialect,
    escape_arg,
    escape_args,
    is_windows_cmd_exe_shell,
    quote_program_path,
    shell_escape,
)

# Self re-invocation
from .invocation import get_self_invocation

# Executable lookup
from .locator import locate_executable, which

# Proxy configuration
from .proxy import (
    clear_tunnel_config,
    get_proxy_config,
    get_tunnel_config,
    set_tunnel_config,
)

__all__ = [
    # Commands
    "normalize_returncode",
    "run_command",
    "which_spawn",
    # Escaping
    "build_command_line",
    "detect_shell_dialect",
    "escape_arg",
    "escape_args",
    "is_windows_cmd_exe_shell",
    "quote_program_path",
    "shell_escape",
    # Invocation
    "get_self_invocation",
    # Lookup
    "locate_executable",
    "which",
    # Proxy
    "clear_tunnel_config",
    "get_proxy_config",
    "get_tunnel_config",
    "set_tunnel_config",
]
