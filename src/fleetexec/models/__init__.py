"""
Data models for the fleetexec package.

This package contains the dataclasses shared by the execution subsystem:

- config: Retry policy, proxy structures and application configuration
- runtime: Command invocations, spawn options/results and the execution context
"""

from .config import (
    DEFAULT_ELEVATION_MESSAGE,
    ExecConfig,
    ProxyConfig,
    RetryPolicy,
    TunnelConfig,
)
from .runtime import (
    CommandInvocation,
    ExecutionContext,
    LocateResult,
    ShellDialect,
    SpawnOptions,
    SpawnResult,
    StdioMode,
)

__all__ = [
    # Configuration models
    "DEFAULT_ELEVATION_MESSAGE",
    "ExecConfig",
    "ProxyConfig",
    "RetryPolicy",
    "TunnelConfig",
    # Runtime models
    "CommandInvocation",
    "ExecutionContext",
    "LocateResult",
    "ShellDialect",
    "SpawnOptions",
    "SpawnResult",
    "StdioMode",
]
