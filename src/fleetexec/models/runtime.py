"""
Runtime data models.

This module contains the data structures that flow through a single command
execution: the invocation itself, the spawn options and results, and the
execution context that carries the environment-derived state explicitly.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, TextIO, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import TunnelConfig


class ShellDialect(Enum):
    """Quoting rules of the shell that will parse a command line."""

    POSIX = "posix"
    WINDOWS_CMD = "windows_cmd"


class StdioMode(Enum):
    """How the child's stdout/stderr are routed."""

    # Child writes straight to the current process's streams.
    INHERIT = "inherit"
    # Output is captured and returned in the SpawnResult.
    PIPE = "pipe"


@dataclass(frozen=True)
class CommandInvocation:
    """
    An external command: a program path followed by its argument values.

    The program is a path and is never put through argument escaping; only
    the argument values are.
    """

    program: str
    args: Tuple[str, ...] = ()

    @classmethod
    def from_argv(cls, argv: Sequence[str]) -> "CommandInvocation":
        if not argv:
            raise ValueError("A command invocation requires at least a program")
        program, *args = argv
        return cls(program=str(program), args=tuple(str(a) for a in args))

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]


@dataclass(frozen=True)
class SpawnOptions:
    """
    Options for a single child process.

    Attributes:
        cwd: Working directory for the child, None for the current one.
        env: Environment overrides merged on top of the context environment.
        stdio: Whether stdout/stderr are inherited or captured.
        stderr_sink: Writable text stream that receives the child's stderr.
            It is only ever appended to and never closed.
    """

    cwd: Optional[Path] = None
    env: Optional[Mapping[str, str]] = None
    stdio: StdioMode = StdioMode.INHERIT
    stderr_sink: Optional[TextIO] = None


@dataclass(frozen=True)
class SpawnResult:
    """
    Normalised outcome of a terminated child process.

    Exactly one of exit_code and termination_signal is set.
    """

    exit_code: Optional[int] = None
    termination_signal: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and self.termination_signal is None


@dataclass(frozen=True)
class LocateResult:
    """Result of an executable lookup; path is None when nothing matched."""

    program: str
    path: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class ExecutionContext:
    """
    Environment-derived state for one top-level command.

    Built once (normally with from_environment) and passed explicitly to the
    locator, escaper, runner and elevator so that tests can substitute a
    synthetic environment without touching os.environ.
    """

    env: Mapping[str, str] = field(default_factory=dict)
    platform: str = sys.platform
    # None means "whatever sys.stdout / sys.stderr is at write time".
    stdout: Optional[TextIO] = field(default=None, compare=False)
    stderr: Optional[TextIO] = field(default=None, compare=False)
    debug: bool = False
    tunnel_config: Optional["TunnelConfig"] = None
    self_invocation: Tuple[str, ...] = ()

    @property
    def is_windows(self) -> bool:
        return self.platform == "win32"

    def getenv(self, name: str) -> Optional[str]:
        """Look up an environment variable; names are case-insensitive on Windows."""
        if name in self.env:
            return self.env[name]
        if self.is_windows:
            upper = name.upper()
            for key, value in self.env.items():
                if key.upper() == upper:
                    return value
        return None

    @property
    def stdout_stream(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    @property
    def stderr_stream(self) -> TextIO:
        return self.stderr if self.stderr is not None else sys.stderr

    @classmethod
    def from_environment(cls, debug: Optional[bool] = None) -> "ExecutionContext":
        """
        Capture the live process state.

        Args:
            debug: Force the debug flag; by default any non-empty DEBUG
                environment variable enables it.
        """
        from ..system.invocation import get_self_invocation
        from ..system.proxy import get_tunnel_config

        env = dict(os.environ)
        return cls(
            env=env,
            platform=sys.platform,
            debug=bool(env.get("DEBUG")) if debug is None else debug,
            tunnel_config=get_tunnel_config(),
            self_invocation=get_self_invocation(),
        )
