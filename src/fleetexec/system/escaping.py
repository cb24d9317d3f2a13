"""
Shell argument escaping for sh/bash and the Windows cmd.exe shell.

cmd.exe uses the caret instead of the backslash for metacharacters and
doubled double quotes for quote literals, so it gets its own escaper. The
escapers are pure functions of (argument, dialect); only dialect selection
looks at the environment.

Reference for the cmd.exe rules:
https://blogs.msdn.microsoft.com/twistylittlepassagesallalike/2011/04/23/everyone-quotes-command-line-arguments-the-wrong-way/
"""

import re
import shlex
from typing import List, Optional, Sequence

from ..errors import UnsupportedShellDialectError
from ..models import CommandInvocation, ExecutionContext, ShellDialect

_CMD_METACHARACTERS = re.compile(r'([()%!^<>&|])')


def is_windows_cmd_exe_shell(context: ExecutionContext) -> bool:
    """
    Decide whether the shell that started this process is cmd.exe (or PowerShell).

    Note:
        Any shell that does not set SHELL while ComSpec points at cmd.exe is
        treated as cmd.exe, including third-party non-POSIX shells. The
        ComSpec suffix match is case-sensitive, so "CMD.EXE" is not detected.
    """
    comspec = context.getenv("ComSpec")
    return (
        # neither bash nor sh (e.g. not MSYS, MSYS2, Cygwin, WSL)
        context.getenv("SHELL") is None
        and comspec is not None
        and comspec.endswith("cmd.exe")
    )


def detect_shell_dialect(
    context: Optional[ExecutionContext] = None, detect_shell: bool = False
) -> ShellDialect:
    """
    Pick the quoting dialect for one invocation.

    Args:
        context: Execution context to inspect
        detect_shell: Use SHELL/ComSpec to find the interactive shell. This
            detects MSYS/MSYS2 bash on Windows. Leave it off when the command
            line goes to a spawn-through-shell API, since those always use
            ComSpec on Windows regardless of SHELL.
    """
    context = context or ExecutionContext.from_environment()
    if detect_shell:
        is_cmd_exe = is_windows_cmd_exe_shell(context)
    else:
        is_cmd_exe = context.is_windows
    return ShellDialect.WINDOWS_CMD if is_cmd_exe else ShellDialect.POSIX


def windows_cmd_exe_escape_arg(arg: str) -> str:
    """Escape one argument for the Windows cmd.exe shell."""
    # already double quoted: drop the outer pair rather than wrap twice
    if len(arg) > 1 and arg.startswith('"') and arg.endswith('"'):
        arg = arg[1:-1]
    arg = _CMD_METACHARACTERS.sub(r'^\1', arg)
    return '"' + arg.replace('"', '""') + '"'


def posix_escape_arg(arg: str) -> str:
    """Escape one argument for sh/bash with single-quote rules."""
    return shlex.quote(arg)


def escape_arg(arg: str, dialect: ShellDialect) -> str:
    if dialect is ShellDialect.POSIX:
        return posix_escape_arg(arg)
    if dialect is ShellDialect.WINDOWS_CMD:
        return windows_cmd_exe_escape_arg(arg)
    raise UnsupportedShellDialectError(dialect)


def escape_args(args: Sequence[str], dialect: ShellDialect) -> List[str]:
    return [escape_arg(arg, dialect) for arg in args]


def shell_escape(
    args: Sequence[str],
    detect_shell: bool = False,
    context: Optional[ExecutionContext] = None,
) -> List[str]:
    """
    Escape each argument for the shell dialect of this host.

    Args:
        args: Unescaped argument values
        detect_shell: See detect_shell_dialect()
        context: Execution context used for dialect selection

    Returns:
        One escaped token per argument
    """
    dialect = detect_shell_dialect(context, detect_shell=detect_shell)
    return escape_args(args, dialect)


def quote_program_path(program: str, dialect: ShellDialect) -> str:
    """
    Quote a program path for the start of a command line.

    The path is not subject to metacharacter escaping; on cmd.exe it is only
    wrapped in double quotes, which cannot appear inside a Windows path.
    """
    if dialect is ShellDialect.POSIX:
        return shlex.quote(program)
    if dialect is ShellDialect.WINDOWS_CMD:
        if len(program) > 1 and program.startswith('"') and program.endswith('"'):
            return program
        return f'"{program}"'
    raise UnsupportedShellDialectError(dialect)


def build_command_line(invocation: CommandInvocation, dialect: ShellDialect) -> str:
    """Join a path-quoted program and its escaped arguments into one command line."""
    return " ".join([quote_program_path(invocation.program, dialect),
                     *escape_args(invocation.args, dialect)])
