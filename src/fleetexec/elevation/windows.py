"""
Privilege elevation through the UAC ``runas`` verb on Windows.

The elevated process runs in a new context that cannot share our console, so
its stdout and stderr are redirected to temporary files by cmd.exe and
replayed to the caller once it exits.
"""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Optional, TextIO

from ..errors import ElevationError
from ..models import CommandInvocation, ExecutionContext, ShellDialect
from ..system.escaping import build_command_line, quote_program_path
from .base import AbstractElevator

logger = logging.getLogger(__name__)

SEE_MASK_NOCLOSEPROCESS = 0x00000040
SEE_MASK_NO_CONSOLE = 0x00008000
SW_HIDE = 0
INFINITE = 0xFFFFFFFF
ERROR_CANCELLED = 1223


def _shell_execute_runas(file: str, parameters: str) -> int:
    """
    Start ``file parameters`` elevated with ShellExecuteExW and wait for it.

    Returns:
        The elevated process's exit code

    Raises:
        ElevationError: If the user declined the UAC prompt
        OSError: If ShellExecuteExW failed for another reason
    """
    import ctypes
    from ctypes import wintypes

    class SHELLEXECUTEINFOW(ctypes.Structure):
        _fields_ = [
            ("cbSize", wintypes.DWORD),
            ("fMask", ctypes.c_ulong),
            ("hwnd", wintypes.HWND),
            ("lpVerb", wintypes.LPCWSTR),
            ("lpFile", wintypes.LPCWSTR),
            ("lpParameters", wintypes.LPCWSTR),
            ("lpDirectory", wintypes.LPCWSTR),
            ("nShow", ctypes.c_int),
            ("hInstApp", wintypes.HINSTANCE),
            ("lpIDList", ctypes.c_void_p),
            ("lpClass", wintypes.LPCWSTR),
            ("hkeyClass", wintypes.HKEY),
            ("dwHotKey", wintypes.DWORD),
            ("hIconOrMonitor", wintypes.HANDLE),
            ("hProcess", wintypes.HANDLE),
        ]

    shell32 = ctypes.WinDLL("shell32", use_last_error=True)
    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    info = SHELLEXECUTEINFOW()
    info.cbSize = ctypes.sizeof(info)
    info.fMask = SEE_MASK_NOCLOSEPROCESS | SEE_MASK_NO_CONSOLE
    info.lpVerb = "runas"
    info.lpFile = file
    info.lpParameters = parameters
    info.nShow = SW_HIDE

    if not shell32.ShellExecuteExW(ctypes.byref(info)):
        error = ctypes.get_last_error()
        if error == ERROR_CANCELLED:
            raise ElevationError("Elevation was declined at the administrator prompt")
        raise ctypes.WinError(error)

    try:
        kernel32.WaitForSingleObject(info.hProcess, INFINITE)
        exit_code = wintypes.DWORD()
        if not kernel32.GetExitCodeProcess(info.hProcess, ctypes.byref(exit_code)):
            raise ctypes.WinError(ctypes.get_last_error())
        return exit_code.value
    finally:
        kernel32.CloseHandle(info.hProcess)


def _replay(path: Path, sink: TextIO) -> None:
    if not path.exists():
        return
    text = path.read_text(encoding="utf-8", errors="replace")
    if text:
        sink.write(text)
        sink.flush()


class WindowsRunAsElevator(AbstractElevator):
    """
    Runs ``cmd.exe /d /s /c "<command line>"`` through the UAC prompt.

    The UAC dialog explains itself, so no message is printed beforehand.
    """

    name = "runas"
    explains_itself = True

    def build_parameters(
        self, command_line: str, stdout_path: Path, stderr_path: Path
    ) -> str:
        """cmd.exe parameters running ``command_line`` with both streams redirected."""
        redirect = (
            f"> {quote_program_path(str(stdout_path), ShellDialect.WINDOWS_CMD)} "
            f"2> {quote_program_path(str(stderr_path), ShellDialect.WINDOWS_CMD)}"
        )
        # /s: cmd strips only the outermost quote pair, keeping inner quoting
        return f'/d /s /c "{command_line} {redirect}"'

    async def execute(
        self,
        invocation: CommandInvocation,
        stderr: Optional[TextIO],
        context: ExecutionContext,
    ) -> None:
        command_line = build_command_line(invocation, ShellDialect.WINDOWS_CMD)
        comspec = context.getenv("ComSpec") or "cmd.exe"
        logger.debug(f"runas command line: {command_line}")

        with tempfile.TemporaryDirectory(prefix="fleetexec-") as tmp:
            stdout_path = Path(tmp) / "stdout.log"
            stderr_path = Path(tmp) / "stderr.log"
            parameters = self.build_parameters(command_line, stdout_path, stderr_path)

            loop = asyncio.get_event_loop()
            try:
                exit_code = await loop.run_in_executor(
                    None, _shell_execute_runas, comspec, parameters
                )
            except ElevationError as e:
                raise ElevationError(str(e), command=invocation.argv) from e
            except OSError as e:
                raise ElevationError(
                    f"Unable to start elevated process: {e}", command=invocation.argv
                ) from e
            finally:
                _replay(stdout_path, context.stdout_stream)
                _replay(stderr_path, stderr if stderr is not None else context.stderr_stream)

        if exit_code != 0:
            raise ElevationError(
                f"Elevated command failed with exit code={exit_code}: {command_line}",
                command=invocation.argv,
                exit_code=exit_code,
            )
