"""
Command execution and process management utilities.

This module locates an executable, spawns it with asyncio, waits for it to
terminate and normalises the outcome into a SpawnResult: an exit code, or the
name of the signal that killed the child. Whether a non-zero exit or a signal
is an error is the caller's choice.
"""

import asyncio
import codecs
import logging
import signal
from typing import List, Optional, Sequence, TextIO, Tuple

from ..errors import AbnormalTerminationError, ProcessLaunchError
from ..models import (
    CommandInvocation,
    ExecutionContext,
    SpawnOptions,
    SpawnResult,
    StdioMode,
)
from .locator import which

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


def normalize_returncode(
    returncode: int, is_windows: bool = False
) -> Tuple[Optional[int], Optional[str]]:
    """
    Split an asyncio return code into (exit_code, signal_name).

    On POSIX a negative return code -N means the child was killed by signal N.

    Examples:
        >>> normalize_returncode(0)
        (0, None)
        >>> normalize_returncode(-15)
        (None, 'SIGTERM')
    """
    if returncode < 0 and not is_windows:
        try:
            return None, signal.Signals(-returncode).name
        except ValueError:
            return None, f"SIG{-returncode}"
    return returncode, None


async def _pump_stream(
    stream: asyncio.StreamReader,
    captured: Optional[List[str]],
    sink: Optional[TextIO],
) -> None:
    """Relay a child's output stream to a sink and/or a capture buffer."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        text = decoder.decode(chunk, final=not chunk)
        if text:
            if sink is not None:
                sink.write(text)
                sink.flush()
            if captured is not None:
                captured.append(text)
        if not chunk:
            break


async def _spawn_and_wait(
    program: str,
    args: Sequence[str],
    options: SpawnOptions,
    context: ExecutionContext,
) -> Tuple[int, Optional[str], Optional[str]]:
    env = dict(context.env)
    if options.env:
        env.update(options.env)

    capture = options.stdio is StdioMode.PIPE
    pipe_stderr = capture or options.stderr_sink is not None

    process = await asyncio.create_subprocess_exec(
        program,
        *args,
        cwd=str(options.cwd) if options.cwd is not None else None,
        env=env,
        stdout=asyncio.subprocess.PIPE if capture else None,
        stderr=asyncio.subprocess.PIPE if pipe_stderr else None,
    )
    logger.debug(f"Spawned '{program}' with PID {process.pid}")

    stdout_chunks: Optional[List[str]] = [] if capture else None
    stderr_chunks: Optional[List[str]] = [] if capture else None
    pumps = []
    if capture:
        pumps.append(_pump_stream(process.stdout, stdout_chunks, None))
    if pipe_stderr:
        pumps.append(_pump_stream(process.stderr, stderr_chunks, options.stderr_sink))
    await asyncio.gather(*pumps)

    returncode = await process.wait()
    return (
        returncode,
        "".join(stdout_chunks) if stdout_chunks is not None else None,
        "".join(stderr_chunks) if stderr_chunks is not None else None,
    )


async def which_spawn(
    program_name: str,
    args: Sequence[str],
    options: Optional[SpawnOptions] = None,
    return_exit_code_or_signal: bool = False,
    context: Optional[ExecutionContext] = None,
) -> SpawnResult:
    """
    Locate ``program_name`` on the PATH and run it with ``args``.

    Args:
        program_name: Basename of the program to run, e.g. 'ssh'
        args: Argument values, passed to the program without a shell
        options: Working directory, environment overrides and stdio routing
        return_exit_code_or_signal: Return a non-zero exit code or a signal
            as data instead of raising AbnormalTerminationError
        context: Execution context (environment, debug flag, streams)

    Returns:
        SpawnResult with exactly one of exit_code / termination_signal set

    Raises:
        ExecutableNotFoundError: If the program is not on the PATH
        ProcessLaunchError: If the child could not be started
        AbnormalTerminationError: On a non-zero exit or a signal, unless
            return_exit_code_or_signal is true
    """
    context = context or ExecutionContext.from_environment()
    options = options or SpawnOptions()
    args = [str(arg) for arg in args]

    program = await which(program_name, context=context)
    if context.debug:
        stream = context.stderr_stream
        stream.write(f"[debug] [{', '.join([program, *args])}]\n")
        stream.flush()
    logger.debug(f"Running {program} with {len(args)} argument(s)")

    try:
        returncode, stdout, stderr = await _spawn_and_wait(program, args, options, context)
    except OSError as e:
        logger.debug(f"Launch of '{program}' failed: {type(e).__name__}: {e}")
        raise ProcessLaunchError(program_name, program, args, cause=e) from e

    exit_code, termination_signal = normalize_returncode(returncode, context.is_windows)
    if not return_exit_code_or_signal and (exit_code or termination_signal):
        raise AbnormalTerminationError(
            program_name, program, args, exit_code=exit_code, signal=termination_signal
        )
    return SpawnResult(
        exit_code=exit_code,
        termination_signal=termination_signal,
        stdout=stdout,
        stderr=stderr,
    )


async def run_command(
    argv: Sequence[str],
    options: Optional[SpawnOptions] = None,
    check: bool = True,
    context: Optional[ExecutionContext] = None,
) -> SpawnResult:
    """
    Run ``[program, *args]`` through which_spawn().

    Args:
        argv: Program name followed by its arguments
        options: Spawn options
        check: Raise on a non-zero exit code or a signal
        context: Execution context
    """
    invocation = CommandInvocation.from_argv(argv)
    return await which_spawn(
        invocation.program,
        invocation.args,
        options=options,
        return_exit_code_or_signal=not check,
        context=context,
    )
