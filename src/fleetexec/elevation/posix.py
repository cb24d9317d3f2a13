"""
Privilege elevation through sudo on Linux and macOS.
"""

import logging
from typing import Optional, TextIO

from ..errors import (
    ElevationError,
    ExecutableNotFoundError,
    ProcessLaunchError,
)
from ..models import CommandInvocation, ExecutionContext, ShellDialect, SpawnOptions
from ..system.commands import which_spawn
from ..system.escaping import build_command_line
from .base import AbstractElevator

logger = logging.getLogger(__name__)

POSIX_SHELL = "/bin/sh"


class SudoElevator(AbstractElevator):
    """
    Runs the command line as ``sudo /bin/sh -c '<command line>'``.

    stdin and stdout are inherited, so sudo's password prompt reaches the
    user's terminal; stderr goes to the caller's sink when one is given.
    """

    name = "sudo"
    explains_itself = False

    async def execute(
        self,
        invocation: CommandInvocation,
        stderr: Optional[TextIO],
        context: ExecutionContext,
    ) -> None:
        command_line = build_command_line(invocation, ShellDialect.POSIX)
        logger.debug(f"sudo command line: {command_line}")

        try:
            result = await which_spawn(
                "sudo",
                [POSIX_SHELL, "-c", command_line],
                options=SpawnOptions(stderr_sink=stderr),
                return_exit_code_or_signal=True,
                context=context,
            )
        except (ExecutableNotFoundError, ProcessLaunchError) as e:
            raise ElevationError(
                f"Unable to run sudo: {e}", command=invocation.argv
            ) from e

        if not result.succeeded:
            raise ElevationError(
                f"Elevated command failed with exit code={result.exit_code} "
                f"signal={result.termination_signal}: {command_line}",
                command=invocation.argv,
                exit_code=result.exit_code,
                signal=result.termination_signal,
            )
