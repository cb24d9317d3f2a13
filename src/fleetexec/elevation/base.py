"""
Defines the abstract interface for privilege elevation strategies.

Each supported host platform has exactly one implementation:

- SudoElevator (POSIX): runs the command line through ``sudo /bin/sh -c``
- WindowsRunAsElevator (Windows): runs it through cmd.exe with the UAC
  ``runas`` verb
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, TextIO

from ..errors import ElevationError, ValidationError
from ..models import CommandInvocation, ExecutionContext
from ..system.locator import which

logger = logging.getLogger(__name__)


class AbstractElevator(ABC):
    """
    Abstract base class for elevation strategies.

    Subclasses receive a fully resolved CommandInvocation and are responsible
    for escaping it for their shell, handing it to the platform elevation
    primitive and relaying the elevated process's output.
    """

    # Human-readable strategy name, used in log messages.
    name: str = "abstract"
    # True when the platform's own credential UI tells the user why it appeared.
    explains_itself: bool = False

    async def build_invocation(
        self,
        command: Sequence[str],
        is_cli_cmd: bool,
        context: ExecutionContext,
    ) -> CommandInvocation:
        """
        Turn the caller's command into an invocation with an absolute program.

        Args:
            command: Unescaped command. For a CLI sub-command this holds only
                the sub-command words, e.g. ['internal', 'osinit', ...]; the
                running program's own invocation prefix is added here.
            is_cli_cmd: Whether ``command`` is a sub-command of this CLI
            context: Execution context

        Returns:
            CommandInvocation whose program is an absolute path
        """
        if is_cli_cmd:
            if not context.self_invocation:
                raise ElevationError(
                    "Unable to determine how to re-run this program with elevated privileges",
                    command=command,
                )
            return CommandInvocation.from_argv([*context.self_invocation, *command])

        if not command:
            raise ValidationError(
                "command must contain at least a program name",
                field_name="command",
                value=command,
            )
        program = await which(command[0], context=context)
        return CommandInvocation.from_argv([program, *command[1:]])

    async def execute_with_privileges(
        self,
        command: Sequence[str],
        stderr: Optional[TextIO] = None,
        is_cli_cmd: bool = True,
        context: Optional[ExecutionContext] = None,
    ) -> None:
        """
        Run ``command`` with administrator/root privileges.

        Raises:
            ElevationError: If elevation was declined or failed, or the
                elevated command did not succeed
        """
        context = context or ExecutionContext.from_environment()
        invocation = await self.build_invocation(command, is_cli_cmd, context)
        logger.info(f"Elevating via {self.name}: {invocation.program}")
        await self.execute(invocation, stderr, context)

    @abstractmethod
    async def execute(
        self,
        invocation: CommandInvocation,
        stderr: Optional[TextIO],
        context: ExecutionContext,
    ) -> None:
        """
        Hand ``invocation`` to the platform elevation primitive and wait for it.

        Args:
            invocation: Command with an absolute program path
            stderr: Optional sink for the elevated process's stderr
            context: Execution context
        """
        pass
