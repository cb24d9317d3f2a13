"""
Entry point for running commands with administrator / superuser privileges.
"""

import logging
from typing import Optional, Sequence, TextIO

from ..config import get_config
from ..models import ExecutionContext
from .base import AbstractElevator
from .posix import SudoElevator
from .windows import WindowsRunAsElevator

logger = logging.getLogger(__name__)


def get_elevator(context: ExecutionContext) -> AbstractElevator:
    """Select the elevation strategy for the host platform of ``context``."""
    if context.is_windows:
        return WindowsRunAsElevator()
    return SudoElevator()


async def sudo(
    command: Sequence[str],
    *,
    stderr: Optional[TextIO] = None,
    msg: Optional[str] = None,
    is_cli_cmd: bool = True,
    context: Optional[ExecutionContext] = None,
) -> None:
    """
    Execute a child process with admin / superuser privileges.

    The user is told why a password prompt may follow (except on Windows,
    where the UAC dialog says so itself), the arguments are shell-escaped for
    the platform's shell and the command is handed to the elevation helper.

    Args:
        command: Unescaped command and arguments. If is_cli_cmd is true this
            holds only the sub-command of this CLI, e.g.
            ['internal', 'osinit', ...]; the running program's own invocation
            is prepended automatically.
        stderr: Optional stream to which the elevated stderr is written
        msg: Optional message shown before the password prompt
        is_cli_cmd: Whether ``command`` is a sub-command of this CLI
        context: Execution context

    Raises:
        ElevationError: If elevation fails or the elevated command fails
    """
    context = context or ExecutionContext.from_environment()
    elevator = get_elevator(context)

    if not elevator.explains_itself:
        print(msg or get_config().elevation_message, file=context.stdout_stream)
    await elevator.execute_with_privileges(
        command, stderr=stderr, is_cli_cmd=is_cli_cmd, context=context
    )
