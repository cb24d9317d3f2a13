"""
Executable lookup on the host search path.

Like the Unix ``which`` utility: finds the first instance of a program in the
PATH of the execution context. Results are never cached, so a changed PATH is
picked up on the next call.
"""

import asyncio
import functools
import logging
import os
import shutil
from typing import Optional

from ..errors import ExecutableNotFoundError, validate_non_empty_string
from ..models import ExecutionContext, LocateResult

logger = logging.getLogger(__name__)


async def locate_executable(
    program: str, context: Optional[ExecutionContext] = None
) -> LocateResult:
    """
    Search the context's PATH for ``program``.

    Not finding the program is an expected outcome and is reported through
    the result rather than an exception. Other failures propagate unchanged.

    Args:
        program: Basename of a program, for example 'ssh'
        context: Execution context whose PATH is searched

    Returns:
        LocateResult with an absolute path, or with path None when absent
    """
    validate_non_empty_string(program, field_name="program")
    context = context or ExecutionContext.from_environment()
    search_path = context.getenv("PATH")
    if search_path is None:
        search_path = os.defpath

    loop = asyncio.get_event_loop()
    found = await loop.run_in_executor(
        None, functools.partial(shutil.which, program, path=search_path)
    )
    if found is None:
        logger.debug(f"'{program}' not found on PATH")
        return LocateResult(program=program)
    return LocateResult(program=program, path=os.path.abspath(found))


async def which(
    program: str,
    reject_on_missing: bool = True,
    context: Optional[ExecutionContext] = None,
) -> str:
    """
    Return the full path of ``program``.

    Args:
        program: Basename of a program, for example 'ssh'
        reject_on_missing: If the program cannot be found, raise
            ExecutableNotFoundError instead of returning an empty string
        context: Execution context whose PATH is searched

    Returns:
        The program's absolute path, e.g. 'C:\\WINDOWS\\System32\\OpenSSH\\ssh.EXE',
        or '' when missing and reject_on_missing is false

    Raises:
        ExecutableNotFoundError: If the program is missing and reject_on_missing is true
    """
    result = await locate_executable(program, context)
    if result.found:
        return result.path
    if reject_on_missing:
        raise ExecutableNotFoundError(program)
    return ""
