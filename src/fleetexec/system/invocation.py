"""
Self re-invocation support.

Works out the argv prefix that starts this CLI again, so that a sub-command
can be re-run under an elevation helper.
"""

import logging
import os
import sys
from typing import List, Tuple

import psutil

logger = logging.getLogger(__name__)


def _live_cmdline() -> List[str]:
    try:
        return psutil.Process().cmdline()
    except (psutil.Error, OSError) as e:
        logger.debug(f"Could not read own command line: {type(e).__name__}: {e}")
        return []


def get_self_invocation() -> Tuple[str, ...]:
    """
    Return the argv prefix that re-runs the current program.

    Frozen (single-file) builds re-run the executable alone. Otherwise the
    live command line is trimmed of the user arguments in sys.argv[1:],
    which keeps interpreter flags and the ``-m module`` form intact. When the
    command line cannot be read, the interpreter plus sys.argv[0] is used.

    Returns:
        Tuple such as ("/usr/bin/python3", "-m", "fleetexec").
    """
    if getattr(sys, "frozen", False):
        return (sys.executable,)

    cmdline = _live_cmdline()
    user_args = len(sys.argv) - 1
    if cmdline and len(cmdline) > user_args:
        prefix = cmdline[:len(cmdline) - user_args]
        # Interpreter given as a bare name: use the resolved one.
        if not os.path.isabs(prefix[0]):
            prefix[0] = sys.executable
        return tuple(prefix)

    return (sys.executable, *sys.argv[:1])
