"""
Command-line interface for fleetexec.

A thin harness over the execution subsystem: it is what a privileged
re-invocation of this program runs, and it lets the locator, escaper, runner
and elevator be exercised by hand when diagnosing a host.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from ..config import get_config
from ..elevation import sudo
from ..errors import (
    AbnormalTerminationError,
    ValidationError,
    handle_cli_error,
    retry,
    validate_positive_integer,
)
from ..models import ExecutionContext, RetryPolicy
from ..system import get_proxy_config, run_command, shell_escape, which

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetexec",
        description="Locate, escape, run and elevate external commands.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    which_parser = subparsers.add_parser("which", help="Print the full path of a program.")
    which_parser.add_argument("program")
    which_parser.add_argument(
        "--soft",
        action="store_true",
        help="Print an empty line instead of failing when the program is missing.",
    )

    escape_parser = subparsers.add_parser(
        "escape", help="Shell-escape arguments for this host's shell."
    )
    escape_parser.add_argument(
        "--detect-shell",
        action="store_true",
        default=None,
        help="Detect the interactive shell (e.g. MSYS bash on Windows) from SHELL/ComSpec.",
    )
    escape_parser.add_argument("args", nargs="*")

    run_parser = subparsers.add_parser("run", help="Run a program from the PATH.")
    run_parser.add_argument(
        "--retries",
        type=str,
        default=None,
        help="Total attempts for a failing command. Defaults to a single attempt.",
    )
    run_parser.add_argument("program")
    run_parser.add_argument("args", nargs=argparse.REMAINDER)

    sudo_parser = subparsers.add_parser(
        "sudo", help="Run a fleetexec sub-command (or, with --external, any program) elevated."
    )
    sudo_parser.add_argument(
        "--external",
        action="store_true",
        help="Treat the arguments as an external program instead of a fleetexec sub-command.",
    )
    sudo_parser.add_argument("args", nargs=argparse.REMAINDER)

    subparsers.add_parser("proxy", help="Show the active proxy configuration.")
    return parser


async def _cmd_which(args: argparse.Namespace, context: ExecutionContext) -> int:
    path = await which(args.program, reject_on_missing=not args.soft, context=context)
    print(path, file=context.stdout_stream)
    return 0 if path else 1


async def _cmd_escape(args: argparse.Namespace, context: ExecutionContext) -> int:
    detect_shell = args.detect_shell if args.detect_shell is not None else get_config().detect_shell
    print(" ".join(shell_escape(args.args, detect_shell=detect_shell, context=context)),
          file=context.stdout_stream)
    return 0


async def _cmd_run(args: argparse.Namespace, context: ExecutionContext) -> int:
    argv = [args.program, *args.args]
    if args.retries is None:
        policy = RetryPolicy(max_attempts=1, label=args.program)
    else:
        attempts = validate_positive_integer(args.retries, min_value=1, field_name="--retries")
        policy = replace(get_config().retry, max_attempts=attempts, label=args.program)

    try:
        await retry(lambda: run_command(argv, context=context), policy)
    except AbnormalTerminationError as e:
        logger.debug(str(e))
        return e.exit_code if e.exit_code else 1
    return 0


async def _cmd_sudo(args: argparse.Namespace, context: ExecutionContext) -> int:
    if not args.args:
        raise ValidationError("sudo needs a command to run", field_name="args")
    await sudo(args.args, is_cli_cmd=not args.external, context=context)
    return 0


async def _cmd_proxy(args: argparse.Namespace, context: ExecutionContext) -> int:
    proxy = get_proxy_config(context)
    if proxy is None:
        print("No proxy configured", file=context.stdout_stream)
        return 1
    auth = " (authenticated)" if proxy.proxy_auth else ""
    print(f"{proxy.host}:{proxy.port}{auth}", file=context.stdout_stream)
    return 0


_HANDLERS = {
    "which": _cmd_which,
    "escape": _cmd_escape,
    "run": _cmd_run,
    "sudo": _cmd_sudo,
    "proxy": _cmd_proxy,
}


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Loads the configuration, builds one ExecutionContext for the whole
    command and dispatches to the sub-command handler.

    Raises:
        SystemExit: Always, with the sub-command's exit status
    """
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except Exception as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    context = ExecutionContext.from_environment()
    if config.debug and not context.debug:
        context = replace(context, debug=True)
    _setup_logging("DEBUG" if context.debug else config.log_level)

    try:
        exit_code = asyncio.run(_HANDLERS[args.command](args, context))
    except Exception as e:
        handle_cli_error(error=e, context=args.command, exit_code=1, logger=logger)
    sys.exit(exit_code)
