"""
Unit tests for privilege elevation.

The platform primitives (sudo via which_spawn, ShellExecuteExW) are mocked;
these tests check what gets handed to them and how failures are mapped.
"""

import io
import shlex
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from fleetexec.elevation import (
    SudoElevator,
    WindowsRunAsElevator,
    get_elevator,
    sudo,
)
from fleetexec.elevation.posix import POSIX_SHELL
from fleetexec.errors import (
    ElevationError,
    ExecutableNotFoundError,
    ProcessLaunchError,
    ValidationError,
)
from fleetexec.models import DEFAULT_ELEVATION_MESSAGE, ExecutionContext, SpawnResult


@pytest.mark.unit
class TestElevatorSelection:
    """Test platform strategy selection."""

    def test_posix(self, posix_context):
        """Test that POSIX hosts use sudo."""
        assert isinstance(get_elevator(posix_context), SudoElevator)

    def test_windows(self, windows_context):
        """Test that Windows hosts use the runas verb."""
        elevator = get_elevator(windows_context)
        assert isinstance(elevator, WindowsRunAsElevator)
        assert elevator.explains_itself


@pytest.mark.unit
class TestSudo:
    """Test the sudo() entry point on POSIX."""

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_cli_command_is_prefixed(self, mock_spawn, posix_context, captured_streams):
        """Test that a CLI sub-command is re-run through this program's own invocation."""
        mock_spawn.return_value = SpawnResult(exit_code=0)

        await sudo(["internal", "osinit", "/dev/sd b"], context=posix_context)

        args, kwargs = mock_spawn.call_args
        assert args[0] == "sudo"
        shell, flag, command_line = args[1]
        assert (shell, flag) == (POSIX_SHELL, "-c")
        assert shlex.split(command_line) == [
            *posix_context.self_invocation, "internal", "osinit", "/dev/sd b"
        ]
        assert kwargs["return_exit_code_or_signal"] is True
        assert captured_streams["stdout"].getvalue() == DEFAULT_ELEVATION_MESSAGE + "\n"

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_external_command_is_resolved(self, mock_spawn, temp_dir, test_utils, captured_streams):
        """Test that an external program is resolved to an absolute path."""
        mock_spawn.return_value = SpawnResult(exit_code=0)
        tool = test_utils.make_executable(temp_dir, "diskutil-x")
        context = ExecutionContext(
            env={"PATH": str(temp_dir)},
            platform="linux",
            stdout=captured_streams["stdout"],
            stderr=captured_streams["stderr"],
        )

        await sudo(["diskutil-x", "eject", "disk 2"], is_cli_cmd=False, context=context)

        command_line = mock_spawn.call_args[0][1][2]
        assert shlex.split(command_line) == [str(tool), "eject", "disk 2"]

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_custom_message_and_stderr_sink(self, mock_spawn, posix_context, captured_streams):
        """Test that a custom message is printed and stderr goes to the sink."""
        mock_spawn.return_value = SpawnResult(exit_code=0)
        sink = io.StringIO()

        await sudo(["status"], msg="Root is needed to flash.", stderr=sink, context=posix_context)

        assert captured_streams["stdout"].getvalue() == "Root is needed to flash.\n"
        assert mock_spawn.call_args.kwargs["options"].stderr_sink is sink

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_configured_message(self, mock_spawn, posix_context, captured_streams, config_file):
        """Test that the configured elevation message is the default."""
        from fleetexec.config import set_config_path

        set_config_path(config_file)
        mock_spawn.return_value = SpawnResult(exit_code=0)

        await sudo(["status"], context=posix_context)

        assert captured_streams["stdout"].getvalue() == (
            "Root access is needed to write the device image.\n"
        )

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_failed_command(self, mock_spawn, posix_context):
        """Test that a failing elevated command raises ElevationError."""
        mock_spawn.return_value = SpawnResult(exit_code=1)

        with pytest.raises(ElevationError) as exc_info:
            await sudo(["status"], context=posix_context)

        assert exc_info.value.exit_code == 1
        assert exc_info.value.command[-1] == "status"

    @pytest.mark.asyncio
    @patch("fleetexec.elevation.posix.which_spawn", new_callable=AsyncMock)
    async def test_signal(self, mock_spawn, posix_context):
        """Test that a signal-terminated elevated command raises ElevationError."""
        mock_spawn.return_value = SpawnResult(termination_signal="SIGINT")

        with pytest.raises(ElevationError) as exc_info:
            await sudo(["status"], context=posix_context)
        assert exc_info.value.signal == "SIGINT"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ExecutableNotFoundError("sudo"),
        ProcessLaunchError("sudo", "/usr/bin/sudo", [], cause=PermissionError("denied")),
    ])
    async def test_sudo_unavailable(self, error, posix_context):
        """Test that a missing or unstartable sudo is reported as ElevationError."""
        with patch("fleetexec.elevation.posix.which_spawn", new=AsyncMock(side_effect=error)):
            with pytest.raises(ElevationError, match="Unable to run sudo") as exc_info:
                await sudo(["status"], context=posix_context)
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_no_self_invocation(self, posix_context):
        """Test that a CLI command cannot be elevated without a re-invocation prefix."""
        from dataclasses import replace

        context = replace(posix_context, self_invocation=())
        with pytest.raises(ElevationError):
            await sudo(["status"], context=context)

    @pytest.mark.asyncio
    async def test_empty_external_command(self, posix_context):
        """Test that an empty external command is rejected."""
        with pytest.raises(ValidationError):
            await sudo([], is_cli_cmd=False, context=posix_context)


@pytest.mark.unit
class TestWindowsRunAs:
    """Test the Windows elevation strategy with ShellExecuteExW mocked."""

    def test_build_parameters(self):
        """Test the cmd.exe parameters with output redirection."""
        parameters = WindowsRunAsElevator().build_parameters(
            '"C:\\fleet\\fleet.exe" "status"',
            Path("C:/tmp/out.log"),
            Path("C:/tmp/err.log"),
        )
        assert parameters.startswith('/d /s /c ""C:\\fleet\\fleet.exe" "status" > "')
        assert '2> "' in parameters
        assert parameters.endswith('err.log""')

    @pytest.mark.asyncio
    async def test_no_message_printed(self, windows_context, captured_streams):
        """Test that no explanation is printed since UAC explains itself."""
        with patch("fleetexec.elevation.windows._shell_execute_runas", return_value=0) as runas:
            await sudo(["status"], context=windows_context)

        assert captured_streams["stdout"].getvalue() == ""
        file, parameters = runas.call_args[0]
        assert file == r"C:\WINDOWS\system32\cmd.exe"
        assert '"C:\\Program Files\\fleet\\fleet.exe" "status"' in parameters

    @pytest.mark.asyncio
    async def test_output_is_replayed(self, windows_context, captured_streams):
        """Test that redirected output files are replayed to the caller's streams."""
        sink = io.StringIO()

        def fake_runas(file, parameters):
            # Recover the temporary paths from the redirections.
            out_path = parameters.split(' > "')[1].split('"')[0]
            err_path = parameters.split(' 2> "')[1].split('"')[0]
            Path(out_path).write_text("formatted\n")
            Path(err_path).write_text("warning\n")
            return 0

        with patch("fleetexec.elevation.windows._shell_execute_runas", side_effect=fake_runas):
            await sudo(["format"], stderr=sink, context=windows_context)

        assert captured_streams["stdout"].getvalue() == "formatted\n"
        assert sink.getvalue() == "warning\n"

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, windows_context):
        """Test that a failing elevated command raises ElevationError."""
        with patch("fleetexec.elevation.windows._shell_execute_runas", return_value=5):
            with pytest.raises(ElevationError) as exc_info:
                await sudo(["status"], context=windows_context)
        assert exc_info.value.exit_code == 5

    @pytest.mark.asyncio
    async def test_declined_prompt(self, windows_context):
        """Test that a declined UAC prompt surfaces as ElevationError with the command."""
        declined = ElevationError("Elevation was declined at the administrator prompt")
        with patch("fleetexec.elevation.windows._shell_execute_runas", side_effect=declined):
            with pytest.raises(ElevationError, match="declined") as exc_info:
                await sudo(["status"], context=windows_context)
        assert exc_info.value.command[-1] == "status"

    @pytest.mark.asyncio
    async def test_os_error(self, windows_context):
        """Test that other ShellExecuteExW failures are mapped to ElevationError."""
        with patch("fleetexec.elevation.windows._shell_execute_runas",
                   side_effect=OSError("The system cannot find the file specified")):
            with pytest.raises(ElevationError, match="Unable to start elevated process"):
                await sudo(["status"], context=windows_context)
