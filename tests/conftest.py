"""
Pytest configuration and shared fixtures for the fleetexec test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the fleetexec project.
"""

import io
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fleetexec.models import ExecutionContext  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def captured_streams():
    """In-memory stdout/stderr for execution contexts."""
    return {"stdout": io.StringIO(), "stderr": io.StringIO()}


@pytest.fixture
def posix_context(captured_streams):
    """Execution context for a POSIX host with the real environment."""
    return ExecutionContext(
        env=dict(os.environ),
        platform="linux",
        stdout=captured_streams["stdout"],
        stderr=captured_streams["stderr"],
        debug=False,
        self_invocation=(sys.executable, "-m", "fleetexec"),
    )


@pytest.fixture
def windows_context(captured_streams):
    """Synthetic execution context for a Windows host running cmd.exe."""
    return ExecutionContext(
        env={
            "ComSpec": r"C:\WINDOWS\system32\cmd.exe",
            "PATH": r"C:\WINDOWS\system32",
        },
        platform="win32",
        stdout=captured_streams["stdout"],
        stderr=captured_streams["stderr"],
        debug=False,
        self_invocation=(r"C:\Program Files\fleet\fleet.exe",),
    )


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "execution": {
            "debug": False,
            "detect_shell": True,
            "log_level": "warning",
        },
        "retry": {
            "max_attempts": 5,
            "initial_delay_ms": 250,
            "backoff_multiplier": 2,
            "label": "fleet operation",
        },
        "elevation": {
            "message": "Root access is needed to write the device image.",
        },
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write the sample configuration to a temporary config.toml."""
    import toml

    config_path = temp_dir / "config.toml"
    with open(config_path, "w") as f:
        toml.dump(sample_config_data, f)
    return config_path


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def make_executable(directory: Path, name: str, body: str = "#!/bin/sh\nexit 0\n") -> Path:
        """Create an executable script in ``directory``."""
        path = directory / name
        path.write_text(body)
        path.chmod(0o755)
        return path


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture(autouse=True)
def isolate_global_state(tmp_path):
    """Keep user configuration and proxy tunnel state out of every test."""
    from fleetexec.config import clear_config_cache, set_config_path
    from fleetexec.system.proxy import clear_tunnel_config

    set_config_path(tmp_path / "missing-config.toml")
    clear_tunnel_config()

    yield

    clear_config_cache()
    set_config_path(None)
    clear_tunnel_config()
