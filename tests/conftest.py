"""Pytest configuration for numc test suite."""

import shutil
import sys
from pathlib import Path

import pytest

# Add repository root to path for numc imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def pytest_addoption(parser):
    """Add --cc option selecting the compiler for end-to-end tests."""
    parser.addoption(
        "--cc",
        action="store",
        default="gcc",
        help="C compiler used by tests that build executables",
    )


@pytest.fixture
def cc(request) -> str:
    """C compiler for end-to-end tests; skips when it is not installed."""
    compiler = request.config.getoption("cc")
    if shutil.which(compiler) is None:
        pytest.skip(f"C compiler '{compiler}' not available")
    return compiler
