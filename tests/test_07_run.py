"""End-to-end tests: compile programs with the C compiler and check their output."""

import subprocess
from pathlib import Path

import pytest

from numc import compile_to_c
from numc.toolchain import build

RUN_DIR = Path(__file__).parent / "07_run"


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected stdout) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            result.append((test_name, "\n".join(input_lines), "\n".join(expected_lines).strip()))
        else:
            i += 1
    return result


def pytest_generate_tests(metafunc):
    """Parametrize tests over run test files."""
    if "run_input" in metafunc.fixturenames:
        params = []
        for test_file in sorted(RUN_DIR.glob("*.tests")):
            for name, input_code, expected in parse_test_file(test_file):
                params.append(
                    pytest.param(input_code, expected, id=f"{test_file.stem}/{name}")
                )
        metafunc.parametrize("run_input,run_expected", params)


def test_run(run_input: str, run_expected: str, cc: str, tmp_path: Path):
    """Build the program and compare what it prints."""
    exe = tmp_path / "prog"
    result = build(compile_to_c(run_input), str(exe), cc)
    if not result.ok:
        pytest.fail(f"C compilation failed:\n{result.stderr}")
    run = subprocess.run([str(exe)], capture_output=True, text=True, timeout=10)
    assert run.returncode == 0
    assert run.stdout.strip() == run_expected
