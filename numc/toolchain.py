"""Native toolchain: hand generated C to a C compiler."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

CC_FLAGS: list[str] = ["-x", "c", "-O3"]


class ToolchainError(Exception):
    """The C compiler could not be started."""


@dataclass
class BuildResult:
    """Outcome of one compiler run, reported as-is."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def compile_command(output: str, cc: str = "gcc") -> list[str]:
    """Compiler argv; the source is read from stdin."""
    return [cc, "-o", output] + CC_FLAGS + ["-", "-lm"]


def build(c_source: str, output: str, cc: str = "gcc") -> BuildResult:
    """Compile `c_source` into the executable `output`. One attempt, no retry."""
    cmd = compile_command(output, cc)
    try:
        result = subprocess.run(cmd, input=c_source, capture_output=True, text=True)
    except FileNotFoundError:
        raise ToolchainError("cannot run C compiler '" + cc + "'")
    return BuildResult(result.returncode, result.stdout, result.stderr)
