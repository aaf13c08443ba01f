"""Compile configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PHASES: list[str] = [
    "parse",
    "codegen",
]


@dataclass
class Options:
    """What to compile and where the results go."""

    input_file: str
    output: str | None = None  # Explicit executable name
    keep_intermediate: bool = False  # Also write the generated C next to the binary
    cc: str = "gcc"
    stop_at: str | None = None  # One of PHASES

    def stem(self) -> str:
        return Path(self.input_file).stem

    def output_name(self) -> str:
        """Executable name: the explicit override, else the input file stem."""
        if self.output is not None:
            return self.output
        return self.stem()

    def intermediate_name(self) -> str:
        return self.stem() + ".c"
