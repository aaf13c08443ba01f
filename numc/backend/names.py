"""Function name table: source function names → unique C symbols.

Every function definition is hoisted to the top level of the generated C file,
so two definitions that share a source name (say, identical helpers nested in
different functions) would collide. Each definition gets a mangled name
`f<suffix>_<name>`, and calls resolve through this table.
"""

from __future__ import annotations

from typing import Callable

from ..ast import Pos


class CodegenError(Exception):
    """Semantic error found while generating code."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class RedefinitionError(CodegenError):
    """A function name was defined twice in one compilation unit."""


class UndefinedFunctionError(CodegenError):
    """A call names a function that was never defined."""


class ArityError(CodegenError):
    """A call passes the wrong number of arguments."""


def counter() -> Callable[[], str]:
    """Suffix source yielding "1", "2", "3", ..."""
    state = [0]

    def next_suffix() -> str:
        state[0] += 1
        return str(state[0])

    return next_suffix


class FunctionNames:
    """Source name → (mangled name, parameter count), owned by one generation pass."""

    def __init__(self, suffixes: Callable[[], str] | None = None) -> None:
        self._suffixes: Callable[[], str] = suffixes if suffixes is not None else counter()
        self._mangled: dict[str, str] = {}
        self._arity: dict[str, int] = {}
        self._defined_at: dict[str, Pos] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._mangled

    def __len__(self) -> int:
        return len(self._mangled)

    def define(self, name: str, arity: int, pos: Pos) -> str:
        """Intern a new function name and return its mangled symbol."""
        if name in self._mangled:
            first = self._defined_at[name]
            raise RedefinitionError(
                "function '"
                + name
                + "' already defined at line "
                + str(first.line)
                + " col "
                + str(first.col),
                pos.line,
                pos.col,
            )
        mangled = "f" + self._suffixes() + "_" + name
        self._mangled[name] = mangled
        self._arity[name] = arity
        self._defined_at[name] = pos
        return mangled

    def lookup(self, name: str) -> str | None:
        return self._mangled.get(name)

    def arity(self, name: str) -> int:
        return self._arity[name]
