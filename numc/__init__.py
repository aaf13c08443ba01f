"""numc: a small numeric scripting language compiled through C."""

from __future__ import annotations

from .backend import CodegenError as CodegenError, emit_c
from .frontend import (
    ParseError as ParseError,
    ResolveError as ResolveError,
    TokenizeError as TokenizeError,
    parse as parse,
)


def compile_to_c(source: str) -> str:
    """Parse numc source and generate the complete C translation unit."""
    return emit_c(parse(source))
