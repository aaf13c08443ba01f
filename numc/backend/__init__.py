"""numc back end: C code generation."""

from __future__ import annotations

from .c import CBackend as CBackend, emit_c as emit_c
from .names import (
    ArityError as ArityError,
    CodegenError as CodegenError,
    FunctionNames as FunctionNames,
    RedefinitionError as RedefinitionError,
    UndefinedFunctionError as UndefinedFunctionError,
)
