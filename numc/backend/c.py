"""C backend: numc AST → C source for gcc.

Layout of the generated file:
- preamble (includes and the `print_number` runtime routine)
- prototypes for every hoisted function
- hoisted functions, in the order their definitions finished compiling
- `int main(void)` holding the top-level statements

Every value is a double. Function definitions may appear in any body; each one
is compiled as its own unit under a mangled name and never emitted inline.
"""

from __future__ import annotations

import math
from re import compile as re_compile

from ..ast import (
    Assignment,
    BinaryOp,
    Call,
    Declaration,
    Div,
    Expr,
    ExprStmt,
    ForStmt,
    FunctionDef,
    Ident,
    IfStmt,
    Mod,
    Number,
    Pos,
    Pow,
    Program,
    Stmt,
    WhileStmt,
)
from .names import ArityError, FunctionNames, UndefinedFunctionError

ENTRY_NAME = "main"

PREAMBLE: str = """\
// Generated by numc
#include <stdio.h>
#include <math.h>

static void print_number(double n) {
    if (n == (long long)n) {
        printf("%lld\\n", (long long)n);
    } else {
        printf("%lf\\n", n);
    }
}"""

# C reserved words and runtime names that need renaming
_C_RESERVED = frozenset(
    {
        "auto",
        "break",
        "case",
        "char",
        "const",
        "continue",
        "default",
        "do",
        "double",
        "else",
        "enum",
        "extern",
        "float",
        "for",
        "goto",
        "if",
        "inline",
        "int",
        "long",
        "register",
        "restrict",
        "return",
        "short",
        "signed",
        "sizeof",
        "static",
        "struct",
        "switch",
        "typedef",
        "union",
        "unsigned",
        "void",
        "volatile",
        "while",
        "_Bool",
        "_Complex",
        "_Imaginary",
        "_Alignas",
        "_Alignof",
        "_Atomic",
        "_Generic",
        "_Noreturn",
        "_Static_assert",
        "_Thread_local",
        "bool",
        "true",
        "false",
        "NULL",
        "main",
        "pow",
        "printf",
        "print_number",
    }
)

# Shape of a mangled function name; user identifiers must not take it.
_MANGLED = re_compile(r"f[0-9]+_")

_RENAME_PREFIX = "v_"


def _safe_name(name: str) -> str:
    """Rename identifiers that would clash with C keywords or generated symbols.

    Names already carrying the prefix are prefixed again, so distinct source
    names always map to distinct C names.
    """
    if (
        name in _C_RESERVED
        or _MANGLED.match(name)
        or name.startswith(_RENAME_PREFIX)
    ):
        return _RENAME_PREFIX + name
    return name


def _number_literal(value: float) -> str:
    """C double literal; negatives are parenthesized so `x - -1` stays valid."""
    if math.isinf(value):
        text = "-HUGE_VAL" if value < 0 else "HUGE_VAL"
    else:
        text = repr(float(value))
    if value < 0:
        return "(" + text + ")"
    return text


class CBackend:
    """Emit C source from a numc program."""

    def __init__(self, names: FunctionNames | None = None) -> None:
        self.indent = 0
        self.lines: list[str] = []
        self.names: FunctionNames = names if names is not None else FunctionNames()
        self.functions: list[str] = []  # Hoisted units, completion order
        self.prototypes: list[str] = []
        self._pos: Pos = Pos(0, 0)  # Statement being lowered, for error positions

    def emit(self, program: Program) -> str:
        """Emit the complete C file for a top-level program."""
        entry = self.compile_unit(program, ENTRY_NAME, [], entry=True)
        sections: list[str] = [PREAMBLE]
        if self.prototypes:
            sections.append("\n".join(self.prototypes))
        sections.extend(self.functions)
        sections.append(entry)
        return "\n\n".join(sections) + "\n"

    def _line(self, text: str) -> None:
        """Emit a line with current indentation."""
        self.lines.append("    " * self.indent + text)

    # ============================================================
    # FUNCTION UNITS
    # ============================================================

    def compile_unit(
        self,
        body: list[Stmt],
        name: str,
        params: list[str],
        entry: bool = False,
        pos: Pos | None = None,
    ) -> str:
        """Compile one body into a standalone C function and return its text.

        The entry unit becomes `int main(void)`; its trailing expressions print.
        Any other unit is defined in the name table before its body is lowered,
        so recursive calls resolve and redefinitions fail before any output.
        """
        if entry:
            header = "int " + ENTRY_NAME + "(void) {"
        else:
            where = pos if pos is not None else self._pos
            mangled = self.names.define(name, len(params), where)
            param_list = ", ".join("double " + _safe_name(p) for p in params)
            if not param_list:
                param_list = "void"
            signature = "double " + mangled + "(" + param_list + ")"
            self.prototypes.append(signature + ";")
            header = signature + " {"
        saved_lines = self.lines
        saved_indent = self.indent
        self.lines = []
        self.indent = 0
        self._line(header)
        self.indent += 1
        self._emit_body(body, not entry)
        if entry:
            self._line("return 0;")
        elif not body or not isinstance(body[-1], ExprStmt):
            self._line("return 0;")
        self.indent -= 1
        self._line("}")
        text = "\n".join(self.lines)
        self.lines = saved_lines
        self.indent = saved_indent
        return text

    def _emit_body(self, stmts: list[Stmt], function_body: bool) -> None:
        last = len(stmts) - 1
        for i, stmt in enumerate(stmts):
            self._emit_stmt(stmt, function_body and i == last)

    def _emit_block(self, stmts: list[Stmt]) -> None:
        """Loop or branch body: never returns."""
        self.indent += 1
        self._emit_body(stmts, False)
        self.indent -= 1

    # ============================================================
    # STATEMENT EMISSION
    # ============================================================

    def _emit_stmt(self, stmt: Stmt, returns: bool) -> None:
        """Emit a statement. `returns` marks the last statement of a function body."""
        self._pos = stmt.pos
        if isinstance(stmt, ExprStmt):
            self._emit_stmt_ExprStmt(stmt, returns)
        elif isinstance(stmt, Declaration):
            value = self._emit_expr(stmt.value)
            self._line("double " + _safe_name(stmt.name) + " = " + value + ";")
        elif isinstance(stmt, Assignment):
            value = self._emit_expr(stmt.value)
            self._line(_safe_name(stmt.name) + " = " + value + ";")
        elif isinstance(stmt, IfStmt):
            self._emit_stmt_IfStmt(stmt)
        elif isinstance(stmt, WhileStmt):
            self._emit_stmt_WhileStmt(stmt)
        elif isinstance(stmt, ForStmt):
            self._emit_stmt_ForStmt(stmt)
        elif isinstance(stmt, FunctionDef):
            unit = self.compile_unit(stmt.body, stmt.name, stmt.params, pos=stmt.pos)
            self.functions.append(unit)
        else:
            raise TypeError("unhandled stmt type: " + type(stmt).__name__)

    def _emit_stmt_ExprStmt(self, stmt: ExprStmt, returns: bool) -> None:
        value = self._emit_expr(stmt.expr)
        if returns:
            self._line("return " + value + ";")
        else:
            self._line("print_number(" + value + ");")

    def _emit_stmt_IfStmt(self, stmt: IfStmt) -> None:
        cond = self._emit_expr(stmt.cond)
        self._line("if (" + cond + ") {")
        self._emit_if_tail(stmt)

    def _emit_if_tail(self, stmt: IfStmt) -> None:
        """Body and else branches; `else if` chains stay flat."""
        self._emit_block(stmt.body)
        else_body = stmt.else_body
        if else_body is None:
            self._line("}")
            return
        if len(else_body) == 1 and isinstance(else_body[0], IfStmt):
            nested = else_body[0]
            self._pos = nested.pos
            cond = self._emit_expr(nested.cond)
            self._line("} else if (" + cond + ") {")
            self._emit_if_tail(nested)
            return
        self._line("} else {")
        self._emit_block(else_body)
        self._line("}")

    def _emit_stmt_WhileStmt(self, stmt: WhileStmt) -> None:
        cond = self._emit_expr(stmt.cond)
        self._line("while (" + cond + ") {")
        self._emit_block(stmt.body)
        self._line("}")

    def _emit_stmt_ForStmt(self, stmt: ForStmt) -> None:
        """Integer counter loops.

        stop:              0 up to stop, step 1
        start, stop:       counts down when start > stop, else up, step 1
        start, stop, step: same direction test, adds step each iteration
        """
        var = _safe_name(stmt.var)
        bounds = [self._emit_expr(b) for b in stmt.bounds]
        if len(bounds) == 1:
            stop = bounds[0]
            header = f"for (int {var} = 0; {var} < {stop}; {var}++) {{"
        elif len(bounds) == 2:
            start, stop = bounds
            down = f"{start} > {stop}"
            header = (
                f"for (int {var} = (int){start}; "
                f"{down} ? {var} > (int){stop} : {var} < (int){stop}; "
                f"{down} ? {var}-- : {var}++) {{"
            )
        elif len(bounds) == 3:
            start, stop, step = bounds
            down = f"{start} > {stop}"
            header = (
                f"for (int {var} = (int){start}; "
                f"{down} ? {var} > (int){stop} : {var} < (int){stop}; "
                f"{var} += (int){step}) {{"
            )
        else:
            raise TypeError("for loop with " + str(len(bounds)) + " bounds")
        self._line(header)
        self._emit_block(stmt.body)
        self._line("}")

    # ============================================================
    # EXPRESSION EMISSION
    # ============================================================

    def _emit_expr(self, expr: Expr) -> str:
        if isinstance(expr, Number):
            return _number_literal(expr.value)
        if isinstance(expr, Ident):
            return _safe_name(expr.name)
        if isinstance(expr, Call):
            return self._emit_expr_Call(expr)
        if isinstance(expr, Pow):
            left = self._emit_expr(expr.left)
            right = self._emit_expr(expr.right)
            return "pow(" + left + ", " + right + ")"
        if isinstance(expr, Div):
            # Loop counters are C ints; keep the quotient a double.
            left = self._emit_expr(expr.left)
            right = self._emit_expr(expr.right)
            return "((double)" + left + " / " + right + ")"
        if isinstance(expr, Mod):
            # Integer remainder, as in C.
            left = self._emit_expr(expr.left)
            right = self._emit_expr(expr.right)
            return "((int)" + left + " % (int)" + right + ")"
        if isinstance(expr, BinaryOp):
            left = self._emit_expr(expr.left)
            right = self._emit_expr(expr.right)
            return "(" + left + " " + expr.op + " " + right + ")"
        raise TypeError("unhandled expr type: " + type(expr).__name__)

    def _emit_expr_Call(self, expr: Call) -> str:
        mangled = self.names.lookup(expr.name)
        if mangled is None:
            raise UndefinedFunctionError(
                "call to undefined function '" + expr.name + "'",
                self._pos.line,
                self._pos.col,
            )
        expected = self.names.arity(expr.name)
        if expected != len(expr.args):
            raise ArityError(
                "function '"
                + expr.name
                + "' takes "
                + str(expected)
                + " argument(s), got "
                + str(len(expr.args)),
                self._pos.line,
                self._pos.col,
            )
        args = ", ".join(self._emit_expr(a) for a in expr.args)
        return mangled + "(" + args + ")"


def emit_c(program: Program, names: FunctionNames | None = None) -> str:
    """Generate a complete C translation unit for `program`."""
    return CBackend(names).emit(program)
