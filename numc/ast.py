"""numc AST: flat expression tokens, expression trees, statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# FLAT EXPRESSION TOKENS
# ============================================================


@dataclass(frozen=True)
class ExprToken:
    """Base for the flat, un-nested form of one expression."""


@dataclass(frozen=True)
class TokNumber(ExprToken):
    """Numeric literal."""

    value: float


@dataclass(frozen=True)
class TokIdent(ExprToken):
    """Variable reference."""

    name: str


@dataclass(frozen=True)
class TokCall(ExprToken):
    """name(args); each argument is its own flat sequence."""

    name: str
    args: list[list[ExprToken]] = field(default_factory=list)


@dataclass(frozen=True)
class TokOp(ExprToken):
    """Binary operator marker: + - * / ^ % <= >= < > == !=."""

    op: str


@dataclass(frozen=True)
class TokOpen(ExprToken):
    """Group-open marker."""


@dataclass(frozen=True)
class TokClose(ExprToken):
    """Group-close marker."""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class Expr:
    """Base for all expressions."""


@dataclass(frozen=True)
class Number(Expr):
    """Numeric literal. Every value is a double."""

    value: float


@dataclass(frozen=True)
class Ident(Expr):
    """Variable reference."""

    name: str


@dataclass(frozen=True)
class Call(Expr):
    """name(args)."""

    name: str
    args: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class BinaryOp(Expr):
    """left op right. One subclass per operator."""

    op: ClassVar[str] = ""

    left: Expr
    right: Expr


@dataclass(frozen=True)
class Add(BinaryOp):
    op: ClassVar[str] = "+"


@dataclass(frozen=True)
class Sub(BinaryOp):
    op: ClassVar[str] = "-"


@dataclass(frozen=True)
class Mul(BinaryOp):
    op: ClassVar[str] = "*"


@dataclass(frozen=True)
class Div(BinaryOp):
    op: ClassVar[str] = "/"


@dataclass(frozen=True)
class Pow(BinaryOp):
    op: ClassVar[str] = "^"


@dataclass(frozen=True)
class Mod(BinaryOp):
    op: ClassVar[str] = "%"


@dataclass(frozen=True)
class Leq(BinaryOp):
    op: ClassVar[str] = "<="


@dataclass(frozen=True)
class Geq(BinaryOp):
    op: ClassVar[str] = ">="


@dataclass(frozen=True)
class Lt(BinaryOp):
    op: ClassVar[str] = "<"


@dataclass(frozen=True)
class Gt(BinaryOp):
    op: ClassVar[str] = ">"


@dataclass(frozen=True)
class Eq(BinaryOp):
    op: ClassVar[str] = "=="


@dataclass(frozen=True)
class Neq(BinaryOp):
    op: ClassVar[str] = "!="


BINARY_OPS: dict[str, type[BinaryOp]] = {
    cls.op: cls for cls in (Add, Sub, Mul, Div, Pow, Mod, Leq, Geq, Lt, Gt, Eq, Neq)
}


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for all statements."""

    pos: Pos


@dataclass
class ExprStmt(Stmt):
    """Bare expression. Returns when last in a function body, prints otherwise."""

    expr: Expr


@dataclass
class Declaration(Stmt):
    """local name = value."""

    name: str
    value: Expr


@dataclass
class Assignment(Stmt):
    """name = value."""

    name: str
    value: Expr


@dataclass
class IfStmt(Stmt):
    """if cond then ... else ... end."""

    cond: Expr
    body: list[Stmt]
    else_body: list[Stmt] | None


@dataclass
class ForStmt(Stmt):
    """for var, bounds... do ... end. Bounds are stop | start, stop | start, stop, step."""

    var: str
    bounds: list[Expr]
    body: list[Stmt]


@dataclass
class WhileStmt(Stmt):
    """while cond do ... end."""

    cond: Expr
    body: list[Stmt]


@dataclass
class FunctionDef(Stmt):
    """function name(params) ... end."""

    name: str
    params: list[str]
    body: list[Stmt]


Program = list[Stmt]
