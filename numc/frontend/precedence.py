"""Precedence resolution: flat expression tokens → expression tree.

Two passes over one expression:

1. `to_postfix` runs the shunting-yard algorithm, moving operands straight to
   the output and holding operators on a stack until an operator that binds
   no tighter arrives (or a group closes).
2. `fold_postfix` replays the postfix sequence on an operand stack; each
   operator pops right then left and pushes the combined node.

Operators of equal precedence combine left to right, except `^`, which
combines right to left: `a - b - c` is `(a - b) - c` and `a ^ b ^ c` is
`a ^ (b ^ c)`.

Input comes from the grammar and is assumed well-formed. Malformed input is
a contract violation and raises `ResolveError`.
"""

from __future__ import annotations

from ..ast import (
    BINARY_OPS,
    Call,
    Expr,
    ExprToken,
    Ident,
    Number,
    TokCall,
    TokClose,
    TokIdent,
    TokNumber,
    TokOp,
    TokOpen,
)

# Higher binds tighter. A group-open marker on the stack acts as 0.
PRECEDENCE: dict[str, int] = {
    "==": 2,
    "!=": 2,
    "<=": 3,
    ">=": 3,
    "<": 3,
    ">": 3,
    "+": 4,
    "-": 4,
    "*": 5,
    "/": 5,
    "%": 5,
    "^": 6,
}

RIGHT_ASSOC: set[str] = {"^"}


class ResolveError(Exception):
    """Malformed flat token sequence."""


def _precedence(tok: TokOp) -> int:
    if tok.op not in PRECEDENCE:
        raise ResolveError("unknown operator: " + repr(tok.op))
    return PRECEDENCE[tok.op]


def _pops(top: TokOp, incoming: TokOp) -> bool:
    """Whether `top` leaves the stack before `incoming` is pushed."""
    top_prec = _precedence(top)
    prec = _precedence(incoming)
    if top_prec > prec:
        return True
    return top_prec == prec and incoming.op not in RIGHT_ASSOC


def to_postfix(tokens: list[ExprToken]) -> list[ExprToken]:
    """Reorder an infix token sequence into postfix order, dropping group markers."""
    output: list[ExprToken] = []
    stack: list[ExprToken] = []
    for tok in tokens:
        if isinstance(tok, (TokNumber, TokIdent, TokCall)):
            output.append(tok)
        elif isinstance(tok, TokOp):
            while stack and isinstance(stack[-1], TokOp) and _pops(stack[-1], tok):
                output.append(stack.pop())
            stack.append(tok)
        elif isinstance(tok, TokOpen):
            stack.append(tok)
        elif isinstance(tok, TokClose):
            while stack and not isinstance(stack[-1], TokOpen):
                output.append(stack.pop())
            if not stack:
                raise ResolveError("group-close marker without matching group-open")
            stack.pop()
        else:
            raise ResolveError("unexpected token: " + repr(tok))
    while stack:
        top = stack.pop()
        if isinstance(top, TokOpen):
            raise ResolveError("group-open marker without matching group-close")
        output.append(top)
    return output


def fold_postfix(postfix: list[ExprToken]) -> Expr:
    """Build the expression tree from a postfix sequence."""
    operands: list[Expr] = []
    for tok in postfix:
        if isinstance(tok, TokNumber):
            operands.append(Number(tok.value))
        elif isinstance(tok, TokIdent):
            operands.append(Ident(tok.name))
        elif isinstance(tok, TokCall):
            # Arguments resolve on their own, independent of this stack.
            operands.append(Call(tok.name, [resolve(arg) for arg in tok.args]))
        elif isinstance(tok, TokOp):
            if len(operands) < 2:
                raise ResolveError("operator " + repr(tok.op) + " is missing an operand")
            right = operands.pop()
            left = operands.pop()
            node_class = BINARY_OPS.get(tok.op)
            if node_class is None:
                raise ResolveError("unknown operator: " + repr(tok.op))
            operands.append(node_class(left, right))
        else:
            raise ResolveError("unexpected token in postfix sequence: " + repr(tok))
    if len(operands) != 1:
        raise ResolveError(
            "expected exactly one expression, got " + str(len(operands))
        )
    return operands[0]


def resolve(tokens: list[ExprToken]) -> Expr:
    """Resolve one flat expression token sequence into an expression tree."""
    return fold_postfix(to_postfix(tokens))
