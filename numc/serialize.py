"""Serialization of AST nodes to JSON-compatible dicts, and JSON rendering."""

from __future__ import annotations

import math

from .ast import (
    Assignment,
    BinaryOp,
    Call,
    Declaration,
    Expr,
    ExprStmt,
    ForStmt,
    FunctionDef,
    Ident,
    IfStmt,
    Number,
    Pos,
    Stmt,
    WhileStmt,
)


def serialize(obj: object) -> object:
    """Recursively serialize an object to a JSON-compatible structure."""
    if obj is None:
        return None
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, (int, float)):
        return obj
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (list, tuple)):
        return [serialize(x) for x in obj]
    if isinstance(obj, Expr):
        return _serialize_expr(obj)
    if isinstance(obj, Stmt):
        return _serialize_stmt(obj)
    if isinstance(obj, Pos):
        return {"line": obj.line, "col": obj.col}
    return "<unserializable>"


def _serialize_expr(obj: Expr) -> dict[str, object]:
    """Serialize Expr subclasses."""
    if isinstance(obj, Number):
        return {"_type": "Number", "value": obj.value}
    if isinstance(obj, Ident):
        return {"_type": "Ident", "name": obj.name}
    if isinstance(obj, Call):
        return {"_type": "Call", "name": obj.name, "args": serialize(obj.args)}
    if isinstance(obj, BinaryOp):
        return {
            "_type": type(obj).__name__,
            "op": obj.op,
            "left": serialize(obj.left),
            "right": serialize(obj.right),
        }
    return {"_type": "<unknown expr>"}


def _serialize_stmt(obj: Stmt) -> dict[str, object]:
    """Serialize Stmt subclasses."""
    d: dict[str, object] = {"_type": type(obj).__name__, "pos": serialize(obj.pos)}
    if isinstance(obj, ExprStmt):
        d["expr"] = serialize(obj.expr)
    elif isinstance(obj, (Declaration, Assignment)):
        d["name"] = obj.name
        d["value"] = serialize(obj.value)
    elif isinstance(obj, IfStmt):
        d["cond"] = serialize(obj.cond)
        d["body"] = serialize(obj.body)
        d["else_body"] = serialize(obj.else_body)
    elif isinstance(obj, ForStmt):
        d["var"] = obj.var
        d["bounds"] = serialize(obj.bounds)
        d["body"] = serialize(obj.body)
    elif isinstance(obj, WhileStmt):
        d["cond"] = serialize(obj.cond)
        d["body"] = serialize(obj.body)
    elif isinstance(obj, FunctionDef):
        d["name"] = obj.name
        d["params"] = serialize(obj.params)
        d["body"] = serialize(obj.body)
    return d


# --- JSON rendering ---

INDENT = "  "

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _quote(text: str) -> str:
    return '"' + "".join(_ESCAPES.get(c, c) for c in text) + '"'


def _number(value: int | float) -> str:
    # JSON has no inf; 1e999 reads back as one.
    if isinstance(value, float) and math.isinf(value):
        return "-1e999" if value < 0 else "1e999"
    return repr(value)


def _bracketed(open_: str, close: str, items: list[str], depth: int) -> str:
    """One item per line, indented one level past the brackets."""
    if not items:
        return open_ + close
    inner = INDENT * (depth + 1)
    body = ",\n".join(inner + item for item in items)
    return open_ + "\n" + body + "\n" + INDENT * depth + close


def _render(value: object, depth: int) -> str:
    """Render a serialized tree (dicts, lists, scalars) as JSON text."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return _number(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        items = [_render(v, depth + 1) for v in value]
        return _bracketed("[", "]", items, depth)
    if isinstance(value, dict):
        items = [_quote(str(k)) + ": " + _render(v, depth + 1) for k, v in value.items()]
        return _bracketed("{", "}", items, depth)
    raise TypeError("cannot render " + type(value).__name__ + " as JSON")


def to_json(obj: object) -> str:
    """Serialize an AST (or part of one) to pretty-printed JSON."""
    return _render(serialize(obj), 0)
