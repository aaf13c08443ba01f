"""numc parser: recursive descent, one method per grammar production.

Statements are parsed directly into AST nodes. Expressions are first collected
as flat token sequences (`term (op term)*`, with group markers around
parenthesized terms) and then handed to the precedence resolver.
"""

from __future__ import annotations

from ..ast import (
    BINARY_OPS,
    Assignment,
    Declaration,
    Expr,
    ExprStmt,
    ExprToken,
    ForStmt,
    FunctionDef,
    IfStmt,
    Number,
    Pos,
    Program,
    Stmt,
    TokCall,
    TokClose,
    TokIdent,
    TokNumber,
    TokOp,
    TokOpen,
    WhileStmt,
)
from .precedence import resolve
from .tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_OP, Token

MAX_FOR_BOUNDS = 3


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def _describe(tok: Token) -> str:
    if tok.type == TK_EOF:
        return "end of input"
    return "'" + tok.value + "'"


class Parser:
    """Recursive descent parser for numc."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        """Keyword or punctuation check; never matches identifiers or numbers."""
        tok = self.current()
        return tok.value == value and tok.type != TK_IDENT and tok.type != TK_NUMBER

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_binary_op(self) -> bool:
        tok = self.current()
        return tok.type == TK_OP and tok.value in BINARY_OPS

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "', got " + _describe(self.current()))
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + _describe(tok))
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        stmts: Program = []
        while not self.at_type(TK_EOF):
            stmts.append(self.parse_stmt())
        return stmts

    def parse_block(self, terminators: tuple[str, ...]) -> list[Stmt]:
        """Statements up to (not including) one of the terminator keywords."""
        stmts: list[Stmt] = []
        while not any(self.at(t) for t in terminators):
            if self.at_type(TK_EOF):
                expected = " or ".join("'" + t + "'" for t in terminators)
                raise self.error("expected " + expected + ", got end of input")
            stmts.append(self.parse_stmt())
        return stmts

    # ── Statements ───────────────────────────────────────────

    def parse_stmt(self) -> Stmt:
        tok = self.current()
        if tok.type == "local":
            return self.parse_local_stmt()
        if tok.type == "function":
            return self.parse_function_def()
        if tok.type == "if":
            return self.parse_if_stmt("if")
        if tok.type == "while":
            return self.parse_while_stmt()
        if tok.type == "for":
            return self.parse_for_stmt()
        nxt = self.peek(1)
        if tok.type == TK_IDENT and nxt.type == TK_OP and nxt.value == "=":
            return self.parse_assignment()
        return self.parse_expr_stmt()

    def parse_local_stmt(self) -> Declaration:
        """Local = 'local' IDENT ( '=' Expr )?"""
        pos = self._pos()
        self.expect("local")
        name_tok = self.expect_ident()
        value: Expr = Number(0.0)
        if self.at("="):
            self.advance()
            value = self.parse_expr()
        return Declaration(pos, name_tok.value, value)

    def parse_assignment(self) -> Assignment:
        pos = self._pos()
        name_tok = self.expect_ident()
        self.expect("=")
        value = self.parse_expr()
        return Assignment(pos, name_tok.value, value)

    def parse_function_def(self) -> FunctionDef:
        """Function = 'function' IDENT '(' Params? ')' Stmt* 'end'"""
        pos = self._pos()
        self.expect("function")
        name_tok = self.expect_ident()
        self.expect("(")
        params: list[str] = []
        if not self.at(")"):
            params.append(self.expect_ident().value)
            while self.at(","):
                self.advance()
                params.append(self.expect_ident().value)
        self.expect(")")
        body = self.parse_block(("end",))
        self.expect("end")
        return FunctionDef(pos, name_tok.value, params, body)

    def parse_if_stmt(self, keyword: str) -> IfStmt:
        """If = ( 'if' | 'elseif' ) Expr 'then' Stmt* ( ElseIf | 'else' Stmt* 'end' | 'end' )"""
        pos = self._pos()
        self.expect(keyword)
        cond = self.parse_expr()
        self.expect("then")
        body = self.parse_block(("elseif", "else", "end"))
        else_body: list[Stmt] | None = None
        if self.at("elseif"):
            # The nested chain consumes the closing 'end'.
            else_body = [self.parse_if_stmt("elseif")]
            return IfStmt(pos, cond, body, else_body)
        if self.at("else"):
            self.advance()
            else_body = self.parse_block(("end",))
        self.expect("end")
        return IfStmt(pos, cond, body, else_body)

    def parse_while_stmt(self) -> WhileStmt:
        pos = self._pos()
        self.expect("while")
        cond = self.parse_expr()
        self.expect("do")
        body = self.parse_block(("end",))
        self.expect("end")
        return WhileStmt(pos, cond, body)

    def parse_for_stmt(self) -> ForStmt:
        """For = 'for' IDENT ( ',' Expr ){1,3} 'do' Stmt* 'end'"""
        pos = self._pos()
        self.expect("for")
        var_tok = self.expect_ident()
        bounds: list[Expr] = []
        self.expect(",")
        bounds.append(self.parse_expr())
        while self.at(","):
            if len(bounds) == MAX_FOR_BOUNDS:
                raise self.error("for loop takes at most 3 bounds")
            self.advance()
            bounds.append(self.parse_expr())
        self.expect("do")
        body = self.parse_block(("end",))
        self.expect("end")
        return ForStmt(pos, var_tok.value, bounds, body)

    def parse_expr_stmt(self) -> ExprStmt:
        pos = self._pos()
        return ExprStmt(pos, self.parse_expr())

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        return resolve(self.parse_flat_expr())

    def parse_flat_expr(self) -> list[ExprToken]:
        """Expr = Term ( Op Term )*"""
        tokens = self.parse_term()
        while self.at_binary_op():
            tokens.append(TokOp(self.advance().value))
            tokens.extend(self.parse_term())
        return tokens

    def parse_term(self) -> list[ExprToken]:
        """Term = '(' Expr ')' | '-'? NUMBER | IDENT '(' Args? ')' | IDENT"""
        tok = self.current()
        if self.at("("):
            self.advance()
            inner = self.parse_flat_expr()
            self.expect(")")
            return [TokOpen()] + inner + [TokClose()]
        if self.at("-") and self.peek(1).type == TK_NUMBER:
            self.advance()
            return [TokNumber(-float(self.advance().value))]
        if tok.type == TK_NUMBER:
            self.advance()
            return [TokNumber(float(tok.value))]
        if tok.type == TK_IDENT:
            self.advance()
            if self.at("("):
                return [TokCall(tok.value, self.parse_arg_list())]
            return [TokIdent(tok.value)]
        raise self.error("expected expression, got " + _describe(tok))

    def parse_arg_list(self) -> list[list[ExprToken]]:
        self.expect("(")
        args: list[list[ExprToken]] = []
        if not self.at(")"):
            args.append(self.parse_flat_expr())
            while self.at(","):
                self.advance()
                args.append(self.parse_flat_expr())
        self.expect(")")
        return args
