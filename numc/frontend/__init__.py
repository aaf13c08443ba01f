"""numc front end: tokenizer, grammar, precedence resolution."""

from __future__ import annotations

from ..ast import Program
from .parse import ParseError as ParseError, Parser
from .precedence import ResolveError as ResolveError, resolve as resolve
from .tokens import TokenizeError as TokenizeError, tokenize


def parse(source: str) -> Program:
    """Parse numc source code into a statement list."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_program()
