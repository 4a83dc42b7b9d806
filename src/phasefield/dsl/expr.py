# src/phasefield/dsl/expr.py
"""
Formula parser for the right-hand sides of planar systems.

Grammar (recursive descent, standard precedence, '^' right-associative):

    expression := term (('+'|'-') term)*
    term       := factor (('*'|'/') factor)*
    factor     := base ('^' factor)?
    base       := '(' expression ')' | '-' factor | NUMBER | IDENT
    IDENT      := 'x' | 'y' | 'a' | 'b' | FUNC '(' expression ')'
    FUNC       := 'sin' | 'cos' | 'tan' | 'exp' | 'sqrt'

Parsing builds an immutable node tree once; evaluation is handled by
``phasefield.runtime.evaluator`` which lowers the tree to a callable.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple, Union
import re

from phasefield.errors import ExpressionParseError

__all__ = [
    "VARIABLES",
    "FUNCTIONS",
    "Token",
    "Num",
    "Var",
    "Neg",
    "BinOp",
    "Call",
    "Node",
    "Expression",
    "tokenize",
    "parse",
]

VARIABLES: Tuple[str, ...] = ("x", "y", "a", "b")
FUNCTIONS: Tuple[str, ...] = ("sin", "cos", "tan", "exp", "sqrt")

_OPERATORS = frozenset("+-*/^()")
_TRAILING_SEMI = re.compile(r"[;\s]+$")
_NUMBER = re.compile(r"^(\d+\.?\d*|\.\d+)$")


@dataclass(frozen=True)
class Token:
    kind: str   # "num" | "op" | "ident"
    text: str
    pos: int    # offset into the caller's original text


# ---- nodes -------------------------------------------------------------------

@dataclass(frozen=True)
class Num:
    value: float


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Neg:
    operand: "Node"


@dataclass(frozen=True)
class BinOp:
    op: str  # one of + - * / ^
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    func: str
    arg: "Node"


Node = Union[Num, Var, Neg, BinOp, Call]


@dataclass(frozen=True)
class Expression:
    """
    Parsed formula.

    Fields:
      - text: formula as given by the caller
      - root: node tree
    """
    text: str
    root: Node

    @property
    def source(self) -> str:
        """Formula text with surrounding whitespace and trailing ';' removed."""
        return _clean(self.text)[0]

    def names(self) -> frozenset[str]:
        """Variables referenced by the formula."""
        out: set[str] = set()
        stack: List[Node] = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, Var):
                out.add(node.name)
            elif isinstance(node, Neg):
                stack.append(node.operand)
            elif isinstance(node, BinOp):
                stack.extend((node.left, node.right))
            elif isinstance(node, Call):
                stack.append(node.arg)
        return frozenset(out)

    def __str__(self) -> str:
        return self.source


# ---- tokenizer ---------------------------------------------------------------

def _clean(text: str) -> Tuple[str, int]:
    lead = len(text) - len(text.lstrip())
    body = _TRAILING_SEMI.sub("", text.strip())
    return body, lead


def tokenize(text: str) -> List[Token]:
    """
    Split a formula into tokens.

    A token is a maximal run of digits/decimal points, a single operator or
    parenthesis, or a maximal run of letters. Whitespace separates tokens.
    """
    body, lead = _clean(text)
    tokens: List[Token] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch.isspace():
            i += 1
            continue
        start = i
        if ch.isdigit() or ch == ".":
            while i < n and (body[i].isdigit() or body[i] == "."):
                i += 1
            lit = body[start:i]
            if not _NUMBER.match(lit):
                raise ExpressionParseError(
                    f"Malformed number '{lit}' at position {lead + start}",
                    text=text, token=lit, position=lead + start,
                )
            tokens.append(Token("num", lit, lead + start))
        elif ch.isalpha():
            while i < n and body[i].isalpha():
                i += 1
            tokens.append(Token("ident", body[start:i], lead + start))
        elif ch in _OPERATORS:
            i += 1
            tokens.append(Token("op", ch, lead + start))
        else:
            raise ExpressionParseError(
                f"Unexpected character '{ch}' at position {lead + start}",
                text=text, token=ch, position=lead + start,
            )
    return tokens


# ---- parser ------------------------------------------------------------------

class _Parser:
    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _peek_op(self, *ops: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind == "op" and tok.text in ops

    def _fail(self, message: str, tok: Token | None) -> ExpressionParseError:
        if tok is None:
            end = len(self.text.rstrip())
            return ExpressionParseError(
                f"{message} (unexpected end of expression)",
                text=self.text, token=None, position=end,
            )
        return ExpressionParseError(
            f"{message}: '{tok.text}' at position {tok.pos}",
            text=self.text, token=tok.text, position=tok.pos,
        )

    def parse(self) -> Node:
        if not self.tokens:
            raise ExpressionParseError("Empty expression", text=self.text)
        node = self._expression()
        tok = self._peek()
        if tok is not None:
            if tok.kind == "op" and tok.text == ")":
                raise self._fail("Mismatched parentheses, unexpected ')'", tok)
            raise self._fail("Unexpected token", tok)
        return node

    def _expression(self) -> Node:
        left = self._term()
        while self._peek_op("+", "-"):
            op = self.tokens[self.pos].text
            self.pos += 1
            left = BinOp(op, left, self._term())
        return left

    def _term(self) -> Node:
        left = self._factor()
        while self._peek_op("*", "/"):
            op = self.tokens[self.pos].text
            self.pos += 1
            left = BinOp(op, left, self._factor())
        return left

    def _factor(self) -> Node:
        base = self._base()
        if self._peek_op("^"):
            self.pos += 1
            return BinOp("^", base, self._factor())
        return base

    def _base(self) -> Node:
        tok = self._peek()
        if tok is None:
            raise self._fail("Expected a number, variable or '('", None)
        if tok.kind == "op":
            if tok.text == "(":
                self.pos += 1
                inner = self._expression()
                self._expect_close(tok)
                return inner
            if tok.text == "-":
                self.pos += 1
                return Neg(self._factor())
            raise self._fail("Unexpected token", tok)
        if tok.kind == "num":
            self.pos += 1
            return Num(float(tok.text))
        # identifier
        self.pos += 1
        if tok.text in VARIABLES:
            return Var(tok.text)
        if tok.text in FUNCTIONS:
            if not self._peek_op("("):
                raise self._fail(f"Expected '(' after function '{tok.text}'", self._peek())
            opening = self.tokens[self.pos]
            self.pos += 1
            arg = self._expression()
            self._expect_close(opening)
            return Call(tok.text, arg)
        raise self._fail("Unknown identifier", tok)

    def _expect_close(self, opening: Token) -> None:
        if self._peek_op(")"):
            self.pos += 1
            return
        tok = self._peek()
        if tok is None:
            raise ExpressionParseError(
                f"Mismatched parentheses: '(' at position {opening.pos} is never closed",
                text=self.text, token="(", position=opening.pos,
            )
        raise self._fail("Mismatched parentheses, expected ')'", tok)


def parse(text: str) -> Expression:
    """Parse ``text`` into an :class:`Expression` or raise ExpressionParseError."""
    if not isinstance(text, str):
        raise ExpressionParseError(f"Expression must be a string, got {type(text).__name__}")
    tokens = tokenize(text)
    root = _Parser(text, tokens).parse()
    return Expression(text=text, root=root)
