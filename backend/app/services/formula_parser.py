"""
formula_parser.py — Sandboxed arithmetic for user-configured cabinet formulas.

Template cabinets store area and hardware-quantity formulas as free text,
e.g. ``(2 * depth * height) + (width * height) + ((1.1 + shelf_qty) * width * depth)``.
They are evaluated here by a small recursive-descent parser that accepts only:

  - decimal literals            12, 0.5, .5, 1.
  - the operators               + - * /  (binary) and + - (unary)
  - parentheses
  - identifiers from an explicit whitelist, bound to numbers by the caller

Nothing is ever handed to ``eval``.  Any other character, an unknown name, a
syntax error, a division by zero or a non-finite result raises FormulaError.
"""

import functools
import math
import re
from typing import Iterable, List, Mapping, Tuple, Union

# Variables available to cabinet area formulas (all in mm or counts)
AREA_VARIABLES: Tuple[str, ...] = (
    "width", "height", "depth",
    "shelf_qty", "drawer_qty", "door_qty", "end_panels_qty",
)

# Variables available to hinge / drawer-hardware quantity formulas
QUANTITY_VARIABLES: Tuple[str, ...] = ("door_qty", "drawer_qty")

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<number>\d+\.\d*|\.\d+|\d+)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op>[-+*/()])"
    r"|(?P<bad>\S)"
    r")"
)

# Node shapes: ("num", float) | ("var", name) | ("neg", node) | (op, left, right)
Node = Union[Tuple[str, float], Tuple[str, str], Tuple[str, "Node"], Tuple[str, "Node", "Node"]]
Token = Tuple[str, str]

# Deepest run of parentheses and unary signs accepted in one formula
MAX_NESTING_DEPTH: int = 100


class FormulaError(ValueError):
    """Formula text that cannot be evaluated to a finite number."""


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN_RE.match(stripped, pos)
        if match is None or match.end() == pos:
            raise FormulaError(f"Unexpected input at position {pos}")
        kind = match.lastgroup
        value = match.group(kind)
        if kind == "bad":
            raise FormulaError(f"Illegal character {value!r} at position {match.start(kind)}")
        tokens.append((kind, value))
        pos = match.end()
    return tokens


class _Parser:
    """
    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := ('+' | '-') unary | primary
    primary := NUMBER | NAME | '(' expr ')'
    """

    def __init__(self, tokens: List[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    def _peek(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return ("end", "")

    def _advance(self) -> Token:
        token = self._peek()
        self._pos += 1
        return token

    def parse(self) -> Node:
        if not self._tokens:
            raise FormulaError("Empty formula")
        node = self._expr()
        kind, value = self._peek()
        if kind != "end":
            raise FormulaError(f"Unexpected token {value!r}")
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self._peek() in (("op", "+"), ("op", "-")):
            _, op = self._advance()
            node = (op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self._peek() in (("op", "*"), ("op", "/")):
            _, op = self._advance()
            node = (op, node, self._unary())
        return node

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise FormulaError("Formula nested too deeply")

    def _unary(self) -> Node:
        if self._peek() in (("op", "-"), ("op", "+")):
            _, op = self._advance()
            self._enter()
            operand = self._unary()
            self._depth -= 1
            return ("neg", operand) if op == "-" else operand
        return self._primary()

    def _primary(self) -> Node:
        kind, value = self._advance()
        if kind == "number":
            return ("num", float(value))
        if kind == "name":
            return ("var", value)
        if (kind, value) == ("op", "("):
            self._enter()
            node = self._expr()
            self._depth -= 1
            if self._advance() != ("op", ")"):
                raise FormulaError("Missing closing parenthesis")
            return node
        if kind == "end":
            raise FormulaError("Unexpected end of formula")
        raise FormulaError(f"Unexpected token {value!r}")


@functools.lru_cache(maxsize=512)
def compile_formula(text: str) -> Node:
    """Parse ``text`` into an expression tree. Cached per distinct formula string."""
    return _Parser(tokenize(text)).parse()


def _names(node: Node) -> Iterable[str]:
    tag = node[0]
    if tag == "var":
        yield node[1]
    elif tag == "neg":
        yield from _names(node[1])
    elif tag in ("+", "-", "*", "/"):
        yield from _names(node[1])
        yield from _names(node[2])


def _evaluate(node: Node, variables: Mapping[str, float]) -> float:
    tag = node[0]
    if tag == "num":
        return node[1]
    if tag == "var":
        return float(variables[node[1]])
    if tag == "neg":
        return -_evaluate(node[1], variables)
    left = _evaluate(node[1], variables)
    right = _evaluate(node[2], variables)
    if tag == "+":
        return left + right
    if tag == "-":
        return left - right
    if tag == "*":
        return left * right
    if right == 0:
        raise FormulaError("Division by zero")
    return left / right


def evaluate_formula(
    text: str,
    variables: Mapping[str, float],
    allowed: Iterable[str] = AREA_VARIABLES,
) -> float:
    """
    Evaluate ``text`` with ``variables`` bound by whole identifier.

    Only names in ``allowed`` may appear; each of them must be present in
    ``variables``.  Returns a finite float or raises FormulaError.
    """
    if text is None:
        raise FormulaError("No formula")
    tree = compile_formula(text.strip())
    allowed_set = set(allowed)
    try:
        for name in _names(tree):
            if name not in allowed_set:
                raise FormulaError(f"Unknown variable {name!r}")
            if name not in variables:
                raise FormulaError(f"No value bound for {name!r}")
        result = _evaluate(tree, variables)
    except RecursionError:
        # Long operator chains build left-deep trees
        raise FormulaError("Formula too long to evaluate") from None
    if not math.isfinite(result):
        raise FormulaError("Formula result is not a finite number")
    return result
