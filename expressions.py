# services/comparison/expressions.py

from __future__ import annotations

import os
import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from sympy import Rational
from sympy.parsing.sympy_parser import parse_expr, standard_transformations


class Difficulty(str, Enum):
    BARE = "bare"
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"
    CHALLENGE = "challenge"


EXPRESSION_TIERS = (Difficulty.BARE, Difficulty.ADDITIVE, Difficulty.MULTIPLICATIVE)

# Probability that the right-hand side is replaced by the left-hand value.
EQUALITY_FORCE_RATE = float(os.getenv("EQUALITY_FORCE_RATE", "0.1"))
EQUALITY_EPSILON = 1e-3

# --- Value object -----------------------------------------------------------------


@dataclass(frozen=True)
class ExpressionSide:
    text: str
    value: int

    def to_dict(self) -> dict:
        return {"text": self.text, "value": self.value}


def bare_side(value: int) -> ExpressionSide:
    return ExpressionSide(text=str(value), value=value)


# --- Syntax tree ------------------------------------------------------------------


@dataclass
class _Num:
    n: int


@dataclass
class _Group:
    inner: "_Node"


@dataclass
class _BinOp:
    op: str
    left: "_Node"
    right: "_Node"


_Node = Union[_Num, _Group, _BinOp]


def _group(node: _Node) -> _Group:
    # (( X )) never needs both brackets
    if isinstance(node, _Group):
        return node
    return _Group(node)


def _render(node: _Node) -> str:
    if isinstance(node, _Num):
        return str(node.n)
    if isinstance(node, _Group):
        return f"({_render(node.inner)})"
    return f"{_render(node.left)}{node.op}{_render(node.right)}"


_DOUBLE_PARENS_RE = re.compile(r"\(\(([^()]*(?:\([^()]*\)[^()]*)*)\)\)")


def collapse_double_parens(text: str) -> str:
    """
    Repeatedly rewrite ``((X))`` as ``(X)``. Only a bracket pair that wraps
    exactly one other bracket pair is collapsed; ``((1+2)×3)`` is left alone.
    """
    while True:
        cleaned = _DOUBLE_PARENS_RE.sub(r"(\1)", text)
        if cleaned == text:
            return cleaned
        text = cleaned


class ExpressionBuilder:
    """
    Builds an arithmetic expression left to right while tracking its exact
    integer value.

    The expression is kept as a small syntax tree and rendered only in
    ``text``. Brackets are added only when an unbracketed sum/difference is
    followed by ``×`` or ``÷``.
    """

    def __init__(self, seed: int):
        self._node: _Node = _Num(seed)
        self.value: int = seed
        self.has_open_add_sub = False

    def add(self, n: int) -> "ExpressionBuilder":
        self._node = _BinOp("+", self._node, _Num(n))
        self.value += n
        self.has_open_add_sub = True
        return self

    def subtract(self, n: int) -> "ExpressionBuilder":
        if not 1 <= n <= self.value - 1:
            raise ValueError(f"subtrahend {n} out of range for running value {self.value}")
        self._node = _BinOp("-", self._node, _Num(n))
        self.value -= n
        self.has_open_add_sub = True
        return self

    def multiply(self, n: int) -> "ExpressionBuilder":
        left = _group(self._node) if self.has_open_add_sub else self._node
        self._node = _BinOp("×", left, _Num(n))
        self.value *= n
        self.has_open_add_sub = False
        return self

    def divide(self, divisor: int) -> "ExpressionBuilder":
        remainder = self.value % divisor
        if remainder:
            self._correct(divisor - remainder)

        left = _group(self._node) if self.has_open_add_sub else self._node
        self._node = _BinOp("÷", left, _Num(divisor))
        self.value //= divisor
        self.has_open_add_sub = False
        return self

    def _correct(self, amount: int) -> None:
        """Raise the running value by ``amount`` before an exact division."""
        node = self._node
        if isinstance(node, _Num):
            self._node = _Num(node.n + amount)
        elif isinstance(node, _BinOp) and node.op == "+" and isinstance(node.right, _Num):
            node.right = _Num(node.right.n + amount)
        else:
            # trailing literal is scaled by earlier factors: add an explicit term
            if _render(node).startswith("("):
                self._node = _Group(_BinOp("+", _Num(amount), node))
            else:
                self._node = _Group(_BinOp("+", node, _Num(amount)))
            self.has_open_add_sub = False
        self.value += amount

    @property
    def text(self) -> str:
        return collapse_double_parens(_render(self._node))

    def build(self) -> ExpressionSide:
        return ExpressionSide(text=self.text, value=self.value)


# --- Generation -------------------------------------------------------------------


def _choose_op(tier: Difficulty, current_value: int, rng: random.Random) -> str:
    if tier == Difficulty.ADDITIVE:
        # below 10 the running value only grows
        if current_value < 10 or rng.random() < 0.5:
            return "+"
        return "-"
    return "×" if rng.random() < 0.5 else "÷"


def generate_expression(
    tier: Difficulty, term_count: int, rng: Optional[random.Random] = None
) -> ExpressionSide:
    rng = rng or random
    tier = Difficulty(tier)
    if tier not in EXPRESSION_TIERS:
        raise ValueError(f"{tier.value!r} is not an expression tier")

    if tier == Difficulty.BARE or term_count <= 1:
        return bare_side(rng.randint(1, 98))

    if tier == Difficulty.MULTIPLICATIVE:
        builder = ExpressionBuilder(rng.randint(2, 11))
    else:
        builder = ExpressionBuilder(rng.randint(5, 24))

    for _ in range(term_count - 1):
        op = _choose_op(tier, builder.value, rng)
        if op == "+":
            builder.add(rng.randint(1, 20))
        elif op == "-":
            builder.subtract(rng.randint(1, builder.value - 1))
        elif op == "×":
            builder.multiply(rng.randint(2, 6))
        else:
            builder.divide(rng.randint(2, 6))

    return builder.build()


def generate_pair(
    tier: Difficulty,
    term_count: int,
    rng: Optional[random.Random] = None,
    force_equal_rate: float = EQUALITY_FORCE_RATE,
) -> Tuple[ExpressionSide, ExpressionSide]:
    rng = rng or random
    left = generate_expression(tier, term_count, rng)
    right = generate_expression(tier, term_count, rng)
    if rng.random() < force_equal_rate:
        right = bare_side(left.value)
    return left, right


def compare(left: ExpressionSide, right: ExpressionSide) -> str:
    return compare_values(left.value, right.value)


def compare_values(left: float, right: float) -> str:
    if abs(left - right) < EQUALITY_EPSILON:
        return "="
    return "<" if left < right else ">"


# --- Evaluation of display text ---------------------------------------------------

LEN_LIMIT = 100
INVALID_CHARS_MSG = (
    "Only expressions using digits, spaces, + - × ÷ * / and parentheses are allowed."
)
_ALLOWED_RE = re.compile(r"^[0-9+\-×÷*/()\s]{1,100}$")
# "**" would reach sympy as a power and "//" as floor division
_OPERATOR_ABUSE_RE = re.compile(r"\*\s*\*|/\s*/")
_OPERATOR_ABUSE_MSG = "Only the operators + - × ÷ are allowed (no powers or floor division)."


def validate_text(text: str) -> Optional[str]:
    if text is None or not isinstance(text, str) or not text.strip():
        return "Expression required."
    if len(text) > LEN_LIMIT:
        return "Expression too long (> 100)."
    if _ALLOWED_RE.fullmatch(text) is None:
        return INVALID_CHARS_MSG
    if _OPERATOR_ABUSE_RE.search(text.replace("×", "*").replace("÷", "/")):
        return _OPERATOR_ABUSE_MSG
    return None


def evaluate_text(text: str) -> Rational:
    """
    Evaluate a display expression (``×``/``÷`` allowed) exactly.

    Raises ValueError for text that fails validation, cannot be parsed, or
    divides by zero.
    """
    msg = validate_text(text)
    if msg:
        raise ValueError(msg)
    expr = text.replace("×", "*").replace("÷", "/")
    try:
        sym = parse_expr(expr, transformations=standard_transformations, evaluate=True)
    except Exception:
        raise ValueError(INVALID_CHARS_MSG)
    if not getattr(sym, "is_number", False):
        # e.g. "()" parses to an empty Tuple
        raise ValueError(INVALID_CHARS_MSG)
    if not isinstance(sym, Rational):
        raise ValueError("Expression is not finite (e.g., division by zero).")
    return sym
