"""
Formula evaluator for derived indicators.

A formula is an arithmetic expression over other indicators of the same
dashboard, referenced as {id:X}:

    ({id:101} + {id:102}) / 2

Grammar
-------
    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := ('+' | '-') factor | NUMBER | PLACEHOLDER | '(' expr ')'

Nothing outside this grammar is ever executed. Any formula that fails to
tokenize or parse, divides by zero, or produces a non-finite value
evaluates to 0.
"""

import logging
import math
import re

from .models import Indicator
from .utils import value_or_zero

logger = logging.getLogger(__name__)

FIELD_PROGRESS = "progress"
FIELD_GOALS = "goals"

_PLACEHOLDER = re.compile(r"\{id:([^}]+)\}")
_TOKEN = re.compile(r"\s*(?:(\{id:[^}]+\})|(\d+\.?\d*|\.\d+)|([-+*/()]))")


class FormulaError(ValueError):
    """Raised internally for formulas outside the arithmetic grammar."""


def formula_dependencies(formula: str | None) -> list[str]:
    """Indicator ids referenced by a formula, in order of first appearance."""
    seen = []
    for match in _PLACEHOLDER.finditer(formula or ""):
        ref = match.group(1).strip()
        if ref not in seen:
            seen.append(ref)
    return seen


def tokenize(formula: str) -> list[tuple[str, str]]:
    """Split a formula into (kind, text) tokens; kind is 'ref', 'num' or 'op'."""
    tokens = []
    pos = 0
    text = formula.rstrip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise FormulaError(f"unexpected character {text[pos:].strip()[:1]!r} at {pos}")
        ref, num, op = match.groups()
        if ref is not None:
            tokens.append(("ref", _PLACEHOLDER.match(ref).group(1).strip()))
        elif num is not None:
            tokens.append(("num", num))
        else:
            tokens.append(("op", op))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, tokens: list[tuple[str, str]], resolve):
        self.tokens = tokens
        self.pos = 0
        self.resolve = resolve

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise FormulaError("unexpected end of formula")
        self.pos += 1
        return token

    def parse(self) -> float:
        value = self._expr()
        if self._peek() is not None:
            raise FormulaError(f"unexpected token {self._peek()[1]!r}")
        return value

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in (("op", "+"), ("op", "-")):
            _, op = self._next()
            rhs = self._term()
            value = value + rhs if op == "+" else value - rhs
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in (("op", "*"), ("op", "/")):
            _, op = self._next()
            rhs = self._factor()
            if op == "*":
                value *= rhs
            else:
                value /= rhs
        return value

    def _factor(self) -> float:
        kind, text = self._next()
        if kind == "num":
            return float(text)
        if kind == "ref":
            return self.resolve(text)
        if text == "-":
            return -self._factor()
        if text == "+":
            return self._factor()
        if text == "(":
            value = self._expr()
            if self._next() != ("op", ")"):
                raise FormulaError("expected ')'")
            return value
        raise FormulaError(f"unexpected token {text!r}")


def evaluate_formula(
    formula: str | None,
    all_indicators: list[Indicator],
    month_index: int,
    field: str = FIELD_PROGRESS,
) -> float:
    """Evaluate `formula` for one month, reading `field` of the referenced indicators.

    Unknown indicator ids and empty slots resolve to 0.
    """
    if not formula:
        return 0.0

    by_id = {str(ind.id): ind for ind in all_indicators}

    def resolve(ref: str) -> float:
        ind = by_id.get(ref)
        if ind is None:
            return 0.0
        series = ind.monthly_goals if field == FIELD_GOALS else ind.monthly_progress
        return value_or_zero(series, month_index)

    try:
        result = _Parser(tokenize(formula), resolve).parse()
    except (FormulaError, RecursionError) as e:
        logger.warning("Formula %r skipped: %s", formula, e)
        return 0.0
    except ZeroDivisionError:
        return 0.0

    if not math.isfinite(result):
        return 0.0
    return result


def formula_series(
    formula: str | None,
    all_indicators: list[Indicator],
    n_periods: int,
    field: str = FIELD_PROGRESS,
) -> list[float]:
    return [evaluate_formula(formula, all_indicators, i, field) for i in range(n_periods)]
