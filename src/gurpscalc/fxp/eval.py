"""Arithmetic formula evaluation over FixedDecimal values.

Formulas are small arithmetic expressions used by rules data, for example
``"($dx+$ht)/4"`` or ``"floor($basic_speed)"``. Variables are written with a
leading ``$`` and are resolved through a VariableResolver, which returns
replacement text that is itself evaluated.

The evaluator raises EvalError and never logs. Callers decide whether a
failure is fatal; evaluate_to_number() is the fail-soft policy used for rules
formulas.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from .fixed import ZERO, FixedDecimal, FixedDecimalError

logger = structlog.get_logger(__name__)

MAX_NESTING_DEPTH = 32

_TOKEN_PATTERN = re.compile(
    r"\s*(?:"
    r"(?P<number>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)"
    r"|\$(?P<variable>[A-Za-z0-9_.]+)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op>[-+*/(),])"
    r")"
)


class EvalError(Exception):
    """Raised when a formula cannot be evaluated to a number."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Unable to evaluate '{expression}': {reason}")
        self.expression = expression
        self.reason = reason


class VariableResolver(Protocol):
    """Supplies replacement text for ``$name`` references in formulas."""

    def resolve_variable(self, variable_name: str) -> str:
        """Return the text for the variable, or an empty string if unknown."""
        ...


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    end = len(expression.rstrip())
    while position < end:
        match = _TOKEN_PATTERN.match(expression, position)
        if match is None or match.end() == position:
            raise EvalError(expression, f"unexpected character at position {position}")
        kind = match.lastgroup
        if kind is None:
            raise EvalError(expression, f"unexpected character at position {position}")
        tokens.append(_Token(kind, match.group(kind)))
        position = match.end()
    return tokens


FUNCTIONS: dict[str, tuple[int, Callable[..., FixedDecimal]]] = {
    "abs": (1, abs),
    "ceil": (1, FixedDecimal.ceil),
    "floor": (1, FixedDecimal.floor),
    "round": (1, FixedDecimal.round),
    "min": (2, FixedDecimal.min),
    "max": (2, FixedDecimal.max),
}


class FormulaEvaluator:
    """
    Evaluates formulas against a variable resolver.

    Supports numeric literals, ``+ - * /``, unary signs, parentheses,
    ``$variables`` and the functions in FUNCTIONS.

    Example:
        >>> FormulaEvaluator().evaluate("(10 + 12) / 4")
        FixedDecimal('5.5')
    """

    def __init__(self, resolver: VariableResolver | None = None) -> None:
        self.resolver = resolver

    def evaluate(self, expression: str) -> FixedDecimal:
        """
        Evaluate an expression to a number.

        Raises:
            EvalError: If the expression is malformed, references a variable
                that cannot be resolved to a number, divides by zero, or nests
                variable references too deeply
        """
        return _Parser(self, expression, 0).parse()

    def _resolve(self, name: str, expression: str, depth: int) -> FixedDecimal:
        if self.resolver is None:
            raise EvalError(expression, f"no resolver available for ${name}")
        if depth >= MAX_NESTING_DEPTH:
            raise EvalError(expression, f"variable ${name} nests too deeply")
        text = self.resolver.resolve_variable(name)
        if not text or not text.strip():
            raise EvalError(expression, f"unable to resolve ${name}")
        try:
            return _Parser(self, text, depth + 1).parse()
        except EvalError as e:
            raise EvalError(expression, f"${name} is not a number ({e.reason})") from e


class _Parser:
    """Recursive-descent parser that computes as it parses."""

    def __init__(self, evaluator: FormulaEvaluator, expression: str, depth: int) -> None:
        self.evaluator = evaluator
        self.expression = expression
        self.depth = depth
        self.tokens = _tokenize(expression)
        self.position = 0

    def parse(self) -> FixedDecimal:
        if not self.tokens:
            raise EvalError(self.expression, "empty expression")
        value = self._expression()
        if self.position != len(self.tokens):
            raise EvalError(self.expression, f"unexpected '{self._peek().text}'")
        return value

    def _peek(self) -> _Token:
        return self.tokens[self.position]

    def _at_op(self, *ops: str) -> bool:
        if self.position >= len(self.tokens):
            return False
        token = self._peek()
        return token.kind == "op" and token.text in ops

    def _take(self) -> _Token:
        if self.position >= len(self.tokens):
            raise EvalError(self.expression, "unexpected end of expression")
        token = self.tokens[self.position]
        self.position += 1
        return token

    def _expect(self, op: str) -> None:
        token = self._take()
        if token.kind != "op" or token.text != op:
            raise EvalError(self.expression, f"expected '{op}' but found '{token.text}'")

    def _expression(self) -> FixedDecimal:
        value = self._term()
        while self._at_op("+", "-"):
            if self._take().text == "+":
                value = value + self._term()
            else:
                value = value - self._term()
        return value

    def _term(self) -> FixedDecimal:
        value = self._unary()
        while self._at_op("*", "/"):
            if self._take().text == "*":
                value = value * self._unary()
            else:
                divisor = self._unary()
                if not divisor:
                    raise EvalError(self.expression, "division by zero")
                value = value / divisor
        return value

    def _unary(self) -> FixedDecimal:
        if self._at_op("-"):
            self._take()
            return -self._unary()
        if self._at_op("+"):
            self._take()
            return self._unary()
        return self._primary()

    def _primary(self) -> FixedDecimal:
        token = self._take()
        if token.kind == "number":
            try:
                return FixedDecimal.parse(token.text)
            except FixedDecimalError as e:
                raise EvalError(self.expression, str(e)) from e
        if token.kind == "variable":
            return self.evaluator._resolve(token.text, self.expression, self.depth)
        if token.kind == "name":
            return self._call(token.text)
        if token.text == "(":
            value = self._expression()
            self._expect(")")
            return value
        raise EvalError(self.expression, f"unexpected '{token.text}'")

    def _call(self, name: str) -> FixedDecimal:
        entry = FUNCTIONS.get(name.lower())
        if entry is None:
            raise EvalError(self.expression, f"unknown function '{name}'")
        arity, function = entry
        self._expect("(")
        arguments = [self._expression()]
        while self._at_op(","):
            self._take()
            arguments.append(self._expression())
        self._expect(")")
        if len(arguments) != arity:
            raise EvalError(
                self.expression,
                f"{name}() takes {arity} argument(s) but {len(arguments)} were given",
            )
        return function(*arguments)


def evaluate_to_number(expression: str, resolver: VariableResolver | None) -> FixedDecimal:
    """
    Evaluate an expression, returning zero if it cannot be evaluated.

    A single malformed formula in rules content degrades one value rather than
    aborting the whole sheet computation. Failures are logged as warnings.

    Args:
        expression: The formula text
        resolver: Supplies values for ``$variables``

    Returns:
        The evaluated value, or zero on failure
    """
    try:
        return FormulaEvaluator(resolver).evaluate(expression)
    except EvalError as e:
        logger.warning(
            "formula_evaluation_failed",
            expression=expression,
            reason=e.reason,
        )
        return ZERO
