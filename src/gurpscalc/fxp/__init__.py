"""Fixed-point numbers and formula evaluation."""

from .eval import EvalError, FormulaEvaluator, VariableResolver, evaluate_to_number
from .fixed import HUNDRED, MAX, MIN, ONE, ZERO, FixedDecimal, FixedDecimalError, div_trunc

__all__ = [
    "FixedDecimal",
    "FixedDecimalError",
    "ZERO",
    "ONE",
    "HUNDRED",
    "MIN",
    "MAX",
    "div_trunc",
    "EvalError",
    "FormulaEvaluator",
    "VariableResolver",
    "evaluate_to_number",
]
