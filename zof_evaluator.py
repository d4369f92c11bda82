"""
Expression layer: turns user text into numbers the solvers can trust.

Users enter expressions such as ``x**3 - 5*x + 2``, ``x^3 - x - 2``,
``3x - 6`` or ``sin(x) - x/2``. Parsing and symbolic differentiation are
delegated to sympy; evaluation goes through a ``math``-backed lambdified
callable. The solvers never see an exception from here: every failure
(domain error, division by zero, overflow, complex or non-finite result)
comes back as ``UNDEFINED``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from tokenize import TokenError
from typing import Callable, Optional

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from zof_config import COMPLEX_TOLERANCE
from zof_errors import InvalidExpression

logger = logging.getLogger(__name__)

X_SYMBOL = sp.symbols("x")

_TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)
_LOCALS = {"x": X_SYMBOL, "e": sp.E}


# --------------------------------------------------------------------------- #
# Evaluation outcome
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class EvaluationOutcome:
    """Either a defined real value or ``UNDEFINED``."""

    value: Optional[float] = None

    @classmethod
    def defined(cls, value: float) -> "EvaluationOutcome":
        return cls(float(value))

    @property
    def is_defined(self) -> bool:
        return self.value is not None


UNDEFINED = EvaluationOutcome()


# --------------------------------------------------------------------------- #
# Parsing
# --------------------------------------------------------------------------- #


def parse_expression(expr: str) -> sp.Expr:
    """Parse ``expr`` as a function of ``x`` or raise ``InvalidExpression``."""
    if not expr or not expr.strip():
        raise InvalidExpression("Function expression cannot be empty.")
    try:
        parsed = parse_expr(
            expr.strip(),
            local_dict=dict(_LOCALS),
            transformations=_TRANSFORMATIONS,
        )
    except (sp.SympifyError, SyntaxError, TokenError, TypeError, ValueError, AttributeError) as exc:
        raise InvalidExpression(f"Invalid function expression: {expr}") from exc

    if not isinstance(parsed, sp.Expr):
        raise InvalidExpression(f"Not an arithmetic expression: {expr}")
    unknown = parsed.free_symbols - {X_SYMBOL}
    if unknown:
        names = ", ".join(sorted(str(symbol) for symbol in unknown))
        raise InvalidExpression(
            f"Expression must only use the variable x (found: {names})."
        )
    undefined_functions = parsed.atoms(AppliedUndef)
    if undefined_functions:
        names = ", ".join(sorted(str(func.func) for func in undefined_functions))
        raise InvalidExpression(f"Unknown function(s) in expression: {names}.")
    return parsed


def validate(expr: str) -> bool:
    """Report whether ``expr`` is a well-formed expression in ``x``."""
    try:
        parse_expression(expr)
    except InvalidExpression:
        return False
    return True


@lru_cache(maxsize=256)
def compile_expression(expr: str) -> Callable[[float], float]:
    """Lambdify ``expr`` once; repeated solver calls hit the cache."""
    return sp.lambdify(X_SYMBOL, parse_expression(expr), "math")


def differentiate(expr: str, order: int = 1) -> str:
    """Symbolic derivative of ``expr`` with respect to ``x``, as text."""
    if order < 1:
        raise ValueError("Derivative order must be at least 1.")
    return str(sp.diff(parse_expression(expr), X_SYMBOL, order))


# --------------------------------------------------------------------------- #
# Evaluation
# --------------------------------------------------------------------------- #


def _to_real(value) -> Optional[float]:
    """Convert a lambdified result into a finite float, or ``None``."""
    if isinstance(value, complex):
        if abs(value.imag) > COMPLEX_TOLERANCE:
            return None
        value = value.real
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def evaluate(expr: str, x: float) -> EvaluationOutcome:
    """Evaluate ``expr`` at ``x``; failures come back as ``UNDEFINED``."""
    try:
        func = compile_expression(expr)
    except InvalidExpression:
        logger.debug("Cannot evaluate invalid expression %r", expr)
        return UNDEFINED
    try:
        raw = func(x)
    except (ArithmeticError, ValueError, TypeError, NameError) as exc:
        logger.debug("%s undefined at x=%r: %s", expr, x, exc)
        return UNDEFINED
    value = _to_real(raw)
    if value is None:
        logger.debug("%s has no finite real value at x=%r (got %r)", expr, x, raw)
        return UNDEFINED
    return EvaluationOutcome.defined(value)
