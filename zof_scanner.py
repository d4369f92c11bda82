"""
Automatic bracket discovery.

The bracketing solvers need an interval whose endpoints straddle a root.
``scan`` walks a range with a fixed step and reports every adjacent pair of
samples whose values change sign, plus every sample that is already a root.
It is a heuristic: two roots inside one step cancel out and stay invisible,
so callers pick ``step`` from the root spacing they expect.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import sympy as sp

from zof_config import MAX_SCAN_SAMPLES, ROOT_PRECISION, ZERO_EPSILON
from zof_evaluator import X_SYMBOL, evaluate, parse_expression
from zof_models import Interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    intervals: Tuple[Interval, ...] = ()
    exact_roots: Tuple[float, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.intervals and not self.exact_roots

    @property
    def positive_count(self) -> int:
        """Candidates lying on the positive side of the axis."""
        return sum(1 for item in self.intervals if item.high > 0) + sum(
            1 for root in self.exact_roots if root > 0
        )

    @property
    def negative_count(self) -> int:
        return sum(1 for item in self.intervals if item.high <= 0) + sum(
            1 for root in self.exact_roots if root < 0
        )


def sample_points(domain_low: float, domain_high: float, step: float) -> List[float]:
    """Grid ``domain_low + k*step`` up to ``domain_high`` (which is always included)."""
    if step <= 0:
        raise ValueError("Step must be greater than 0.")
    if domain_low >= domain_high:
        raise ValueError("Domain lower bound must be smaller than the upper bound.")
    span = domain_high - domain_low
    count = int(math.floor(span / step + 1e-9))
    if count + 2 > MAX_SCAN_SAMPLES:
        raise ValueError(
            f"Step {step} is too small for [{domain_low}, {domain_high}] "
            f"(more than {MAX_SCAN_SAMPLES} samples)."
        )
    points = [domain_low + k * step for k in range(count + 1)]
    # Grid points within a hair of the end are snapped onto it.
    if domain_high - points[-1] > step * 1e-9:
        points.append(domain_high)
    else:
        points[-1] = domain_high
    return points


def scan(
    expression: str,
    domain_low: float,
    domain_high: float,
    step: float,
    *,
    zero_epsilon: float = ZERO_EPSILON,
    precision: int = ROOT_PRECISION,
) -> ScanResult:
    """Find sign-change brackets and exact-zero samples of ``expression``."""
    parse_expression(expression)  # raises InvalidExpression

    xs = sample_points(domain_low, domain_high, step)
    ys = [evaluate(expression, x).value for x in xs]

    intervals: List[Interval] = []
    exact_roots: List[float] = []
    seen = set()

    def record_root(x: float) -> None:
        key = round(x, precision)
        if key not in seen:
            seen.add(key)
            exact_roots.append(key)

    for (x1, y1), (x2, y2) in zip(zip(xs, ys), zip(xs[1:], ys[1:])):
        # A zero sample is recorded even when its neighbour is undefined.
        if y1 is not None and abs(y1) < zero_epsilon:
            record_root(x1)
        elif y2 is not None and abs(y2) < zero_epsilon:
            record_root(x2)
        elif y1 is not None and y2 is not None and y1 * y2 < 0:
            intervals.append(Interval(x1, x2))

    if ys[-1] is not None and abs(ys[-1]) < zero_epsilon:
        record_root(xs[-1])

    logger.debug(
        "Scanned %s over [%s, %s] step %s: %d bracket(s), %d exact root(s)",
        expression,
        domain_low,
        domain_high,
        step,
        len(intervals),
        len(exact_roots),
    )
    return ScanResult(tuple(intervals), tuple(exact_roots))


# --------------------------------------------------------------------------- #
# Descartes' rule of signs
# --------------------------------------------------------------------------- #


def _sign_changes(coefficients: List[float]) -> int:
    signs = [c for c in coefficients if c != 0]
    return sum(1 for left, right in zip(signs, signs[1:]) if left * right < 0)


def descartes_bound(expression: str) -> Optional[Tuple[int, int]]:
    """
    Upper bounds on the number of positive and negative real roots.

    Only meaningful for polynomials with real coefficients; returns ``None``
    for anything else.
    """
    parsed = parse_expression(expression)
    if not parsed.is_polynomial(X_SYMBOL):
        return None
    poly = sp.Poly(sp.expand(parsed), X_SYMBOL)
    if poly.degree() < 1:
        return None
    try:
        coefficients = [float(c) for c in poly.all_coeffs()]
    except TypeError:
        return None
    mirrored = poly.compose(sp.Poly(-X_SYMBOL, X_SYMBOL))
    negative = [float(c) for c in mirrored.all_coeffs()]
    return _sign_changes(coefficients), _sign_changes(negative)
