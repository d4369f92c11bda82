"""
The four root-finding methods of the ZOF project.

This module centralizes:
    - Bisection, bounded by its theoretical iteration count.
    - Regula Falsi (false position) with a fixed iteration ceiling.
    - Newton-Raphson, started from an endpoint chosen by the Fourier
      condition, or from a caller-supplied seed.
    - Fixed-point iteration on g(x) = x - f(x), optionally accelerated with
      Aitken's delta-squared process.
    - ``solve_interval``, which applies any of them to one interval.

Each solver takes the expression text and returns a ``RootResult``:
    root: float
    iterations: int          # always equal to len(trace)
    interval: Interval       # the bracket (or seed point) the run started from
    converged: bool          # False when the iteration cap was reached
    trace: Tuple[IterationRecord, ...]
    columns: Tuple[str, ...] # keys to display for each trace row
    final_error: Optional[float]   # |f(root)| when f is defined there
    message: str

Hard failures raise a ``SolverError`` subclass instead (see zof_errors).
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from zof_config import (
    AITKEN_EPSILON,
    DEFAULT_MAX_ITERATIONS,
    FIXED_POINT_MAX_ITERATIONS,
    NEWTON_MAX_ITERATIONS,
    SLOPE_EPSILON,
)
from zof_errors import (
    DegenerateIntervalNoRoot,
    DegenerateSlope,
    NoSignChange,
    NoValidFourierStart,
    UndefinedEvaluation,
    ZeroDerivative,
)
from zof_evaluator import differentiate, evaluate, parse_expression
from zof_models import Criterion, Interval, MethodKind, RootResult, TraceBuilder

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Shared helpers
# --------------------------------------------------------------------------- #

BISECTION_COLUMNS = ("iteration", "a", "b", "c", "f(c)", "error")
REGULA_FALSI_COLUMNS = ("iteration", "a", "b", "xi", "f(xi)", "error")
NEWTON_COLUMNS = ("iteration", "x", "f(x)", "f'(x)", "x_next", "error")
FIXED_POINT_COLUMNS = ("iteration", "x", "g(x)", "x_aitken", "error")


def _value(expression: str, x: float) -> float:
    outcome = evaluate(expression, x)
    if not outcome.is_defined:
        raise UndefinedEvaluation(expression, x)
    return outcome.value


def _residual(expression: str, x: float) -> Optional[float]:
    value = evaluate(expression, x).value
    return abs(value) if value is not None else None


def check_inputs(tol: float, max_iter: Optional[int] = None) -> None:
    """Reject a non-positive tolerance or an iteration cap below 1."""
    if not (tol > 0 and math.isfinite(tol)):
        raise ValueError(f"Tolerance must be a positive number, got {tol}.")
    if max_iter is not None and max_iter < 1:
        raise ValueError(f"Maximum iterations must be at least 1, got {max_iter}.")


def _converged(criterion: Criterion, value: float, step: Optional[float], tol: float) -> bool:
    if value == 0.0:
        return True
    if criterion.uses_residual and abs(value) < tol:
        return True
    return criterion.uses_step and step is not None and step < tol


def _step_error(criterion: Criterion, value: float, step: Optional[float]) -> Optional[float]:
    """Error estimate recorded for a bracketing step."""
    if criterion is Criterion.RESIDUAL:
        return abs(value)
    return step


def _degenerate_result(
    expression: str,
    interval: Interval,
    tol: float,
    method: MethodKind,
    columns: Tuple[str, ...],
) -> RootResult:
    point = interval.low
    value = _value(expression, point)
    if abs(value) >= tol:
        raise DegenerateIntervalNoRoot(point, value)
    return RootResult(
        root=point,
        iterations=0,
        interval=interval,
        converged=True,
        method=method,
        columns=columns,
        final_error=abs(value),
        message="Zero-width interval is already a root.",
    )


def _open_bracket(
    expression: str, interval: Interval
) -> Tuple[float, float, float, float]:
    low, high = interval.low, interval.high
    f_low, f_high = _value(expression, low), _value(expression, high)
    if f_low * f_high > 0:
        raise NoSignChange(low, high, f_low, f_high)
    return low, high, f_low, f_high


# --------------------------------------------------------------------------- #
# Bisection
# --------------------------------------------------------------------------- #


def bisection_iteration_bound(low: float, high: float, tol: float) -> int:
    """Halvings needed to shrink [low, high] below ``tol``: ceil(log2((b - a)/tol))."""
    if high <= low:
        return 1
    bound = math.ceil((math.log(high - low) - math.log(tol)) / math.log(2))
    return max(bound, 1)


def bisection(
    expression: str,
    interval: Interval,
    tol: float,
    *,
    criterion: Criterion = Criterion.EITHER,
) -> RootResult:
    """
    Halve the bracket until the midpoint meets ``criterion``.

    The loop runs at most ``bisection_iteration_bound`` times; no separate
    iteration cap applies. The step criterion only kicks in from the second
    midpoint on.
    """
    check_inputs(tol)
    criterion = Criterion.parse(criterion)
    method = MethodKind.BISECTION
    if interval.is_degenerate:
        return _degenerate_result(expression, interval, tol, method, BISECTION_COLUMNS)

    a, b, fa, fb = _open_bracket(expression, interval)
    # An exact zero on an endpoint would be lost by the halving rule.
    for endpoint, value in ((a, fa), (b, fb)):
        if value == 0.0:
            return RootResult(
                root=endpoint,
                iterations=0,
                interval=interval,
                converged=True,
                method=method,
                columns=BISECTION_COLUMNS,
                final_error=0.0,
                message="Bracket endpoint is an exact root.",
            )

    max_iter = bisection_iteration_bound(a, b, tol)
    trace = TraceBuilder(BISECTION_COLUMNS)
    prev_c: Optional[float] = None
    c = fc = None
    for i in range(1, max_iter + 1):
        c = (a + b) / 2.0
        fc = _value(expression, c)
        step = abs(c - prev_c) if prev_c is not None else None
        trace.add(i, {"a": a, "b": b, "c": c, "f(c)": fc}, _step_error(criterion, fc, step))
        logger.debug("bisection %d: [%r, %r] c=%r f(c)=%r", i, a, b, c, fc)
        if _converged(criterion, fc, step, tol):
            return RootResult(
                root=c,
                iterations=i,
                interval=interval,
                converged=True,
                method=method,
                trace=trace.freeze(),
                columns=BISECTION_COLUMNS,
                final_error=abs(fc),
                message=f"Converged in {i} iterations.",
            )
        if fa * fc < 0:
            b = c
        else:
            a, fa = c, fc
        prev_c = c

    return RootResult(
        root=c,
        iterations=max_iter,
        interval=interval,
        converged=False,
        method=method,
        trace=trace.freeze(),
        columns=BISECTION_COLUMNS,
        final_error=abs(fc),
        message=f"Reached the theoretical bound of {max_iter} iterations without convergence.",
    )


# --------------------------------------------------------------------------- #
# Regula Falsi
# --------------------------------------------------------------------------- #


def regula_falsi(
    expression: str,
    interval: Interval,
    tol: float,
    *,
    max_iter: int = DEFAULT_MAX_ITERATIONS,
    criterion: Criterion = Criterion.RESIDUAL,
) -> RootResult:
    check_inputs(tol, max_iter)
    criterion = Criterion.parse(criterion)
    method = MethodKind.REGULA_FALSI
    if interval.is_degenerate:
        return _degenerate_result(expression, interval, tol, method, REGULA_FALSI_COLUMNS)

    a, b, fa, fb = _open_bracket(expression, interval)
    trace = TraceBuilder(REGULA_FALSI_COLUMNS)
    prev_xi: Optional[float] = None
    xi = fxi = None
    for i in range(1, max_iter + 1):
        denominator = fb - fa
        if abs(denominator) < SLOPE_EPSILON:
            raise DegenerateSlope(a, b)
        xi = (a * fb - b * fa) / denominator
        fxi = _value(expression, xi)
        step = abs(xi - prev_xi) if prev_xi is not None else None
        trace.add(
            i, {"a": a, "b": b, "xi": xi, "f(xi)": fxi}, _step_error(criterion, fxi, step)
        )
        logger.debug("regula falsi %d: [%r, %r] xi=%r f(xi)=%r", i, a, b, xi, fxi)
        if _converged(criterion, fxi, step, tol):
            return RootResult(
                root=xi,
                iterations=i,
                interval=interval,
                converged=True,
                method=method,
                trace=trace.freeze(),
                columns=REGULA_FALSI_COLUMNS,
                final_error=abs(fxi),
                message=f"Converged in {i} iterations.",
            )
        if fa * fxi < 0:
            b, fb = xi, fxi
        else:
            a, fa = xi, fxi
        prev_xi = xi

    return RootResult(
        root=xi,
        iterations=max_iter,
        interval=interval,
        converged=False,
        method=method,
        trace=trace.freeze(),
        columns=REGULA_FALSI_COLUMNS,
        final_error=abs(fxi),
        message="Maximum iterations reached without convergence.",
    )


# --------------------------------------------------------------------------- #
# Newton-Raphson
# --------------------------------------------------------------------------- #


def fourier_start(expression: str, interval: Interval) -> float:
    """Pick the bracket endpoint where f(x)*f''(x) > 0 (lower endpoint first)."""
    second = differentiate(expression, 2)
    for endpoint in (interval.low, interval.high):
        if _value(expression, endpoint) * _value(second, endpoint) > 0:
            return endpoint
    raise NoValidFourierStart(interval.low, interval.high)


def _newton(
    expression: str,
    x: float,
    tol: float,
    max_iter: int,
    interval: Interval,
    origin: str,
) -> RootResult:
    method = MethodKind.NEWTON_RAPHSON
    derivative = differentiate(expression)
    trace = TraceBuilder(NEWTON_COLUMNS)
    for i in range(1, max_iter + 1):
        fx = _value(expression, x)
        dfx = _value(derivative, x)
        if dfx == 0.0:
            raise ZeroDerivative(x)
        x_next = x - fx / dfx
        error = abs(x_next - x)
        trace.add(i, {"x": x, "f(x)": fx, "f'(x)": dfx, "x_next": x_next}, error)
        logger.debug("newton %d: x=%r f=%r f'=%r next=%r", i, x, fx, dfx, x_next)
        if error < tol:
            return RootResult(
                root=x_next,
                iterations=i,
                interval=interval,
                converged=True,
                method=method,
                trace=trace.freeze(),
                columns=NEWTON_COLUMNS,
                final_error=_residual(expression, x_next),
                message=f"{origin} Converged in {i} iterations.",
            )
        x = x_next

    return RootResult(
        root=x,
        iterations=max_iter,
        interval=interval,
        converged=False,
        method=method,
        trace=trace.freeze(),
        columns=NEWTON_COLUMNS,
        final_error=_residual(expression, x),
        message=f"{origin} Maximum iterations reached without convergence.",
    )


def newton_raphson(
    expression: str,
    interval: Interval,
    tol: float,
    max_iter: int = NEWTON_MAX_ITERATIONS,
) -> RootResult:
    """Newton-Raphson from the Fourier-valid endpoint of ``interval``."""
    check_inputs(tol, max_iter)
    if interval.is_degenerate:
        return _degenerate_result(
            expression, interval, tol, MethodKind.NEWTON_RAPHSON, NEWTON_COLUMNS
        )
    start = fourier_start(expression, interval)
    side = "a" if start == interval.low else "b"
    return _newton(
        expression,
        start,
        tol,
        max_iter,
        interval,
        f"Fourier condition holds at {side} = {start:.6g}.",
    )


def newton_raphson_point(
    expression: str,
    x0: float,
    tol: float,
    max_iter: int = NEWTON_MAX_ITERATIONS,
) -> RootResult:
    """Newton-Raphson from a caller-chosen seed; no Fourier check."""
    check_inputs(tol, max_iter)
    x0 = float(x0)
    return _newton(
        expression, x0, tol, max_iter, Interval.point(x0), f"Started at x0 = {x0:.6g}."
    )


# --------------------------------------------------------------------------- #
# Fixed point iteration
# --------------------------------------------------------------------------- #


def iteration_function(expression: str) -> str:
    """Default fixed-point map g(x) = x - f(x); its fixed points are the roots of f."""
    return f"x - ({expression})"


def aitken_extrapolate(x0: float, x1: float, x2: float) -> Optional[float]:
    """Aitken's delta-squared estimate from three consecutive iterates.

    Returns ``None`` when the second difference is too small to divide by.
    """
    denominator = x2 - 2.0 * x1 + x0
    if abs(denominator) < AITKEN_EPSILON:
        return None
    return x2 - (x2 - x1) ** 2 / denominator


def fixed_point_iteration(
    expression: str,
    x0: float,
    tol: float,
    max_iter: int = FIXED_POINT_MAX_ITERATIONS,
    use_aitken: bool = False,
    *,
    g_expression: Optional[str] = None,
    bracket: Optional[Interval] = None,
) -> RootResult:
    """
    Iterate x <- g(x) from ``x0``.

    ``bracket`` is reported as the result interval when the seed came from
    a scanned bracket; otherwise the interval is the seed point itself.

    With ``use_aitken`` every step that has a consecutive triple
    (x_{i-1}, x_i = g(x_{i-1}), g(x_i)) jumps to the Aitken estimate. A jump
    breaks the chain, so the following step is a plain one.
    """
    check_inputs(tol, max_iter)
    parse_expression(expression)
    g_expr = g_expression.strip() if g_expression else iteration_function(expression)
    parse_expression(g_expr)

    method = MethodKind.FIXED_POINT
    x0 = float(x0)
    interval = bracket if bracket is not None else Interval.point(x0)
    trace = TraceBuilder(FIXED_POINT_COLUMNS)
    x = x0
    previous: Optional[float] = None
    for i in range(1, max_iter + 1):
        gx = _value(g_expr, x)
        x_aitken = None
        if use_aitken and previous is not None:
            x_aitken = aitken_extrapolate(previous, x, gx)
        error = abs(gx - x)
        trace.add(i, {"x": x, "g(x)": gx, "x_aitken": x_aitken}, error)
        logger.debug("fixed point %d: x=%r g(x)=%r aitken=%r", i, x, gx, x_aitken)

        if error < tol or (x_aitken is not None and abs(x_aitken - x) < tol):
            root = x_aitken if x_aitken is not None else gx
            return RootResult(
                root=root,
                iterations=i,
                interval=interval,
                converged=True,
                method=method,
                trace=trace.freeze(),
                columns=FIXED_POINT_COLUMNS,
                final_error=_residual(expression, root),
                message=f"Converged in {i} iterations using g(x) = {g_expr}.",
            )
        if x_aitken is not None:
            previous, x = None, x_aitken
        else:
            previous, x = x, gx

    return RootResult(
        root=x,
        iterations=max_iter,
        interval=interval,
        converged=False,
        method=method,
        trace=trace.freeze(),
        columns=FIXED_POINT_COLUMNS,
        final_error=_residual(expression, x),
        message=f"Maximum iterations reached without convergence using g(x) = {g_expr}.",
    )


# --------------------------------------------------------------------------- #
# Dispatch
# --------------------------------------------------------------------------- #


def solve_interval(
    method: "str | MethodKind",
    expression: str,
    interval: Interval,
    tol: float,
    *,
    max_iter: Optional[int] = None,
    criterion: "Optional[str | Criterion]" = None,
    use_aitken: bool = False,
    g_expression: Optional[str] = None,
) -> RootResult:
    """
    Run one method over one interval.

    Bisection ignores ``max_iter`` (its bound is computed from the bracket).
    Fixed-point iteration seeds from the interval midpoint and reports the
    interval itself on the result.
    """
    method = MethodKind.parse(method)
    check_inputs(tol, max_iter)
    if method is MethodKind.BISECTION:
        return bisection(
            expression, interval, tol, criterion=criterion or Criterion.EITHER
        )
    if method is MethodKind.REGULA_FALSI:
        return regula_falsi(
            expression,
            interval,
            tol,
            max_iter=DEFAULT_MAX_ITERATIONS if max_iter is None else max_iter,
            criterion=criterion or Criterion.RESIDUAL,
        )
    if method is MethodKind.NEWTON_RAPHSON:
        return newton_raphson(
            expression,
            interval,
            tol,
            NEWTON_MAX_ITERATIONS if max_iter is None else max_iter,
        )
    return fixed_point_iteration(
        expression,
        interval.midpoint,
        tol,
        FIXED_POINT_MAX_ITERATIONS if max_iter is None else max_iter,
        use_aitken,
        g_expression=g_expression,
        bracket=interval,
    )
