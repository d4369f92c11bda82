"""
Front-facing API: find every root in a range, or run one method once.

``find_all_roots`` scans a range for brackets and applies one solver to each
of them; ``run_method`` is the single-run façade the CLI and the Flask view
call when the user supplies the bracket or seed directly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from zof_config import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    FIXED_POINT_MAX_ITERATIONS,
    NEWTON_MAX_ITERATIONS,
    ROOT_PRECISION,
)
from zof_errors import SolverError
from zof_evaluator import evaluate, parse_expression
from zof_models import Criterion, Interval, MethodKind, RootResult
from zof_scanner import ScanResult, scan
from zof_solver import (
    BISECTION_COLUMNS,
    FIXED_POINT_COLUMNS,
    NEWTON_COLUMNS,
    REGULA_FALSI_COLUMNS,
    bisection,
    check_inputs,
    fixed_point_iteration,
    newton_raphson,
    newton_raphson_point,
    regula_falsi,
    solve_interval,
)

logger = logging.getLogger(__name__)

# Mapping useful for UI layers
METHOD_LABELS = {kind.value: kind.label for kind in MethodKind}

_COLUMNS = {
    MethodKind.BISECTION: BISECTION_COLUMNS,
    MethodKind.REGULA_FALSI: REGULA_FALSI_COLUMNS,
    MethodKind.NEWTON_RAPHSON: NEWTON_COLUMNS,
    MethodKind.FIXED_POINT: FIXED_POINT_COLUMNS,
}


# --------------------------------------------------------------------------- #
# Root aggregator
# --------------------------------------------------------------------------- #


def _exact_root_result(root: float, method: MethodKind, expression: str) -> RootResult:
    value = evaluate(expression, root).value
    return RootResult(
        root=root,
        iterations=0,
        interval=Interval.point(root),
        converged=True,
        method=method,
        columns=_COLUMNS[method],
        final_error=abs(value) if value is not None else None,
        message=f"{expression} vanishes at a scan sample.",
    )


def find_all_roots(
    expression: str,
    scan_low: float,
    scan_high: float,
    step: float,
    method: Union[str, MethodKind],
    tol: float,
    *,
    max_iter: Optional[int] = None,
    criterion: Optional[Union[str, Criterion]] = None,
    use_aitken: bool = False,
    g_expression: Optional[str] = None,
    keep_unconverged: bool = False,
    found: Optional[ScanResult] = None,
) -> List[RootResult]:
    """
    Scan ``[scan_low, scan_high]`` and solve every bracket found.

    Exact zeros hit by the scan come back as zero-iteration results. Results
    are ordered by position along the axis, which is the order the scan
    produced them in. A bracket whose solver raises is logged and skipped;
    so is an unconverged run unless ``keep_unconverged`` is set. An empty
    list means the scan found nothing.

    Pass ``found`` to reuse a scan of the same range the caller already ran.
    """
    method = MethodKind.parse(method)
    parse_expression(expression)
    check_inputs(tol, max_iter)
    if criterion is not None:
        criterion = Criterion.parse(criterion)

    if found is None:
        found = scan(expression, scan_low, scan_high, step)
    if found.is_empty:
        logger.info("No sign changes of %s in [%s, %s]", expression, scan_low, scan_high)
        return []

    results: List[RootResult] = [
        _exact_root_result(root, method, expression) for root in found.exact_roots
    ]
    for interval in found.intervals:
        try:
            result = solve_interval(
                method,
                expression,
                interval,
                tol,
                max_iter=max_iter,
                criterion=criterion,
                use_aitken=use_aitken,
                g_expression=g_expression,
            )
        except SolverError as exc:
            logger.warning("%s failed on %s: %s", method.label, interval, exc)
            continue
        if not result.converged and not keep_unconverged:
            logger.warning(
                "%s did not converge on %s after %d iterations",
                method.label,
                interval,
                result.iterations,
            )
            continue
        results.append(result)

    results.sort(key=lambda item: item.interval.low)
    return results


def summary_rows(results: List[RootResult]) -> List[Dict[str, Any]]:
    """One display row per result, numbered from 1."""
    rows = []
    for index, result in enumerate(results, start=1):
        rows.append(
            {
                "#": index,
                "interval": str(result.interval),
                "root": round(result.root, ROOT_PRECISION),
                "iterations": result.iterations,
                "converged": result.converged,
            }
        )
    return rows


# --------------------------------------------------------------------------- #
# Public runner
# --------------------------------------------------------------------------- #

MethodParams = Mapping[str, Any]


def _param(params: MethodParams, key: str) -> float:
    if params.get(key) is None:
        raise ValueError(f"{key.replace('_', ' ').title()} is required.")
    return float(params[key])


def run_method(
    method: Union[str, MethodKind],
    *,
    function_expr: str,
    params: MethodParams,
    g_expr: Optional[str] = None,
) -> RootResult:
    """
    Dispatch helper that runs the chosen method once.

    Parameters
    ----------
    method : key identifying the algorithm (see ``METHOD_LABELS``).
    function_expr : f(x) expression supplied by the user.
    params : ``tolerance``, ``max_iterations`` and ``criterion`` plus
        ``lower``/``upper`` for a bracket or ``initial_guess`` for a seed.
        Newton-Raphson takes either; fixed point also reads ``aitken``.
    g_expr : optional g(x) replacing x - f(x) for fixed-point iteration.
    """
    method = MethodKind.parse(method)
    parse_expression(function_expr)
    tol = params.get("tolerance")
    tol = DEFAULT_TOLERANCE if tol is None else float(tol)
    max_iter = params.get("max_iterations")
    max_iter = None if max_iter is None else int(max_iter)
    check_inputs(tol, max_iter)
    criterion = params.get("criterion") or None

    if method is MethodKind.FIXED_POINT:
        return fixed_point_iteration(
            function_expr,
            _param(params, "initial_guess"),
            tol,
            FIXED_POINT_MAX_ITERATIONS if max_iter is None else max_iter,
            bool(params.get("aitken")),
            g_expression=g_expr or None,
        )
    if method is MethodKind.NEWTON_RAPHSON and params.get("lower") is None:
        return newton_raphson_point(
            function_expr,
            _param(params, "initial_guess"),
            tol,
            NEWTON_MAX_ITERATIONS if max_iter is None else max_iter,
        )

    interval = Interval(_param(params, "lower"), _param(params, "upper"))
    if method is MethodKind.BISECTION:
        return bisection(
            function_expr, interval, tol, criterion=criterion or Criterion.EITHER
        )
    if method is MethodKind.REGULA_FALSI:
        return regula_falsi(
            function_expr,
            interval,
            tol,
            max_iter=DEFAULT_MAX_ITERATIONS if max_iter is None else max_iter,
            criterion=criterion or Criterion.RESIDUAL,
        )
    return newton_raphson(
        function_expr,
        interval,
        tol,
        NEWTON_MAX_ITERATIONS if max_iter is None else max_iter,
    )
