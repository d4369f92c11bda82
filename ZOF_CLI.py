"""
Command-Line Interface for the Zero of Functions (ZOF) Solver.

The CLI walks users through:
    1. Choosing one of the four supported numerical methods.
    2. Entering f(x) and either a range to scan for roots or a single
       bracket / initial guess.
    3. Viewing per-iteration diagnostics plus a summary of every root found.

The same numerical core is shared with the Flask web interface to keep the
project maintainable.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Dict, List, Optional

from zof_config import (
    DEFAULT_SCAN_HIGH,
    DEFAULT_SCAN_LOW,
    DEFAULT_SCAN_STEP,
    DEFAULT_TOLERANCE,
    SolverSettings,
)
from zof_errors import ZofError
from zof_evaluator import parse_expression
from zof_models import MethodKind, RootResult
from zof_roots import METHOD_LABELS, find_all_roots, run_method, summary_rows
from zof_scanner import descartes_bound, scan


def _format_value(value) -> str:
    if value is None:
        return "--"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if math.isnan(value):
            return "--"
    try:
        number = float(value)
        return f"{number:.6g}"
    except (TypeError, ValueError):
        return str(value)


def _print_table(columns: List[str], entries: List[Dict[str, object]]) -> None:
    rows = [[_format_value(entry.get(col)) for col in columns] for entry in entries]
    widths = [
        max(len(col), *(len(row[idx]) for row in rows))
        for idx, col in enumerate(columns)
    ]

    def print_row(values: List[str]) -> None:
        line = " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(values))
        print(line)

    rule = "-" * (sum(widths) + 3 * (len(columns) - 1))
    print(rule)
    print_row(columns)
    print(rule)
    for row in rows:
        print_row(row)
    print(rule)


def _print_iterations(result: RootResult) -> None:
    if not result.trace:
        print("No iteration details to display.")
        return
    print("\nDetailed Iterations")
    _print_table(list(result.columns), result.rows())


def _print_summary_table(results: List[RootResult]) -> None:
    print("\nRoots found")
    _print_table(["#", "interval", "root", "iterations", "converged"], summary_rows(results))


def _prompt_float(message: str, *, default: Optional[float] = None) -> float:
    while True:
        raw = input(f"{message} " + (f"[default: {default}] " if default is not None else ""))
        if not raw.strip():
            if default is not None:
                return default
            print("Value is required. Please try again.")
            continue
        try:
            value = float(raw)
        except ValueError:
            print("Invalid number. Please enter a numeric value.")
            continue
        if not math.isfinite(value):
            print("Invalid number. Please enter a finite value.")
            continue
        return value


def _prompt_positive(message: str, *, default: float) -> float:
    while True:
        value = _prompt_float(message, default=default)
        if value > 0:
            return value
        print("Value must be greater than 0.")


def _prompt_int(message: str, *, default: Optional[int] = None) -> Optional[int]:
    while True:
        raw = input(f"{message} " + (f"[default: {default}] " if default else "[blank: method default] "))
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError:
            print("Invalid integer. Please enter a whole number.")
            continue
        if value < 1:
            print("Value must be at least 1.")
            continue
        return value


def _prompt_yes_no(message: str) -> bool:
    return input(f"{message} (y/n): ").strip().lower() in {"y", "yes", "s"}


def _prompt_function(prompt: str) -> str:
    while True:
        expr = input(prompt).strip()
        if not expr:
            print("Expression cannot be empty. Please try again.")
            continue
        try:
            parse_expression(expr)
        except ZofError as exc:
            print(f"Input error: {exc}")
            continue
        return expr


def _prompt_range(lower_msg: str, upper_msg: str, **defaults: float) -> tuple:
    while True:
        low = _prompt_float(lower_msg, default=defaults.get("low"))
        high = _prompt_float(upper_msg, default=defaults.get("high"))
        if low < high:
            return low, high
        print("Invalid range. The lower bound must be smaller than the upper bound.")


def _prompt_criterion(method: MethodKind) -> Optional[str]:
    if method not in (MethodKind.BISECTION, MethodKind.REGULA_FALSI):
        return None
    default = "either" if method is MethodKind.BISECTION else "residual"
    while True:
        raw = input(
            f"Stop on |f(x)| (residual), |x_i - x_(i-1)| (step) or either? [default: {default}] "
        ).strip().lower()
        if not raw:
            return default
        if raw in {"residual", "step", "either"}:
            return raw
        print("Please answer residual, step or either.")


def _describe_polynomial(function_expr: str) -> None:
    bound = descartes_bound(function_expr)
    if bound is None:
        return
    positive, negative = bound
    print(f"\nDescartes' rule of signs: at most {positive} positive and {negative} negative real root(s).")


def _solve_single(method: MethodKind, function_expr: str, tol: float, max_iter: Optional[int]) -> None:
    params: Dict[str, object] = {"tolerance": tol, "max_iterations": max_iter}
    g_expr = None
    if method.is_bracketing or (
        method is MethodKind.NEWTON_RAPHSON and _prompt_yes_no("Start Newton-Raphson from a bracket [a, b]?")
    ):
        params["lower"], params["upper"] = _prompt_range(
            "Enter lower bound (a):", "Enter upper bound (b):"
        )
        params["criterion"] = _prompt_criterion(method)
    else:
        params["initial_guess"] = _prompt_float("Enter initial guess (x0):")
    if method is MethodKind.FIXED_POINT:
        params["aitken"] = _prompt_yes_no("Apply Aitken acceleration?")
        if _prompt_yes_no("Supply your own g(x) instead of x - f(x)?"):
            g_expr = _prompt_function("Enter g(x): ")

    result = run_method(method, function_expr=function_expr, params=params, g_expr=g_expr)
    _print_iterations(result)
    _display_summary(result)


def _solve_scan(method: MethodKind, function_expr: str, tol: float, max_iter: Optional[int]) -> None:
    low, high = _prompt_range(
        "Scan from:", "Scan to:", low=DEFAULT_SCAN_LOW, high=DEFAULT_SCAN_HIGH
    )
    step = _prompt_positive("Scan step:", default=DEFAULT_SCAN_STEP)
    settings = SolverSettings(
        tolerance=tol,
        max_iterations=max_iter,
        scan_low=low,
        scan_high=high,
        step=step,
        aitken=method is MethodKind.FIXED_POINT and _prompt_yes_no("Apply Aitken acceleration?"),
    )
    settings.validate()
    criterion = _prompt_criterion(method)

    found = scan(function_expr, settings.scan_low, settings.scan_high, settings.step)
    if found.is_empty:
        print("No sign changes detected in the scanned range.")
        return
    print("\nIntervals with a sign change:")
    for idx, interval in enumerate(found.intervals, start=1):
        print(f"  {idx}) {interval}")
    for root in found.exact_roots:
        print(f"  exact zero at x = {_format_value(root)}")
    print(f"Positive candidates: {found.positive_count}, negative candidates: {found.negative_count}")

    results = find_all_roots(
        function_expr,
        settings.scan_low,
        settings.scan_high,
        settings.step,
        method,
        settings.tolerance,
        max_iter=settings.max_iterations,
        criterion=criterion,
        use_aitken=settings.aitken,
        found=found,
    )
    if not results:
        print("No root converged in the scanned range.")
        return
    for result in results:
        print(f"\n== {result.interval}: {result.message}")
        _print_iterations(result)
    _print_summary_table(results)


def _display_summary(result: RootResult) -> None:
    print("\nSummary")
    print("-------")
    print(f"Status       : {'Converged' if result.converged else 'Did not converge'}")
    print(f"Estimated root: {_format_value(result.root)}")
    print(f"Final error  : {_format_value(result.final_error)}")
    print(f"Iterations   : {result.iterations}")
    print(f"Message      : {result.message}")


def _configure_logging() -> None:
    level = os.environ.get("ZOF_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    _configure_logging()
    print("=" * 70)
    print("Zero of Functions (ZOF) Solver - CLI")
    print("Enter equations using the variable x. Example: x**3 - 5*x + 2, x^3 - x - 2 or sin(x)")
    print("=" * 70)

    method_keys = list(METHOD_LABELS.keys())

    while True:
        print("\nAvailable Methods:")
        for idx, key in enumerate(method_keys, start=1):
            print(f"  {idx}. {METHOD_LABELS[key]}")
        print("  0. Exit")

        choice_raw = input("\nSelect a method by number: ").strip()
        if choice_raw == "0":
            print("Goodbye!")
            break
        try:
            choice = int(choice_raw)
            if choice < 1:
                raise IndexError(choice)
            method = MethodKind(method_keys[choice - 1])
        except (ValueError, IndexError):
            print("Invalid selection. Please choose a valid method number.")
            continue

        function_expr = _prompt_function("Enter f(x): ")
        _describe_polynomial(function_expr)

        try:
            tol = _prompt_positive("Enter tolerance (e.g., 1e-6):", default=DEFAULT_TOLERANCE)
            max_iter = _prompt_int("Enter maximum iterations:")
            if _prompt_yes_no("Scan a range for every root?"):
                _solve_scan(method, function_expr, tol, max_iter)
            else:
                _solve_single(method, function_expr, tol, max_iter)
        except (ZofError, ValueError) as exc:
            print(f"Input error: {exc}")

        again = input("\nWould you like to solve another equation? (y/n): ").strip()
        if again.lower() not in {"y", "yes"}:
            print("Thanks for using the ZOF Solver!")
            break


if __name__ == "__main__":
    main()
