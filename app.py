"""
Flask web GUI for the Zero of Functions (ZOF) Solver.

Users can:
    - Pick any of the four numerical methods.
    - Enter f(x) (and optionally g(x) for fixed point) plus method parameters.
    - Either solve one bracket / seed, or scan a range for every root.
    - Review per-iteration diagnostics and the estimated roots.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from flask import Flask, render_template, request

from zof_config import SolverSettings, float_from
from zof_errors import ZofError
from zof_models import MethodKind, RootResult
from zof_roots import METHOD_LABELS, find_all_roots, run_method, summary_rows
from zof_scanner import descartes_bound

app = Flask(__name__)


@app.template_filter("num")
def format_number(value) -> str:
    if value is None:
        return "--"
    if isinstance(value, bool):
        return "yes" if value else "no"
    try:
        return f"{float(value):.6g}"
    except (TypeError, ValueError):
        return str(value)


DEFAULTS = {
    "function_expr": "x**3 - x - 2",
    "g_expr": "",
    "mode": "single",
    "newton_start": "bracket",
    "lower": "1",
    "upper": "2",
    "initial_guess": "1",
    "scan_low": "-10",
    "scan_high": "10",
    "step": "0.1",
    "tolerance": "1e-6",
    "max_iterations": "",
    "criterion": "",
}


def _collect_params(method: MethodKind, form, settings: SolverSettings) -> Dict[str, object]:
    params: Dict[str, object] = {
        "tolerance": settings.tolerance,
        "max_iterations": settings.max_iterations,
        "criterion": settings.criterion,
        "aitken": settings.aitken,
    }
    use_bracket = method.is_bracketing or (
        method is MethodKind.NEWTON_RAPHSON and form.get("newton_start") != "seed"
    )
    if use_bracket:
        params["lower"] = float_from(form, "lower", None)
        params["upper"] = float_from(form, "upper", None)
    else:
        params["initial_guess"] = float_from(form, "initial_guess", None)
    return params


def _solve(method: MethodKind, function_expr: str, form) -> List[RootResult]:
    settings = SolverSettings.from_mapping(form)
    if form.get("mode") == "scan":
        return find_all_roots(
            function_expr,
            settings.scan_low,
            settings.scan_high,
            settings.step,
            method,
            settings.tolerance,
            max_iter=settings.max_iterations,
            criterion=settings.criterion,
            use_aitken=settings.aitken,
            g_expression=form.get("g_expr", "").strip() or None,
        )
    params = _collect_params(method, form, settings)
    return [
        run_method(
            method,
            function_expr=function_expr,
            params=params,
            g_expr=form.get("g_expr", "").strip() or None,
        )
    ]


@app.route("/", methods=["GET", "POST"])
def index():
    results: List[RootResult] = []
    error_message: Optional[str] = None
    bound = None
    form = {**DEFAULTS, **request.form.to_dict()}
    selected_method = form.get("method", MethodKind.BISECTION.value)
    searched = False

    if request.method == "POST":
        function_expr = form.get("function_expr", "").strip()
        if not function_expr:
            error_message = "Please provide f(x)."
        else:
            try:
                method = MethodKind.parse(selected_method)
                bound = descartes_bound(function_expr)
                results = _solve(method, function_expr, form)
                searched = True
            except (ZofError, ValueError) as exc:
                error_message = str(exc)

    context = {
        "methods": METHOD_LABELS,
        "selected_method": selected_method,
        "form": form,
        "results": results,
        "summary": summary_rows(results),
        "searched": searched,
        "descartes": bound,
        "error_message": error_message,
    }
    return render_template("index.html", **context)


if __name__ == "__main__":
    app.run(debug=True)
