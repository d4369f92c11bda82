import logging

import pytest

from zof_errors import InvalidExpression, NoSignChange
from zof_models import Criterion, Interval, MethodKind
from zof_roots import METHOD_LABELS, find_all_roots, run_method, summary_rows
from zof_scanner import scan


def test_exact_scan_hits_become_zero_iteration_results():
    results = find_all_roots("x**3 - x", -2.0, 2.0, 0.5, "bisection", 1e-6)

    assert [r.root for r in results] == [-1.0, 0.0, 1.0]
    assert all(r.converged and r.iterations == 0 and r.trace == () for r in results)
    assert all(r.interval.is_degenerate for r in results)


@pytest.mark.parametrize("method", ["bisection", "regula_falsi"])
def test_bracketing_methods_find_every_root(method):
    results = find_all_roots("x**3 - x", -1.95, 2.05, 0.5, method, 1e-6)

    assert len(results) == 3
    for result, expected in zip(results, (-1.0, 0.0, 1.0)):
        assert result.method is MethodKind(method)
        assert result.root == pytest.approx(expected, abs=1e-5)
        assert result.interval.low < expected < result.interval.high


def test_failed_intervals_are_logged_and_skipped(caplog):
    # The bracket around 0 has no endpoint satisfying the Fourier condition.
    with caplog.at_level(logging.WARNING, logger="zof_roots"):
        results = find_all_roots("x**3 - x", -1.95, 2.05, 0.5, "newton_raphson", 1e-6)

    assert [round(r.root, 6) for r in results] == [-1.0, 1.0]
    assert any("failed" in message for message in caplog.messages)


def test_unconverged_runs_are_dropped_unless_requested():
    dropped = find_all_roots(
        "x**3 - x", -1.95, 2.05, 0.5, "regula_falsi", 1e-12, max_iter=2
    )
    kept = find_all_roots(
        "x**3 - x",
        -1.95,
        2.05,
        0.5,
        "regula_falsi",
        1e-12,
        max_iter=2,
        keep_unconverged=True,
    )

    assert dropped == []
    assert len(kept) == 3
    assert not any(r.converged for r in kept)
    assert all(r.iterations == 2 for r in kept)


def test_fixed_point_over_scanned_bracket():
    results = find_all_roots("x - cos(x)", 0.0, 1.0, 0.25, "fixed_point", 1e-8, use_aitken=True)

    assert len(results) == 1
    assert results[0].root == pytest.approx(0.7390851332, abs=1e-7)


def test_no_sign_change_means_empty_result():
    assert find_all_roots("x**2 + 1", -5.0, 5.0, 0.5, "bisection", 1e-6) == []


def test_invalid_expression_is_rejected_up_front():
    with pytest.raises(InvalidExpression):
        find_all_roots("x +* 2", -1.0, 1.0, 0.1, "bisection", 1e-6)


def test_summary_rows():
    rows = summary_rows(find_all_roots("x**3 - x", -2.0, 2.0, 0.5, "bisection", 1e-6))

    assert [row["#"] for row in rows] == [1, 2, 3]
    assert rows[0]["root"] == -1.0
    assert rows[0]["iterations"] == 0
    assert rows[0]["converged"] is True


def test_method_labels_cover_every_method():
    assert list(METHOD_LABELS) == [
        "bisection",
        "regula_falsi",
        "newton_raphson",
        "fixed_point",
    ]


def test_run_method_bracket():
    result = run_method(
        "bisection",
        function_expr="x**3 - x - 2",
        params={"lower": 1.0, "upper": 2.0, "tolerance": 1e-6},
    )

    assert result.converged
    assert result.root == pytest.approx(1.5213797, abs=1e-6)


def test_run_method_passes_criterion_and_cap():
    result = run_method(
        "regula_falsi",
        function_expr="x**3 - x - 2",
        params={
            "lower": 1.0,
            "upper": 2.0,
            "tolerance": 1e-12,
            "max_iterations": 4,
            "criterion": Criterion.STEP,
        },
    )

    assert result.iterations == 4
    assert result.trace[0].error is None


def test_run_method_newton_seed_and_bracket():
    seeded = run_method(
        "newton_raphson",
        function_expr="x**2 - 2",
        params={"initial_guess": 1.0, "tolerance": 1e-8},
    )
    bracketed = run_method(
        "newton_raphson",
        function_expr="x**2 - 2",
        params={"lower": 0.0, "upper": 2.0, "tolerance": 1e-8},
    )

    assert seeded.interval == Interval.point(1.0)
    assert bracketed.trace[0].values["x"] == 2.0
    assert seeded.root == pytest.approx(bracketed.root, abs=1e-8)


def test_run_method_fixed_point_with_aitken():
    result = run_method(
        "fixed_point",
        function_expr="0.5*x - 1",
        params={"initial_guess": 0.0, "tolerance": 1e-6, "aitken": True},
    )

    assert result.root == 2.0
    assert result.iterations == 3


def test_run_method_errors():
    with pytest.raises(ValueError, match="Initial Guess is required"):
        run_method("fixed_point", function_expr="x - cos(x)", params={})
    with pytest.raises(ValueError, match="Unknown method"):
        run_method("secant", function_expr="x", params={})
    with pytest.raises(InvalidExpression):
        run_method("bisection", function_expr="", params={"lower": 0, "upper": 1})
    with pytest.raises(NoSignChange):
        run_method(
            "bisection", function_expr="x**2 + 1", params={"lower": -1, "upper": 1}
        )


@pytest.mark.parametrize(
    "tol, max_iter",
    [(0.0, None), (-1.0, None), (1e-6, 0)],
)
def test_find_all_roots_rejects_bad_numbers(tol, max_iter):
    # Exact scan hits alone must not bypass the check.
    with pytest.raises(ValueError):
        find_all_roots("x**3 - x", -2.0, 2.0, 0.5, "bisection", tol, max_iter=max_iter)
    with pytest.raises(ValueError):
        find_all_roots("x**3 - x", -1.95, 2.05, 0.5, "regula_falsi", tol, max_iter=max_iter)


@pytest.mark.parametrize(
    "params, message",
    [
        ({"tolerance": 0.0}, "Tolerance"),
        ({"tolerance": -1e-3}, "Tolerance"),
        ({"max_iterations": 0}, "Maximum iterations"),
    ],
)
def test_run_method_rejects_bad_numbers(params, message):
    with pytest.raises(ValueError, match=message):
        run_method(
            "bisection",
            function_expr="x**3 - x - 2",
            params={"lower": 1.0, "upper": 2.0, **params},
        )


def test_exact_hits_carry_their_residual():
    results = find_all_roots("x**3 - x", -2.0, 2.0, 0.5, "bisection", 1e-6)

    assert [r.final_error for r in results] == [0.0, 0.0, 0.0]


def test_fixed_point_results_keep_the_scanned_bracket():
    results = find_all_roots("x - cos(x)", 0.0, 1.0, 0.25, "fixed_point", 1e-8, use_aitken=True)

    assert results[0].interval == Interval(0.5, 0.75)


def test_precomputed_scan_is_reused(monkeypatch):
    found = scan("x**3 - x - 2", 0.0, 3.0, 0.5)

    def fail(*args, **kwargs):
        raise AssertionError("range scanned twice")

    monkeypatch.setattr("zof_roots.scan", fail)
    results = find_all_roots("x**3 - x - 2", 0.0, 3.0, 0.5, "bisection", 1e-6, found=found)

    assert len(results) == 1
    assert results[0].interval == Interval(1.5, 2.0)
