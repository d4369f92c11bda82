import pytest

import ZOF_CLI
from ZOF_CLI import _format_value


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "--"),
        (float("nan"), "--"),
        (True, "yes"),
        (False, "no"),
        (1.5213797068, "1.52138"),
        (3, "3"),
        ("[1, 2]", "[1, 2]"),
    ],
)
def test_format_value(value, expected):
    assert _format_value(value) == expected


def _run(monkeypatch, capsys, answers):
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))
    ZOF_CLI.main()
    return capsys.readouterr().out


def test_single_bisection_session(monkeypatch, capsys):
    out = _run(
        monkeypatch,
        capsys,
        ["1", "x**3 - x - 2", "", "", "n", "1", "2", "", "n"],
    )

    assert "Converged" in out
    assert "1.52138" in out
    assert "Thanks for using the ZOF Solver!" in out


def test_newton_scan_session(monkeypatch, capsys):
    out = _run(
        monkeypatch,
        capsys,
        ["3", "x^3 - x", "", "", "y", "-2", "2", "0.5", "n"],
    )

    assert "exact zero at x = -1" in out
    assert "Roots found" in out
    assert "at most 1 positive and 1 negative" in out


def test_invalid_expression_is_asked_again(monkeypatch, capsys):
    out = _run(
        monkeypatch,
        capsys,
        ["1", "x +* 2", "x - 1", "", "", "n", "0", "3", "", "n"],
    )

    assert "Input error: Invalid function expression" in out
    assert "Converged" in out


def test_exit(monkeypatch, capsys):
    out = _run(monkeypatch, capsys, ["0"])

    assert "Goodbye!" in out


def test_scan_session_scans_once(monkeypatch, capsys):
    def fail(*args, **kwargs):
        raise AssertionError("range scanned twice")

    monkeypatch.setattr("zof_roots.scan", fail)
    out = _run(
        monkeypatch,
        capsys,
        ["1", "x^3 - x", "", "", "y", "-1.95", "2.05", "0.5", "", "n"],
    )

    assert "Intervals with a sign change" in out
    assert "Roots found" in out
