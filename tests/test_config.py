import pytest

from zof_config import (
    DEFAULT_SCAN_STEP,
    DEFAULT_TOLERANCE,
    SolverSettings,
    float_from,
)
from zof_models import Criterion, Interval, MethodKind


def test_blank_form_uses_defaults():
    settings = SolverSettings.from_mapping({"tolerance": "", "max_iterations": ""})

    assert settings.tolerance == DEFAULT_TOLERANCE
    assert settings.step == DEFAULT_SCAN_STEP
    assert settings.max_iterations is None
    assert settings.criterion is None
    assert settings.aitken is False


def test_form_values_are_parsed():
    settings = SolverSettings.from_mapping(
        {
            "tolerance": "1e-8",
            "max_iterations": "25",
            "scan_low": "-3",
            "scan_high": "3",
            "step": "0.25",
            "criterion": "Step",
            "aitken": "on",
        }
    )

    assert settings == SolverSettings(1e-8, 25, -3.0, 3.0, 0.25, Criterion.STEP, True)


@pytest.mark.parametrize(
    "form, message",
    [
        ({"tolerance": "abc"}, "Tolerance must be numeric"),
        ({"tolerance": "0"}, "Tolerance must be greater than 0"),
        ({"tolerance": "inf"}, "finite"),
        ({"max_iterations": "2.5"}, "Max Iterations must be an integer"),
        ({"max_iterations": "0"}, "at least 1"),
        ({"step": "-1"}, "Step must be greater than 0"),
        ({"scan_low": "5", "scan_high": "1"}, "smaller than"),
        ({"criterion": "bogus"}, "Unknown termination criterion"),
    ],
)
def test_invalid_form_values(form, message):
    with pytest.raises(ValueError, match=message):
        SolverSettings.from_mapping(form)


def test_float_from_requires_value_without_default():
    with pytest.raises(ValueError, match="Lower is required"):
        float_from({}, "lower", None)


def test_interval_invariants():
    assert Interval(1.0, 2.0).width == 1.0
    assert Interval(1.0, 3.0).midpoint == 2.0
    assert Interval.point(4.0).is_degenerate
    with pytest.raises(ValueError):
        Interval(2.0, 1.0)
    with pytest.raises(ValueError):
        Interval(float("nan"), 1.0)


def test_method_kind_parsing():
    assert MethodKind.parse(" Regula_Falsi ") is MethodKind.REGULA_FALSI
    assert MethodKind.BISECTION.is_bracketing
    assert not MethodKind.FIXED_POINT.is_bracketing
    assert MethodKind.NEWTON_RAPHSON.label.startswith("Newton")
