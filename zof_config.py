"""
Numeric defaults and front-end input parsing.

The constants are the knobs the core uses when a caller does not pass its
own value. ``SolverSettings`` turns raw strings coming from a web form or a
console prompt into validated numbers, so both front ends share one set of
rules.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from zof_models import Criterion

# --------------------------------------------------------------------------- #
# Numeric defaults
# --------------------------------------------------------------------------- #

DEFAULT_TOLERANCE = 1e-6
DEFAULT_MAX_ITERATIONS = 50  # false position has no closed-form bound
NEWTON_MAX_ITERATIONS = 20
FIXED_POINT_MAX_ITERATIONS = 100

DEFAULT_SCAN_LOW = -10.0
DEFAULT_SCAN_HIGH = 10.0
DEFAULT_SCAN_STEP = 0.1
MAX_SCAN_SAMPLES = 1_000_000

ZERO_EPSILON = 1e-8
ROOT_PRECISION = 6
SLOPE_EPSILON = 1e-12
AITKEN_EPSILON = 1e-12
COMPLEX_TOLERANCE = 1e-9


# --------------------------------------------------------------------------- #
# Settings parsed from user input
# --------------------------------------------------------------------------- #


def _label(name: str) -> str:
    return name.replace("_", " ").title()


def float_from(form: Mapping[str, Any], name: str, default: Optional[float]) -> float:
    raw = form.get(name)
    if raw is None or str(raw).strip() == "":
        if default is None:
            raise ValueError(f"{_label(name)} is required.")
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{_label(name)} must be numeric.") from exc
    if not math.isfinite(value):
        raise ValueError(f"{_label(name)} must be a finite number.")
    return value


def _int_from(form: Mapping[str, Any], name: str, default: Optional[int]) -> int:
    raw = form.get(name)
    if raw is None or str(raw).strip() == "":
        if default is None:
            raise ValueError(f"{_label(name)} is required.")
        return default
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{_label(name)} must be an integer.") from exc


def _flag_from(form: Mapping[str, Any], name: str) -> bool:
    raw = form.get(name)
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in {"1", "on", "true", "y", "yes", "s"}


@dataclass(frozen=True)
class SolverSettings:
    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: Optional[int] = None
    scan_low: float = DEFAULT_SCAN_LOW
    scan_high: float = DEFAULT_SCAN_HIGH
    step: float = DEFAULT_SCAN_STEP
    criterion: Optional[Criterion] = None
    aitken: bool = False

    @classmethod
    def from_mapping(cls, form: Mapping[str, Any]) -> "SolverSettings":
        """
        Build settings from a mapping of raw values (Flask form, prompt answers).

        Blank entries fall back to the module defaults. A blank
        ``max_iterations`` means "use the method's own cap".
        """
        raw_iterations = form.get("max_iterations")
        max_iterations = (
            None
            if raw_iterations is None or str(raw_iterations).strip() == ""
            else _int_from(form, "max_iterations", None)
        )
        raw_criterion = str(form.get("criterion") or "").strip()
        settings = cls(
            tolerance=float_from(form, "tolerance", DEFAULT_TOLERANCE),
            max_iterations=max_iterations,
            scan_low=float_from(form, "scan_low", DEFAULT_SCAN_LOW),
            scan_high=float_from(form, "scan_high", DEFAULT_SCAN_HIGH),
            step=float_from(form, "step", DEFAULT_SCAN_STEP),
            criterion=Criterion.parse(raw_criterion) if raw_criterion else None,
            aitken=_flag_from(form, "aitken"),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.tolerance <= 0:
            raise ValueError("Tolerance must be greater than 0.")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError("Max Iterations must be at least 1.")
        if self.step <= 0:
            raise ValueError("Step must be greater than 0.")
        if self.scan_low >= self.scan_high:
            raise ValueError("Scan Low must be smaller than Scan High.")
