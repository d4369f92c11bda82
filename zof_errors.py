"""
Error taxonomy shared by the evaluator, the solvers and the front ends.

Every failure a solver can report is its own class so callers (and tests)
can tell them apart with ``except``/``pytest.raises``. Running out of
iterations is deliberately *not* an error: the solver hands back its last
iterate with ``converged=False``.
"""

from __future__ import annotations

from typing import Optional


class ZofError(Exception):
    """Base class for every error raised by the ZOF core."""

    kind = "error"


class InvalidExpression(ZofError, ValueError):
    """Raised when a user-supplied expression cannot be parsed."""

    kind = "invalid_expression"


class SolverError(ZofError, RuntimeError):
    """A solver run was aborted; only that interval's attempt is lost."""

    kind = "solver_error"

    def __init__(self, message: str, *, x: Optional[float] = None) -> None:
        super().__init__(message)
        self.x = x


class NoSignChange(SolverError):
    kind = "no_sign_change"

    def __init__(self, low: float, high: float, f_low: float, f_high: float) -> None:
        super().__init__(
            f"f(a) and f(b) must have opposite signs: "
            f"f({low})={f_low}, f({high})={f_high}."
        )
        self.low = low
        self.high = high


class DegenerateIntervalNoRoot(SolverError):
    kind = "degenerate_interval"

    def __init__(self, point: float, value: float) -> None:
        super().__init__(
            f"Zero-width interval at x={point} is not a root (f={value}).", x=point
        )


class DegenerateSlope(SolverError):
    kind = "degenerate_slope"

    def __init__(self, low: float, high: float) -> None:
        super().__init__(
            f"f(b) - f(a) is numerically zero on [{low}, {high}]; "
            "false position cannot interpolate."
        )
        self.low = low
        self.high = high


class ZeroDerivative(SolverError):
    kind = "zero_derivative"

    def __init__(self, x: float) -> None:
        super().__init__(
            f"Derivative vanished at x={x}; Newton-Raphson cannot proceed.", x=x
        )


class NoValidFourierStart(SolverError):
    kind = "no_fourier_start"

    def __init__(self, low: float, high: float) -> None:
        super().__init__(
            f"Neither endpoint of [{low}, {high}] satisfies f(x)*f''(x) > 0."
        )
        self.low = low
        self.high = high


class UndefinedEvaluation(SolverError):
    kind = "undefined_evaluation"

    def __init__(self, expression: str, x: float) -> None:
        super().__init__(f"{expression} is undefined at x={x}.", x=x)
        self.expression = expression
