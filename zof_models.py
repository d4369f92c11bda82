"""
Value types passed between the scanner, the solvers and the front ends.

All of them are frozen: a ``RootResult`` and its trace are built once by the
solver run that produced them and only read afterwards.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


class MethodKind(str, enum.Enum):
    BISECTION = "bisection"
    REGULA_FALSI = "regula_falsi"
    NEWTON_RAPHSON = "newton_raphson"
    FIXED_POINT = "fixed_point"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @property
    def is_bracketing(self) -> bool:
        return self in (MethodKind.BISECTION, MethodKind.REGULA_FALSI)

    @classmethod
    def parse(cls, key: "str | MethodKind") -> "MethodKind":
        if isinstance(key, cls):
            return key
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown method: {key}") from None


_METHOD_LABELS = {
    MethodKind.BISECTION: "Bisection Method",
    MethodKind.REGULA_FALSI: "Regula Falsi (False Position)",
    MethodKind.NEWTON_RAPHSON: "Newton-Raphson Method (Fourier start)",
    MethodKind.FIXED_POINT: "Fixed Point Iteration (Aitken optional)",
}


class Criterion(str, enum.Enum):
    """Which quantity ends a bracketing run."""

    RESIDUAL = "residual"  # |f(x_i)| < tol
    STEP = "step"  # |x_i - x_{i-1}| < tol
    EITHER = "either"

    @property
    def uses_residual(self) -> bool:
        return self in (Criterion.RESIDUAL, Criterion.EITHER)

    @property
    def uses_step(self) -> bool:
        return self in (Criterion.STEP, Criterion.EITHER)

    @classmethod
    def parse(cls, key: "str | Criterion") -> "Criterion":
        if isinstance(key, cls):
            return key
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            choices = ", ".join(item.value for item in cls)
            raise ValueError(
                f"Unknown termination criterion: {key} (choose {choices})"
            ) from None


@dataclass(frozen=True)
class Interval:
    low: float
    high: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ValueError(f"Interval bounds must be finite: [{self.low}, {self.high}]")
        if self.low > self.high:
            raise ValueError(
                f"Interval lower bound {self.low} exceeds upper bound {self.high}"
            )

    @classmethod
    def point(cls, value: float) -> "Interval":
        return cls(value, value)

    @property
    def is_degenerate(self) -> bool:
        return self.low == self.high

    @property
    def width(self) -> float:
        return self.high - self.low

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2.0

    def __str__(self) -> str:
        return f"[{self.low:.6g}, {self.high:.6g}]"


@dataclass(frozen=True)
class IterationRecord:
    """One step of a solver run.

    ``values`` keeps the step's working numbers in display order (endpoints,
    iterate, function values). ``error`` is the step's error estimate, or
    ``None`` while it is not defined yet (no previous iterate).
    """

    iteration: int
    values: Mapping[str, Optional[float]]
    error: Optional[float]

    def as_row(self, columns: Sequence[str]) -> Dict[str, Optional[float]]:
        row: Dict[str, Optional[float]] = {}
        for column in columns:
            if column == "iteration":
                row[column] = self.iteration
            elif column == "error":
                row[column] = self.error
            else:
                row[column] = self.values.get(column)
        return row


@dataclass(frozen=True)
class RootResult:
    root: float
    iterations: int
    interval: Interval
    converged: bool
    method: MethodKind
    trace: Tuple[IterationRecord, ...] = ()
    columns: Tuple[str, ...] = ()
    final_error: Optional[float] = None
    message: str = ""

    def rows(self) -> List[Dict[str, Optional[float]]]:
        return [record.as_row(self.columns) for record in self.trace]


@dataclass
class TraceBuilder:
    """Append-only trace owned by a single solver run."""

    columns: Tuple[str, ...]
    records: List[IterationRecord] = field(default_factory=list)

    def add(
        self,
        iteration: int,
        values: Mapping[str, Optional[float]],
        error: Optional[float],
    ) -> None:
        self.records.append(IterationRecord(iteration, dict(values), error))

    def freeze(self) -> Tuple[IterationRecord, ...]:
        return tuple(self.records)
