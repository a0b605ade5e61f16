"""Core types shared by the Simplex and Brent optimizers.

An objective may return either a bare real number or a :class:`Result`
carrying auxiliary data alongside the value. :func:`normalize_result` turns
both into a :class:`Result` at the evaluation boundary, so the engines only
ever compare ``Result.value``.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

import numpy as np

Array = np.ndarray
L = TypeVar("L")


@dataclass(frozen=True)
class Result:
    """Value of the objective at a location, with optional auxiliary data.

    Return this from an objective to carry extra information (a fitted model,
    predictions, diagnostics) through to the optimizer's result.
    """

    value: float
    data: Any = None


Raw = Union[float, Result]
Objective = Callable[[Any], Raw]


class ConfigError(ValueError):
    """Raised when control parameters are invalid."""


class EvaluationError(ValueError):
    """Raised when an objective returns something that is not a value."""


@dataclass(frozen=True)
class Point(Generic[L]):
    """A location visited by an optimizer.

    ``id`` is the evaluation counter of the engine that created the point; it
    is for diagnostics only and never used to break ties.
    """

    location: L
    value: float
    data: Any
    id: int


@dataclass(frozen=True)
class FitResult(Generic[L]):
    """Best point found so far, plus progress counters.

    Attributes:
        location: Best location found.
        value: Objective value at ``location``.
        data: Auxiliary data returned by the objective at ``location``.
        converged: Whether the convergence test has passed.
        iterations: Number of steps taken.
        evaluations: Number of objective calls made.
    """

    location: L
    value: float
    data: Any
    converged: bool
    iterations: int
    evaluations: int


def _as_value(raw: Any) -> Optional[float]:
    if isinstance(raw, (bool, np.bool_)):
        return None
    if isinstance(raw, numbers.Real):
        return float(raw)
    if isinstance(raw, np.ndarray) and raw.ndim == 0 and np.isrealobj(raw):
        return float(raw)
    return None


def normalize_result(raw: Raw) -> Result:
    """Return ``raw`` as a :class:`Result`.

    A bare real number becomes ``Result(value, None)``; a ``Result`` is
    returned with its value coerced to ``float``. Infinities are values, NaN
    is not: it cannot be ordered against other points.

    Raises:
        EvaluationError: If ``raw`` is neither a real number nor a
            ``Result`` with a real value, or if the value is NaN.
    """
    if isinstance(raw, Result):
        value = _as_value(raw.value)
        if value is None:
            raise EvaluationError(
                f"Objective returned a Result with non-numeric value {raw.value!r}"
            )
    else:
        value = _as_value(raw)
        if value is None:
            raise EvaluationError(
                f"Objective must return a real number or a Result, got {type(raw).__name__}"
            )
    if math.isnan(value):
        raise EvaluationError("Objective returned NaN")
    if not isinstance(raw, Result):
        return Result(value=value)
    if type(raw.value) is float:
        return raw
    return Result(value=value, data=raw.data)


__all__ = [
    "Array",
    "Objective",
    "Raw",
    "Result",
    "Point",
    "FitResult",
    "ConfigError",
    "EvaluationError",
    "normalize_result",
]
