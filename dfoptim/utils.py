"""Evaluation helpers wrapping user objectives.

Calling an objective goes through :func:`evaluate`, which never raises and
instead returns :class:`Ok` or :class:`Err`. The caller decides what to do
with a failure: :meth:`Err.unwrap` re-raises the original exception and
:func:`recover` maps it to an infinitely bad result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Union

from .core import Objective, Result, normalize_result


@dataclass(frozen=True)
class Ok:
    """A successful evaluation."""

    result: Result

    def unwrap(self) -> Result:
        return self.result


@dataclass(frozen=True)
class Err:
    """A failed evaluation, holding the exception the objective raised."""

    error: Exception

    def unwrap(self) -> Result:
        raise self.error


Outcome = Union[Ok, Err]


def evaluate(fun: Objective, location: Any) -> Outcome:
    """Call ``fun`` at ``location`` and normalize its return value.

    Any exception raised by ``fun`` or by normalization is captured in an
    :class:`Err` rather than propagated.
    """
    try:
        return Ok(normalize_result(fun(location)))
    except Exception as exc:
        return Err(exc)


def recover(outcome: Outcome) -> Ok:
    """Map a failed evaluation to a result with value ``+inf``."""
    if isinstance(outcome, Err):
        return Ok(Result(value=math.inf))
    return outcome


def protect(fun: Objective) -> Callable[[Any], Result]:
    """Wrap ``fun`` so that any failure evaluates to ``+inf``.

    Useful for objectives that are undefined over part of the search space:
    raising for out-of-domain inputs steers the optimizer away from them.
    """

    def protected(location: Any) -> Result:
        return recover(evaluate(fun, location)).result

    return protected


def invert(fun: Objective) -> Callable[[Any], Result]:
    """Wrap ``fun`` so that its value is negated, turning maximization into
    minimization. Auxiliary data is passed through unchanged."""

    def inverted(location: Any) -> Result:
        result = normalize_result(fun(location))
        return Result(value=-result.value, data=result.data)

    return inverted


__all__ = ["Ok", "Err", "Outcome", "evaluate", "recover", "protect", "invert"]
