"""Brent's method for one-dimensional minimization.

Combines golden-section search with parabolic interpolation, following
Brent's ``fmin``. The search tracks a bracket ``[a, b]`` containing the
minimum and three points ``x`` (best so far), ``w`` (second best) and ``v``
(previous ``w``). Each step evaluates the objective exactly once.

References:
    - R. P. Brent, *Algorithms for Minimization without Derivatives* (1973),
      chapter 5
    - Forsythe, Malcolm & Moler, *Computer Methods for Mathematical
      Computations* (1977), ``fmin``
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, Union

import numpy as np

from .control import BrentControl, brent_control
from .core import FitResult, Objective, Point
from .logging import get_logger
from .utils import evaluate, invert

logger = get_logger(__name__)

# (3 - sqrt(5)) / 2, the squared inverse of the golden ratio.
GOLDEN = 0.5 * (3.0 - math.sqrt(5.0))
SQRT_EPS = math.sqrt(np.finfo(float).eps)


@dataclass
class BrentState:
    """Mutable state of a Brent search.

    Attributes:
        a: Lower end of the bracket.
        b: Upper end of the bracket.
        x: Point with the lowest value seen.
        w: Point with the second lowest value.
        v: Previous value of ``w``.
        d: Most recent step taken from ``x``.
        e: Step taken the cycle before ``d``; a parabolic step is only
            accepted if it is less than half of this.
    """

    a: float
    b: float
    x: Point[float]
    w: Point[float]
    v: Point[float]
    d: float = 0.0
    e: float = 0.0
    iterations: int = 0
    evaluations: int = 0
    converged: bool = False


def _evaluate_point(target: Objective, location: float, point_id: int) -> Point[float]:
    result = evaluate(target, location).unwrap()
    return Point(location=location, value=result.value, data=result.data, id=point_id)


def brent_init(target: Objective, lower: float, upper: float) -> BrentState:
    """Evaluate the first point of a search over ``[lower, upper]``.

    The first point is placed at the golden section of the interval and
    seeds ``x``, ``w`` and ``v``.

    Raises:
        ValueError: If the bounds are not finite or ``lower > upper``.
    """
    lower = float(lower)
    upper = float(upper)
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise ValueError("Bracket bounds must be finite.")
    if lower > upper:
        raise ValueError("Require lower <= upper.")
    x = _evaluate_point(target, lower + GOLDEN * (upper - lower), 0)
    return BrentState(a=lower, b=upper, x=x, w=x, v=x, evaluations=1)


def _tolerances(state: BrentState, tolerance: float) -> tuple[float, float]:
    tol1 = SQRT_EPS * abs(state.x.location) + tolerance / 3.0
    return tol1, 2.0 * tol1


def brent_converged(state: BrentState, tolerance: float) -> bool:
    """Return True once the bracket is narrow enough around ``x``."""
    _, tol2 = _tolerances(state, tolerance)
    xm = 0.5 * (state.a + state.b)
    return abs(state.x.location - xm) <= tol2 - 0.5 * (state.b - state.a)


def _fit_parabola(state: BrentState, tol1: float) -> tuple[float, float]:
    """Fit a parabola through ``x``, ``w`` and ``v``.

    Returns ``(p, q)`` with ``q >= 0`` such that the step from ``x`` to the
    vertex of the parabola is ``p / q``. Both are zero when the previous
    steps were too small for the fit to be trusted.
    """
    if abs(state.e) <= tol1:
        return 0.0, 0.0
    x, w, v = state.x, state.w, state.v
    r = (x.location - w.location) * (x.value - v.value)
    q = (x.location - v.location) * (x.value - w.value)
    p = (x.location - v.location) * q - (x.location - w.location) * r
    q = 2.0 * (q - r)
    if q > 0:
        p = -p
    else:
        q = -q
    return p, q


def _update_state(state: BrentState, u: Point[float]) -> None:
    x, w, v = state.x, state.w, state.v
    if u.value > x.value:
        if u.location < x.location:
            state.a = u.location
        else:
            state.b = u.location
        if u.value <= w.value or w.location == x.location:
            state.v = w
            state.w = u
        elif u.value <= v.value or v.location == x.location or v.location == w.location:
            state.v = u
    else:
        if u.location >= x.location:
            state.a = x.location
        else:
            state.b = x.location
        state.v = w
        state.w = x
        state.x = u


def brent_step(state: BrentState, target: Objective, control: BrentControl) -> bool:
    """Advance ``state`` by one evaluation of ``target``.

    ``target`` is minimized; maximization is handled by the caller inverting
    the objective. Once converged, further calls return True without
    evaluating anything.

    Returns:
        Whether the search has converged.
    """
    if state.converged:
        return True
    state.iterations += 1
    if brent_converged(state, control.tolerance):
        state.converged = True
        logger.info(
            "Brent converged after %d iterations (%d evaluations) at %g",
            state.iterations,
            state.evaluations,
            state.x.location,
        )
        return True

    a, b, x = state.a, state.b, state.x.location
    xm = 0.5 * (a + b)
    tol1, tol2 = _tolerances(state, control.tolerance)
    p, q = _fit_parabola(state, tol1)

    # Infinite values (from a protected objective) give a non-finite fit.
    if (
        not (math.isfinite(p) and math.isfinite(q))
        or abs(p) >= abs(q * 0.5 * state.e)
        or p <= q * (a - x)
        or p >= q * (b - x)
    ):
        kind = "golden"
        e = b - x if x < xm else a - x
        d = GOLDEN * e
    else:
        kind = "parabolic"
        e = state.d
        d = p / q
        u = x + d
        # Keep away from the ends of the bracket.
        if u - a < tol2 or b - u < tol2:
            d = tol1 if x < xm else -tol1

    # Keep away from x.
    step = d if abs(d) >= tol1 else (tol1 if d >= 0 else -tol1)
    u = _evaluate_point(target, x + step, state.evaluations)
    state.evaluations += 1
    state.d = d
    state.e = e
    _update_state(state, u)

    logger.debug(
        "Iteration %d: %s step to %g, bracket [%g, %g]",
        state.iterations,
        kind,
        u.location,
        state.a,
        state.b,
    )
    return False


class Brent:
    """
    Step-wise one-dimensional minimizer (or maximizer) on a bracket.

    Args:
        target: Objective taking a float and returning a real number or a
            :class:`~dfoptim.core.Result`.
        lower: Lower end of the search interval.
        upper: Upper end of the search interval.
        control: A :class:`~dfoptim.control.BrentControl`, a mapping of its
            fields, or None for the defaults.

    Example
    -------
    >>> solver = Brent(lambda x: (x - 1) ** 2, -3, 3)
    >>> res = solver.run()
    >>> res.converged, round(res.location, 4)
    (True, 1.0)
    """

    def __init__(
        self,
        target: Objective,
        lower: float,
        upper: float,
        control: Optional[Union[BrentControl, Mapping[str, Any]]] = None,
    ) -> None:
        self._control = brent_control(control)
        self._target = invert(target) if self._control.find_maximum else target
        self._state = brent_init(self._target, lower, upper)

    @property
    def control(self) -> BrentControl:
        return self._control

    @property
    def converged(self) -> bool:
        return self._state.converged

    @property
    def bracket(self) -> tuple[float, float]:
        """Current bracket ``(a, b)`` known to contain the optimum."""
        return self._state.a, self._state.b

    def step(self) -> bool:
        """Take one step; return True if the search has converged."""
        return brent_step(self._state, self._target, self._control)

    def run(
        self,
        max_iterations: float = math.inf,
        callback: Optional[Callable[[FitResult[float]], None]] = None,
    ) -> FitResult[float]:
        """Step until converged or ``max_iterations`` steps have been taken.

        The default cap is unbounded. Check ``converged`` on the returned
        result when passing a finite cap.
        """
        if max_iterations < 0:
            raise ValueError("max_iterations must be non-negative.")
        taken = 0
        while not self._state.converged and taken < max_iterations:
            self.step()
            taken += 1
            if callback is not None:
                callback(self.result())
        if not self._state.converged:
            logger.info("Brent stopped after %d iterations without converging", taken)
        return self.result()

    def _reported(self, point: Point[float]) -> Point[float]:
        if self._control.find_maximum:
            return replace(point, value=-point.value)
        return point

    def result(self) -> FitResult[float]:
        """Return the best point found so far.

        When maximizing, ``value`` is the objective's own value at
        ``location``, not the negated value minimized internally.
        """
        best = self._reported(self._state.x)
        return FitResult(
            location=best.location,
            value=best.value,
            data=best.data,
            converged=self._state.converged,
            iterations=self._state.iterations,
            evaluations=self._state.evaluations,
        )

    def snapshot(self) -> tuple[Point[float], Point[float], Point[float]]:
        """Return the tracked points ``(x, w, v)``."""
        state = self._state
        return self._reported(state.x), self._reported(state.w), self._reported(state.v)


def fit_brent(
    target: Objective,
    lower: float,
    upper: float,
    control: Optional[Union[BrentControl, Mapping[str, Any]]] = None,
    max_iterations: float = math.inf,
    callback: Optional[Callable[[FitResult[float]], None]] = None,
) -> FitResult[float]:
    """Minimize (or maximize) ``target`` over ``[lower, upper]``."""
    return Brent(target, lower, upper, control).run(max_iterations, callback=callback)


__all__ = [
    "BrentState",
    "brent_init",
    "brent_step",
    "brent_converged",
    "Brent",
    "fit_brent",
]
