"""Nelder-Mead simplex minimization.

The search state lives in a plain :class:`SimplexState` that is advanced one
move at a time by :func:`simplex_step`. :class:`Simplex` bundles a state with
its objective and control so callers can interleave steps with their own
work (progress reporting, cancellation, animation):

>>> import numpy as np
>>> from dfoptim import Simplex
>>> def bowl(x):
...     return (x[0] - 1) ** 2 + (x[1] + 2) ** 2
>>> solver = Simplex(bowl, [3.0, 1.0])
>>> while not solver.step():
...     pass
>>> bool(np.allclose(solver.result().location, [1.0, -2.0], atol=1e-2))
True

References:
    - Nelder & Mead, "A simplex method for function minimization" (1965)
    - Lagarias et al., "Convergence properties of the Nelder-Mead simplex
      method in low dimensions" (1998)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

import numpy as np

from .control import SimplexControl, simplex_control
from .core import Array, FitResult, Objective, Point
from .logging import get_logger
from .utils import Err, evaluate, recover

logger = get_logger(__name__)

# Move coefficients: reflection, expansion, contraction and shrink.
RHO = 1.0
CHI = 2.0
PSI = -0.5
SIGMA = 0.5


@dataclass
class SimplexState:
    """Mutable state of a simplex search.

    ``points`` holds the ``n + 1`` vertices sorted by ascending value, so
    ``points[0]`` is the best vertex and ``points[-1]`` the worst.
    """

    points: List[Point[Array]] = field(default_factory=list)
    iterations: int = 0
    evaluations: int = 0
    converged: bool = False

    @property
    def dimension(self) -> int:
        return len(self.points) - 1

    @property
    def best(self) -> Point[Array]:
        return self.points[0]


def _weighted_sum(weight: float, centroid: Array, location: Array) -> Array:
    return (1.0 + weight) * centroid - weight * location


def _evaluate_point(
    state: SimplexState, target: Objective, location: Array, tolerate: bool
) -> Point[Array]:
    location = np.array(location, dtype=float)
    location.setflags(write=False)
    outcome = evaluate(target, location)
    if tolerate and isinstance(outcome, Err):
        logger.debug(
            "Objective failed at %s (%r); treating value as +inf",
            location,
            outcome.error,
        )
        outcome = recover(outcome)
    result = outcome.unwrap()
    point = Point(location=location, value=result.value, data=result.data, id=state.evaluations)
    state.evaluations += 1
    return point


def _sort(points: List[Point[Array]]) -> None:
    points.sort(key=lambda point: point.value)


def _centroid(points: Sequence[Point[Array]]) -> Array:
    """Coordinate-wise mean of every vertex except the worst."""
    return np.mean([point.location for point in points[:-1]], axis=0)


def _adopt(state: SimplexState, point: Point[Array]) -> None:
    state.points[-1] = point
    _sort(state.points)


def simplex_init(
    target: Objective, location: Union[Sequence[float], Array], control: SimplexControl
) -> SimplexState:
    """Evaluate the initial simplex around ``location``.

    Vertex 0 is ``location`` itself. Vertex ``i + 1`` perturbs coordinate
    ``i``: a non-zero coordinate is scaled by ``1 + delta_non_zero``, a zero
    coordinate is replaced by ``delta_zero``.

    The objective at ``location`` is never protected, because there is no
    valid vertex to fall back on; its failure always propagates.

    Raises:
        ValueError: If ``location`` is not a non-empty, finite 1-D vector.
    """
    x0 = np.asarray(location, dtype=float)
    if x0.ndim != 1 or x0.size == 0:
        raise ValueError("Initial location must be a non-empty 1-D vector.")
    if not np.all(np.isfinite(x0)):
        raise ValueError("Initial location must be finite.")

    state = SimplexState()
    state.points.append(_evaluate_point(state, target, x0, tolerate=False))
    for i in range(x0.size):
        vertex = x0.copy()
        if vertex[i] != 0:
            vertex[i] *= 1.0 + control.delta_non_zero
        else:
            vertex[i] = control.delta_zero
        state.points.append(
            _evaluate_point(state, target, vertex, control.tolerates_evaluation_failure)
        )
    _sort(state.points)
    return state


def simplex_converged(points: Sequence[Point[Array]], tolerance: float) -> bool:
    """Return True once values have equalized and the simplex has collapsed.

    Values are equal when the absolute or relative gap between the best and
    worst vertex is below ``tolerance``; the simplex has collapsed when no
    coordinate of the best and worst vertex differs by ``tolerance`` or more.
    """
    best = points[0]
    worst = points[-1]
    same_value = worst.value - best.value < tolerance or (
        worst.value != 0 and 1.0 - best.value / worst.value < tolerance
    )
    if not same_value:
        return False
    spread = float(np.max(np.abs(best.location - worst.location)))
    return spread < tolerance


def simplex_step(state: SimplexState, target: Objective, control: SimplexControl) -> bool:
    """Advance ``state`` by one Nelder-Mead move.

    Each call costs one or two objective evaluations (``n`` more when the
    simplex shrinks). Once converged, further calls return True without
    touching the state.

    Returns:
        Whether the simplex has converged.
    """
    if state.converged:
        return True
    state.iterations += 1
    points = state.points
    if simplex_converged(points, control.tolerance):
        state.converged = True
        logger.info(
            "Simplex converged after %d iterations (%d evaluations), value %g",
            state.iterations,
            state.evaluations,
            points[0].value,
        )
        return True

    tolerate = control.tolerates_evaluation_failure
    best = points[0]
    worst = points[-1]
    centroid = _centroid(points)

    def move(weight: float, origin: Array, location: Array) -> Point[Array]:
        return _evaluate_point(state, target, _weighted_sum(weight, origin, location), tolerate)

    reflected = move(RHO, centroid, worst.location)
    if reflected.value < best.value:
        expanded = move(CHI, centroid, worst.location)
        if expanded.value < reflected.value:
            kind = "expand"
            _adopt(state, expanded)
        else:
            kind = "reflect"
            _adopt(state, reflected)
    elif reflected.value >= points[-2].value:
        if reflected.value > worst.value:
            kind = "contract inside"
            contracted = move(PSI, centroid, worst.location)
        else:
            kind = "contract outside"
            contracted = move(-PSI * RHO, centroid, worst.location)
        if contracted.value < worst.value:
            _adopt(state, contracted)
        else:
            kind = "shrink"
            shrunk = [move(-SIGMA, best.location, point.location) for point in points[1:]]
            points[1:] = shrunk
            _sort(points)
    else:
        kind = "reflect"
        _adopt(state, reflected)

    logger.debug(
        "Iteration %d: %s, best value %g, worst value %g",
        state.iterations,
        kind,
        points[0].value,
        points[-1].value,
    )
    return False


class Simplex:
    """
    Step-wise Nelder-Mead minimizer.

    Unlike :func:`fit_simplex`, which runs to completion in one call, a
    ``Simplex`` holds a partially completed search that the caller drives
    with :meth:`step`. Each step only costs a few objective evaluations, so
    long searches can report progress or be abandoned between steps.

    Args:
        target: Objective taking a 1-D array and returning a real number or
            a :class:`~dfoptim.core.Result`.
        location: Starting point.
        control: A :class:`~dfoptim.control.SimplexControl`, a mapping of its
            fields, or None for the defaults.

    Example
    -------
    >>> solver = Simplex(lambda x: float(x @ x), [2.0, 4.0])
    >>> solver.result().evaluations
    3
    >>> solver.run(500).converged
    True
    """

    def __init__(
        self,
        target: Objective,
        location: Union[Sequence[float], Array],
        control: Optional[Union[SimplexControl, Mapping[str, Any]]] = None,
    ) -> None:
        self._target = target
        self._control = simplex_control(control)
        self._state = simplex_init(target, location, self._control)

    @property
    def control(self) -> SimplexControl:
        return self._control

    @property
    def dimension(self) -> int:
        return self._state.dimension

    @property
    def converged(self) -> bool:
        return self._state.converged

    def step(self) -> bool:
        """Take one step; return True if the simplex has converged."""
        return simplex_step(self._state, self._target, self._control)

    def run(
        self,
        max_iterations: float,
        callback: Optional[Callable[[FitResult[Array]], None]] = None,
    ) -> FitResult[Array]:
        """Step until converged or ``max_iterations`` steps have been taken.

        A cap that is too small is not an error: check ``converged`` on the
        returned result. ``callback`` receives the current result after each
        step.
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
            logger.info(
                "Simplex stopped after %d iterations without converging", taken
            )
        return self.result()

    def result(self) -> FitResult[Array]:
        """Return the best vertex found so far, whether converged or not."""
        best = self._state.best
        return FitResult(
            location=best.location,
            value=best.value,
            data=best.data,
            converged=self._state.converged,
            iterations=self._state.iterations,
            evaluations=self._state.evaluations,
        )

    def snapshot(self) -> tuple[Point[Array], ...]:
        """Return the vertices of the simplex, sorted from best to worst."""
        return tuple(self._state.points)


def fit_simplex(
    target: Objective,
    location: Union[Sequence[float], Array],
    control: Optional[Union[SimplexControl, Mapping[str, Any]]] = None,
    max_iterations_per_dimension: int = 200,
    callback: Optional[Callable[[FitResult[Array]], None]] = None,
) -> FitResult[Array]:
    """Minimize ``target`` from ``location`` with the Nelder-Mead method.

    The total number of steps is capped at
    ``max_iterations_per_dimension * len(location)``.
    """
    solver = Simplex(target, location, control)
    return solver.run(max_iterations_per_dimension * solver.dimension, callback=callback)


__all__ = [
    "SimplexState",
    "simplex_init",
    "simplex_step",
    "simplex_converged",
    "Simplex",
    "fit_simplex",
]
