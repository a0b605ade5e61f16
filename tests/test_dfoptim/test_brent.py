import math

import numpy as np
import pytest

from dfoptim import Brent, Result, fit_brent, protect
from dfoptim.brent import GOLDEN, brent_converged, brent_init, brent_step
from dfoptim.control import brent_control
from dfoptim.core import EvaluationError


def parabola(x: float) -> float:
    return x * x


def test_golden_ratio_constant():
    phi = 0.5 * (1 + math.sqrt(5))
    assert GOLDEN == pytest.approx(1 / phi**2)
    assert GOLDEN == pytest.approx(1 - 1 / phi)


@pytest.mark.parametrize("lower, upper", [(-3, 3), (-10, 3), (0, 3)])
def test_finds_easy_minimum(lower, upper):
    res = fit_brent(parabola, lower, upper)
    assert res.converged
    assert res.location == pytest.approx(0, abs=1e-4)
    assert res.value == pytest.approx(0, abs=1e-8)


def test_finds_harder_minimum():
    def fn(x):
        return -(x + math.sin(x)) * math.exp(-x * x)

    res = fit_brent(fn, -10, 10)
    assert res.converged
    assert res.location == pytest.approx(0.6795786640979207, abs=1e-5)


def test_can_fail_to_converge():
    res = fit_brent(parabola, -2, 2, {}, 3)
    assert res.converged is False
    assert res.iterations == 3
    assert res.evaluations == 4


def test_finds_easy_maximum():
    res = fit_brent(lambda x: 2 - x * x, -3, 3, {"find_maximum": True})
    assert res.converged
    assert res.location == pytest.approx(0, abs=1e-4)
    assert res.value == pytest.approx(2)


def test_maximum_snapshot_reports_true_values():
    solver = Brent(lambda x: 2 - x * x, -3, 3, brent_control(find_maximum=True))
    solver.run(5)
    x, w, v = solver.snapshot()
    for point in (x, w, v):
        assert point.value == pytest.approx(2 - point.location**2)
    assert x.value >= w.value


def test_lower_level_interface():
    solver = Brent(parabola, -3, 3)
    assert solver.result().converged is False
    assert solver.result().evaluations == 1
    assert solver.run(3).converged is False
    assert solver.run().converged is True
    res = solver.result()
    assert res.location == pytest.approx(0, abs=1e-4)
    assert res.value == pytest.approx(0, abs=1e-8)


def test_first_point_is_golden_section():
    solver = Brent(parabola, 0, 1)
    x, w, v = solver.snapshot()
    assert x.location == pytest.approx(GOLDEN)
    assert x is w is v
    assert solver.bracket == (0.0, 1.0)


def test_accumulates_additional_information():
    xs = np.arange(1.0, 11.0)
    ys = np.array([0.54, 1.25, 1.44, 2.23, 2.59, 2.76, 3.41, 3.61, 4.32, 4.86])

    def target(m):
        def predict(z):
            return m * np.asarray(z)

        return Result(value=float(np.sum((m * xs - ys) ** 2)), data=predict)

    ans = Brent(target, 0, 10).run(100)
    assert ans.converged
    assert ans.location == pytest.approx(0.483168831168832, abs=1e-5)
    assert np.allclose(ans.data(xs), ans.location * xs)


def test_bracket_always_contains_best_point():
    solver = Brent(lambda x: (x - 1.3) ** 4 + math.cos(x), -4, 6)

    def check(_):
        a, b = solver.bracket
        x, w, v = solver.snapshot()
        assert a <= x.location <= b
        assert x.value <= w.value

    res = solver.run(callback=check)
    assert res.converged


def test_step_is_terminal_once_converged():
    solver = Brent(parabola, -3, 3)
    first = solver.run()
    assert solver.step() is True
    assert solver.result() == first
    assert solver.result() == solver.result()


def test_one_evaluation_per_step():
    solver = Brent(parabola, -3, 3)
    for i in range(1, 6):
        assert solver.step() is False
        res = solver.result()
        assert res.iterations == i
        assert res.evaluations == i + 1


def test_degenerate_bracket_converges_immediately():
    res = fit_brent(parabola, 2, 2)
    assert res.converged
    assert res.location == 2.0
    assert res.evaluations == 1


def test_invalid_bracket():
    with pytest.raises(ValueError):
        Brent(parabola, 3, -3)
    with pytest.raises(ValueError):
        Brent(parabola, -math.inf, 3)


def test_evaluation_errors_propagate():
    def target(x):
        if x > 1:
            raise ZeroDivisionError("out of domain")
        return (x - 2) ** 2

    with pytest.raises(ZeroDivisionError, match="out of domain"):
        fit_brent(target, 0, 4)


def test_free_step_function():
    control = brent_control(tolerance=1e-8)
    state = brent_init(parabola, -1.0, 2.0)
    while not brent_step(state, parabola, control):
        assert state.a <= state.x.location <= state.b
    assert brent_converged(state, control.tolerance)
    assert state.x.location == pytest.approx(0, abs=1e-6)


def test_protected_objective_routes_around_failures():
    def target(x):
        if x <= 0:
            raise ValueError("x must be positive")
        return (x - 0.2) ** 2

    res = fit_brent(protect(target), -10, 1)
    assert res.converged
    assert res.location == pytest.approx(0.2, abs=1e-4)
    assert math.isfinite(res.value)


def nan_above_one(x):
    return math.nan if x > 1 else (x - 0.5) ** 2


def test_nan_value_is_an_evaluation_error():
    with pytest.raises(EvaluationError, match="NaN"):
        Brent(nan_above_one, -3, 3).run(50)


def test_protected_nan_region_is_avoided():
    res = Brent(protect(nan_above_one), -3, 3).run(200)
    assert res.converged
    assert res.location == pytest.approx(0.5, abs=1e-4)
    assert res.value == pytest.approx(0, abs=1e-8)
