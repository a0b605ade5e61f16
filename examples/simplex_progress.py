"""
Example: Driving a Nelder-Mead search step by step

Minimizes the Rosenbrock "banana" function, printing the simplex every few
steps. Because each call to ``step()`` only evaluates the objective a few
times, the loop is free to report progress, enforce a time budget or stop
early.
"""

import time

import numpy as np

from dfoptim import Simplex


def banana(x: np.ndarray, a: float = 1.0, b: float = 100.0) -> float:
    return (a - x[0]) ** 2 + b * (x[1] - x[0] ** 2) ** 2


def main() -> None:
    print("=" * 60)
    print("Nelder-Mead on the Rosenbrock function")
    print("=" * 60)

    solver = Simplex(banana, [-1.5, 1.0], {"delta_non_zero": 0.5})
    budget = 2.0
    start = time.perf_counter()
    while not solver.step():
        res = solver.result()
        if res.iterations % 25 == 0:
            vertices = ", ".join(
                np.array2string(p.location, precision=3) for p in solver.snapshot()
            )
            print(f"step {res.iterations:4d}  f={res.value:.3e}  simplex: {vertices}")
        if time.perf_counter() - start > budget:
            print("Time budget exhausted")
            break

    res = solver.result()
    print()
    print(f"Converged: {res.converged}")
    print(f"Best location: {np.array2string(res.location, precision=6)}")
    print(f"Best value: {res.value:.3e}")
    print(f"Iterations: {res.iterations}, evaluations: {res.evaluations}")


if __name__ == "__main__":
    main()
