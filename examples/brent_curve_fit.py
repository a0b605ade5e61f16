"""
Example: One-dimensional fits with Brent's method

Fits the slope of a line through the origin by least squares, returning the
fitted predictions as auxiliary data, then minimizes a function that is
only defined for positive x. Objectives that are undefined for part of
the bracket can be wrapped with ``protect`` so that failures count as
infinitely bad.
"""

import math

import numpy as np

from dfoptim import Result, fit_brent, protect

XS = np.arange(1.0, 11.0)
YS = np.array([0.54, 1.25, 1.44, 2.23, 2.59, 2.76, 3.41, 3.61, 4.32, 4.86])


def slope_loss(m: float) -> Result:
    predictions = m * XS
    return Result(value=float(np.sum((predictions - YS) ** 2)), data=predictions)


def log_bowl(x: float) -> float:
    # Undefined for x <= 0.
    return x / 2 - math.log(x)


def main() -> None:
    print("=" * 60)
    print("Example 1: least-squares slope")
    print("=" * 60)
    res = fit_brent(slope_loss, 0, 10)
    print(f"Slope: {res.location:.6f} (closed form {XS @ YS / (XS @ XS):.6f})")
    print(f"Residual sum of squares: {res.value:.4f}")
    print(f"Fitted values: {np.array2string(res.data, precision=2)}")
    print()

    print("=" * 60)
    print("Example 2: minimum of x/2 - log(x) on [-1, 6]")
    print("=" * 60)
    res = fit_brent(protect(log_bowl), -1, 6)
    print(f"Converged: {res.converged} after {res.iterations} iterations")
    print(f"Minimum at x = {res.location:.4f}, value {res.value:.6f}")


if __name__ == "__main__":
    main()
