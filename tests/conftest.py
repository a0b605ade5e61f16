"""Pytest configuration and shared fixtures for dfoptim tests.

This module provides:
- A deterministic numpy RNG fixture for random starting points
- Common objective functions used across the test modules
"""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture
def sum_of_squares():
    def fun(x: np.ndarray) -> float:
        return float(np.sum(np.asarray(x) ** 2))

    return fun


@pytest.fixture
def banana():
    def fun(x: np.ndarray) -> float:
        return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2

    return fun
