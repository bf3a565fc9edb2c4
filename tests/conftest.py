"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def spd_matrix(rng):
    """Well-conditioned 5x5 symmetric positive-definite matrix."""
    X = rng.standard_normal((20, 5))
    return X.T @ X + 5 * np.eye(5)


@pytest.fixture
def sigma():
    """3x3 covariance matrix of a small portfolio, upper triangle only."""
    return np.array([
        [0.010, 0.0030, 0.006],
        [0.000, 0.0225, 0.012],
        [0.000, 0.0000, 0.040],
    ])


@pytest.fixture
def X():
    """3x4 integer-valued matrix used by the product tests."""
    return np.array([
        [3.0, 5.0, 2.0, -3.0],
        [-2.0, 2.0, 3.0, 10.0],
        [0.0, 2.0, 1.0, 1.0],
    ])
