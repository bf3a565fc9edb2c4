"""
Numerical precision constants and utilities.

Provides machine epsilon and the condition-number diagnostic attached to
singular-matrix errors.
"""

import numpy as np
from numpy.typing import NDArray
from typing import Any


def machine_epsilon(dtype: np.dtype | type = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Complex dtypes report the epsilon of their real component.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def condition_number(A: NDArray[Any]) -> float:
    """
    Compute condition number of a matrix using SVD.

    Args:
        A: Input matrix

    Returns:
        Condition number (ratio of largest to smallest singular value)
        Returns inf if matrix is singular or contains non-finite values.
    """
    if not np.all(np.isfinite(A)):
        return np.inf
    s = np.linalg.svd(A, compute_uv=False)
    if s[-1] == 0:
        return np.inf
    return float(s[0] / s[-1])
