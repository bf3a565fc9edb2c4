"""
Input validation utilities for pystatlinalg.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent. Every precondition of an
operation is checked here, before any kernel runs.

Design principles:
    - No silent type coercion (except integer data promoted to float64)
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pystatlinalg.core.exceptions import ValidationError, DimensionError
from pystatlinalg.core.layouts import ALL_TRIANGLES

# Element types the dense kernels are compiled for (s, d, c, z)
SUPPORTED_DTYPES = (
    np.dtype(np.float32),
    np.dtype(np.float64),
    np.dtype(np.complex64),
    np.dtype(np.complex128),
)


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[Any]:
    """
    Validate and convert input to numpy array.

    Accepts any array-like and converts to numpy array without copying
    when the input already is one. Integer data is promoted to float64;
    floating and complex data must be single or double precision.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float32, float64, complex64 or complex128 dtype

    Raises:
        ValidationError: If input cannot be converted to a supported array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    # Reject non-numeric dtypes (strings, bytes, datetime, bool, etc.)
    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.integer):
        result = result.astype(np.float64)

    if result.dtype not in SUPPORTED_DTYPES:
        supported = ", ".join(str(dt) for dt in SUPPORTED_DTYPES)
        raise ValidationError(
            f"{name}: unsupported element type {result.dtype}, expected one of {supported}"
        )

    return result


def check_finite(array: NDArray[Any], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_2d(array: NDArray[Any], name: str) -> None:
    """
    Verify array is 2-dimensional.

    Raises:
        DimensionError: If array is not 2D
    """
    check_ndim(array, 2, name)


def check_matrix_or_vector(array: NDArray[Any], name: str) -> None:
    """
    Verify array is a vector (1D) or a matrix (2D).

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If array is 0D or has more than two dimensions
    """
    if array.ndim not in (1, 2):
        raise DimensionError(
            f"{name}: expected a vector or a matrix, got {array.ndim}D with shape {array.shape}"
        )


def check_nonempty(array: NDArray[Any], name: str) -> None:
    """
    Verify every dimension of the array is non-zero.

    Raises:
        DimensionError: If any dimension has length 0
    """
    if any(length == 0 for length in array.shape):
        raise DimensionError(
            f"{name}: empty operand with shape {array.shape}"
        )


def check_square(array: NDArray[Any], name: str) -> None:
    """
    Verify array is a square matrix.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If array is not 2D or rows != cols
    """
    check_2d(array, name)
    rows, cols = array.shape
    if rows != cols:
        raise DimensionError(
            f"{name}: expected a square matrix, got shape {array.shape}"
        )


def check_conformable(
    a: NDArray[Any],
    b: NDArray[Any],
    names: tuple[str, str],
) -> None:
    """
    Verify the inner dimensions of the product a·b agree.

    Works for any combination of vectors and matrices: the last axis of
    ``a`` is matched against the first axis of ``b``.

    Args:
        a: Left operand
        b: Right operand
        names: Parameter names for error messages

    Raises:
        DimensionError: If a.shape[-1] != b.shape[0]
    """
    if a.shape[-1] != b.shape[0]:
        raise DimensionError(
            f"{names[0]} @ {names[1]}: inner dimensions differ "
            f"({names[0]} has shape {a.shape}, {names[1]} has shape {b.shape})"
        )


def check_consistent_length(
    *arrays: NDArray[Any],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_same_shape(
    a: NDArray[Any],
    b: NDArray[Any],
    names: tuple[str, str],
) -> None:
    """
    Verify two arrays have identical shapes.

    Raises:
        DimensionError: If shapes differ
    """
    if a.shape != b.shape:
        raise DimensionError(
            f"{names[0]} and {names[1]} must have the same shape, "
            f"got {a.shape} and {b.shape}"
        )


def check_real(array: NDArray[Any], name: str) -> None:
    """
    Verify array holds real floating-point data.

    Symmetric, triangular and Cholesky kernels are only dispatched for
    real element types.

    Raises:
        ValidationError: If array has a complex dtype
    """
    if np.issubdtype(array.dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: complex element type {array.dtype} is not supported here, "
            f"expected float32 or float64"
        )


def check_triangle(triangle: str, name: str) -> None:
    """
    Verify a triangle designation is 'upper' or 'lower'.

    Raises:
        ValidationError: If triangle is not a known designation
    """
    if triangle not in ALL_TRIANGLES:
        raise ValidationError(
            f"{name}: triangle must be 'upper' or 'lower', got {triangle!r}"
        )
