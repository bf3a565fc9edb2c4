"""
Multiply family: general, symmetric and triangular products.

Every function accepts operands as array-likes, ndarrays of any layout,
MatrixViews or OwnedBuffers, and returns a freshly allocated ndarray
(or a scalar, for the vector·vector case). Operands are never modified.

Only the declared triangle of a symmetric or triangular operand is read;
the other triangle may hold anything, including NaN.
"""

from typing import Any

import numpy as np
from numpy.typing import DTypeLike, NDArray

from pystatlinalg.core.exceptions import DimensionError, ValidationError
from pystatlinalg.core.layouts import Triangle
from pystatlinalg.core.ownership import Operand, normalize
from pystatlinalg.core.validation import (
    SUPPORTED_DTYPES,
    check_conformable,
    check_real,
    check_square,
)
from pystatlinalg.linalg._common import is_lower, resolve_triangle, resolve_unit_diagonal
from pystatlinalg.linalg.backends import get_backend


def eye(n: int, m: int | None = None, dtype: DTypeLike = np.float64) -> NDArray[Any]:
    """
    Identity matrix.

    Parameters
    ----------
    n : int
        Number of rows.
    m : int, optional
        Number of columns; defaults to ``n``.
    dtype : dtype, default float64
        Element type.

    Returns
    -------
    ndarray
        n×m matrix with ones on the main diagonal.
    """
    if n <= 0 or (m is not None and m <= 0):
        raise DimensionError(f"eye: dimensions must be positive, got n={n}, m={m}")
    if np.dtype(dtype) not in SUPPORTED_DTYPES:
        raise ValidationError(f"eye: unsupported element type {np.dtype(dtype)}")
    return np.eye(n, m, dtype=dtype)


def mtimes(a: Operand, b: Operand) -> Any:
    """
    General product a·b.

    Dispatch by rank:

    - matrix·matrix -> matrix (gemm)
    - matrix·vector -> vector (gemv)
    - vector·matrix -> vector, computed as aᵀ applied to the vector
      through gemv's transpose flag; ``b`` is never copied transposed
    - vector·vector -> scalar (dot)

    Real and complex element types are supported; mixed operands are
    promoted to their common type.

    Parameters
    ----------
    a, b : Operand
        Vectors or matrices with ``a.shape[-1] == b.shape[0]``.

    Returns
    -------
    ndarray or scalar

    Raises
    ------
    DimensionError
        If the inner dimensions differ.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_conformable(va, vb, ('a', 'b'))
        backend = get_backend()
        if va.is_vector and vb.is_vector:
            return backend.dot(va, vb)
        if vb.is_vector:
            return backend.gemv(va, vb)
        if va.is_vector:
            return backend.gemv(vb, va, trans=True)
        return backend.gemm(va, vb)


def mtimes_symmetric(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
) -> NDArray[Any]:
    """
    Product sym(a)·b where only one triangle of ``a`` is read.

    Parameters
    ----------
    a : Operand
        Square real matrix. Its ``triangle`` half defines the symmetric
        matrix; the rest is ignored.
    b : Operand
        Matrix or vector with ``b.shape[0] == a.shape[1]``.
    triangle : {'upper', 'lower'}, optional
        Defaults to the view's declared triangle, else 'upper'.

    Returns
    -------
    ndarray
        Same shape as ``b``.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(va, 'a')
        check_real(va, 'a')
        check_real(vb, 'b')
        check_conformable(va, vb, ('a', 'b'))
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        backend = get_backend()
        if vb.is_vector:
            return backend.symv(va, vb, lower)
        return backend.symm(va, vb, lower)


def mtimes_symmetric_right(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
) -> NDArray[Any]:
    """
    Product a·sym(b) where only one triangle of ``b`` is read.

    A vector ``a`` is treated as a row vector: ``a·sym(b) == sym(b)·a``.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(vb, 'b')
        check_real(va, 'a')
        check_real(vb, 'b')
        check_conformable(va, vb, ('a', 'b'))
        lower = is_lower(resolve_triangle(vb, triangle, 'b'))
        backend = get_backend()
        if va.is_vector:
            return backend.symv(vb, va, lower)
        return backend.symm(vb, va, lower, right=True)


def mtimes_triangular(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
    unit_diagonal: bool | None = None,
) -> NDArray[Any]:
    """
    Product tri(a)·b where ``a`` is triangular.

    The in-place triangular kernel runs on a fresh copy of ``b``.

    Parameters
    ----------
    a : Operand
        Square real matrix; only its ``triangle`` half is read.
    b : Operand
        Matrix or vector with ``b.shape[0] == a.shape[1]``.
    triangle : {'upper', 'lower'}, optional
        Defaults to the view's declared triangle, else 'upper'.
    unit_diagonal : bool, optional
        Treat the diagonal of ``a`` as all ones without reading it.
        Defaults to the view's declared tag, else False.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(va, 'a')
        check_real(va, 'a')
        check_real(vb, 'b')
        check_conformable(va, vb, ('a', 'b'))
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        unit = resolve_unit_diagonal(va, unit_diagonal)
        backend = get_backend()
        if vb.is_vector:
            return backend.trmv(va, vb, lower, unit)
        return backend.trmm(va, vb, lower, unit)


def mtimes_triangular_right(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
    unit_diagonal: bool | None = None,
) -> NDArray[Any]:
    """
    Product a·tri(b) where ``b`` is triangular.

    The in-place triangular kernel runs on a fresh copy of ``a``. A vector
    ``a`` is treated as a row vector.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(vb, 'b')
        check_real(va, 'a')
        check_real(vb, 'b')
        check_conformable(va, vb, ('a', 'b'))
        lower = is_lower(resolve_triangle(vb, triangle, 'b'))
        unit = resolve_unit_diagonal(vb, unit_diagonal)
        backend = get_backend()
        if va.is_vector:
            return backend.trmv(vb, va, lower, unit, trans=True)
        return backend.trmm(vb, va, lower, unit, right=True)
