"""
Derived products: cross products, quadratic forms and row-wise dots.

These are the building blocks of covariance and Mahalanobis-type
computations. Self cross products go through a rank-k update, so the
result is exactly symmetric: one triangle is computed and mirrored.

Vector overloads follow the row-vector convention: ``crossprod(x)`` is the
outer product xxᵀ and ``tcrossprod(x)`` is the inner product x·x.
"""

from typing import Any

from numpy.typing import NDArray

from pystatlinalg.core.exceptions import DimensionError
from pystatlinalg.core.layouts import Triangle
from pystatlinalg.core.ownership import Operand, normalize
from pystatlinalg.core.validation import (
    check_2d,
    check_conformable,
    check_consistent_length,
    check_real,
    check_same_shape,
    check_square,
)
from pystatlinalg.core.view import MatrixView
from pystatlinalg.linalg._common import resolve_triangle
from pystatlinalg.linalg.backends import get_backend
from pystatlinalg.linalg.multiply import mtimes, mtimes_symmetric


def _check_same_rank(va: MatrixView, vb: MatrixView, operation: str) -> None:
    if va.ndim != vb.ndim:
        raise DimensionError(
            f"{operation}: a and b must both be vectors or both be matrices, "
            f"got shapes {va.shape} and {vb.shape}"
        )


def crossprod(a: Operand, b: Operand | None = None) -> Any:
    """
    Cross product aᵀ·b, or aᵀ·a when ``b`` is omitted.

    Parameters
    ----------
    a : Operand
        m×n matrix, or a vector.
    b : Operand, optional
        m×k matrix (same number of rows as ``a``), or a vector.

    Returns
    -------
    ndarray
        - ``crossprod(a)``: n×n, exactly symmetric
        - ``crossprod(a, b)``: n×k
        - ``crossprod(x)``: outer product xxᵀ, exactly symmetric
        - ``crossprod(x, y)``: outer product xyᵀ
    """
    backend = get_backend()
    if b is None:
        with normalize(a, names=('a',)) as (va,):
            if va.is_vector:
                return backend.syr(va)
            return backend.syrk(va, trans=True)

    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_same_rank(va, vb, 'crossprod')
        if va.is_vector:
            return backend.ger(va, vb)
        check_consistent_length(va, vb, names=('a', 'b'))
        return backend.gemm(va.T, vb)


def tcrossprod(a: Operand, b: Operand | None = None) -> Any:
    """
    Transposed cross product a·bᵀ, or a·aᵀ when ``b`` is omitted.

    Parameters
    ----------
    a : Operand
        m×n matrix, or a vector.
    b : Operand, optional
        k×n matrix (same number of columns as ``a``), or a vector of the
        same length as ``a``.

    Returns
    -------
    ndarray or scalar
        - ``tcrossprod(a)``: m×m, exactly symmetric
        - ``tcrossprod(a, b)``: m×k
        - ``tcrossprod(x)`` / ``tcrossprod(x, y)``: scalar dot product
    """
    backend = get_backend()
    if b is None:
        with normalize(a, names=('a',)) as (va,):
            if va.is_vector:
                return backend.dot(va, va)
            return backend.syrk(va, trans=False)

    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_same_rank(va, vb, 'tcrossprod')
        if va.is_vector:
            check_same_shape(va, vb, ('a', 'b'))
            return backend.dot(va, vb)
        vbt = vb.T
        check_conformable(va, vbt, ('a', 'b.T'))
        return backend.gemm(va, vbt)


def quadratic_form(a: Operand, b: Operand) -> Any:
    """
    Quadratic form bᵀ·a·b.

    Computed as two chained products. A vector ``b`` gives a scalar;
    an n×k matrix ``b`` gives a k×k matrix.

    Raises
    ------
    DimensionError
        If ``a`` is not square or ``b`` does not have ``a.shape[1]`` rows.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(va, 'a')
        check_conformable(va, vb, ('a', 'b'))
        if vb.is_vector:
            return mtimes(mtimes(va, vb), vb)
        return mtimes(vb.T, mtimes(va, vb))


def quadratic_form_symmetric(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
) -> Any:
    """
    Quadratic form bᵀ·sym(a)·b, reading only one triangle of ``a``.

    Always evaluated as bᵀ·(sym(a)·b). A transposed ``b`` is column-major,
    so the symmetric kernel reads it in place and the result is
    bit-identical to the same two products written out by hand.

    Parameters
    ----------
    a : Operand
        Square real matrix.
    b : Operand
        Vector or n×k matrix.
    triangle : {'upper', 'lower'}, optional
        Defaults to the view's declared triangle, else 'upper'.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_square(va, 'a')
        check_real(va, 'a')
        check_real(vb, 'b')
        check_conformable(va, vb, ('a', 'b'))
        triangle = resolve_triangle(va, triangle, 'a')
        if vb.is_vector:
            return mtimes(mtimes_symmetric(va, vb, triangle=triangle), vb)
        return mtimes(vb.T, mtimes_symmetric(va, vb, triangle=triangle))


def rows_dot_product(a: Operand, b: Operand) -> NDArray[Any]:
    """
    Dot product of each row of ``a`` with the matching row of ``b``.

    Parameters
    ----------
    a, b : Operand
        m×n matrices of the same shape.

    Returns
    -------
    ndarray
        Length-m vector.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        check_2d(va, 'a')
        check_2d(vb, 'b')
        check_same_shape(va, vb, ('a', 'b'))
        return get_backend().rowdot(va, vb)
