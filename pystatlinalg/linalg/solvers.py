"""
Solve and factor family.

Linear systems a·x = b (``mldivide`` and its structured variants), the
matrix inverse, and Cholesky factorization. Every solve stages private
column-major copies of ``a`` and ``b`` before the kernel overwrites them,
so caller operands are never modified. The one exception is
``cholesky_decompose_in_place``, which writes into memory the caller
explicitly lends for writing.

Shape convention: ``b`` may be an n×k matrix or a length-n vector, and
``x`` comes back in the same form.

Failures:
    - Singular systems and non-convergent least squares raise
      SingularMatrixError
    - Non-positive-definite inputs raise NotPositiveDefiniteError
    - Shape problems raise DimensionError before any kernel runs
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pystatlinalg.core.exceptions import NotPositiveDefiniteError
from pystatlinalg.core.layouts import Triangle
from pystatlinalg.core.ownership import Operand, normalize, normalize_mut
from pystatlinalg.core.validation import (
    check_2d,
    check_consistent_length,
    check_finite,
    check_real,
    check_square,
)
from pystatlinalg.core.view import MatrixView
from pystatlinalg.linalg._common import is_lower, resolve_triangle
from pystatlinalg.linalg.backends import get_backend


def _check_system(va: MatrixView, vb: MatrixView, *, square: bool = True) -> None:
    if square:
        check_square(va, 'a')
    else:
        check_2d(va, 'a')
    check_consistent_length(va, vb, names=('a', 'b'))


def _check_real_system(va: MatrixView, vb: MatrixView) -> None:
    _check_system(va, vb)
    check_real(va, 'a')
    check_real(vb, 'b')


def mldivide(a: Operand, b: Operand) -> NDArray[Any]:
    """
    Solve a·x = b.

    A square ``a`` is solved by LU factorization with partial pivoting.
    A rectangular m×n ``a`` gives the minimum-norm least-squares solution
    (SVD based); a rank-deficient system emits a RuntimeWarning but still
    returns that solution.

    Parameters
    ----------
    a : Operand
        m×n matrix, real or complex.
    b : Operand
        m×k matrix or length-m vector.

    Returns
    -------
    ndarray
        n×k matrix or length-n vector.

    Raises
    ------
    DimensionError
        If ``a`` is not a matrix or the row counts differ.
    SingularMatrixError
        If a square ``a`` is singular, or the least-squares solve does not
        converge.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_system(va, vb, square=False)
        backend = get_backend()
        if va.is_square:
            return backend.gesv(va, vb)
        return backend.gelsd(va, vb)


def mldivide_symmetric(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
) -> NDArray[Any]:
    """
    Solve sym(a)·x = b for a symmetric, possibly indefinite ``a``.

    Only the ``triangle`` half of ``a`` is read.

    Raises
    ------
    SingularMatrixError
        If the factorization finds an exactly zero pivot block.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_real_system(va, vb)
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        return get_backend().sysv(va, vb, lower)


def mldivide_positive_definite(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
) -> NDArray[Any]:
    """
    Solve sym(a)·x = b for a symmetric positive-definite ``a``.

    Only the ``triangle`` half of ``a`` is read.

    Raises
    ------
    NotPositiveDefiniteError
        If ``a`` is not positive definite. ``info`` holds the order of the
        first leading minor that failed.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_real_system(va, vb)
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        return get_backend().posv(va, vb, lower)


def mldivide_cholesky(
    a: Operand,
    b: Operand,
    *,
    triangle: Triangle | None = None,
    check_factor: bool = False,
) -> NDArray[Any]:
    """
    Solve a system given its Cholesky factor.

    ``a`` is the output of ``cholesky_decompose``: upper U with
    A = UᵀU, or lower L with A = LLᵀ. The solution satisfies A·x = b.

    The factor is trusted. The kernel cannot tell a valid factor from an
    arbitrary triangular matrix, so a bad factor silently yields a wrong
    answer unless ``check_factor=True``, which verifies that the diagonal
    is finite and strictly positive first.

    Parameters
    ----------
    a : Operand
        n×n triangular factor.
    b : Operand
        n×k matrix or length-n vector.
    triangle : {'upper', 'lower'}, optional
        Which triangle holds the factor. Defaults to the view's declared
        triangle, else 'upper'.
    check_factor : bool, default False
        Validate the factor's diagonal before solving.

    Raises
    ------
    NotPositiveDefiniteError
        If ``check_factor`` is set and a diagonal entry is not positive.
    ValidationError
        If ``check_factor`` is set and the diagonal is not finite.
    """
    with normalize(a, b, names=('a', 'b')) as (va, vb):
        _check_real_system(va, vb)
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        if check_factor:
            diagonal = np.diagonal(va.data)
            check_finite(diagonal, 'a')
            bad = np.flatnonzero(diagonal <= 0)
            if bad.size:
                raise NotPositiveDefiniteError(
                    f"a: not a Cholesky factor (diagonal entry {int(bad[0])} "
                    f"is {diagonal[bad[0]]}, expected > 0)",
                    matrix_name='a',
                    info=int(bad[0]) + 1,
                )
        return get_backend().potrs(va, vb, lower)


def mlinverse(a: Operand) -> NDArray[Any]:
    """
    Inverse of a square matrix, real or complex.

    Raises
    ------
    SingularMatrixError
        If ``a`` is not invertible as it has zero determinant.
    """
    with normalize(a, names=('a',)) as (va,):
        check_square(va, 'a')
        return get_backend().inv(va)


def cholesky_decompose(
    a: Operand,
    *,
    triangle: Triangle | None = None,
) -> NDArray[Any]:
    """
    Cholesky factor of a symmetric positive-definite matrix.

    Parameters
    ----------
    a : Operand
        n×n real matrix; only its ``triangle`` half is read.
    triangle : {'upper', 'lower'}, optional
        'upper' returns U with a = UᵀU, 'lower' returns L with a = LLᵀ.
        Defaults to the view's declared triangle, else 'upper'.

    Returns
    -------
    ndarray
        Freshly allocated triangular factor; the other triangle is zero.

    Raises
    ------
    NotPositiveDefiniteError
        If ``a`` is not positive definite.
    """
    with normalize(a, names=('a',)) as (va,):
        check_square(va, 'a')
        check_real(va, 'a')
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        return get_backend().potrf(va, lower)


def cholesky_decompose_in_place(
    a: Operand,
    *,
    triangle: Triangle | None = None,
) -> None:
    """
    Cholesky factorization overwriting ``a``.

    On success the ``triangle`` half of ``a`` holds the factor and the
    other half is zero. On failure the contents of ``a`` are unspecified.

    Parameters
    ----------
    a : OwnedBuffer, MatrixView or ndarray
        Writable n×n real matrix. An OwnedBuffer is borrowed exclusively
        for the duration of the call; a writable MatrixView or a
        writeable float ndarray is written directly.
    triangle : {'upper', 'lower'}, optional
        Defaults to the view's declared triangle, else 'upper'.

    Raises
    ------
    OwnershipError
        If ``a`` is read-only, not an ndarray, or an OwnedBuffer with a
        live borrow.
    NotPositiveDefiniteError
        If ``a`` is not positive definite.
    """
    with normalize_mut(a, 'a') as va:
        check_square(va, 'a')
        check_real(va, 'a')
        lower = is_lower(resolve_triangle(va, triangle, 'a'))
        get_backend().potrf_in_place(va, lower)
