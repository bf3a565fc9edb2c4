"""
Dense linear algebra operations.

Multiply family:
    eye, mtimes, mtimes_symmetric, mtimes_symmetric_right,
    mtimes_triangular, mtimes_triangular_right

Derived products:
    crossprod, tcrossprod, quadratic_form, quadratic_form_symmetric,
    rows_dot_product

Solve / factor family:
    mldivide, mldivide_symmetric, mldivide_positive_definite,
    mldivide_cholesky, mlinverse, cholesky_decompose,
    cholesky_decompose_in_place

Usage:
    from pystatlinalg.linalg import cholesky_decompose, mldivide_cholesky

    U = cholesky_decompose(sigma)
    z = mldivide_cholesky(U, x - mu)
"""

from pystatlinalg.linalg.multiply import (
    eye,
    mtimes,
    mtimes_symmetric,
    mtimes_symmetric_right,
    mtimes_triangular,
    mtimes_triangular_right,
)
from pystatlinalg.linalg.products import (
    crossprod,
    tcrossprod,
    quadratic_form,
    quadratic_form_symmetric,
    rows_dot_product,
)
from pystatlinalg.linalg.solvers import (
    mldivide,
    mldivide_symmetric,
    mldivide_positive_definite,
    mldivide_cholesky,
    mlinverse,
    cholesky_decompose,
    cholesky_decompose_in_place,
)

__all__ = [
    # Multiply
    "eye",
    "mtimes",
    "mtimes_symmetric",
    "mtimes_symmetric_right",
    "mtimes_triangular",
    "mtimes_triangular_right",
    # Products
    "crossprod",
    "tcrossprod",
    "quadratic_form",
    "quadratic_form_symmetric",
    "rows_dot_product",
    # Solve / factor
    "mldivide",
    "mldivide_symmetric",
    "mldivide_positive_definite",
    "mldivide_cholesky",
    "mlinverse",
    "cholesky_decompose",
    "cholesky_decompose_in_place",
]
