"""
pystatlinalg: dense linear algebra for statistical computing.

A thin, layout-aware dispatch layer over LAPACK/BLAS for the products,
solves and factorizations that statistical code leans on: cross
products, quadratic forms, symmetric and positive-definite solves, and
Cholesky factorization.

Submodules:
    linalg: The operations
    core: Operand views, owned buffers, exceptions and validation
"""

__version__ = "0.1.0"
__author__ = "Hai-Shuo"
__email__ = "contact@sgcx.org"

from pystatlinalg import linalg
from pystatlinalg.core import MatrixView, OwnedBuffer

__all__ = [
    "__version__",
    "linalg",
    "MatrixView",
    "OwnedBuffer",
]
