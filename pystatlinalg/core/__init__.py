"""
Core infrastructure for pystatlinalg.

This module provides the operand model and shared utilities used by the
linear algebra operations.

Key components:
    view: MatrixView, the non-owning operand description
    buffer: OwnedBuffer with scoped shared/exclusive borrows
    ownership: normalization of caller operands into views
    protocols: KernelBackend protocol
    exceptions: Exception hierarchy
    validation: Input validators
    layouts: Layout/triangle string constants
    compute: Timing, precision and tolerance utilities
"""

from pystatlinalg.core.protocols import KernelBackend
from pystatlinalg.core.view import MatrixView
from pystatlinalg.core.buffer import OwnedBuffer
from pystatlinalg.core.ownership import normalize, normalize_mut
from pystatlinalg.core.exceptions import (
    PyStatLinalgError,
    ValidationError,
    DimensionError,
    OwnershipError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
)

__all__ = [
    # Protocols
    "KernelBackend",
    # Operands
    "MatrixView",
    "OwnedBuffer",
    "normalize",
    "normalize_mut",
    # Exceptions
    "PyStatLinalgError",
    "ValidationError",
    "DimensionError",
    "OwnershipError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
]
