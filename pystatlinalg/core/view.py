"""
Non-owning matrix and vector views.

A MatrixView describes a rank-1 or rank-2 operand living in memory the
view does not own: a read-only (or, when explicitly borrowed for writing,
read-write) NumPy view plus the metadata the kernel adapter needs to
dispatch without copying: layout, element type and the declared
triangle of symmetric/triangular operands.

Views never allocate. Transposing a view swaps strides and the triangle
tag; the underlying memory is untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pystatlinalg.core.exceptions import OwnershipError, ValidationError
from pystatlinalg.core.layouts import (
    ELEMENT_COMPLEX,
    ELEMENT_REAL,
    LAYOUT_COLUMN_MAJOR,
    LAYOUT_ROW_MAJOR,
    LAYOUT_STRIDED,
    LAYOUT_TRANSPOSED,
    MUTABILITY_READ_ONLY,
    MUTABILITY_READ_WRITE,
    TRIANGLE_LOWER,
    TRIANGLE_UPPER,
    Triangle,
)
from pystatlinalg.core.validation import (
    SUPPORTED_DTYPES,
    check_array,
    check_matrix_or_vector,
    check_nonempty,
    check_triangle,
)


def classify_layout(array: NDArray[Any]) -> str:
    """
    Classify the memory layout of a vector or matrix.

    Args:
        array: 1D or 2D array

    Returns:
        One of the LAYOUT_* constants from pystatlinalg.core.layouts
    """
    if array.ndim == 1:
        return LAYOUT_ROW_MAJOR if array.flags.c_contiguous else LAYOUT_STRIDED
    if array.flags.c_contiguous:
        return LAYOUT_ROW_MAJOR
    if array.flags.f_contiguous:
        return LAYOUT_COLUMN_MAJOR
    if array.strides[0] == array.itemsize:
        return LAYOUT_TRANSPOSED
    return LAYOUT_STRIDED


def _flip(triangle: Triangle | None) -> Triangle | None:
    if triangle is None:
        return None
    return TRIANGLE_LOWER if triangle == TRIANGLE_UPPER else TRIANGLE_UPPER


@dataclass(frozen=True, eq=False)
class MatrixView:
    """
    Borrowed view of a vector or matrix.

    Attributes:
        data: NumPy view over the borrowed memory. Read-only unless the
            view was borrowed for writing.
        triangle: Declared triangle for symmetric/triangular operands,
            or None when the operand is general.
        unit_diagonal: Declared unit diagonal for triangular operands.
    """
    data: NDArray[Any]
    triangle: Triangle | None = None
    unit_diagonal: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.data, np.ndarray):
            raise ValidationError(
                f"view: data must be a NumPy array, got {type(self.data).__name__} "
                f"(use MatrixView.borrow() for array-likes)"
            )
        check_matrix_or_vector(self.data, 'view')
        check_nonempty(self.data, 'view')
        if self.data.dtype not in SUPPORTED_DTYPES:
            raise ValidationError(
                f"view: unsupported element type {self.data.dtype}"
            )
        if self.triangle is not None:
            check_triangle(self.triangle, 'view')

    @classmethod
    def borrow(
        cls,
        array: ArrayLike,
        *,
        name: str = 'array',
        triangle: Triangle | None = None,
        unit_diagonal: bool = False,
        writable: bool = False,
    ) -> MatrixView:
        """
        Borrow caller memory as a view.

        Args:
            array: Array-like operand. Lists and integer arrays are
                converted (and therefore copied); floating ndarrays are
                borrowed without copying.
            name: Parameter name for error messages
            triangle: Declared triangle ('upper' or 'lower')
            unit_diagonal: Declared unit diagonal
            writable: Borrow for writing. Requires a writeable ndarray
                of a supported dtype, since writing to a converted copy
                would silently lose the result.

        Returns:
            MatrixView over the caller's memory

        Raises:
            ValidationError: If the operand is not numeric
            DimensionError: If the operand is empty or not 1D/2D
            OwnershipError: If writing was requested on memory that
                cannot be written in place
        """
        arr = check_array(array, name)
        if writable:
            if arr is not array:
                raise OwnershipError(
                    f"{name}: in-place operation requires a float32/float64 ndarray, "
                    f"got {type(array).__name__}"
                )
            if not arr.flags.writeable:
                raise OwnershipError(f"{name}: array is read-only")
            return cls(arr.view(), triangle, unit_diagonal)

        data = arr.view()
        data.flags.writeable = False
        return cls(data, triangle, unit_diagonal)

    # === Shape ===

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return self.data.ndim

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns; 1 for vectors."""
        return self.data.shape[1] if self.data.ndim == 2 else 1

    @property
    def is_vector(self) -> bool:
        return self.data.ndim == 1

    @property
    def is_square(self) -> bool:
        return self.data.ndim == 2 and self.rows == self.cols

    # === Element type / layout / mutability ===

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def element_type(self) -> str:
        if np.issubdtype(self.data.dtype, np.complexfloating):
            return ELEMENT_COMPLEX
        return ELEMENT_REAL

    @property
    def layout(self) -> str:
        return classify_layout(self.data)

    @property
    def mutability(self) -> str:
        if self.data.flags.writeable:
            return MUTABILITY_READ_WRITE
        return MUTABILITY_READ_ONLY

    # === Derived views ===

    @property
    def T(self) -> MatrixView:
        return self.transposed()

    def transposed(self) -> MatrixView:
        """Transposed view; strides swap and upper/lower tags swap."""
        return replace(self, data=self.data.T, triangle=_flip(self.triangle))

    def with_triangle(
        self,
        triangle: Triangle | None,
        unit_diagonal: bool | None = None,
    ) -> MatrixView:
        """Same memory, different declared triangle."""
        if unit_diagonal is None:
            unit_diagonal = self.unit_diagonal
        return replace(self, triangle=triangle, unit_diagonal=unit_diagonal)

    def read_only(self) -> MatrixView:
        """Read-only view of the same memory."""
        if not self.data.flags.writeable:
            return self
        data = self.data.view()
        data.flags.writeable = False
        return replace(self, data=data)

    def __repr__(self) -> str:
        tag = f", triangle={self.triangle!r}" if self.triangle else ""
        return (
            f"MatrixView(shape={self.shape}, dtype={self.dtype}, "
            f"layout={self.layout!r}, {self.mutability}{tag})"
        )
