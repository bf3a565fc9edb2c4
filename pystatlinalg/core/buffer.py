"""
Owned storage with scoped borrows.

OwnedBuffer holds a private, contiguous allocation. It is shared by every
Python reference to the object and released when the last one is dropped.
Access goes through scoped borrows:

    buf = OwnedBuffer.from_array(sigma)

    with buf.borrow() as view:          # shared, read-only; any number
        ...

    with buf.borrow_mut() as view:      # exclusive, read-write; only one
        cholesky_decompose_in_place(view)

Borrow bookkeeping is a plain counter and is not protected by a lock.
Mutating a buffer from one thread while another thread reads it is the
caller's responsibility; the counter catches the single-threaded mistakes
(an exclusive borrow requested while a shared one is live, and vice versa).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray

from pystatlinalg.core.exceptions import OwnershipError
from pystatlinalg.core.layouts import Triangle
from pystatlinalg.core.validation import check_array
from pystatlinalg.core.view import MatrixView


class OwnedBuffer:
    """
    Exclusively-owned, contiguous matrix or vector storage.

    Construct with from_array(), zeros() or eye(); the constructor takes
    ownership of an ndarray the caller must not keep using.
    """

    def __init__(self, data: NDArray[Any]):
        if not data.flags.owndata and data.base is not None:
            raise OwnershipError(
                "OwnedBuffer: data is a view of another array; use OwnedBuffer.from_array()"
            )
        # Validates dtype and rank up front.
        MatrixView(data)
        self._data = data
        self._shared = 0
        self._exclusive = False

    @classmethod
    def from_array(cls, array: ArrayLike, *, order: str = 'C') -> OwnedBuffer:
        """Copy any array-like into a new buffer."""
        return cls(np.array(check_array(array, 'array'), order=order, copy=True))

    @classmethod
    def zeros(
        cls,
        shape: int | tuple[int, ...],
        dtype: DTypeLike = np.float64,
        *,
        order: str = 'C',
    ) -> OwnedBuffer:
        return cls(np.zeros(shape, dtype=dtype, order=order))

    @classmethod
    def eye(cls, n: int, m: int | None = None, dtype: DTypeLike = np.float64) -> OwnedBuffer:
        return cls(np.eye(n, m, dtype=dtype))

    @property
    def shape(self) -> tuple[int, ...]:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def active_borrows(self) -> int:
        """Number of live borrows (shared or exclusive)."""
        return self._shared + int(self._exclusive)

    @property
    def is_exclusively_borrowed(self) -> bool:
        return self._exclusive

    def to_array(self) -> NDArray[Any]:
        """Copy of the current contents."""
        if self._exclusive:
            raise OwnershipError(
                "OwnedBuffer: cannot read while an exclusive borrow is live"
            )
        return self._data.copy()

    @contextmanager
    def borrow(
        self,
        *,
        triangle: Triangle | None = None,
        unit_diagonal: bool = False,
    ) -> Iterator[MatrixView]:
        """
        Shared, read-only borrow.

        Yields:
            Read-only MatrixView of the buffer

        Raises:
            OwnershipError: If an exclusive borrow is live
        """
        if self._exclusive:
            raise OwnershipError(
                "OwnedBuffer: shared borrow requested while an exclusive borrow is live"
            )
        data = self._data.view()
        data.flags.writeable = False
        self._shared += 1
        try:
            yield MatrixView(data, triangle, unit_diagonal)
        finally:
            self._shared -= 1

    @contextmanager
    def borrow_mut(
        self,
        *,
        triangle: Triangle | None = None,
        unit_diagonal: bool = False,
    ) -> Iterator[MatrixView]:
        """
        Exclusive, read-write borrow.

        Yields:
            Writable MatrixView of the buffer

        Raises:
            OwnershipError: If any other borrow is live
        """
        if self.active_borrows:
            raise OwnershipError(
                f"OwnedBuffer: exclusive borrow requested while "
                f"{self.active_borrows} borrow(s) are live"
            )
        self._exclusive = True
        try:
            yield MatrixView(self._data.view(), triangle, unit_diagonal)
        finally:
            self._exclusive = False

    def __repr__(self) -> str:
        return (
            f"OwnedBuffer(shape={self.shape}, dtype={self.dtype}, "
            f"borrows={self.active_borrows})"
        )
