"""
Ownership normalization.

Every public operation accepts operands in any of the forms a caller
naturally has at hand (lists, contiguous or strided ndarrays, transposed
views, MatrixView, OwnedBuffer) and reduces them to canonical MatrixViews
before dispatch. OwnedBuffers are borrowed for exactly the duration of the
call; the borrows are released when the enclosing ``with`` block exits,
even if the operation raises.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Any, Iterator, Union

from numpy.typing import ArrayLike

from pystatlinalg.core.buffer import OwnedBuffer
from pystatlinalg.core.exceptions import OwnershipError
from pystatlinalg.core.view import MatrixView

Operand = Union[ArrayLike, MatrixView, OwnedBuffer]


def as_view(operand: Any, name: str) -> MatrixView:
    """
    Canonical read-only view of a borrowed operand.

    Args:
        operand: Array-like or MatrixView. OwnedBuffers must go through
            normalize() so the borrow is scoped.
        name: Parameter name for error messages

    Returns:
        Read-only MatrixView
    """
    if isinstance(operand, MatrixView):
        return operand.read_only()
    if isinstance(operand, OwnedBuffer):
        raise OwnershipError(
            f"{name}: OwnedBuffer operands must be borrowed through normalize()"
        )
    return MatrixView.borrow(operand, name=name)


@contextmanager
def normalize(
    *operands: Operand,
    names: tuple[str, ...],
) -> Iterator[tuple[MatrixView, ...]]:
    """
    Reduce operands to read-only views for the duration of a call.

    Args:
        *operands: Operands in any supported form
        names: Parameter names for error messages (must match number of operands)

    Yields:
        Tuple of read-only MatrixViews, one per operand

    Raises:
        ValueError: If number of names doesn't match number of operands
        OwnershipError: If an OwnedBuffer is exclusively borrowed
    """
    if len(operands) != len(names):
        raise ValueError(
            f"Number of operands ({len(operands)}) must match number of names ({len(names)})"
        )
    with ExitStack() as stack:
        views = []
        for operand, name in zip(operands, names):
            if isinstance(operand, OwnedBuffer):
                views.append(stack.enter_context(operand.borrow()))
            else:
                views.append(as_view(operand, name))
        yield tuple(views)


@contextmanager
def normalize_mut(operand: Operand, name: str) -> Iterator[MatrixView]:
    """
    Writable view for an in-place operation.

    Args:
        operand: OwnedBuffer (borrowed exclusively), writable MatrixView,
            or writeable float ndarray
        name: Parameter name for error messages

    Yields:
        Read-write MatrixView

    Raises:
        OwnershipError: If the operand cannot be written in place
    """
    if isinstance(operand, OwnedBuffer):
        with operand.borrow_mut() as view:
            yield view
        return
    if isinstance(operand, MatrixView):
        if not operand.data.flags.writeable:
            raise OwnershipError(f"{name}: view is read-only")
        yield operand
        return
    yield MatrixView.borrow(operand, name=name, writable=True)
