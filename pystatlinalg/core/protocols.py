"""
Core protocols for pystatlinalg.

These define structural interfaces that kernel backends must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so a
backend only has to provide the methods, not inherit from anything.

Design Principles:
    - Minimal contracts: one method per dense kernel primitive
    - Views in, freshly allocated arrays out
    - Backends are stateless and safe to share across threads
"""

from typing import Any, Protocol, runtime_checkable

from numpy.typing import NDArray

from pystatlinalg.core.view import MatrixView


@runtime_checkable
class KernelBackend(Protocol):
    """
    Protocol for dense kernel backends.

    Each primitive takes canonical MatrixViews, performs any layout
    translation or staging the kernel needs, and returns a freshly
    allocated result the caller owns. Kernel status codes never escape:
    failures are raised as NumericalError subclasses, illegal arguments
    as ValidationError.

    Symmetric and triangular primitives take ``lower`` and read only that
    triangle of their structured operand.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{library}'
        Examples: 'cpu_lapack'
        """
        ...

    # === Level 1 / 2 ===

    def dot(self, x: MatrixView, y: MatrixView) -> Any: ...

    def gemv(self, a: MatrixView, x: MatrixView, trans: bool = False) -> NDArray[Any]: ...

    def symv(self, a: MatrixView, x: MatrixView, lower: bool) -> NDArray[Any]: ...

    def trmv(
        self, a: MatrixView, x: MatrixView, lower: bool,
        unit_diagonal: bool = False, trans: bool = False,
    ) -> NDArray[Any]: ...

    def syr(self, x: MatrixView) -> NDArray[Any]: ...

    def ger(self, x: MatrixView, y: MatrixView) -> NDArray[Any]: ...

    def rowdot(self, a: MatrixView, b: MatrixView) -> NDArray[Any]: ...

    # === Level 3 ===

    def gemm(self, a: MatrixView, b: MatrixView) -> NDArray[Any]: ...

    def symm(self, a: MatrixView, b: MatrixView, lower: bool, right: bool = False) -> NDArray[Any]: ...

    def trmm(
        self, a: MatrixView, b: MatrixView, lower: bool,
        unit_diagonal: bool = False, right: bool = False,
    ) -> NDArray[Any]: ...

    def syrk(self, a: MatrixView, trans: bool) -> NDArray[Any]: ...

    # === Solvers / factorizations ===

    def gesv(self, a: MatrixView, b: MatrixView) -> NDArray[Any]: ...

    def gelsd(self, a: MatrixView, b: MatrixView) -> NDArray[Any]: ...

    def sysv(self, a: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]: ...

    def posv(self, a: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]: ...

    def potrs(self, c: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]: ...

    def inv(self, a: MatrixView) -> NDArray[Any]: ...

    def potrf(self, a: MatrixView, lower: bool) -> NDArray[Any]: ...

    def potrf_in_place(self, a: MatrixView, lower: bool) -> None: ...
