"""
Exception hierarchy for pystatlinalg.

All exceptions inherit from PyStatLinalgError to allow catching any
library-specific error. Operation families raise the most specific class
that applies; kernel failures are translated here, never passed through
as raw status codes.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyStatLinalgError(Exception):
    """Base exception for all pystatlinalg errors."""
    pass


class ValidationError(PyStatLinalgError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks, including
    an illegal argument reported back by a kernel (a programming error
    in the caller, not a numerical condition).
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when operand shapes don't conform (inner dimensions of a
    product, row counts of a solve) or when a square operand is required.
    """
    pass


class OwnershipError(PyStatLinalgError):
    """
    Buffer ownership rules were violated.

    Raised when an exclusive (read-write) borrow is requested while other
    borrows of the same buffer are live, when a shared borrow is requested
    during an exclusive one, or when an in-place operation is handed
    memory it may not write to.
    """
    pass


class NumericalError(PyStatLinalgError):
    """
    Numerical computation failed.

    Base class for failures reported by a dense kernel.

    Attributes:
        routine: Name of the kernel routine that reported the failure
        info: Kernel status code (1-based index of the failing component)
    """

    def __init__(
        self,
        message: str,
        *,
        routine: str | None = None,
        info: int | None = None,
    ):
        super().__init__(message)
        self.routine = routine
        self.info = info


class SingularMatrixError(NumericalError):
    """
    Matrix is singular, or the system could not be solved.

    Raised for exactly zero pivots (general and symmetric-indefinite
    solves, inversion) and for least-squares solves that fail to converge.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(m, n))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
        *,
        routine: str | None = None,
        info: int | None = None,
    ):
        super().__init__(message, routine=routine, info=info)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised when a Cholesky factorization or positive-definite solve
    finds a leading minor that is not positive definite. The order of
    that minor is available as ``info``.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None,
        *,
        routine: str | None = None,
        info: int | None = None,
    ):
        super().__init__(message, routine=routine, info=info)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue
