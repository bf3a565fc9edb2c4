"""
CPU kernel backend over SciPy's BLAS and LAPACK wrappers.

This is the only module that talks to the native kernels. It translates
NumPy layouts into what the column-major kernels expect and maps kernel
status codes to exceptions.

Layout translation:
    - A column-major (F-contiguous) operand is passed as-is.
    - A row-major (C-contiguous) operand is passed as its transpose, which
      is an F-contiguous view of the same memory, and the kernel's
      transpose flag (or, for symmetric/triangular operands, its triangle
      flag) compensates. No copy.
    - Anything else is staged into a private column-major copy.

Kernels that overwrite an operand (trmm, trmv and every LAPACK routine
here) only ever see private staging copies, except potrf_in_place which
writes into the caller's exclusively borrowed memory.

Status codes: 0 is success; info < 0 means an illegal argument and is
raised as ValidationError; info > 0 is a numerical failure raised as a
NumericalError subclass carrying the routine name and the 1-based index.
"""

import warnings
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import get_blas_funcs, get_lapack_funcs

from pystatlinalg.core.compute.precision import condition_number, machine_epsilon
from pystatlinalg.core.exceptions import (
    NotPositiveDefiniteError,
    SingularMatrixError,
    ValidationError,
)
from pystatlinalg.core.view import MatrixView


# === Layout helpers ===

def _promote(*arrays: NDArray[Any]) -> tuple[NDArray[Any], ...]:
    """Cast operands to their common element type (no copy when equal)."""
    dtype = np.result_type(*arrays)
    return tuple(arr.astype(dtype, copy=False) for arr in arrays)


def _column_major(arr: NDArray[Any]) -> tuple[NDArray[Any], bool]:
    """
    F-contiguous operand for a kernel, plus whether it is transposed.

    Returns (f, transposed) with f == arr, or f.T == arr when transposed.
    Only strided inputs are copied.
    """
    if arr.flags.f_contiguous:
        return arr, False
    if arr.flags.c_contiguous:
        return arr.T, True
    return np.asfortranarray(arr), False


def _private_column_major(arr: NDArray[Any]) -> tuple[NDArray[Any], bool]:
    """Like _column_major, but the result is always a private writable copy."""
    if arr.flags.f_contiguous:
        return arr.copy(order='F'), False
    if arr.flags.c_contiguous:
        return arr.T.copy(order='F'), True
    return np.asfortranarray(arr), False


def _symmetric_operand(arr: NDArray[Any], lower: bool) -> tuple[NDArray[Any], bool]:
    # The transpose of a symmetric matrix is itself, stored in the other triangle.
    f, transposed = _column_major(arr)
    return f, (not lower) if transposed else lower


def _private_symmetric(arr: NDArray[Any], lower: bool) -> tuple[NDArray[Any], bool]:
    f, transposed = _private_column_major(arr)
    return f, (not lower) if transposed else lower


def _triangular_operand(arr: NDArray[Any], lower: bool) -> tuple[NDArray[Any], bool, bool]:
    """Returns (f, lower, transposed) for a triangular operand."""
    f, transposed = _column_major(arr)
    return f, (not lower) if transposed else lower, transposed


def _contiguous_vector(arr: NDArray[Any]) -> NDArray[Any]:
    return np.ascontiguousarray(arr)


def _stage_rhs(arr: NDArray[Any], rows: int | None = None) -> NDArray[Any]:
    """Private column-major copy of a right-hand side, as a 2D array."""
    rhs = arr.reshape(-1, 1) if arr.ndim == 1 else arr
    if rows is None or rows == rhs.shape[0]:
        return np.array(rhs, order='F', copy=True)
    staged = np.zeros((rows, rhs.shape[1]), dtype=rhs.dtype, order='F')
    staged[:rhs.shape[0]] = rhs
    return staged


def _unstage(x: NDArray[Any], like: NDArray[Any]) -> NDArray[Any]:
    """Shape a solution like the right-hand side it solves for."""
    return x[:, 0] if like.ndim == 1 else x


def _mirror_upper(c: NDArray[Any]) -> NDArray[Any]:
    """Copy the strict upper triangle into the strict lower triangle."""
    lower = np.tril_indices(c.shape[0], -1)
    c[lower] = c.T[lower]
    return c


def _workspace(value: Any) -> int:
    """Workspace size from a LAPACK query, rounded up for float32 results."""
    value = np.real(value)
    if np.asarray(value).dtype == np.float32:
        value = np.nextafter(value, np.inf, dtype=np.float32)
    return max(1, int(value))


def _check_info(routine: str, info: int) -> None:
    if info < 0:
        raise ValidationError(
            f"{routine}: illegal value in argument {-info}"
        )


def _min_eigenvalue(arr: NDArray[Any] | None, lower: bool) -> float | None:
    """Smallest eigenvalue of the designated triangle, for diagnostics."""
    if arr is None:
        return None
    tri = np.tril(arr) if lower else np.triu(arr)
    if not np.all(np.isfinite(tri)):
        return None
    return float(np.linalg.eigvalsh(arr, UPLO='L' if lower else 'U')[0])


def _not_positive_definite(
    routine: str,
    info: int,
    arr: NDArray[Any] | None,
    lower: bool,
) -> NotPositiveDefiniteError:
    return NotPositiveDefiniteError(
        f"a: not positive definite (leading minor of order {info} is not positive)",
        matrix_name='a',
        min_eigenvalue=_min_eigenvalue(arr, lower),
        routine=routine,
        info=info,
    )


class CPUKernelBackend:
    """
    Dense kernels on the CPU via LAPACK/BLAS (through SciPy).

    Stateless; a single instance is shared by every operation.
    """

    @property
    def name(self) -> str:
        return 'cpu_lapack'

    # === Level 1 / 2 ===

    def dot(self, x: MatrixView, y: MatrixView) -> Any:
        """Unconjugated dot product x·y."""
        xv, yv = _promote(x.data, y.data)
        dotu = get_blas_funcs('dotu', dtype=xv.dtype)
        return xv.dtype.type(dotu(_contiguous_vector(xv), _contiguous_vector(yv)))

    def gemv(self, a: MatrixView, x: MatrixView, trans: bool = False) -> NDArray[Any]:
        """a·x, or aᵀ·x when trans."""
        A, X = _promote(a.data, x.data)
        gemv = get_blas_funcs('gemv', dtype=A.dtype)
        fa, transposed = _column_major(A)
        return gemv(1.0, fa, _contiguous_vector(X), trans=int(trans != transposed))

    def symv(self, a: MatrixView, x: MatrixView, lower: bool) -> NDArray[Any]:
        A, X = _promote(a.data, x.data)
        symv = get_blas_funcs('symv', dtype=A.dtype)
        fa, lower = _symmetric_operand(A, lower)
        return symv(1.0, fa, _contiguous_vector(X), lower=int(lower))

    def trmv(
        self,
        a: MatrixView,
        x: MatrixView,
        lower: bool,
        unit_diagonal: bool = False,
        trans: bool = False,
    ) -> NDArray[Any]:
        """tri(a)·x, or tri(a)ᵀ·x when trans. x is copied into the result first."""
        A, X = _promote(a.data, x.data)
        trmv = get_blas_funcs('trmv', dtype=A.dtype)
        ft, lower, transposed = _triangular_operand(A, lower)
        out = np.array(X, copy=True)
        return trmv(
            ft, out,
            lower=int(lower),
            trans=int(trans != transposed),
            diag=int(unit_diagonal),
            overwrite_x=1,
        )

    def syr(self, x: MatrixView) -> NDArray[Any]:
        """Outer product x·xᵀ, exactly symmetric."""
        X = _contiguous_vector(x.data)
        if np.iscomplexobj(X):
            return self.ger(x, x)
        syr = get_blas_funcs('syr', dtype=X.dtype)
        return _mirror_upper(syr(1.0, X, lower=0))

    def ger(self, x: MatrixView, y: MatrixView) -> NDArray[Any]:
        """Outer product x·yᵀ (unconjugated)."""
        X, Y = _promote(x.data, y.data)
        ger = get_blas_funcs('geru' if np.iscomplexobj(X) else 'ger', dtype=X.dtype)
        return ger(1.0, _contiguous_vector(X), _contiguous_vector(Y))

    def rowdot(self, a: MatrixView, b: MatrixView) -> NDArray[Any]:
        """Dot product of each row of a with the same row of b."""
        A, B = _promote(a.data, b.data)
        return np.einsum('ij,ij->i', A, B)

    # === Level 3 ===

    def gemm(self, a: MatrixView, b: MatrixView) -> NDArray[Any]:
        """a·b, returned row-major when both operands are row-major."""
        A, B = _promote(a.data, b.data)
        gemm = get_blas_funcs('gemm', dtype=A.dtype)
        fa, ta = _column_major(A)
        fb, tb = _column_major(B)
        # (a·b)ᵀ = bᵀ·aᵀ comes back column-major; its transpose is row-major a·b.
        ct = gemm(1.0, fb, fa, trans_a=int(not tb), trans_b=int(not ta))
        return ct.T

    def symm(
        self,
        a: MatrixView,
        b: MatrixView,
        lower: bool,
        right: bool = False,
    ) -> NDArray[Any]:
        """sym(a)·b, or b·sym(a) when right."""
        S, B = _promote(a.data, b.data)
        symm = get_blas_funcs('symm', dtype=S.dtype)
        fs, lower = _symmetric_operand(S, lower)
        fb, transposed = _column_major(B)
        if transposed:
            # Work on bᵀ: (sym·b)ᵀ = bᵀ·sym and (b·sym)ᵀ = sym·bᵀ.
            ct = symm(1.0, fs, fb, side=int(not right), lower=int(lower))
            return ct.T
        return symm(1.0, fs, fb, side=int(right), lower=int(lower))

    def trmm(
        self,
        a: MatrixView,
        b: MatrixView,
        lower: bool,
        unit_diagonal: bool = False,
        right: bool = False,
    ) -> NDArray[Any]:
        """tri(a)·b, or b·tri(a) when right. b is copied into the result first."""
        T, B = _promote(a.data, b.data)
        trmm = get_blas_funcs('trmm', dtype=T.dtype)
        ft, lower, transposed = _triangular_operand(T, lower)
        out = np.array(B, order='F', copy=True)
        return trmm(
            1.0, ft, out,
            side=int(right),
            lower=int(lower),
            trans_a=int(transposed),
            diag=int(unit_diagonal),
            overwrite_b=1,
        )

    def syrk(self, a: MatrixView, trans: bool) -> NDArray[Any]:
        """a·aᵀ, or aᵀ·a when trans; exactly symmetric."""
        A = a.data
        syrk = get_blas_funcs('syrk', dtype=A.dtype)
        fa, transposed = _column_major(A)
        c = syrk(1.0, fa, trans=int(trans != transposed), lower=0)
        return _mirror_upper(c)

    # === Solvers ===

    def gesv(self, a: MatrixView, b: MatrixView) -> NDArray[Any]:
        """Solve a·x = b for square a by LU with partial pivoting."""
        A, B = _promote(a.data, b.data)
        gesv = get_lapack_funcs('gesv', dtype=A.dtype)
        staged = np.array(A, order='F', copy=True)
        _, _, x, info = gesv(staged, _stage_rhs(B), overwrite_a=1, overwrite_b=1)
        _check_info('gesv', info)
        if info > 0:
            raise SingularMatrixError(
                f"a: matrix is singular (U[{info},{info}] is exactly zero), "
                f"the system has no unique solution",
                matrix_name='a',
                condition_number=condition_number(A),
                routine='gesv',
                info=info,
            )
        return _unstage(x, B)

    def gelsd(self, a: MatrixView, b: MatrixView) -> NDArray[Any]:
        """Minimum-norm least-squares solution of a·x = b via SVD."""
        A, B = _promote(a.data, b.data)
        m, n = A.shape
        nrhs = 1 if B.ndim == 1 else B.shape[1]
        gelsd, gelsd_lwork = get_lapack_funcs(('gelsd', 'gelsd_lwork'), dtype=A.dtype)
        cond = machine_epsilon(A.dtype)
        staged = np.array(A, order='F', copy=True)
        rhs = _stage_rhs(B, rows=max(m, n))

        if np.iscomplexobj(A):
            work, rwork, iwork, info = gelsd_lwork(m, n, nrhs, cond)
            _check_info('gelsd_lwork', info)
            x, _, rank, info = gelsd(
                staged, rhs, _workspace(work), _workspace(rwork), _workspace(iwork),
                cond, False, False,
            )
        else:
            work, iwork, info = gelsd_lwork(m, n, nrhs, cond)
            _check_info('gelsd_lwork', info)
            x, _, rank, info = gelsd(
                staged, rhs, _workspace(work), _workspace(iwork),
                cond, False, False,
            )
        _check_info('gelsd', info)
        if info > 0:
            raise SingularMatrixError(
                f"a: least-squares solve did not converge "
                f"({info} off-diagonal elements failed to converge to zero)",
                matrix_name='a',
                expected_rank=min(m, n),
                routine='gelsd',
                info=info,
            )
        if rank < min(m, n):
            warnings.warn(
                f"a: least-squares system is rank-deficient "
                f"(rank={rank}, expected={min(m, n)}); returning the minimum-norm solution",
                RuntimeWarning,
                stacklevel=3,
            )
        return _unstage(x[:n], B)

    def sysv(self, a: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]:
        """Solve sym(a)·x = b by symmetric-indefinite (Bunch-Kaufman) factorization."""
        S, B = _promote(a.data, b.data)
        sysv, sysv_lwork = get_lapack_funcs(('sysv', 'sysv_lwork'), dtype=S.dtype)
        staged, lower_f = _private_symmetric(S, lower)
        work, info = sysv_lwork(S.shape[0], lower=int(lower_f))
        _check_info('sysv_lwork', info)
        _, _, x, info = sysv(
            staged, _stage_rhs(B),
            lwork=_workspace(work), lower=int(lower_f),
            overwrite_a=1, overwrite_b=1,
        )
        _check_info('sysv', info)
        if info > 0:
            raise SingularMatrixError(
                f"a: matrix is singular (D[{info},{info}] is exactly zero), "
                f"the system has no unique solution",
                matrix_name='a',
                routine='sysv',
                info=info,
            )
        return _unstage(x, B)

    def posv(self, a: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]:
        """Solve sym(a)·x = b for positive-definite a by Cholesky factorization."""
        S, B = _promote(a.data, b.data)
        posv = get_lapack_funcs('posv', dtype=S.dtype)
        staged, lower_f = _private_symmetric(S, lower)
        _, x, info = posv(staged, _stage_rhs(B), lower=int(lower_f), overwrite_a=1, overwrite_b=1)
        _check_info('posv', info)
        if info > 0:
            raise _not_positive_definite('posv', info, S, lower)
        return _unstage(x, B)

    def potrs(self, c: MatrixView, b: MatrixView, lower: bool) -> NDArray[Any]:
        """Solve a·x = b given the Cholesky factor c of a. c is only read."""
        C, B = _promote(c.data, b.data)
        potrs = get_lapack_funcs('potrs', dtype=C.dtype)
        # Read-only use: the transposed view of c is the transposed factor.
        fc, lower = _symmetric_operand(C, lower)
        x, info = potrs(fc, _stage_rhs(B), lower=int(lower), overwrite_b=1)
        _check_info('potrs', info)
        return _unstage(x, B)

    def inv(self, a: MatrixView) -> NDArray[Any]:
        """Inverse of a by LU factorization."""
        A = a.data
        getrf, getri, getri_lwork = get_lapack_funcs(
            ('getrf', 'getri', 'getri_lwork'), dtype=A.dtype
        )
        # inv(aᵀ) = inv(a)ᵀ, so a row-major a is factored as its transpose.
        staged, transposed = _private_column_major(A)
        routine = 'getrf'
        lu, piv, info = getrf(staged, overwrite_a=1)
        _check_info(routine, info)
        if info == 0:
            routine = 'getri'
            work, info = getri_lwork(A.shape[0])
            _check_info('getri_lwork', info)
            inv, info = getri(lu, piv, lwork=_workspace(work), overwrite_lu=1)
            _check_info('getri', info)
        if info > 0:
            raise SingularMatrixError(
                "a: matrix is not invertible as it has zero determinant",
                matrix_name='a',
                condition_number=condition_number(A),
                routine=routine,
                info=info,
            )
        return inv.T if transposed else inv

    def potrf(self, a: MatrixView, lower: bool) -> NDArray[Any]:
        """Cholesky factor of sym(a); the other triangle of the result is zero."""
        A = a.data
        potrf = get_lapack_funcs('potrf', dtype=A.dtype)
        staged, transposed = _private_column_major(A)
        lower_f = (not lower) if transposed else lower
        c, info = potrf(staged, lower=int(lower_f), clean=1, overwrite_a=1)
        _check_info('potrf', info)
        if info > 0:
            raise _not_positive_definite('potrf', info, A, lower)
        return c.T if transposed else c

    def potrf_in_place(self, a: MatrixView, lower: bool) -> None:
        """
        Cholesky factorization written into a's own memory.

        On failure the contents of a are unspecified and no eigenvalue
        diagnostic is attached.
        """
        arr = a.data
        potrf = get_lapack_funcs('potrf', dtype=arr.dtype)
        target, transposed = _column_major(arr)
        lower_f = (not lower) if transposed else lower
        c, info = potrf(target, lower=int(lower_f), clean=1, overwrite_a=1)
        _check_info('potrf', info)
        if info > 0:
            raise _not_positive_definite('potrf', info, None, lower)
        if not np.shares_memory(c, arr):
            # Strided target: the kernel worked on a staging copy.
            dest = arr.T if transposed else arr
            dest[...] = c
