"""
Tests for the multiply family.

Validates:
    - mtimes dispatch by rank (matrix/vector combinations)
    - Layout independence: row-major, column-major, transposed and strided
      operands all give the same answer
    - Symmetric and triangular products read only the declared triangle
    - Operands are never modified
"""

import numpy as np
import pytest

from pystatlinalg.core.buffer import OwnedBuffer
from pystatlinalg.core.compute.tolerances import CPU_FP64, select_tolerance
from pystatlinalg.core.exceptions import DimensionError, ValidationError
from pystatlinalg.core.view import MatrixView
from pystatlinalg.linalg import (
    eye,
    mtimes,
    mtimes_symmetric,
    mtimes_symmetric_right,
    mtimes_triangular,
    mtimes_triangular_right,
)


A35 = np.array([
    [-5.0, 1.0, 7.0, 7.0, -4.0],
    [-1.0, -5.0, 6.0, 3.0, -3.0],
    [-5.0, -2.0, -3.0, 6.0, 0.0],
])
B54 = np.array([
    [-5.0, -3.0, 3.0, 1.0],
    [4.0, 3.0, 6.0, 4.0],
    [-4.0, -2.0, -2.0, 2.0],
    [-1.0, 9.0, 4.0, 8.0],
    [9.0, 8.0, 3.0, -2.0],
])
C34 = np.array([
    [-42.0, 35.0, -7.0, 77.0],
    [-69.0, -21.0, -42.0, 21.0],
    [23.0, 69.0, 3.0, 29.0],
])


def _layouts(arr):
    """The same matrix in every memory layout the adapter distinguishes."""
    big = np.zeros((arr.shape[0] * 2, arr.shape[1] * 2))
    big[::2, ::2] = arr
    tall = np.zeros((arr.shape[1] * 2, arr.shape[0]))
    tall[::2] = arr.T
    return {
        'row_major': np.ascontiguousarray(arr),
        'column_major': np.asfortranarray(arr),
        'strided': big[::2, ::2],
        'transposed': tall[::2].T,
    }


# ═══════════════════════════════════════════════════════════════════════
# eye
# ═══════════════════════════════════════════════════════════════════════


class TestEye:

    def test_square(self):
        np.testing.assert_array_equal(eye(3), np.eye(3))

    def test_rectangular(self):
        np.testing.assert_array_equal(eye(2, 3), np.eye(2, 3))

    def test_dtype(self):
        assert eye(2, dtype=np.float32).dtype == np.float32

    def test_non_positive(self):
        with pytest.raises(DimensionError):
            eye(0)

    def test_unsupported_dtype(self):
        with pytest.raises(ValidationError):
            eye(2, dtype=np.int64)


# ═══════════════════════════════════════════════════════════════════════
# mtimes
# ═══════════════════════════════════════════════════════════════════════


class TestMtimes:

    def test_matrix_matrix(self):
        np.testing.assert_array_equal(mtimes(A35, B54), C34)

    @pytest.mark.parametrize("layout_a", ['row_major', 'column_major', 'strided', 'transposed'])
    @pytest.mark.parametrize("layout_b", ['row_major', 'column_major', 'strided', 'transposed'])
    def test_layout_independent(self, layout_a, layout_b):
        a = _layouts(A35)[layout_a]
        b = _layouts(B54)[layout_b]
        np.testing.assert_array_equal(mtimes(a, b), C34)

    def test_matrix_vector(self, X):
        y = np.array([2.0, 3.0, 4.0, 5.0])
        result = mtimes(X, y)
        assert result.shape == (3,)
        np.testing.assert_array_equal(result, [14.0, 64.0, 15.0])

    def test_matrix_vector_transposed_matrix(self, X):
        y = np.array([2.0, 3.0, 4.0, 5.0])
        np.testing.assert_array_equal(mtimes(np.asfortranarray(X), y), [14.0, 64.0, 15.0])

    def test_vector_matrix(self, X):
        x = np.array([1.0, 2.0, 4.0])
        np.testing.assert_array_equal(mtimes(x, X), x @ X)

    def test_vector_matrix_strided_vector(self, X):
        x = np.array([1.0, 0.0, 2.0, 0.0, 4.0, 0.0])[::2]
        np.testing.assert_array_equal(mtimes(x, X), x @ X)

    def test_vector_vector(self):
        x = np.array([-5.0, 1.0, 7.0, 7.0, -4.0])
        y = np.array([4.0, -4.0, -2.0, 10.0, 4.0])
        result = mtimes(x, y)
        assert np.ndim(result) == 0
        assert result == 16.0

    def test_identity(self, rng):
        a = rng.standard_normal((4, 3))
        np.testing.assert_array_equal(mtimes(eye(4), a), a)
        np.testing.assert_array_equal(mtimes(a, eye(3)), a)

    def test_complex(self, rng):
        a = rng.standard_normal((3, 4)) + 1j * rng.standard_normal((3, 4))
        b = rng.standard_normal((4, 2)) + 1j * rng.standard_normal((4, 2))
        np.testing.assert_allclose(mtimes(a, b), a @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_complex_vector_dot_is_unconjugated(self):
        x = np.array([1j, 2.0])
        y = np.array([1j, 1.0])
        assert mtimes(x, y) == pytest.approx(1.0)

    def test_mixed_real_complex(self):
        a = np.eye(2)
        b = np.array([[1j, 0], [0, 2j]])
        np.testing.assert_array_equal(mtimes(a, b), b)

    def test_float32(self, rng):
        a = rng.standard_normal((3, 4)).astype(np.float32)
        b = rng.standard_normal((4, 5)).astype(np.float32)
        result = mtimes(a, b)
        assert result.dtype == np.float32
        tol = select_tolerance(result.dtype)
        np.testing.assert_allclose(result, a @ b, rtol=tol.rtol, atol=tol.atol)

    def test_owned_buffer_operand(self):
        buf = OwnedBuffer.from_array(A35)
        np.testing.assert_array_equal(mtimes(buf, B54), C34)
        assert buf.active_borrows == 0

    def test_inputs_untouched(self):
        a, b = A35.copy(), B54.copy()
        mtimes(a, b)
        np.testing.assert_array_equal(a, A35)
        np.testing.assert_array_equal(b, B54)

    def test_result_is_fresh(self):
        result = mtimes(A35, B54)
        assert not np.shares_memory(result, A35)
        assert not np.shares_memory(result, B54)

    def test_inner_dimension_mismatch(self):
        with pytest.raises(DimensionError, match="inner dimensions"):
            mtimes(A35, A35)

    def test_vector_length_mismatch(self):
        with pytest.raises(DimensionError):
            mtimes(np.ones(3), np.ones(4))


# ═══════════════════════════════════════════════════════════════════════
# Symmetric products
# ═══════════════════════════════════════════════════════════════════════


class TestMtimesSymmetric:

    S = np.array([
        [3.0, 5.0, 2.0],
        [5.0, 2.0, 3.0],
        [2.0, 3.0, 1.0],
    ])

    def test_upper_only(self, rng):
        b = rng.standard_normal((3, 4))
        upper = np.triu(self.S) + np.tril(np.full((3, 3), np.nan), -1)
        result = mtimes_symmetric(upper, b)
        np.testing.assert_allclose(result, self.S @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_lower_only(self, rng):
        b = rng.standard_normal((3, 2))
        lower = np.tril(self.S) + np.triu(np.full((3, 3), np.nan), 1)
        result = mtimes_symmetric(lower, b, triangle='lower')
        np.testing.assert_allclose(result, self.S @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    @pytest.mark.parametrize("layout", ['row_major', 'column_major', 'strided', 'transposed'])
    def test_layouts(self, layout, rng):
        b = rng.standard_normal((3, 4))
        upper = np.triu(self.S)
        result = mtimes_symmetric(_layouts(upper)[layout], _layouts(b)[layout])
        np.testing.assert_allclose(result, self.S @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_vector(self):
        x = np.array([2.0, 3.0, 4.0])
        np.testing.assert_array_equal(mtimes_symmetric(np.triu(self.S), x), [29.0, 28.0, 17.0])

    def test_view_triangle_tag(self, rng):
        b = rng.standard_normal((3, 2))
        view = MatrixView.borrow(np.tril(self.S), triangle='lower')
        result = mtimes_symmetric(view, b)
        np.testing.assert_allclose(result, self.S @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_conflicting_triangle(self):
        view = MatrixView.borrow(self.S, triangle='lower')
        with pytest.raises(ValidationError, match="contradicts"):
            mtimes_symmetric(view, np.ones(3), triangle='upper')

    def test_complex_rejected(self):
        with pytest.raises(ValidationError, match="complex"):
            mtimes_symmetric(self.S.astype(complex), np.ones(3))

    def test_non_square(self):
        with pytest.raises(DimensionError, match="square"):
            mtimes_symmetric(np.ones((2, 3)), np.ones(3))


class TestMtimesSymmetricRight:

    S = TestMtimesSymmetric.S

    def test_vector(self):
        x = np.array([2.0, 3.0, 4.0])
        np.testing.assert_array_equal(mtimes_symmetric_right(x, self.S), [29.0, 28.0, 17.0])

    def test_matrix(self, rng):
        a = rng.standard_normal((4, 3))
        result = mtimes_symmetric_right(a, np.triu(self.S))
        np.testing.assert_allclose(result, a @ self.S, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_matrix_column_major_lower(self, rng):
        a = np.asfortranarray(rng.standard_normal((2, 3)))
        result = mtimes_symmetric_right(a, np.tril(self.S), triangle='lower')
        np.testing.assert_allclose(result, a @ self.S, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)


# ═══════════════════════════════════════════════════════════════════════
# Triangular products
# ═══════════════════════════════════════════════════════════════════════


class TestMtimesTriangular:

    T = np.array([
        [2.0, 1.0, -1.0],
        [0.0, 3.0, 4.0],
        [0.0, 0.0, 5.0],
    ])

    def test_upper(self, rng):
        b = rng.standard_normal((3, 4))
        garbage = self.T + np.tril(np.full((3, 3), 7.0), -1)
        result = mtimes_triangular(garbage, b)
        np.testing.assert_allclose(result, self.T @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_lower(self, rng):
        L = self.T.T
        b = rng.standard_normal((3, 2))
        garbage = L + np.triu(np.full((3, 3), -9.0), 1)
        result = mtimes_triangular(garbage, b, triangle='lower')
        np.testing.assert_allclose(result, L @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    @pytest.mark.parametrize("layout", ['row_major', 'column_major', 'strided', 'transposed'])
    def test_layouts(self, layout, rng):
        b = rng.standard_normal((3, 2))
        result = mtimes_triangular(_layouts(self.T)[layout], _layouts(b)[layout])
        np.testing.assert_allclose(result, self.T @ b, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_unit_diagonal(self):
        b = np.eye(3)
        unit = np.triu(self.T, 1) + np.eye(3)
        result = mtimes_triangular(self.T, b, unit_diagonal=True)
        np.testing.assert_array_equal(result, unit)

    def test_vector(self):
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(mtimes_triangular(self.T, x), self.T @ x)

    def test_vector_row_major_lower(self):
        x = np.array([1.0, 2.0, 3.0])
        L = np.ascontiguousarray(self.T.T)
        np.testing.assert_array_equal(mtimes_triangular(L, x, triangle='lower'), L @ x)

    def test_b_untouched(self, rng):
        b = rng.standard_normal((3, 3))
        original = b.copy()
        mtimes_triangular(self.T, b)
        np.testing.assert_array_equal(b, original)


class TestMtimesTriangularRight:

    T = TestMtimesTriangular.T

    def test_matrix(self, rng):
        a = rng.standard_normal((4, 3))
        result = mtimes_triangular_right(a, self.T)
        np.testing.assert_allclose(result, a @ self.T, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_matrix_lower_view_tag(self, rng):
        a = rng.standard_normal((2, 3))
        view = MatrixView.borrow(self.T.T, triangle='lower')
        result = mtimes_triangular_right(a, view)
        np.testing.assert_allclose(result, a @ self.T.T, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_vector(self):
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(mtimes_triangular_right(x, self.T), x @ self.T)

    def test_a_untouched(self, rng):
        a = rng.standard_normal((2, 3))
        original = a.copy()
        mtimes_triangular_right(a, self.T)
        np.testing.assert_array_equal(a, original)
