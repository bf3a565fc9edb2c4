"""
Tests for the derived-product family.

Validates:
    - crossprod / tcrossprod for matrices and vectors, with and without b
    - Self cross products are exactly symmetric
    - quadratic_form and quadratic_form_symmetric, including transposed b
    - rows_dot_product
"""

import numpy as np
import pytest

from pystatlinalg.core.compute.tolerances import CPU_FP64
from pystatlinalg.core.exceptions import DimensionError, ValidationError
from pystatlinalg.core.view import MatrixView
from pystatlinalg.linalg import (
    crossprod,
    mtimes,
    mtimes_symmetric,
    quadratic_form,
    quadratic_form_symmetric,
    rows_dot_product,
    tcrossprod,
)
from pystatlinalg.linalg.backends import get_backend


# ═══════════════════════════════════════════════════════════════════════
# crossprod
# ═══════════════════════════════════════════════════════════════════════


class TestCrossprod:

    def test_self(self, X):
        expected = np.array([
            [13.0, 11.0, 0.0, -29.0],
            [11.0, 33.0, 18.0, 7.0],
            [0.0, 18.0, 14.0, 25.0],
            [-29.0, 7.0, 25.0, 110.0],
        ])
        np.testing.assert_array_equal(crossprod(X), expected)

    def test_self_column_major(self, X):
        np.testing.assert_array_equal(crossprod(np.asfortranarray(X)), X.T @ X)

    def test_self_exactly_symmetric(self, rng):
        a = rng.standard_normal((50, 6))
        result = crossprod(a)
        np.testing.assert_array_equal(result, result.T)
        np.testing.assert_allclose(result, a.T @ a, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_with_b(self, X):
        Y = np.array([[1.0, 8.0], [7.0, -3.0], [-5.0, 2.0]])
        expected = np.array([
            [-11.0, 30.0],
            [9.0, 38.0],
            [18.0, 9.0],
            [62.0, -52.0],
        ])
        np.testing.assert_array_equal(crossprod(X, Y), expected)

    def test_vector_self(self):
        x = np.array([3.0, 5.0, 2.0, -3.0])
        result = crossprod(x)
        assert result.shape == (4, 4)
        np.testing.assert_array_equal(result, np.outer(x, x))
        np.testing.assert_array_equal(result[0], [9.0, 15.0, 6.0, -9.0])

    def test_vector_pair(self):
        x = np.array([3.0, 5.0, 2.0, -3.0])
        y = np.array([-2.0, 2.0, 3.0])
        expected = np.array([
            [-6.0, 6.0, 9.0],
            [-10.0, 10.0, 15.0],
            [-4.0, 4.0, 6.0],
            [6.0, -6.0, -9.0],
        ])
        np.testing.assert_array_equal(crossprod(x, y), expected)

    def test_complex_vector_outer_is_unconjugated(self):
        x = np.array([1j, 1.0])
        np.testing.assert_array_equal(crossprod(x), np.outer(x, x))

    def test_row_mismatch(self, X):
        with pytest.raises(DimensionError, match="Inconsistent lengths"):
            crossprod(X, np.ones((2, 2)))

    def test_vector_matrix_mix(self, X):
        with pytest.raises(DimensionError, match="both be vectors"):
            crossprod(np.ones(3), X)


# ═══════════════════════════════════════════════════════════════════════
# tcrossprod
# ═══════════════════════════════════════════════════════════════════════


class TestTcrossprod:

    def test_self(self, X):
        expected = np.array([
            [47.0, -20.0, 9.0],
            [-20.0, 117.0, 17.0],
            [9.0, 17.0, 6.0],
        ])
        np.testing.assert_array_equal(tcrossprod(X), expected)

    def test_self_transposed_view(self, X):
        np.testing.assert_array_equal(tcrossprod(np.asfortranarray(X)), X @ X.T)

    def test_with_b(self, X):
        Y = np.array([[-3.0, -5.0, 10.0, -3.0], [4.0, 7.0, 6.0, 9.0]])
        expected = np.array([[-5.0, 32.0], [-4.0, 114.0], [-3.0, 29.0]])
        np.testing.assert_array_equal(tcrossprod(X, Y), expected)

    def test_vector_self(self):
        assert tcrossprod(np.array([3.0, 5.0, 2.0, -3.0])) == 47.0

    def test_vector_pair(self):
        x = np.array([3.0, 5.0, 2.0, -3.0])
        y = np.array([-2.0, 2.0, 3.0, 10.0])
        assert tcrossprod(x, y) == -20.0

    def test_exactly_symmetric(self, rng):
        a = rng.standard_normal((5, 40))
        result = tcrossprod(a)
        np.testing.assert_array_equal(result, result.T)

    def test_column_mismatch(self, X):
        with pytest.raises(DimensionError):
            tcrossprod(X, np.ones((2, 3)))

    def test_vector_length_mismatch(self):
        with pytest.raises(DimensionError, match="same shape"):
            tcrossprod(np.ones(3), np.ones(4))


# ═══════════════════════════════════════════════════════════════════════
# Quadratic forms
# ═══════════════════════════════════════════════════════════════════════


A_QF = np.array([
    [1.0, 2.0, 3.0],
    [10.0, 9.0, 8.0],
    [5.0, 6.0, 7.0],
])
W_QF = np.array([
    [1.0, 2.0],
    [2.0, 6.0],
    [4.0, 1.0],
])


class TestQuadraticForm:

    def test_vector(self):
        assert quadratic_form(A_QF, np.array([1.0, 2.0, 4.0])) == 317.0

    def test_matrix(self):
        expected = np.array([[317.0, 393.0], [439.0, 579.0]])
        np.testing.assert_array_equal(quadratic_form(A_QF, W_QF), expected)

    def test_matrix_transposed_view(self):
        w_t = np.ascontiguousarray(W_QF.T)
        expected = np.array([[317.0, 393.0], [439.0, 579.0]])
        np.testing.assert_array_equal(quadratic_form(A_QF, w_t.T), expected)

    def test_complex(self, rng):
        a = rng.standard_normal((3, 3)) + 1j * rng.standard_normal((3, 3))
        b = rng.standard_normal(3) + 1j * rng.standard_normal(3)
        assert quadratic_form(a, b) == pytest.approx(b @ a @ b)

    def test_non_square(self):
        with pytest.raises(DimensionError, match="square"):
            quadratic_form(np.ones((2, 3)), np.ones(3))

    def test_mismatch(self):
        with pytest.raises(DimensionError):
            quadratic_form(A_QF, np.ones(2))


class TestQuadraticFormSymmetric:

    W = np.array([0.25, 0.3, 0.45])

    def test_vector_upper(self, sigma):
        result = quadratic_form_symmetric(sigma, self.W)
        full = np.triu(sigma) + np.triu(sigma, 1).T
        assert result == pytest.approx(0.01579, abs=1e-5)
        assert result == pytest.approx(self.W @ full @ self.W, rel=CPU_FP64.rtol)

    def test_matrix_lower(self, sigma):
        lower = np.ascontiguousarray(sigma.T)
        w = np.array([[0.25, 0.3], [0.30, 0.4], [0.45, 0.3]])
        result = quadratic_form_symmetric(lower, w, triangle='lower')
        expected = np.array([[0.01579, 0.01392], [0.01392, 0.01278]])
        np.testing.assert_allclose(result, expected, atol=1e-5)

    def test_ignores_other_triangle(self, sigma):
        poisoned = sigma + np.tril(np.full((3, 3), np.nan), -1)
        assert np.isfinite(quadratic_form_symmetric(poisoned, self.W))

    def test_transposed_b_matches_contiguous_b(self):
        S = np.array([[4.0, 1.0, 2.0], [1.0, 3.0, 0.0], [2.0, 0.0, 5.0]])
        b = np.array([[1.0, 2.0], [-1.0, 3.0], [2.0, 0.0]])
        b_transposed = np.ascontiguousarray(b.T).T
        assert b_transposed.strides[1] != b_transposed.itemsize
        direct = quadratic_form_symmetric(S, b)
        via_right = quadratic_form_symmetric(S, b_transposed)
        np.testing.assert_array_equal(direct, via_right)
        np.testing.assert_array_equal(direct, b.T @ S @ b)

    @pytest.mark.parametrize("triangle", ['upper', 'lower'])
    def test_transposed_b_bit_identical_to_two_products(self, rng, triangle):
        s = rng.standard_normal((5, 5))
        s = s + s.T
        b_transposed = rng.standard_normal((7, 5)).T
        assert b_transposed.strides[1] != b_transposed.itemsize
        result = quadratic_form_symmetric(s, b_transposed, triangle=triangle)
        two_products = mtimes(
            b_transposed.T, mtimes_symmetric(s, b_transposed, triangle=triangle)
        )
        np.testing.assert_array_equal(result, two_products)

    def test_transposed_b_reaches_kernel_without_copy(self, rng, monkeypatch):
        s = rng.standard_normal((4, 4))
        s = s + s.T
        b_transposed = rng.standard_normal((3, 4)).T
        backend = get_backend()
        seen = []
        symm = backend.symm

        def recording_symm(a, b, lower, right=False):
            seen.append(b.data)
            return symm(a, b, lower, right=right)

        monkeypatch.setattr(backend, 'symm', recording_symm)
        quadratic_form_symmetric(s, b_transposed)
        assert len(seen) == 1
        assert np.shares_memory(seen[0], b_transposed)

    def test_declared_triangle_on_view(self, sigma):
        view = MatrixView.borrow(sigma.T, triangle='lower')
        assert quadratic_form_symmetric(view, self.W) == pytest.approx(
            quadratic_form_symmetric(sigma, self.W), rel=CPU_FP64.rtol
        )

    def test_complex_rejected(self, sigma):
        with pytest.raises(ValidationError):
            quadratic_form_symmetric(sigma, self.W.astype(complex))


# ═══════════════════════════════════════════════════════════════════════
# rows_dot_product
# ═══════════════════════════════════════════════════════════════════════


class TestRowsDotProduct:

    def test_basic(self):
        a = np.array([[-5.0, 1.0], [0.0, 7.0], [7.0, -4.0]])
        b = np.array([[4.0, -4.0], [-2.0, 10.0], [4.0, 1.0]])
        np.testing.assert_array_equal(rows_dot_product(a, b), [-24.0, 70.0, 24.0])

    def test_column_major(self, rng):
        a = np.asfortranarray(rng.standard_normal((5, 3)))
        b = rng.standard_normal((5, 3))
        np.testing.assert_allclose(
            rows_dot_product(a, b), np.sum(a * b, axis=1),
            rtol=CPU_FP64.rtol, atol=CPU_FP64.atol,
        )

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError, match="same shape"):
            rows_dot_product(np.ones((2, 3)), np.ones((3, 2)))

    def test_vectors_rejected(self):
        with pytest.raises(DimensionError):
            rows_dot_product(np.ones(3), np.ones(3))
