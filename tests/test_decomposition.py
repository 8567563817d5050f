"""Tests for the tolerance SVD."""

import numpy as np
import pandas as pd
import pytest

from tolerance_svd import (
    AllSingularValuesBelowToleranceError,
    ComplexSingularValueError,
    NegativeSingularValueAboveToleranceError,
    RawDecomposition,
    Tolerance,
    ToleranceSVDError,
    ToleranceSVDResult,
    compute_svd_scipy,
    normalize_signs,
    select_components,
    tolerance_svd,
    truncate_vectors,
)


@pytest.fixture
def real_data():
    """Generate a full rank real matrix."""
    np.random.seed(42)
    return np.random.randn(8, 5)


@pytest.fixture
def rank_deficient_data():
    """Generate a 10 x 6 matrix of rank 3."""
    np.random.seed(42)
    return np.random.randn(10, 3) @ np.random.randn(3, 6)


@pytest.fixture
def labeled_data():
    """Generate a 2 x 3 DataFrame with row and column labels."""
    np.random.seed(7)
    return pd.DataFrame(
        np.random.randn(2, 3), index=["r1", "r2"], columns=["c1", "c2", "c3"]
    )


def stub_primitive(d, u=None, v=None):
    """SVD primitive returning fixed values, whatever the matrix."""
    d = np.asarray(d)
    n = len(d)
    u = np.eye(n) if u is None else u
    v = np.eye(n) if v is None else v

    def _svd(matrix, nu, nv):
        return RawDecomposition(d=d, u=u[:, :nu], v=v[:, :nv])

    return _svd


class TestToleranceBypass:
    """Test that a disabled tolerance returns the SVD unmodified."""

    @pytest.mark.parametrize("tol", [None, np.nan, np.inf, -np.inf, -1.0, -1e-20])
    def test_identity_pass_through(self, real_data, tol):
        """Disabled tolerances give the raw SVD."""
        raw = compute_svd_scipy(real_data, 5, 5)
        result = tolerance_svd(real_data, tol=tol)

        assert np.array_equal(result.d, raw.d)
        assert np.array_equal(result.u, raw.u)
        assert np.array_equal(result.v, raw.v)

    def test_pass_through_keeps_small_values(self, rank_deficient_data):
        """Near zero singular values are not removed."""
        result = tolerance_svd(rank_deficient_data, tol=None)

        assert len(result.d) == 6

    def test_pass_through_has_no_labels(self, labeled_data):
        """Labels are only attached when filtering."""
        result = tolerance_svd(labeled_data, tol=-1)

        assert result.row_labels is None
        assert result.col_labels is None

    def test_disabled_tolerance_instance(self, real_data):
        """A disabled Tolerance instance is accepted."""
        raw = compute_svd_scipy(real_data, 5, 5)
        result = tolerance_svd(real_data, tol=Tolerance.disabled())

        assert np.array_equal(result.v, raw.v)

    def test_pass_through_skips_validity_checks(self):
        """Negative singular values are not checked without tolerance."""
        result = tolerance_svd(np.eye(2), tol=None, svd=stub_primitive([2.0, -1.0]))

        assert np.array_equal(result.d, [2.0, -1.0])


class TestToleranceFiltering:
    """Test the filtering of the singular values."""

    def test_returns_result(self, real_data):
        result = tolerance_svd(real_data)

        assert isinstance(result, ToleranceSVDResult)
        assert result.n_components == 5
        assert result.u.shape == (8, 5)
        assert result.v.shape == (5, 5)

    def test_diagonal_scenario(self):
        """The third, near zero, component is dropped."""
        x = np.diag([1.0, 1.0, 1e-20])
        result = tolerance_svd(x, tol=1e-10)

        assert np.allclose(result.d, [1.0, 1.0])
        assert result.n_components == 2
        assert result.u.shape == (3, 2)
        assert result.v.shape == (3, 2)

    def test_rank_deficient(self, rank_deficient_data):
        """Components beyond the rank are dropped."""
        result = tolerance_svd(rank_deficient_data, tol=1e-10)

        assert result.n_components == 3
        assert result.u.shape == (10, 3)
        assert result.v.shape == (6, 3)

    def test_kept_values_above_tolerance(self, rank_deficient_data):
        tol = 1e-10
        result = tolerance_svd(rank_deficient_data, tol=tol)

        assert np.all(result.d**2 >= tol)

    def test_order_preserved(self, real_data):
        result = tolerance_svd(real_data)

        assert np.all(result.d[:-1] >= result.d[1:])

    def test_default_tolerance_drops_exact_zeros(self):
        """Exact zero singular values are below machine epsilon."""
        x = np.diag([3.0, 2.0, 0.0])
        result = tolerance_svd(x)

        assert np.allclose(result.d, [3.0, 2.0])

    def test_zero_tolerance_keeps_zeros(self):
        """With tol = 0 no squared value is strictly below the tolerance."""
        result = tolerance_svd(np.zeros((2, 2)), tol=0.0)

        assert np.array_equal(result.d, [0.0, 0.0])

    def test_all_below_tolerance(self):
        with pytest.raises(AllSingularValuesBelowToleranceError):
            tolerance_svd(np.full((3, 3), 1e-8), tol=1.0)

    def test_zero_matrix(self):
        with pytest.raises(AllSingularValuesBelowToleranceError, match="below the tolerance"):
            tolerance_svd(np.zeros((4, 3)))

    def test_error_attributes(self):
        with pytest.raises(ToleranceSVDError) as exc_info:
            tolerance_svd(np.zeros((2, 2)), tol=0.5)

        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.tol == 0.5
        assert np.array_equal(exc_info.value.singular_values, [0.0, 0.0])

    def test_invalid_tolerance_type(self, real_data):
        with pytest.raises(TypeError):
            tolerance_svd(real_data, tol="small")


class TestValidityChecks:
    """Test the checks of complex and negative singular values."""

    def test_complex_singular_values(self):
        with pytest.raises(ComplexSingularValueError, match="complex"):
            tolerance_svd(np.eye(2), svd=stub_primitive([2.0 + 1j, 1.0]))

    def test_complex_dtype_with_zero_imaginary_part(self):
        result = tolerance_svd(np.eye(2), svd=stub_primitive(np.array([2.0, 1.0], dtype=complex)))

        assert not np.iscomplexobj(result.d)
        assert np.array_equal(result.d, [2.0, 1.0])

    def test_negative_above_tolerance(self):
        with pytest.raises(NegativeSingularValueAboveToleranceError, match="negative"):
            tolerance_svd(np.eye(2), svd=stub_primitive([2.0, -1.0]))

    def test_negative_below_tolerance_is_dropped(self):
        """Small negative values are noise, removed by the filter."""
        result = tolerance_svd(
            np.eye(3), tol=1e-12, svd=stub_primitive([2.0, 1.0, -1e-10])
        )

        assert np.array_equal(result.d, [2.0, 1.0])


class TestVectorCounts:
    """Test the truncation of u and v to nu and nv columns."""

    def test_nu_smaller_than_survivors(self, real_data):
        """Only the first column of u is kept."""
        raw = compute_svd_scipy(real_data, 1, 5)
        result = tolerance_svd(real_data, nu=1)

        assert result.u.shape == (8, 1)
        assert result.v.shape == (5, 5)
        assert result.n_components == 5
        assert np.allclose(np.abs(result.u[:, 0]), np.abs(raw.u[:, 0]))

    def test_positional_truncation(self):
        """Below the survivor count, columns are taken by position."""
        result = tolerance_svd(
            np.eye(3), nu=1, nv=3, tol=1e-10, svd=stub_primitive([3.0, 2.0, 1e-20])
        )

        assert np.array_equal(result.d, [3.0, 2.0])
        assert np.array_equal(result.u, np.eye(3)[:, :1])
        assert np.array_equal(result.v, np.eye(3)[:, :2])

    def test_nv_smaller_than_survivors(self, real_data):
        result = tolerance_svd(real_data, nv=2)

        assert result.u.shape == (8, 5)
        assert result.v.shape == (5, 2)

    def test_nu_zero(self, real_data):
        result = tolerance_svd(real_data, nu=0)

        assert result.u.shape == (8, 0)
        assert result.v.shape == (5, 5)

    def test_nu_above_min_dimension(self, rank_deficient_data):
        """Extra left vectors do not survive the filter."""
        result = tolerance_svd(rank_deficient_data, nu=10, tol=1e-10)

        assert result.u.shape == (10, 3)

    @pytest.mark.parametrize("nu,nv", [(1, 1), (2, 4), (5, 3), (3, 5)])
    def test_width_bounds(self, real_data, nu, nv):
        result = tolerance_svd(real_data, nu=nu, nv=nv)

        assert result.u.shape[1] <= nu
        assert result.v.shape[1] <= nv
        assert result.u.shape[1] <= result.n_components
        assert result.v.shape[1] <= result.n_components

    def test_invalid_nu(self, real_data):
        """Errors of the SVD primitive propagate."""
        with pytest.raises(ValueError, match="nu must be between"):
            tolerance_svd(real_data, nu=9)


class TestLabels:
    """Test the propagation of row and column labels."""

    def test_labels(self, labeled_data):
        result = tolerance_svd(labeled_data)

        assert list(result.row_labels) == ["r1", "r2"]
        assert list(result.col_labels) == ["c1", "c2", "c3"]

    def test_frames(self, labeled_data):
        result = tolerance_svd(labeled_data)

        assert list(result.u_frame().index) == ["r1", "r2"]
        assert list(result.v_frame().index) == ["c1", "c2", "c3"]
        assert result.v_frame().shape == (3, 2)

    def test_labels_with_positional_truncation(self, labeled_data):
        result = tolerance_svd(labeled_data, nu=1, nv=1)

        assert list(result.u_frame().index) == ["r1", "r2"]
        assert list(result.v_frame().index) == ["c1", "c2", "c3"]

    def test_array_has_no_labels(self, real_data):
        result = tolerance_svd(real_data)

        assert result.row_labels is None
        assert result.col_labels is None
        assert list(result.u_frame().index) == list(range(8))


class TestSignNormalization:
    """Test the sign convention of the singular vectors."""

    def test_column_sums_non_negative(self, real_data):
        result = tolerance_svd(real_data)

        assert np.all(result.v.sum(axis=0) >= 0)

    def test_reconstruction_full_rank(self, real_data):
        result = tolerance_svd(real_data)

        assert np.allclose(result.reconstruct(), real_data, atol=1e-10)

    def test_reconstruction_rank_deficient(self, rank_deficient_data):
        result = tolerance_svd(rank_deficient_data, tol=1e-10)

        assert np.allclose(result.reconstruct(), rank_deficient_data, atol=1e-8)

    def test_singular_vectors_consistent(self, real_data):
        """x v = u diag(d) holds after flipping."""
        result = tolerance_svd(real_data)

        assert np.allclose(real_data @ result.v, result.u * result.d, atol=1e-10)

    def test_sign_independent_of_solver(self, real_data):
        """Flipping the solver's signs gives the same result."""

        def flipped_svd(matrix, nu, nv):
            raw = compute_svd_scipy(matrix, nu, nv)
            return RawDecomposition(d=raw.d, u=-raw.u, v=-raw.v)

        result = tolerance_svd(real_data)
        result_flipped = tolerance_svd(real_data, svd=flipped_svd)

        assert np.allclose(result.u, result_flipped.u)
        assert np.allclose(result.v, result_flipped.v)


class TestSteps:
    """Test the individual steps of the filter."""

    def test_select_components(self):
        keep = select_components(np.array([3.0, 2.0, 1e-9]), tol=1e-12)

        assert np.array_equal(keep, [0, 1])

    def test_select_components_boundary(self):
        """A squared value equal to the tolerance is kept."""
        keep = select_components(np.array([2.0, 0.5]), tol=0.25)

        assert np.array_equal(keep, [0, 1])

    def test_select_components_empty(self):
        with pytest.raises(AllSingularValuesBelowToleranceError):
            select_components(np.array([1e-3, 1e-4]), tol=1.0)

    def test_truncate_vectors_selects_survivors(self):
        vectors = np.arange(12.0).reshape(3, 4)
        keep = np.array([0, 1])

        assert np.array_equal(truncate_vectors(vectors, keep, 4), vectors[:, :2])
        assert np.array_equal(truncate_vectors(vectors, keep, 2), vectors[:, :2])

    def test_truncate_vectors_positional(self):
        vectors = np.arange(12.0).reshape(3, 4)
        keep = np.array([0, 1, 2])

        assert np.array_equal(truncate_vectors(vectors, keep, 1), vectors[:, :1])

    def test_normalize_signs(self):
        u = np.array([[1.0, 2.0], [3.0, 4.0]])
        v = np.array([[-1.0, 1.0], [-2.0, 1.0]])

        u_new, v_new = normalize_signs(u, v)

        assert np.array_equal(u_new, [[-1.0, 2.0], [-3.0, 4.0]])
        assert np.array_equal(v_new, [[1.0, 1.0], [2.0, 1.0]])

    def test_normalize_signs_zero_sum_not_flipped(self):
        u = np.array([[1.0], [2.0]])
        v = np.array([[1.0], [-1.0]])

        u_new, v_new = normalize_signs(u, v)

        assert np.array_equal(u_new, u)
        assert np.array_equal(v_new, v)

    def test_normalize_signs_does_not_modify_inputs(self):
        u = np.array([[1.0], [2.0]])
        v = np.array([[-1.0], [-1.0]])

        normalize_signs(u, v)

        assert np.array_equal(v, [[-1.0], [-1.0]])

    def test_normalize_signs_unpaired_columns(self):
        """Columns of u beyond the width of v keep their sign."""
        u = np.ones((2, 3))
        v = np.array([[-1.0], [-1.0]])

        u_new, v_new = normalize_signs(u, v)

        assert np.array_equal(u_new[:, 0], [-1.0, -1.0])
        assert np.array_equal(u_new[:, 1:], np.ones((2, 2)))
        assert np.array_equal(v_new, [[1.0], [1.0]])

    def test_normalize_signs_empty_v(self):
        u = -np.ones((2, 2))

        u_new, v_new = normalize_signs(u, np.zeros((3, 0)))

        assert np.array_equal(u_new, u)
        assert v_new.shape == (3, 0)
