"""SVD with truncation of the components likely caused by floating point
imprecision.

Any component whose squared singular value is below the tolerance is
removed from ``d``, ``u`` and ``v``. The kept singular vectors are labeled
with the row and column labels of the input and their signs are fixed so
that every column of ``v`` sums to a non-negative value.
"""

import logging
from numbers import Real
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd

from .errors import (
    AllSingularValuesBelowToleranceError,
    ComplexSingularValueError,
    NegativeSingularValueAboveToleranceError,
)
from .primitives import SVDMethod, SVDPrimitive, get_svd_primitive
from .results import RawDecomposition, ToleranceSVDResult
from .tolerance import MACHINE_EPSILON, Tolerance

_logger = logging.getLogger(__name__)


def _as_matrix(
    x: Union[np.ndarray, pd.DataFrame],
) -> Tuple[np.ndarray, Optional[pd.Index], Optional[pd.Index]]:
    # returns the matrix as an array, and the row / column labels
    # (None for anything that is not a DataFrame)
    if isinstance(x, pd.DataFrame):
        return x.to_numpy(), x.index, x.columns
    return np.asarray(x), None, None


def check_singular_values(d: np.ndarray, tol: float) -> np.ndarray:
    """Check that the singular values are real, and that none of them is
    negative with a square above the tolerance.

    Negative values whose square is below the tolerance are allowed: they
    are noise and get removed by :func:`select_components`.

    Parameters
    ----------
    d : np.ndarray
        Singular values.
    tol : float
        Active tolerance.

    Returns
    -------
    np.ndarray
        The singular values, as a real array.

    Raises
    ------
    ComplexSingularValueError
        If a singular value has a nonzero imaginary part.
    NegativeSingularValueAboveToleranceError
        If a singular value is negative and its square exceeds tol.
    """
    d = np.asarray(d)
    if np.iscomplexobj(d):
        if np.any(d.imag != 0):
            raise ComplexSingularValueError(
                "Singular values are complex.", singular_values=d, tol=tol
            )
        d = d.real
    if np.any((d**2 > tol) & (np.sign(d) == -1)):
        raise NegativeSingularValueAboveToleranceError(
            f"Singular values are negative with a magnitude above the tolerance ({tol}).",
            singular_values=d,
            tol=tol,
        )
    return d


def select_components(d: np.ndarray, tol: float) -> np.ndarray:
    """Indices of the singular values to keep, i.e. those for which
    ``d**2 < tol`` does not hold.

    Raises
    ------
    AllSingularValuesBelowToleranceError
        If no singular value is kept.
    """
    keep = np.flatnonzero(~(d**2 < tol))
    if keep.size == 0:
        raise AllSingularValuesBelowToleranceError(
            f"All (squared) singular values are below the tolerance ({tol}).",
            singular_values=d,
            tol=tol,
        )
    _logger.debug(f"keeping {keep.size} of {d.size} components (tol={tol})")
    return keep


def truncate_vectors(vectors: np.ndarray, keep: np.ndarray, n_requested: int) -> np.ndarray:
    """Restrict singular vectors to the kept components.

    If at least as many vectors as kept components were requested, the
    columns of the kept components are selected. Otherwise the first
    n_requested columns are taken by position, whatever the tolerance:
    the singular values being sorted, these are the leading components.

    Parameters
    ----------
    vectors : np.ndarray
        Singular vectors, one column per component.
    keep : np.ndarray
        Indices of the kept components.
    n_requested : int
        Number of vectors requested (nu or nv).

    Returns
    -------
    np.ndarray
        Matrix with min(n_requested, len(keep)) columns.
    """
    if n_requested >= keep.size:
        return vectors[:, keep]
    return vectors[:, :n_requested]


def normalize_signs(u: np.ndarray, v: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Flip components so that each column of v has a non-negative sum.

    Column j of u and column j of v are flipped together, which leaves
    u diag(d) v^T unchanged. Columns of u without a counterpart in v (when
    u is wider than v) are left untouched.

    Returns
    -------
    u, v : np.ndarray
        New arrays, the inputs are not modified.
    """
    n_paired = min(u.shape[1], v.shape[1])
    signs = np.where(v.sum(axis=0) < 0, -1.0, 1.0)
    u_signs = np.ones(u.shape[1])
    u_signs[:n_paired] = signs[:n_paired]
    if np.any(signs < 0):
        _logger.debug(f"flipping components {np.flatnonzero(signs < 0).tolist()}")
    return u * u_signs, v * signs


def tolerance_svd(
    x: Union[np.ndarray, pd.DataFrame],
    nu: Optional[int] = None,
    nv: Optional[int] = None,
    tol: Union[Tolerance, Real, None] = MACHINE_EPSILON,
    svd: Union[SVDMethod, SVDPrimitive] = "scipy",
) -> ToleranceSVDResult:
    """SVD that removes components likely due to floating point imprecision.

    Components whose squared singular value is below ``tol`` are removed
    from d, u and v. The rows of u are labeled with the row labels of x and
    the rows of v with its column labels (when x is a DataFrame). Each
    component is flipped if the sum of its right singular vector is
    negative.

    A disabled tolerance (None, NaN, +/- infinity or a negative number)
    skips all of the above: the SVD primitive's result is returned as is.

    Parameters
    ----------
    x : np.ndarray or pd.DataFrame
        Matrix to decompose.
    nu : int, optional
        Number of left singular vectors. Default is min(x.shape).
    nv : int, optional
        Number of right singular vectors. Default is min(x.shape).
    tol : float, Tolerance or None
        Threshold for the squared singular values. Default is the double
        precision machine epsilon.
    svd : {"scipy", "random"} or callable
        SVD primitive, either a method name or a callable
        ``svd(matrix, nu, nv) -> RawDecomposition``.

    Returns
    -------
    ToleranceSVDResult

    Raises
    ------
    ComplexSingularValueError
        If a singular value is complex.
    NegativeSingularValueAboveToleranceError
        If a singular value is negative with a square above tol.
    AllSingularValuesBelowToleranceError
        If all squared singular values are below tol.
    """
    matrix, row_labels, col_labels = _as_matrix(x)
    tolerance = Tolerance.from_value(tol)

    default_count = min(matrix.shape) if matrix.ndim == 2 else 0
    nu = default_count if nu is None else nu
    nv = default_count if nv is None else nv

    primitive = get_svd_primitive(svd) if isinstance(svd, str) else svd
    raw: RawDecomposition = primitive(matrix, nu, nv)

    if not tolerance.active:
        _logger.debug("tolerance disabled, returning the SVD as is")
        return ToleranceSVDResult.from_raw(raw)

    tol_value: float = tolerance.value  # type: ignore[assignment]
    d = check_singular_values(raw.d, tol_value)
    keep = select_components(d, tol_value)

    u = truncate_vectors(raw.u, keep, nu)
    v = truncate_vectors(raw.v, keep, nv)
    u, v = normalize_signs(u, v)

    return ToleranceSVDResult(
        d=d[keep],
        u=u,
        v=v,
        row_labels=row_labels,
        col_labels=col_labels,
    )
