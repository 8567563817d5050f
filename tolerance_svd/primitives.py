"""Dense SVD primitives the tolerance filter delegates to.

A primitive is any callable ``svd(matrix, nu, nv) -> RawDecomposition``
returning all min(rows, cols) singular values in descending order, nu
left singular vectors and nv right singular vectors.
"""

from typing import Callable, Literal, Optional

import numpy as np
import scipy.linalg
from sklearn.utils.extmath import randomized_svd

from .results import RawDecomposition

SVDPrimitive = Callable[[np.ndarray, int, int], RawDecomposition]

SVDMethod = Literal["scipy", "random"]


def _check_vector_counts(matrix: np.ndarray, nu: int, nv: int) -> None:
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got an array of shape {matrix.shape}")
    rows, cols = matrix.shape
    if rows == 0 or cols == 0:
        raise ValueError(f"Cannot decompose an empty matrix of shape {matrix.shape}")
    if not 0 <= nu <= rows:
        raise ValueError(f"nu must be between 0 and {rows} (number of rows), got {nu}")
    if not 0 <= nv <= cols:
        raise ValueError(f"nv must be between 0 and {cols} (number of columns), got {nv}")


def compute_svd_scipy(matrix: np.ndarray, nu: int, nv: int) -> RawDecomposition:
    """Compute the SVD using scipy (LAPACK, deterministic).

    The full bases are only computed when more vectors than
    min(rows, cols) are requested.

    Parameters
    ----------
    matrix : np.ndarray
        Input matrix (rows x cols).
    nu : int
        Number of left singular vectors, between 0 and rows.
    nv : int
        Number of right singular vectors, between 0 and cols.

    Returns
    -------
    RawDecomposition

    Raises
    ------
    ValueError
        If the matrix is not 2-D, is empty, or nu / nv is out of range.
    numpy.linalg.LinAlgError
        If the SVD does not converge.
    """
    _check_vector_counts(matrix, nu, nv)
    full_matrices = max(nu, nv) > min(matrix.shape)
    U, s, Vh = scipy.linalg.svd(matrix, full_matrices=full_matrices)
    return RawDecomposition(d=s, u=U[:, :nu], v=Vh[:nv].T.conj())


def compute_svd_random(
    matrix: np.ndarray,
    nu: int,
    nv: int,
    random_state: Optional[int] = 0,
    power_iteration_normalizer: str = "QR",
) -> RawDecomposition:
    """Compute the SVD using the randomized algorithm of scikit-learn.

    Faster than :func:`compute_svd_scipy` for large matrices, but
    approximate. Only the min(rows, cols) leading vectors are available,
    so nu and nv can not exceed min(rows, cols).

    Parameters
    ----------
    matrix : np.ndarray
        Input matrix (rows x cols).
    nu : int
        Number of left singular vectors.
    nv : int
        Number of right singular vectors.
    random_state : int, optional
        Random seed for reproducibility. Default is 0.
    power_iteration_normalizer : str
        Normalizer used in the power iterations. Default is "QR".

    Returns
    -------
    RawDecomposition

    Raises
    ------
    ValueError
        If nu / nv is out of range or randomized_svd fails.
    """
    _check_vector_counts(matrix, nu, nv)
    n_components = min(matrix.shape)
    if max(nu, nv) > n_components:
        raise ValueError(
            f"The randomized SVD computes at most {n_components} singular vectors, "
            f"got nu={nu} and nv={nv}"
        )

    try:
        U, s, Vh = randomized_svd(
            matrix,
            n_components,
            random_state=random_state,
            power_iteration_normalizer=power_iteration_normalizer,
        )
    except ValueError as e:
        raise ValueError(f"randomized_svd failed on matrix of shape {matrix.shape}: {e}")

    return RawDecomposition(d=s, u=U[:, :nu], v=Vh[:nv].T.conj())


def get_svd_primitive(method: SVDMethod = "scipy", **kwargs) -> SVDPrimitive:
    """Return the SVD primitive corresponding to a method name.

    Parameters
    ----------
    method : {"scipy", "random"}
        "scipy" is deterministic, "random" is faster for large matrices.
    **kwargs
        Extra arguments of the primitive (random_state and
        power_iteration_normalizer for "random").

    Raises
    ------
    ValueError
        If an unknown method is specified.
    """
    if method == "scipy":
        return compute_svd_scipy
    elif method == "random":

        def _random(matrix: np.ndarray, nu: int, nv: int) -> RawDecomposition:
            return compute_svd_random(matrix, nu, nv, **kwargs)

        return _random
    else:
        raise ValueError(f"Unsupported SVD method: {method}")
