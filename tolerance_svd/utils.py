"""Diagnostics for tolerance SVD results."""

import numpy as np


def reconstruct(d: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rank-k approximation of the decomposed matrix.

    Only the components present in all of d, u and v are used, i.e.
    k = min(len(d), u.shape[1], v.shape[1]).

    Parameters
    ----------
    d : np.ndarray
        Singular values, shape (n_d,).
    u : np.ndarray
        Left singular vectors, shape (rows, n_u).
    v : np.ndarray
        Right singular vectors, shape (cols, n_v).

    Returns
    -------
    np.ndarray
        Matrix of shape (rows, cols).
    """
    k = min(len(d), u.shape[1], v.shape[1])
    return (u[:, :k] * d[:k]) @ v[:, :k].T


def estimate_reconstruction_error(
    s: np.ndarray,
    n_components: int,
) -> float:
    """Estimate reconstruction error from singular values.

    The reconstruction error is approximated by the squared norm of the
    discarded singular values relative to the total squared norm:

        error ≈ ||s[n_components:]||^2 / ||s||^2

    Parameters
    ----------
    s : np.ndarray
        All singular values, shape (n_total,).
    n_components : int
        Number of components to keep.

    Returns
    -------
    float
        Estimated relative reconstruction error (between 0 and 1).
    """
    if n_components >= len(s):
        return 0.0

    s_full_norm = np.linalg.norm(s) ** 2
    s_trunc_norm = np.linalg.norm(s[n_components:]) ** 2

    return float(s_trunc_norm / s_full_norm)


def compute_explained_variance_ratio(s: np.ndarray) -> np.ndarray:
    """Cumulative fraction of the total variance explained by the first
    k components, for k = 1, 2, ..., n.

    Parameters
    ----------
    s : np.ndarray
        Singular values, shape (n_components,).

    Returns
    -------
    np.ndarray
        Cumulative explained variance ratio, shape (n_components,).
        The last entry is 1.
    """
    s_squared: np.ndarray = s**2
    cumsum = np.cumsum(s_squared)
    total: np.ndarray = np.sum(s_squared)

    return cumsum / total  # type: ignore[no-any-return]
