"""Result dataclasses for tolerance SVD operations."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .logs import TableStr
from .utils import reconstruct


@dataclass
class RawDecomposition(TableStr):
    """Decomposition as returned by an SVD primitive.

    Attributes
    ----------
    d : np.ndarray
        All min(rows, cols) singular values, sorted in descending order.
    u : np.ndarray
        Left singular vectors, shape (rows, nu).
    v : np.ndarray
        Right singular vectors, shape (cols, nv).
    """

    d: np.ndarray
    u: np.ndarray
    v: np.ndarray


@dataclass
class ToleranceSVDResult(TableStr):
    """Decomposition after tolerance filtering.

    The widths of u and v are capped independently (by nu and nv), so
    they may differ from each other and from the length of d.

    Attributes
    ----------
    d : np.ndarray
        Kept singular values, in their original descending order.
    u : np.ndarray
        Left singular vectors, one row per input row.
    v : np.ndarray
        Right singular vectors, one row per input column.
    row_labels : pd.Index, optional
        Labels of the rows of u (the input's row labels).
    col_labels : pd.Index, optional
        Labels of the rows of v (the input's column labels).
    """

    d: np.ndarray
    u: np.ndarray
    v: np.ndarray
    row_labels: Optional[pd.Index] = None
    col_labels: Optional[pd.Index] = None

    @classmethod
    def from_raw(cls, raw: RawDecomposition) -> "ToleranceSVDResult":
        return cls(d=raw.d, u=raw.u, v=raw.v)

    @property
    def n_components(self) -> int:
        return len(self.d)

    def u_frame(self) -> pd.DataFrame:
        """Left singular vectors as a DataFrame indexed by the row labels."""
        return pd.DataFrame(
            self.u,
            index=self.row_labels,
            columns=[f"component_{i}" for i in range(self.u.shape[1])],
        )

    def v_frame(self) -> pd.DataFrame:
        """Right singular vectors as a DataFrame indexed by the column labels."""
        return pd.DataFrame(
            self.v,
            index=self.col_labels,
            columns=[f"component_{i}" for i in range(self.v.shape[1])],
        )

    def reconstruct(self) -> np.ndarray:
        """Rank-k approximation u diag(d) v^T of the input matrix."""
        return reconstruct(self.d, self.u, self.v)
