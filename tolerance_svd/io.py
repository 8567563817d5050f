"""CSV and HDF5 I/O for tolerance SVD."""

import logging
from pathlib import Path
from typing import Optional, Union

import h5py
import numpy as np
import pandas as pd

from .results import ToleranceSVDResult

_logger = logging.getLogger(__name__)

_DATASET_TYPE = "tolerance_svd"


def load_matrix(
    filename: Union[str, Path],
    index_col: Optional[Union[int, str]] = None,
    header: Optional[Union[int, str]] = "infer",
) -> pd.DataFrame:
    """Load a numeric matrix from a CSV file.

    Parameters
    ----------
    filename : str or Path
        Input CSV file.
    index_col : int or str, optional
        Column holding the row labels. If None, rows are labeled 0..n-1.
    header : int, "infer" or None
        Row holding the column labels (see pandas.read_csv).

    Returns
    -------
    pd.DataFrame
        The matrix, labeled.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If some entries are not numeric.
    """
    path = Path(filename)
    if not path.is_file():
        raise FileNotFoundError(f"Matrix file not found: {filename}")

    _logger.info(f"Loading matrix from {filename}")
    frame = pd.read_csv(path, index_col=index_col, header=header)

    non_numeric = [c for c in frame.columns if not pd.api.types.is_numeric_dtype(frame[c])]
    if non_numeric:
        raise ValueError(
            f"Matrix file {filename} has non numeric columns: {non_numeric}. "
            "Use index_col to read row labels from a column."
        )
    return frame


def _write_labels(f: h5py.File, name: str, labels: Optional[pd.Index]) -> None:
    if labels is not None:
        f.create_dataset(
            name,
            data=np.array([str(label) for label in labels], dtype=object),
            dtype=h5py.string_dtype(encoding="utf-8"),
        )


def _read_labels(f: h5py.File, name: str) -> Optional[pd.Index]:
    if name not in f:
        return None
    return pd.Index(f[name].asstr()[...])


def save_result_to_hdf5(
    filename: Union[str, Path],
    result: ToleranceSVDResult,
    mode: str = "w",
) -> None:
    """Save a tolerance SVD result to an HDF5 file.

    Arrays are stored as the datasets "d", "u" and "v", labels (if any)
    as the string datasets "row_labels" and "col_labels". Labels are
    converted to str.

    Parameters
    ----------
    filename : str or Path
        Output HDF5 file path.
    result : ToleranceSVDResult
        Result to save.
    mode : str
        HDF5 file mode. "w" for write (overwrites), "a" for append.
    """
    _logger.info(f"Saving tolerance SVD to {filename}")

    with h5py.File(filename, mode) as f:
        f.create_dataset("d", data=result.d)
        f.create_dataset("u", data=result.u)
        f.create_dataset("v", data=result.v)
        _write_labels(f, "row_labels", result.row_labels)
        _write_labels(f, "col_labels", result.col_labels)
        f.attrs["n_components"] = result.n_components
        f.attrs["dataset_type"] = _DATASET_TYPE


def load_result_from_hdf5(filename: Union[str, Path]) -> ToleranceSVDResult:
    """Load a tolerance SVD result saved by :func:`save_result_to_hdf5`.

    Raises
    ------
    ValueError
        If the file was not written by save_result_to_hdf5.
    """
    _logger.info(f"Loading tolerance SVD from {filename}")

    with h5py.File(filename, "r") as f:
        dataset_type = f.attrs.get("dataset_type", None)
        if dataset_type != _DATASET_TYPE:
            raise ValueError(
                f"{filename} does not contain a tolerance SVD (dataset_type: {dataset_type})"
            )
        return ToleranceSVDResult(
            d=f["d"][...],
            u=f["u"][...],
            v=f["v"][...],
            row_labels=_read_labels(f, "row_labels"),
            col_labels=_read_labels(f, "col_labels"),
        )
