"""Configuration dataclass for tolerance SVD runs."""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union, get_args

import numpy as np
import pandas as pd
import tomli
import yaml

from .decomposition import tolerance_svd
from .logs import TableStr
from .primitives import SVDMethod, SVDPrimitive, get_svd_primitive
from .results import ToleranceSVDResult
from .tolerance import MACHINE_EPSILON, Tolerance


def read_file(file_path: Union[Path, str]) -> Dict[str, Any]:
    """
    Read a json, toml or yaml file into a dictionary.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file extension is not supported, or the file is empty.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Settings file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        with open(path, "r") as f:
            params = json.load(f)
    elif suffix == ".toml":
        with open(path, "rb") as f:
            params = tomli.load(f)
    elif suffix in (".yaml", ".yml"):
        with open(path, "r") as f:
            params = yaml.safe_load(f)
    else:
        raise ValueError(
            f"Unsupported file format: {file_path}. "
            "Only .json, .toml, .yaml, and .yml files are supported."
        )

    if params is None:
        raise ValueError(f"Settings file is empty: {file_path}")

    return params


@dataclass
class ToleranceSVDConfig(TableStr):
    """Configuration of a tolerance SVD.

    Parameters
    ----------
    nu : int, optional
        Number of left singular vectors. None for min(rows, cols).
    nv : int, optional
        Number of right singular vectors. None for min(rows, cols).
    tol : float, optional
        Tolerance on the squared singular values. None, NaN, infinite or
        negative values disable the filtering. Strings such as "nan" or
        "-inf" (toml and yaml have no portable spelling of these) are
        converted with float().
    method : {"scipy", "random"}
        SVD primitive. "scipy" is deterministic, "random" is faster for
        large matrices.
    random_state : int, optional
        Random seed, only used by the "random" method.
    """

    nu: Optional[int] = None
    nv: Optional[int] = None
    tol: Optional[float] = MACHINE_EPSILON
    method: SVDMethod = "scipy"
    random_state: Optional[int] = 0

    def __post_init__(self) -> None:
        for name in ("nu", "nv"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise TypeError(f"{name} must be an integer or None, got {value!r}")
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if isinstance(self.tol, str):
            try:
                self.tol = float(self.tol)
            except ValueError:
                raise ValueError(f"tol must be a number or null, got {self.tol!r}")

        if self.method not in get_args(SVDMethod):
            raise ValueError(
                f"Unsupported SVD method: {self.method} "
                f"(expected one of {get_args(SVDMethod)})"
            )

    @property
    def tolerance(self) -> Tolerance:
        return Tolerance.from_value(self.tol)

    def svd_primitive(self) -> SVDPrimitive:
        if self.method == "random":
            return get_svd_primitive("random", random_state=self.random_state)
        return get_svd_primitive(self.method)

    def decompose(self, x: Union[np.ndarray, pd.DataFrame]) -> ToleranceSVDResult:
        """Run :func:`tolerance_svd` on x with this configuration."""
        return tolerance_svd(
            x, nu=self.nu, nv=self.nv, tol=self.tolerance, svd=self.svd_primitive()
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ToleranceSVDConfig":
        """
        Raises
        ------
        ValueError
            If d contains keys that are not fields of ToleranceSVDConfig.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(
                f"Unknown tolerance SVD settings: {sorted(unknown)} "
                f"(expected a subset of {sorted(known)})"
            )
        return cls(**d)

    @classmethod
    def from_file(cls, file_path: Union[Path, str]) -> "ToleranceSVDConfig":
        return cls.from_dict(read_file(file_path))
