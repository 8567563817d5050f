"""Tolerance value used to decide which singular values are kept."""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Optional, Union

import numpy as np

# default tolerance: double precision machine epsilon
MACHINE_EPSILON: float = float(np.finfo(float).eps)


@dataclass(frozen=True)
class Tolerance:
    """Either disabled (``value is None``) or active with a finite,
    non-negative value.

    A disabled tolerance means the raw decomposition is returned
    unchanged. Use :meth:`from_value` to build an instance from a raw
    user input: None, NaN, positive or negative infinity and negative
    numbers all map to the disabled tolerance.

    Attributes
    ----------
    value : float, optional
        Threshold compared to the *squared* singular values.
    """

    value: Optional[float] = None

    def __post_init__(self) -> None:
        if self.value is not None and (
            not math.isfinite(self.value) or self.value < 0
        ):
            raise ValueError(
                f"An active tolerance must be finite and non-negative, got {self.value}. "
                "Use Tolerance.from_value to map invalid values to a disabled tolerance."
            )

    @property
    def active(self) -> bool:
        return self.value is not None

    @classmethod
    def disabled(cls) -> "Tolerance":
        return cls(value=None)

    @classmethod
    def from_value(cls, tol: Union["Tolerance", Real, None]) -> "Tolerance":
        """Normalize a raw tolerance input.

        Parameters
        ----------
        tol :
            A Tolerance instance (returned as is), None, or a real number.

        Returns
        -------
        Tolerance

        Raises
        ------
        TypeError
            If tol is neither None, a Tolerance nor a real number.
        """
        if isinstance(tol, Tolerance):
            return tol
        if tol is None:
            return cls.disabled()
        if isinstance(tol, (bool, np.bool_)) or not isinstance(tol, Real):
            raise TypeError(
                f"tolerance must be a real number or None, got {type(tol).__name__}"
            )
        value = float(tol)
        if math.isnan(value) or math.isinf(value) or value < 0:
            return cls.disabled()
        return cls(value=value)

    def __str__(self) -> str:
        if self.value is None:
            return "disabled"
        return f"{self.value:g}"
