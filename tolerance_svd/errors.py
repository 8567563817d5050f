"""Errors raised while filtering a decomposition by tolerance."""

from typing import Optional

import numpy as np


class ToleranceSVDError(ValueError):
    """Base class for the errors raised when the tolerance filter rejects
    a decomposition.

    Attributes
    ----------
    singular_values : np.ndarray
        The singular values returned by the SVD primitive.
    tol : float
        The active tolerance.
    """

    def __init__(
        self,
        message: str,
        singular_values: Optional[np.ndarray] = None,
        tol: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.singular_values = singular_values
        self.tol = tol


class ComplexSingularValueError(ToleranceSVDError):
    """Some singular values have a nonzero imaginary part."""


class NegativeSingularValueAboveToleranceError(ToleranceSVDError):
    """Some singular values are negative and their square exceeds the tolerance."""


class AllSingularValuesBelowToleranceError(ToleranceSVDError):
    """No squared singular value reaches the tolerance."""
