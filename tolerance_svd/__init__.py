"""Singular value decomposition without the components likely caused by
floating point imprecision.

Main Classes
------------
ToleranceSVDResult : Filtered, labeled and sign normalized decomposition
ToleranceSVDConfig : Configuration of a tolerance SVD run
Tolerance : Tolerance on the squared singular values (active or disabled)

Main Functions
--------------
tolerance_svd : SVD with tolerance based truncation
get_svd_primitive : SVD primitive ("scipy" or "random") the filter delegates to
load_matrix : Load a labeled matrix from a CSV file
save_result_to_hdf5 : Save a result to an HDF5 file
load_result_from_hdf5 : Load a result from an HDF5 file
"""

from .config import ToleranceSVDConfig
from .decomposition import (
    check_singular_values,
    normalize_signs,
    select_components,
    tolerance_svd,
    truncate_vectors,
)
from .errors import (
    AllSingularValuesBelowToleranceError,
    ComplexSingularValueError,
    NegativeSingularValueAboveToleranceError,
    ToleranceSVDError,
)
from .io import load_matrix, load_result_from_hdf5, save_result_to_hdf5
from .primitives import (
    SVDPrimitive,
    compute_svd_random,
    compute_svd_scipy,
    get_svd_primitive,
)
from .results import RawDecomposition, ToleranceSVDResult
from .tolerance import MACHINE_EPSILON, Tolerance
from .utils import (
    compute_explained_variance_ratio,
    estimate_reconstruction_error,
    reconstruct,
)

__version__ = "0.1.0"

__all__ = [
    # Main function
    "tolerance_svd",
    # Steps of the tolerance filter
    "check_singular_values",
    "select_components",
    "truncate_vectors",
    "normalize_signs",
    # Types
    "Tolerance",
    "MACHINE_EPSILON",
    "ToleranceSVDConfig",
    "RawDecomposition",
    "ToleranceSVDResult",
    # Errors
    "ToleranceSVDError",
    "ComplexSingularValueError",
    "NegativeSingularValueAboveToleranceError",
    "AllSingularValuesBelowToleranceError",
    # SVD primitives
    "SVDPrimitive",
    "compute_svd_scipy",
    "compute_svd_random",
    "get_svd_primitive",
    # I/O functions
    "load_matrix",
    "save_result_to_hdf5",
    "load_result_from_hdf5",
    # Utility functions
    "reconstruct",
    "estimate_reconstruction_error",
    "compute_explained_variance_ratio",
    "__version__",
]
