#!/usr/bin/env python3
"""
Command-line interface for the tolerance SVD.

Decomposes a matrix read from a CSV file, removes the components whose
squared singular value is below the tolerance, and optionally saves the
result to an HDF5 file.
"""

import argparse
import logging
import sys
import textwrap
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from .config import ToleranceSVDConfig
from .io import load_matrix, save_result_to_hdf5
from .logs import set_logging, to_table
from .utils import compute_explained_variance_ratio

_logger = logging.getLogger(__name__)


def validate_output_path(out_file: str) -> None:
    """
    Raises
    ------
    FileNotFoundError
        If the parent directory of out_file does not exist.
    """
    out_path = Path(out_file)
    if not out_path.parent.exists():
        raise FileNotFoundError(
            f"Cannot create output file {out_file}: "
            f"parent directory {out_path.parent} does not exist"
        )


def build_config(args: argparse.Namespace) -> ToleranceSVDConfig:
    """
    Configuration from the settings file (if any), overridden by the
    values passed on the command line.
    """
    if args.settings_file is not None:
        _logger.info(f"Loading settings from: {args.settings_file}")
        settings = asdict(ToleranceSVDConfig.from_file(args.settings_file))
    else:
        settings = {}

    for name in ("nu", "nv", "method"):
        value = getattr(args, name)
        if value is not None:
            settings[name] = value
    if args.no_tol:
        settings["tol"] = None
    elif args.tol is not None:
        settings["tol"] = args.tol

    return ToleranceSVDConfig.from_dict(settings)


def tolerance_svd_main(args: argparse.Namespace) -> None:
    """
    Main function of the tolerance SVD command-line tool.

    Raises
    ------
    FileNotFoundError
        If the matrix or settings file, or the output directory, does not exist.
    ValueError
        If the settings are invalid, or the decomposition is rejected by
        the tolerance filter.
    """
    if args.out_file is not None:
        validate_output_path(args.out_file)

    config = build_config(args)
    _logger.info(config.to_table("tolerance SVD configuration:"))

    matrix = load_matrix(args.matrix, index_col=args.index_col)
    _logger.info(f"Decomposing matrix of shape {matrix.shape}")

    result = config.decompose(matrix)

    _logger.info(result.to_table("tolerance SVD result:"))
    explained = compute_explained_variance_ratio(result.d)
    _logger.info(
        to_table(
            {
                f"component_{i}": f"d={d:.6g}, cumulative explained variance={e:.4f}"
                for i, (d, e) in enumerate(zip(result.d, explained))
            }
        )
    )

    if args.out_file is not None:
        save_result_to_hdf5(args.out_file, result)
        _logger.info(f"Saved to: {args.out_file}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Singular value decomposition of a matrix, without the components
            whose squared singular value is below a tolerance.

            The rows of the left singular vectors are labeled with the row
            labels of the matrix (see --index_col), the rows of the right
            singular vectors with its column labels (the CSV header).

            Example:
                tolerance_svd --matrix data.csv --index_col 0 --tol 1e-10 --out_file svd.hdf5
            """
        ),
    )
    parser.add_argument(
        "--matrix",
        type=str,
        required=True,
        help="CSV file containing the matrix to decompose",
    )
    parser.add_argument(
        "--index_col",
        type=int,
        default=None,
        help="Column of the CSV file holding the row labels (default: none)",
    )
    parser.add_argument(
        "--settings_file",
        type=str,
        default=None,
        help="json, toml or yaml file with the tolerance SVD settings",
    )
    parser.add_argument(
        "--nu",
        type=int,
        default=None,
        help="Number of left singular vectors (default: min(rows, columns))",
    )
    parser.add_argument(
        "--nv",
        type=int,
        default=None,
        help="Number of right singular vectors (default: min(rows, columns))",
    )
    tol_group = parser.add_mutually_exclusive_group()
    tol_group.add_argument(
        "--tol",
        type=float,
        default=None,
        help="Tolerance on the squared singular values (default: machine epsilon)",
    )
    tol_group.add_argument(
        "--no_tol",
        action="store_true",
        help="Disable the tolerance filter and return the SVD as is",
    )
    parser.add_argument(
        "--method",
        type=str,
        choices=["scipy", "random"],
        default=None,
        help="SVD method (default: scipy)",
    )
    parser.add_argument(
        "--out_file",
        type=str,
        default=None,
        help="HDF5 file for storing the decomposition (default: not saved)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the tolerance_svd command-line tool."""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    set_logging(level=log_level)

    try:
        tolerance_svd_main(args)
    except Exception as e:
        _logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
