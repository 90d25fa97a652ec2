"""CLI utility to verify dataset availability and basic schema.

Run from the project root:

.. code-block:: bash

    python -m term_deposit.src.data.check_data

The file is loaded and typed but never modified.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Tuple

from ..exceptions import AnalysisError
from .coerce import coerce_types
from .load import DEFAULT_DATA_DIR, DEFAULT_FILENAME, load_raw_data
from .schema import LABEL_COL, UNKNOWN


def dataset_status(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
) -> Tuple[bool, Path]:
    """Return whether the bank marketing file exists."""
    csv_path = Path(data_dir) / filename
    return csv_path.is_file(), csv_path


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check dataset placement and schema.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory containing the file (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=DEFAULT_FILENAME,
        help=f"File name (default: {DEFAULT_FILENAME})",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    exists, csv_path = dataset_status(args.data_dir, args.filename)
    if not exists:
        print(
            "Dataset is missing.\n"
            "   Expected the semicolon-delimited bank marketing file at:\n"
            f"   {csv_path}\n"
        )
        return 1

    print(f"Found dataset at: {csv_path}")

    try:
        typed = coerce_types(load_raw_data(data_dir=args.data_dir, filename=args.filename))
    except AnalysisError as exc:
        print(f"Schema check failed: {exc}")
        return 1

    print(f"Rows: {typed.shape[0]} | Columns: {typed.shape[1]}")
    print(f"Subscription rate: {typed[LABEL_COL].mean():.4f}")
    n_unknown_job = int((typed["job"].astype(object) == UNKNOWN).sum())
    print(f"Rows with job='{UNKNOWN}' (dropped by the analysis): {n_unknown_job}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
