"""Data loading for the bank marketing file.

The UCI *Bank Marketing* export is semicolon-delimited with double-quoted
strings. Two details matter for the downstream coercion step:

1) ``"unknown"`` is a real category label, so pandas' default NA markers are
   disabled and only empty fields become missing;
2) every column is read as text. Integer parsing and yes/no recoding happen in
   :func:`term_deposit.src.data.coerce.coerce_types`, where a malformed value
   can be reported against its column.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from pandas.errors import ParserError

from ..exceptions import SchemaError
from .schema import RAW_COLUMNS

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("term_deposit/data/raw")
DEFAULT_FILENAME = "bank.csv"
DEFAULT_SEP = ";"


def _read(csv_path: Path, sep: str | None) -> pd.DataFrame:
    kwargs = dict(
        dtype=str,
        keep_default_na=False,
        na_values=[""],
        quotechar='"',
    )
    if sep is None:
        return pd.read_csv(csv_path, sep=None, engine="python", **kwargs)
    return pd.read_csv(csv_path, sep=sep, **kwargs)


def load_raw_data(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
    sep: str = DEFAULT_SEP,
) -> pd.DataFrame:
    """Load the raw bank marketing table.

    Parameters
    ----------
    data_dir:
        Directory containing the file.
    filename:
        File name inside ``data_dir``.
    sep:
        Field delimiter. If parsing with it yields a single column (typically
        a comma-delimited copy of the data), the delimiter is auto-detected.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    SchemaError
        If the header lacks any of the raw columns.
    """
    csv_path = Path(data_dir) / filename
    if not csv_path.is_file():
        raise FileNotFoundError(
            f"Expected dataset at {csv_path}. Place the semicolon-delimited bank marketing file there."
        )

    try:
        df = _read(csv_path, sep)
    except ParserError:
        df = None

    if df is None or df.shape[1] < 2:
        logger.warning("Parsing %s with sep=%r failed; auto-detecting the delimiter.", csv_path, sep)
        try:
            df = _read(csv_path, None)
        except ParserError as exc:
            raise SchemaError(f"Failed to parse dataset at {csv_path}.") from exc

    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in RAW_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(f"Dataset at {csv_path} is missing required columns: {missing}")

    logger.info("Loaded %d rows x %d columns from %s", df.shape[0], df.shape[1], csv_path)
    return df


__all__ = ["load_raw_data", "DEFAULT_DATA_DIR", "DEFAULT_FILENAME", "DEFAULT_SEP"]
