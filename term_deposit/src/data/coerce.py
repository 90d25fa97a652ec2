"""Type coercion for the raw bank marketing table.

:func:`coerce_types` turns the all-text frame returned by
:func:`~term_deposit.src.data.load.load_raw_data` into a typed dataset:

1) rename ambiguous columns (``default`` -> ``in_default``, ``y`` -> ``subscribed`` ...);
2) recode yes/no columns to ``bool`` (anything else is an error);
3) parse integer columns;
4) build categorical columns. ``"unknown"`` stays a category, ``"admin."`` is
   rewritten to ``"admin"``, ``month`` is ordered by the calendar and ``day``
   by day number, and every column listed in
   :data:`~term_deposit.src.data.schema.REFERENCE_LEVELS` gets its reference
   level moved to the front of the category set.

The function is deterministic and never drops rows.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import pandas as pd

from ..exceptions import SchemaError, ValueDomainError
from .schema import (
    BOOLEAN_COLUMNS,
    CATEGORICAL_COLUMNS,
    DAY_LEVELS,
    INTEGER_COLUMNS,
    JOB_LABEL_FIXES,
    MONTH_ORDER,
    REFERENCE_LEVELS,
    RENAME_MAP,
    REQUIRED_COLUMNS,
)

logger = logging.getLogger(__name__)

YES_NO = {"yes": True, "no": False}


def _clean_text(s: pd.Series) -> pd.Series:
    """Strip whitespace/quotes and lower-case, keeping missing values missing."""
    return s.astype("string").str.strip().str.strip('"').str.lower()


def relevel(levels: Iterable[object], reference: object) -> List[object]:
    """Return ``levels`` with ``reference`` moved to the front.

    The remaining levels keep their relative order. A reference that is not
    among ``levels`` raises :class:`ValueDomainError`.
    """
    levels = list(levels)
    if reference not in levels:
        raise ValueDomainError(
            f"Reference level {reference!r} not found among levels {levels}."
        )
    return [reference] + [lvl for lvl in levels if lvl != reference]


def _to_bool(s: pd.Series, column: str) -> pd.Series:
    text = _clean_text(s)
    bad = text[~text.isin(list(YES_NO))]
    if len(bad) > 0:
        offending = sorted({str(v) for v in bad.unique()})
        raise ValueDomainError(
            f"Column '{column}' must contain only 'yes'/'no'; found {offending} "
            f"in {len(bad)} row(s)."
        )
    return text.map(YES_NO).astype(bool)


def _to_int(s: pd.Series, column: str) -> pd.Series:
    parsed = pd.to_numeric(s, errors="coerce")
    bad = s[parsed.isna()]
    if len(bad) > 0:
        sample = [str(v) for v in bad.unique()[:5]]
        raise SchemaError(
            f"Column '{column}' must be integer-valued; could not parse {sample}."
        )
    if (parsed != parsed.round()).any():
        raise SchemaError(f"Column '{column}' contains non-integer values.")
    return parsed.astype("int64")


def _category_levels(column: str, values: pd.Series) -> List[str]:
    if column == "month":
        return list(MONTH_ORDER)
    if column == "day":
        return list(DAY_LEVELS)

    observed = sorted(values.dropna().unique().tolist())
    reference = REFERENCE_LEVELS.get(column)
    if reference is None:
        return observed
    return relevel(observed, reference)


def _to_category(s: pd.Series, column: str) -> pd.Series:
    if column == "day":
        text = _to_int(s, column).astype(str)
    else:
        text = _clean_text(s)
    if column == "job":
        text = text.replace(JOB_LABEL_FIXES)

    if text.isna().any():
        raise SchemaError(f"Column '{column}' has {int(text.isna().sum())} missing value(s).")

    levels = _category_levels(column, text)
    unexpected = sorted(set(text.unique()) - set(levels))
    if unexpected:
        raise ValueDomainError(
            f"Column '{column}' has values outside its level set: {unexpected}"
        )

    ordered = column == "month"
    return pd.Series(
        pd.Categorical(text.astype(object), categories=levels, ordered=ordered),
        index=s.index,
        name=column,
    )


def check_required_columns(df: pd.DataFrame, required: Sequence[str]) -> None:
    """Raise :class:`SchemaError` listing every column of ``required`` absent from ``df``."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SchemaError(f"Missing required column(s): {missing}")


def coerce_types(df: pd.DataFrame) -> pd.DataFrame:
    """Rename and type the raw columns.

    Accepts either the raw header (``default``, ``housing``, ``loan``,
    ``contact``, ``y``) or an already renamed frame. Extra columns are kept
    unchanged.

    Raises
    ------
    SchemaError
        A required column is absent or an integer column cannot be parsed.
    ValueDomainError
        A yes/no column holds another value, or a categorical column holds a
        value outside its fixed level set (``month``, ``day``).
    """
    out = df.rename(columns=RENAME_MAP).copy()
    check_required_columns(out, REQUIRED_COLUMNS)

    for col in BOOLEAN_COLUMNS:
        out[col] = _to_bool(out[col], col)

    for col in INTEGER_COLUMNS:
        out[col] = _to_int(out[col], col)

    for col in CATEGORICAL_COLUMNS:
        out[col] = _to_category(out[col], col)

    logger.info(
        "Coerced %d rows: %d boolean, %d integer, %d categorical columns",
        len(out),
        len(BOOLEAN_COLUMNS),
        len(INTEGER_COLUMNS),
        len(CATEGORICAL_COLUMNS),
    )
    return out


__all__ = ["coerce_types", "check_required_columns", "relevel"]
