"""Exploratory summary tables.

These frames are what the report/plotting side consumes: counts and
subscription shares per category level, per-job aggregates, and numeric
distributions split by label. They never modify their input.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from ..data.coerce import check_required_columns
from ..data.schema import LABEL_COL


def crosstab_with_label(df: pd.DataFrame, column: str, label_col: str = LABEL_COL) -> pd.DataFrame:
    """Counts per level of ``column`` x label, with row/column totals."""
    check_required_columns(df, [column, label_col])
    table = pd.crosstab(df[column], df[label_col], dropna=False)
    # plain labels so the margins can be appended to categorical/bool axes
    table.index = pd.Index([str(v) for v in table.index], name=column)
    table.columns = pd.Index([str(c) for c in table.columns], name=label_col)
    table["total"] = table.sum(axis=1)
    table.loc["total"] = table.sum(axis=0)
    return table


def label_proportions(df: pd.DataFrame, column: str, label_col: str = LABEL_COL) -> pd.DataFrame:
    """Plot-ready share of subscribers per level.

    Columns: ``level``, ``n``, ``n_subscribed``, ``proportion``. Levels keep
    their category order (calendar order for ``month``).
    """
    check_required_columns(df, [column, label_col])
    grouped = df.groupby(column, observed=False, sort=True)[label_col]
    out = pd.DataFrame(
        {
            "n": grouped.size(),
            "n_subscribed": grouped.sum().astype(int),
        }
    )
    out["proportion"] = out["n_subscribed"] / out["n"].where(out["n"] > 0)
    out.index.name = "level"
    return out.reset_index()


def job_summary(df: pd.DataFrame, label_col: str = LABEL_COL) -> pd.DataFrame:
    """Aggregate statistics per job, sorted by subscription rate (descending)."""
    check_required_columns(
        df,
        ["job", "balance", "duration", "campaign", "housing_loan", "personal_loan", label_col],
    )
    out = df.groupby("job", observed=True).agg(
        n=(label_col, "size"),
        subscription_rate=(label_col, "mean"),
        mean_balance=("balance", "mean"),
        median_balance=("balance", "median"),
        mean_duration=("duration", "mean"),
        mean_campaign=("campaign", "mean"),
        housing_loan_share=("housing_loan", "mean"),
        personal_loan_share=("personal_loan", "mean"),
    )
    return out.sort_values("subscription_rate", ascending=False).reset_index()


def numeric_by_label(
    df: pd.DataFrame,
    columns: Sequence[str] = ("age", "balance", "duration", "campaign", "pdays", "previous"),
    label_col: str = LABEL_COL,
) -> pd.DataFrame:
    """``describe()`` of each numeric column, split by label (long format)."""
    columns = list(columns)
    check_required_columns(df, columns + [label_col])
    desc = df.groupby(label_col)[columns].describe()
    long = desc.stack(level=0)
    long.index = long.index.set_names([label_col, "variable"])
    return long.reset_index()


def coefficient_table(fitted) -> pd.DataFrame:
    """Coefficient summary of a fitted logistic model, sorted by p-value."""
    return fitted.summary_frame().sort_values("p_value").reset_index(drop=True)


__all__ = [
    "crosstab_with_label",
    "label_proportions",
    "job_summary",
    "numeric_by_label",
    "coefficient_table",
]
