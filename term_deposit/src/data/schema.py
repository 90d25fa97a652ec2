"""Column schema shared by type coercion and design-matrix construction.

The reference level of each categorical column is declared exactly once, in
:data:`REFERENCE_LEVELS`. :func:`~term_deposit.src.data.coerce.coerce_types`
moves that level to the front of the category set, and
:func:`~term_deposit.src.data.design.build_design_matrix` drops the indicator
column for the same level. Changing a baseline therefore means editing this
table and nothing else.
"""

from __future__ import annotations

from typing import Dict, List

# Raw header of the semicolon-delimited bank marketing file.
RAW_COLUMNS: List[str] = [
    "age",
    "job",
    "marital",
    "education",
    "default",
    "balance",
    "housing",
    "loan",
    "contact",
    "day",
    "month",
    "duration",
    "campaign",
    "pdays",
    "previous",
    "poutcome",
    "y",
]

RENAME_MAP: Dict[str, str] = {
    "default": "in_default",
    "housing": "housing_loan",
    "loan": "personal_loan",
    "contact": "contact_type",
    "y": "subscribed",
}

LABEL_COL = "subscribed"

# yes/no coded in the raw file
BOOLEAN_COLUMNS: List[str] = ["in_default", "housing_loan", "personal_loan", LABEL_COL]

INTEGER_COLUMNS: List[str] = ["age", "balance", "duration", "campaign", "pdays", "previous"]

CATEGORICAL_COLUMNS: List[str] = [
    "job",
    "marital",
    "education",
    "contact_type",
    "day",
    "month",
    "poutcome",
]

MONTH_ORDER: List[str] = [
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
]

DAY_LEVELS: List[str] = [str(d) for d in range(1, 32)]

AGE_CATEGORY_LEVELS: List[str] = ["low", "mid", "high"]

# Label cleanup applied before the job category set is built.
JOB_LABEL_FIXES: Dict[str, str] = {"admin.": "admin"}

UNKNOWN = "unknown"

# category -> reference (baseline) level
REFERENCE_LEVELS: Dict[str, object] = {
    "age_categ": "low",
    "was_contacted": False,
    "contact_type": "unknown",
    "job": "unemployed",
    "month": "jan",
    "marital": "single",
    "education": "unknown",
    "poutcome": "unknown",
    "day": "1",
}


def renamed(column: str) -> str:
    """Return the post-rename name of a raw column."""
    return RENAME_MAP.get(column, column)


REQUIRED_COLUMNS: List[str] = [renamed(c) for c in RAW_COLUMNS]


__all__ = [
    "RAW_COLUMNS",
    "RENAME_MAP",
    "LABEL_COL",
    "BOOLEAN_COLUMNS",
    "INTEGER_COLUMNS",
    "CATEGORICAL_COLUMNS",
    "MONTH_ORDER",
    "DAY_LEVELS",
    "AGE_CATEGORY_LEVELS",
    "JOB_LABEL_FIXES",
    "UNKNOWN",
    "REFERENCE_LEVELS",
    "REQUIRED_COLUMNS",
    "renamed",
]
