"""Dummy-encoded design matrix for the logistic models.

:func:`build_design_matrix` walks a fixed, ordered list of input columns:

* categorical columns are expanded with :func:`pandas.get_dummies` into one
  indicator per level (category order), and the indicator of the reference
  level from :data:`~term_deposit.src.data.schema.REFERENCE_LEVELS` is dropped;
* numeric columns pass through unchanged (no scaling);
* the yes/no flags ``in_default``, ``housing_loan`` and ``personal_loan`` are
  appended afterwards as 0/1 columns.

The label is carried separately in :attr:`DesignMatrix.label`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import pandas as pd

from ..exceptions import ValueDomainError
from .coerce import check_required_columns
from .schema import LABEL_COL, REFERENCE_LEVELS

logger = logging.getLogger(__name__)

# Declaration order drives output column order.
MODEL_INPUT_COLUMNS: List[str] = [
    "age_categ",
    "was_contacted",
    "job",
    "marital",
    "education",
    "balance",
    "contact_type",
    "day",
    "month",
    "campaign",
    "pdays",
    "previous",
    "poutcome",
    "duration",
]

CATEGORICAL_INPUTS: List[str] = [
    "age_categ",
    "was_contacted",
    "job",
    "marital",
    "education",
    "contact_type",
    "day",
    "month",
    "poutcome",
]

PASSTHROUGH_INPUTS: List[str] = ["balance", "campaign", "pdays", "previous", "duration"]

ATTACHED_BOOLEANS: List[str] = ["in_default", "housing_loan", "personal_loan"]

DUMMY_SEP = "_"


@dataclass(frozen=True)
class DesignMatrix:
    """Numeric predictors plus the boolean label."""

    features: pd.DataFrame
    label: pd.Series
    expanded_columns: Tuple[str, ...]
    attached_columns: Tuple[str, ...]
    reference_levels: Mapping[str, object] = field(default_factory=dict)

    @property
    def feature_names(self) -> List[str]:
        return list(self.features.columns)

    @property
    def n_rows(self) -> int:
        return int(self.features.shape[0])

    def to_frame(self) -> pd.DataFrame:
        """Features with the label appended as the last column."""
        out = self.features.copy()
        out[self.label.name] = self.label
        return out

    def take(self, positions) -> Tuple[pd.DataFrame, pd.Series]:
        """Rows at integer ``positions`` as ``(X, y)``."""
        return self.features.iloc[positions], self.label.iloc[positions]


def dummy_name(column: str, level: object) -> str:
    return f"{column}{DUMMY_SEP}{level}"


def _as_categorical(s: pd.Series, column: str) -> pd.Series:
    if isinstance(s.dtype, pd.CategoricalDtype):
        cat = s
    elif pd.api.types.is_bool_dtype(s):
        cat = s.astype(pd.CategoricalDtype(categories=[False, True]))
    else:
        cat = s.astype("category")

    observed = set(cat.dropna().unique().tolist())
    unused = [lvl for lvl in cat.cat.categories if lvl not in observed]
    if unused:
        logger.info("Column '%s': dropping unobserved level(s) %s before encoding", column, unused)
        cat = cat.cat.remove_unused_categories()

    if len(cat.cat.categories) == 0:
        raise ValueDomainError(f"Categorical column '{column}' has no observed levels.")
    return cat


def expand_categorical(
    s: pd.Series,
    column: str,
    reference: object,
) -> pd.DataFrame:
    """One indicator column per level, minus the ``reference`` level."""
    cat = _as_categorical(s, column)
    if reference not in list(cat.cat.categories):
        raise ValueDomainError(
            f"Reference level {reference!r} of '{column}' is not observed; "
            f"levels are {list(cat.cat.categories)}."
        )

    dummies = pd.get_dummies(cat, prefix=column, prefix_sep=DUMMY_SEP, dtype=int)
    return dummies.drop(columns=[dummy_name(column, reference)])


def build_design_matrix(
    df: pd.DataFrame,
    *,
    input_columns: Sequence[str] = MODEL_INPUT_COLUMNS,
    categorical_columns: Sequence[str] = CATEGORICAL_INPUTS,
    attached_columns: Sequence[str] = ATTACHED_BOOLEANS,
    reference_levels: Mapping[str, object] | None = None,
    label_col: str = LABEL_COL,
) -> DesignMatrix:
    """Expand the derived dataset into a numeric design matrix.

    Parameters
    ----------
    reference_levels:
        Category -> dropped level. Defaults to the shared schema table, which
        is also what the coercion step uses to order categories.

    Raises
    ------
    SchemaError
        An input, attached or label column is missing.
    ValueDomainError
        A categorical column has no observed level, or its reference level is
        not observed.
    """
    if reference_levels is None:
        reference_levels = REFERENCE_LEVELS

    check_required_columns(df, list(input_columns) + list(attached_columns) + [label_col])

    blocks: List[pd.DataFrame] = []
    expanded: List[str] = []
    used_refs: Dict[str, object] = {}
    for col in input_columns:
        if col in categorical_columns:
            if col not in reference_levels:
                raise ValueDomainError(f"No reference level configured for categorical column '{col}'.")
            block = expand_categorical(df[col], col, reference_levels[col])
            used_refs[col] = reference_levels[col]
        else:
            block = df[[col]]
        blocks.append(block)
        expanded.extend(block.columns)

    attached = df[list(attached_columns)].astype(int)
    features = pd.concat(blocks + [attached], axis=1)
    label = df[label_col].astype(bool).rename(label_col)

    logger.info(
        "Design matrix: %d rows x %d columns (%d expanded, %d attached)",
        features.shape[0],
        features.shape[1],
        len(expanded),
        attached.shape[1],
    )
    return DesignMatrix(
        features=features,
        label=label,
        expanded_columns=tuple(expanded),
        attached_columns=tuple(attached.columns),
        reference_levels=used_refs,
    )


def expected_expanded_width(
    df: pd.DataFrame,
    *,
    input_columns: Sequence[str] = MODEL_INPUT_COLUMNS,
    categorical_columns: Sequence[str] = CATEGORICAL_INPUTS,
) -> int:
    """Sum of (observed levels - 1) over categorical inputs plus the numeric inputs."""
    width = 0
    for col in input_columns:
        if col in categorical_columns:
            width += df[col].nunique(dropna=True) - 1
        else:
            width += 1
    return int(width)


__all__ = [
    "MODEL_INPUT_COLUMNS",
    "CATEGORICAL_INPUTS",
    "PASSTHROUGH_INPUTS",
    "ATTACHED_BOOLEANS",
    "DesignMatrix",
    "dummy_name",
    "expand_categorical",
    "build_design_matrix",
    "expected_expanded_width",
]
