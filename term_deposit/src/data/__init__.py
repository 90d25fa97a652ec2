"""Loading, typing and feature derivation for the bank marketing dataset.

Processing order
----------------
1) :func:`load_raw_data` reads the semicolon-delimited file as text.
2) :func:`coerce_types` renames columns and builds bool/int/categorical types.
3) :func:`derive_features` drops ``job == "unknown"`` rows and adds
   ``age_categ``, ``was_contacted``, ``trans_balance``, ``engagement_score``
   and ``potential_client``.
4) :func:`build_design_matrix` produces the dummy-encoded model input.
"""

from __future__ import annotations

from .load import load_raw_data
from .coerce import check_required_columns, coerce_types, relevel
from .features import (
    OrderNormTable,
    OrderNormTransformer,
    add_age_category,
    add_engagement_score,
    add_potential_client,
    add_trans_balance,
    add_was_contacted,
    age_category,
    derive_features,
    drop_unknown_job,
    engagement_raw,
    min_max_scale,
    sample_rows,
)
from .design import (
    ATTACHED_BOOLEANS,
    CATEGORICAL_INPUTS,
    MODEL_INPUT_COLUMNS,
    PASSTHROUGH_INPUTS,
    DesignMatrix,
    build_design_matrix,
    expected_expanded_width,
)
from .schema import LABEL_COL, REFERENCE_LEVELS

__all__ = [
    # loading
    "load_raw_data",
    # coercion
    "coerce_types",
    "check_required_columns",
    "relevel",
    # features
    "drop_unknown_job",
    "age_category",
    "add_age_category",
    "add_was_contacted",
    "add_potential_client",
    "engagement_raw",
    "min_max_scale",
    "add_engagement_score",
    "OrderNormTable",
    "OrderNormTransformer",
    "add_trans_balance",
    "derive_features",
    "sample_rows",
    # design matrix
    "DesignMatrix",
    "build_design_matrix",
    "expected_expanded_width",
    "MODEL_INPUT_COLUMNS",
    "CATEGORICAL_INPUTS",
    "PASSTHROUGH_INPUTS",
    "ATTACHED_BOOLEANS",
    # schema
    "LABEL_COL",
    "REFERENCE_LEVELS",
]
