"""Derived features for the typed bank marketing dataset.

Deterministic, row-local derivations
------------------------------------
- :func:`add_age_category` (``age_categ``: low / mid / high)
- :func:`add_was_contacted` (``pdays != -1``)
- :func:`add_potential_client` (auxiliary flag, never a model input)

Column-level derivations
------------------------
- :func:`add_engagement_score`: a min-max scaled composite of duration,
  balance and loan flags. The scaling uses the min/max of the frame it is
  given.
- :func:`add_trans_balance`: the rank-based normalizing transform
  (:class:`OrderNormTransformer`). This one is *fitted*: the empirical rank
  table is learned once and reused. :func:`derive_features` fits it on the full
  retained dataset, as the analysis does; pass a transformer fitted on the
  training rows instead to keep test-set ranks out of the training features.

The only row filter in the pipeline is :func:`drop_unknown_job`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.base import BaseEstimator, TransformerMixin

from ..exceptions import DegenerateTransformError, SchemaError
from .coerce import check_required_columns
from .schema import AGE_CATEGORY_LEVELS, LABEL_COL, UNKNOWN

logger = logging.getLogger(__name__)

# Age bucket thresholds, both strict: 25 falls in "low", 60 in "mid".
AGE_LOW_UPPER = 25
AGE_HIGH_LOWER = 60

NEVER_CONTACTED = -1


# -----------------------------------------------------------------------------
# Row filter
# -----------------------------------------------------------------------------


def _label_rate(df: pd.DataFrame) -> float:
    if LABEL_COL not in df.columns or len(df) == 0:
        return float("nan")
    return float(df[LABEL_COL].mean())


def drop_unknown_job(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows whose ``job`` is ``"unknown"``.

    The category set of ``job`` is trimmed to the levels still observed, so
    the dropped label does not reappear as an all-zero dummy column.
    """
    check_required_columns(df, ["job"])
    keep = df["job"].astype(object) != UNKNOWN
    out = df.loc[keep].copy()
    if isinstance(out["job"].dtype, pd.CategoricalDtype):
        out["job"] = out["job"].cat.remove_unused_categories()

    logger.info(
        "Dropped %d row(s) with job='%s' (%d -> %d); subscription rate %.4f -> %.4f",
        int((~keep).sum()),
        UNKNOWN,
        len(df),
        len(out),
        _label_rate(df),
        _label_rate(out),
    )
    return out


# -----------------------------------------------------------------------------
# Row-local features
# -----------------------------------------------------------------------------


def age_category(age: pd.Series) -> pd.Series:
    """Bucket ages: high if > 60, else mid if > 25, else low."""
    labels = np.where(
        age > AGE_HIGH_LOWER,
        "high",
        np.where(age > AGE_LOW_UPPER, "mid", "low"),
    )
    return pd.Series(
        pd.Categorical(labels, categories=AGE_CATEGORY_LEVELS),
        index=age.index,
        name="age_categ",
    )


def add_age_category(df: pd.DataFrame) -> pd.DataFrame:
    check_required_columns(df, ["age"])
    out = df.copy()
    out["age_categ"] = age_category(out["age"])
    return out


def add_was_contacted(df: pd.DataFrame) -> pd.DataFrame:
    """``was_contacted`` is True iff the client was reached in an earlier campaign."""
    check_required_columns(df, ["pdays"])
    out = df.copy()
    out["was_contacted"] = (out["pdays"] != NEVER_CONTACTED).astype(bool)
    return out


def add_potential_client(df: pd.DataFrame) -> pd.DataFrame:
    """Flag well-funded, unencumbered clients never reached before."""
    check_required_columns(
        df,
        ["balance", "campaign", "previous", "in_default", "housing_loan", "personal_loan"],
    )
    out = df.copy()
    out["potential_client"] = (
        (out["balance"] > 1000)
        & (out["campaign"] > 0)
        & (out["previous"] == 0)
        & ~out["in_default"]
        & ~out["housing_loan"]
        & ~out["personal_loan"]
    ).astype(bool)
    return out


# -----------------------------------------------------------------------------
# Engagement score
# -----------------------------------------------------------------------------

ENGAGEMENT_INPUTS = ["in_default", "duration", "balance", "housing_loan", "personal_loan"]


def engagement_raw(df: pd.DataFrame) -> pd.Series:
    """Unscaled engagement score, clamped at zero.

    ``duration + 10 * balance / 1000 - 10 * housing_loan - 20 * personal_loan``,
    or 0 for clients in default.
    """
    check_required_columns(df, ENGAGEMENT_INPUTS)
    raw = (
        df["duration"].astype(float)
        + 10.0 * (df["balance"].astype(float) / 1000.0)
        - 10.0 * df["housing_loan"].astype(float)
        - 20.0 * df["personal_loan"].astype(float)
    )
    raw = raw.where(~df["in_default"].astype(bool), 0.0)
    return raw.clip(lower=0.0).rename("engagement_raw")


def min_max_scale(values: pd.Series, decimals: Optional[int] = 3) -> pd.Series:
    """Scale to [0, 1]. A constant series scales to NaN (logged, not raised)."""
    lo = float(values.min())
    hi = float(values.max())
    span = hi - lo
    if not np.isfinite(span) or span == 0.0:
        logger.warning(
            "Min-max scaling of '%s' is undefined (min == max == %s); returning NaN.",
            values.name,
            lo,
        )
        return pd.Series(np.nan, index=values.index, name=values.name, dtype=float)
    scaled = (values.astype(float) - lo) / span
    if decimals is not None:
        scaled = scaled.round(decimals)
    return scaled


def add_engagement_score(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out["engagement_score"] = min_max_scale(engagement_raw(out)).rename("engagement_score")
    return out


# -----------------------------------------------------------------------------
# Rank-based normalizing transform
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderNormTable:
    """Fitted state of :class:`OrderNormTransformer`.

    ``x`` holds the sorted distinct training values and ``z`` their normal
    scores (strictly increasing). ``slope`` is the least squares slope of
    normal score on value; beyond the fitted range the transform continues
    from the nearest end point with that slope.
    """

    x: np.ndarray
    z: np.ndarray
    slope: float
    n_obs: int

    def apply(self, values: np.ndarray) -> np.ndarray:
        v = np.asarray(values, dtype=float)
        out = np.interp(v, self.x, self.z)
        below = v < self.x[0]
        above = v > self.x[-1]
        out[below] = self.z[0] + self.slope * (v[below] - self.x[0])
        out[above] = self.z[-1] + self.slope * (v[above] - self.x[-1])
        return out


def _order_norm_table(values: np.ndarray) -> OrderNormTable:
    v = np.asarray(values, dtype=float)
    v = v[np.isfinite(v)]
    n = v.size
    if n < 2 or float(np.ptp(v)) == 0.0:
        raise DegenerateTransformError(
            f"Order-norm transform needs at least two distinct values; got n={n}, "
            f"distinct={np.unique(v).size}."
        )

    ranks = stats.rankdata(v, method="average")
    scores = stats.norm.ppf((ranks - 0.5) / n)

    # Ties share one average rank, so each distinct value has one score.
    x, first = np.unique(v, return_index=True)
    z = scores[first]

    slope = np.polyfit(v, scores, deg=1)[0]
    return OrderNormTable(x=x, z=z, slope=float(slope), n_obs=int(n))


class OrderNormTransformer(BaseEstimator, TransformerMixin):
    """Map values to the standard-normal quantile of their empirical rank.

    ``fit`` computes average ranks (ties share a rank), converts them to
    probabilities ``(rank - 0.5) / n`` and stores the normal quantiles in an
    immutable :class:`OrderNormTable`. ``transform`` interpolates linearly
    between fitted values and extrapolates linearly outside the fitted range,
    so it is strictly increasing on new data as well.
    """

    def __init__(self, warn_on_extrapolation: bool = True):
        self.warn_on_extrapolation = warn_on_extrapolation

        # fitted
        self.table_: OrderNormTable | None = None

    def fit(self, X, y=None):
        X = np.asarray(X, dtype=float)
        if X.ndim == 2:
            if X.shape[1] != 1:
                raise ValueError("OrderNormTransformer handles a single column.")
            X = X[:, 0]
        self.table_ = _order_norm_table(X)
        return self

    def transform(self, X) -> np.ndarray:
        if self.table_ is None:
            raise RuntimeError("OrderNormTransformer must be fitted before transform.")

        X = np.asarray(X, dtype=float)
        shape = X.shape
        flat = X.reshape(-1)

        if self.warn_on_extrapolation:
            n_out = int(np.sum((flat < self.table_.x[0]) | (flat > self.table_.x[-1])))
            if n_out:
                logger.warning(
                    "Order-norm: %d value(s) outside the fitted range [%s, %s]; extrapolating linearly.",
                    n_out,
                    self.table_.x[0],
                    self.table_.x[-1],
                )

        return self.table_.apply(flat).reshape(shape)


def add_trans_balance(
    df: pd.DataFrame,
    transformer: OrderNormTransformer | None = None,
) -> Tuple[pd.DataFrame, OrderNormTransformer]:
    """Add ``trans_balance``.

    Parameters
    ----------
    transformer:
        - If None: a new transformer is fitted on ``df['balance']``.
        - If provided: it must already be fitted; it is reused as-is.
    """
    check_required_columns(df, ["balance"])
    if transformer is None:
        transformer = OrderNormTransformer().fit(df["balance"].to_numpy())
        logger.info("Fitted order-norm transform on %d balance values", transformer.table_.n_obs)

    out = df.copy()
    out["trans_balance"] = transformer.transform(out["balance"].to_numpy())
    return out, transformer


# -----------------------------------------------------------------------------
# Orchestration
# -----------------------------------------------------------------------------


def derive_features(
    df: pd.DataFrame,
    balance_transformer: OrderNormTransformer | None = None,
) -> Tuple[pd.DataFrame, OrderNormTransformer]:
    """Filter unknown jobs and add every derived column.

    Returns the augmented frame and the (fitted or reused) balance transformer.
    """
    out = drop_unknown_job(df)
    if out.empty:
        raise SchemaError("No rows left after dropping job='unknown'.")

    out = add_age_category(out)
    out = add_was_contacted(out)
    out, balance_transformer = add_trans_balance(out, transformer=balance_transformer)
    out = add_engagement_score(out)
    out = add_potential_client(out)
    return out, balance_transformer


def sample_rows(df: pd.DataFrame, n: int, rng: np.random.Generator) -> pd.DataFrame:
    """Draw ``n`` rows without replacement (all rows if ``n >= len(df)``)."""
    if n >= len(df):
        return df.copy()
    positions = np.sort(rng.choice(len(df), size=int(n), replace=False))
    return df.iloc[positions].copy()


__all__ = [
    "AGE_LOW_UPPER",
    "AGE_HIGH_LOWER",
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
]
