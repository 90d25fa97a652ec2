"""Train/test split and unpenalized logistic regression.

The model is a binomial GLM with the canonical logit link, fitted by maximum
likelihood (IRLS) through :mod:`statsmodels`. There is no regularization and
no class weighting, so coefficients, standard errors and p-values are the
classical ones; the p-values feed the choice of the reduced model's columns.

Fitted state lives in the frozen :class:`FittedLogit`. Predicting is a pure
function of that object and a new feature frame.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import ConvergenceWarning, PerfectSeparationWarning

from ..exceptions import FitError, SchemaError

logger = logging.getLogger(__name__)

INTERCEPT = "const"
DEFAULT_TRAIN_FRAC = 0.8


# ---------------------------------------------------------------------------
# Split
# ---------------------------------------------------------------------------


def round_half_away_from_zero(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


@dataclass(frozen=True)
class TrainTestSplit:
    """Row positions of the two partitions (disjoint, covering all rows)."""

    train_idx: np.ndarray
    test_idx: np.ndarray

    @property
    def n_train(self) -> int:
        return int(self.train_idx.size)

    @property
    def n_test(self) -> int:
        return int(self.test_idx.size)


def split_train_test(
    n_rows: int,
    rng: np.random.Generator,
    train_frac: float = DEFAULT_TRAIN_FRAC,
) -> TrainTestSplit:
    """Permute ``range(n_rows)`` and cut after ``round(train_frac * n_rows)``.

    Rounding is half away from zero. The permutation comes from ``rng`` only,
    so the same seed always yields the same partition.
    """
    if not (0.0 < train_frac < 1.0):
        raise ValueError(f"train_frac must be in (0, 1), got {train_frac}.")
    if n_rows < 2:
        raise ValueError(f"Need at least two rows to split, got {n_rows}.")

    order = rng.permutation(int(n_rows))
    n_train = round_half_away_from_zero(train_frac * n_rows)
    n_train = min(max(n_train, 1), n_rows - 1)
    return TrainTestSplit(train_idx=order[:n_train], test_idx=order[n_train:])


# ---------------------------------------------------------------------------
# Fit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FittedLogit:
    """Immutable result of :func:`fit_logistic`.

    ``params`` is indexed by ``const`` followed by ``feature_names``.
    """

    feature_names: tuple
    params: pd.Series
    bse: pd.Series
    zvalues: pd.Series
    pvalues: pd.Series
    n_obs: int
    llf: float
    aic: float
    converged: bool

    def decision_function(self, X: pd.DataFrame) -> pd.Series:
        missing = [c for c in self.feature_names if c not in X.columns]
        if missing:
            raise SchemaError(f"Missing model column(s) at prediction time: {missing}")
        design = X[list(self.feature_names)].astype(float)
        eta = self.params[INTERCEPT] + design.to_numpy() @ self.params[list(self.feature_names)].to_numpy()
        return pd.Series(eta, index=X.index, name="linear_predictor")

    def predict_proba(self, X: pd.DataFrame) -> pd.Series:
        """P(subscribed = True) for each row of ``X``."""
        eta = self.decision_function(X).to_numpy()
        # 1 / (1 + exp(-eta)) without overflow warnings for large |eta|
        prob = np.exp(-np.logaddexp(0.0, -eta))
        return pd.Series(prob, index=X.index, name="probability")

    def summary_frame(self) -> pd.DataFrame:
        """Coefficient table: estimate, std error, z, p-value, odds ratio."""
        return pd.DataFrame(
            {
                "term": self.params.index,
                "estimate": self.params.to_numpy(),
                "std_error": self.bse.to_numpy(),
                "z_value": self.zvalues.to_numpy(),
                "p_value": self.pvalues.to_numpy(),
                "odds_ratio": np.exp(self.params.to_numpy()),
            }
        )


def _check_label(y: pd.Series) -> np.ndarray:
    if y.isna().any():
        raise FitError(f"Label '{y.name}' has {int(y.isna().sum())} missing value(s).")
    classes = pd.unique(y)
    if len(classes) < 2:
        raise FitError(
            f"Label '{y.name}' has a single class {list(classes)} in the training partition."
        )
    return y.astype(bool).astype(int).to_numpy()


def collinear_columns(design: pd.DataFrame, tol: Optional[float] = None) -> List[str]:
    """Columns that are linear combinations of the columns before them.

    Scans left to right and keeps a column only if it raises the rank, which
    names the redundant column (for example a dummy level that never occurs,
    or a level identical to another).
    """
    kept: List[str] = []
    redundant: List[str] = []
    rank = 0
    for col in design.columns:
        candidate = design[kept + [col]].to_numpy(dtype=float)
        new_rank = int(np.linalg.matrix_rank(candidate, tol=tol))
        if new_rank > rank:
            kept.append(col)
            rank = new_rank
        else:
            redundant.append(col)
    return redundant


def _check_rank(design: pd.DataFrame) -> None:
    values = design.to_numpy(dtype=float)
    rank = int(np.linalg.matrix_rank(values))
    if rank < values.shape[1]:
        redundant = collinear_columns(design)
        raise FitError(
            f"Design matrix is rank deficient (rank {rank} < {values.shape[1]} columns); "
            f"linearly dependent column(s): {redundant}"
        )


def fit_logistic(
    X: pd.DataFrame,
    y: pd.Series,
    columns: Optional[Sequence[str]] = None,
    *,
    max_iter: int = 100,
) -> FittedLogit:
    """Fit ``logit P(y) = const + X @ beta`` by maximum likelihood.

    Parameters
    ----------
    X:
        Numeric feature frame (see :class:`~term_deposit.src.data.design.DesignMatrix`).
    y:
        Boolean/0-1 label aligned with ``X``.
    columns:
        Optional subset of ``X`` columns (the reduced model). Defaults to all.

    Raises
    ------
    SchemaError
        ``columns`` names a column absent from ``X``.
    FitError
        Single-class label, rank-deficient design, or IRLS did not converge.
    """
    if columns is None:
        columns = list(X.columns)
    else:
        columns = list(columns)
        missing = [c for c in columns if c not in X.columns]
        if missing:
            raise SchemaError(f"Reduced-model column(s) not in design matrix: {missing}")
    if not columns:
        raise FitError("No predictor columns selected.")

    endog = _check_label(y)
    exog = sm.add_constant(X[columns].astype(float), has_constant="add", prepend=True)
    _check_rank(exog)

    model = sm.GLM(endog, exog, family=sm.families.Binomial())
    with warnings.catch_warnings():
        warnings.simplefilter("error", ConvergenceWarning)
        warnings.simplefilter("always", PerfectSeparationWarning)
        try:
            result = model.fit(maxiter=max_iter)
        except (ConvergenceWarning, np.linalg.LinAlgError) as exc:
            raise FitError(f"Logistic fit failed: {exc}") from exc

    converged = bool(getattr(result, "converged", True))
    if not converged:
        raise FitError(f"Logistic fit did not converge within {max_iter} iterations.")

    logger.info(
        "Fitted logistic model: %d rows, %d predictors, log-likelihood %.3f, AIC %.3f",
        int(result.nobs),
        len(columns),
        float(result.llf),
        float(result.aic),
    )
    return FittedLogit(
        feature_names=tuple(columns),
        params=result.params.copy(),
        bse=result.bse.copy(),
        zvalues=result.tvalues.copy(),
        pvalues=result.pvalues.copy(),
        n_obs=int(result.nobs),
        llf=float(result.llf),
        aic=float(result.aic),
        converged=converged,
    )


def significant_columns(fitted: FittedLogit, alpha: float = 0.05) -> List[str]:
    """Predictors (intercept excluded) with p-value below ``alpha``.

    Advisory only: the reduced model's columns come from configuration.
    """
    p = fitted.pvalues.drop(labels=[INTERCEPT], errors="ignore")
    return [str(c) for c in p.index if float(p[c]) < alpha]


__all__ = [
    "INTERCEPT",
    "DEFAULT_TRAIN_FRAC",
    "round_half_away_from_zero",
    "TrainTestSplit",
    "split_train_test",
    "FittedLogit",
    "collinear_columns",
    "fit_logistic",
    "significant_columns",
]
