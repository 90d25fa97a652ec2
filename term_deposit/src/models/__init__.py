"""Model fitting: deterministic train/test split and the logistic GLM."""

from __future__ import annotations

from .logistic import (
    FittedLogit,
    TrainTestSplit,
    collinear_columns,
    fit_logistic,
    round_half_away_from_zero,
    significant_columns,
    split_train_test,
)

__all__ = [
    "TrainTestSplit",
    "split_train_test",
    "round_half_away_from_zero",
    "FittedLogit",
    "fit_logistic",
    "collinear_columns",
    "significant_columns",
]
