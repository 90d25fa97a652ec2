"""Scoring helpers for the subscription classifiers.

Key APIs
--------
- :func:`roc_points`: the ROC curve over every distinct score (ties grouped).
- :func:`roc_auc`: trapezoidal area under that curve.
- :func:`confusion_at_threshold`: TP/FP/TN/FN plus accuracy, sensitivity and
  specificity at one probability cutoff.
- :func:`threshold_report`: the same for several cutoffs, as a table.
- :func:`evaluate_model`: all of the above for a fitted model on a partition.

The positive class is always ``subscribed == True``. A rate whose denominator
is zero is reported as NaN.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics

logger = logging.getLogger(__name__)

DEFAULT_CUTOFFS = (0.5, 0.2)


# ---------------------------------------------------------------------------
# Array conversion helpers
# ---------------------------------------------------------------------------


def _to_1d_labels(x: Any) -> np.ndarray:
    """Convert labels (bool / 0-1) to a 1D boolean array."""
    if isinstance(x, (pd.Series, pd.Index)):
        arr = x.to_numpy()
    elif isinstance(x, pd.DataFrame):
        if x.shape[1] != 1:
            raise ValueError(f"Expected a single-column DataFrame for labels, got shape={x.shape}.")
        arr = x.iloc[:, 0].to_numpy()
    else:
        arr = np.asarray(x)
    arr = np.asarray(arr).reshape(-1)
    if pd.isna(arr).any():
        raise ValueError("Labels contain missing values.")
    return arr.astype(bool)


def _to_1d_proba(x: Any) -> np.ndarray:
    if isinstance(x, (pd.Series, pd.DataFrame)):
        arr = x.to_numpy()
    else:
        arr = np.asarray(x)
    return np.asarray(arr, dtype=float).reshape(-1)


def _paired(y_true: Any, y_prob: Any) -> tuple[np.ndarray, np.ndarray]:
    y = _to_1d_labels(y_true)
    p = _to_1d_proba(y_prob)
    if y.shape[0] != p.shape[0]:
        raise ValueError(f"Length mismatch: y_true={y.shape[0]} vs y_prob={p.shape[0]}")
    if not np.all(np.isfinite(p)):
        raise ValueError("Predicted probabilities contain NaN/Inf.")
    return y, p


def _ratio(num: int, den: int) -> float:
    return float(num) / float(den) if den > 0 else float("nan")


# ---------------------------------------------------------------------------
# ROC / AUC
# ---------------------------------------------------------------------------


def roc_points(y_true: Any, y_prob: Any) -> pd.DataFrame:
    """ROC curve as a table with columns ``threshold``, ``fpr``, ``tpr``.

    One row per distinct score (rows with equal scores move together), plus
    the (0, 0) starting point whose threshold is ``inf``. Rows are ordered by
    decreasing threshold. Empty when ``y_true`` has a single class.
    """
    y, p = _paired(y_true, y_prob)
    if np.unique(y).size < 2:
        logger.warning("ROC curve undefined: test labels contain a single class.")
        return pd.DataFrame({"threshold": [], "fpr": [], "tpr": []}, dtype=float)

    fpr, tpr, thresholds = metrics.roc_curve(y, p, pos_label=True, drop_intermediate=False)
    # sklearn>=1.3 uses inf for the starting point, older releases max+1
    thresholds = thresholds.astype(float)
    thresholds[0] = np.inf
    return pd.DataFrame({"threshold": thresholds, "fpr": fpr, "tpr": tpr})


def roc_auc(y_true: Any, y_prob: Any) -> float:
    """Area under the ROC curve by the trapezoidal rule (NaN for one class)."""
    roc = roc_points(y_true, y_prob)
    if roc.empty:
        return float("nan")
    return float(metrics.auc(roc["fpr"].to_numpy(), roc["tpr"].to_numpy()))


# ---------------------------------------------------------------------------
# Confusion matrix
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfusionSummary:
    cutoff: float
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def n(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.n)

    @property
    def sensitivity(self) -> float:
        return _ratio(self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp)

    def as_dict(self) -> Dict[str, float]:
        out: Dict[str, float] = dict(asdict(self))
        out.update(
            n=self.n,
            accuracy=self.accuracy,
            sensitivity=self.sensitivity,
            specificity=self.specificity,
        )
        return out

    def matrix(self) -> pd.DataFrame:
        """2x2 table, rows = predicted, columns = actual (True first)."""
        return pd.DataFrame(
            [[self.tp, self.fp], [self.fn, self.tn]],
            index=pd.Index([True, False], name="predicted"),
            columns=pd.Index([True, False], name="actual"),
        )


def predict_labels(y_prob: Any, cutoff: float) -> np.ndarray:
    """Positive when the probability reaches the cutoff (``p >= cutoff``)."""
    return _to_1d_proba(y_prob) >= float(cutoff)


def confusion_at_threshold(y_true: Any, y_prob: Any, cutoff: float) -> ConfusionSummary:
    y, p = _paired(y_true, y_prob)
    pred = predict_labels(p, cutoff)
    cm = metrics.confusion_matrix(y, pred, labels=[False, True])
    tn, fp, fn, tp = (int(v) for v in cm.ravel())
    return ConfusionSummary(cutoff=float(cutoff), tp=tp, fp=fp, tn=tn, fn=fn)


def threshold_report(
    y_true: Any,
    y_prob: Any,
    cutoffs: Sequence[float] = DEFAULT_CUTOFFS,
) -> pd.DataFrame:
    """One row of confusion counts and rates per cutoff."""
    rows = [confusion_at_threshold(y_true, y_prob, c).as_dict() for c in cutoffs]
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Model-level evaluation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelEvaluation:
    name: str
    probabilities: pd.Series
    roc: pd.DataFrame
    auc: float
    confusion: List[ConfusionSummary] = field(default_factory=list)

    def report(self) -> pd.DataFrame:
        rows = []
        for c in self.confusion:
            row = c.as_dict()
            row["model"] = self.name
            row["auc"] = self.auc
            rows.append(row)
        return pd.DataFrame(rows)


def evaluate_model(
    fitted,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    *,
    name: str = "model",
    cutoffs: Sequence[float] = DEFAULT_CUTOFFS,
) -> ModelEvaluation:
    """Score ``X_test`` with ``fitted.predict_proba`` and compute ROC/AUC and confusion tables."""
    prob = fitted.predict_proba(X_test)
    roc = roc_points(y_test, prob)
    auc = roc_auc(y_test, prob)
    confusion = [confusion_at_threshold(y_test, prob, c) for c in cutoffs]

    for c in confusion:
        logger.info(
            "%s @ cutoff %.2f: accuracy=%.4f sensitivity=%.4f specificity=%.4f (TP=%d FP=%d TN=%d FN=%d)",
            name,
            c.cutoff,
            c.accuracy,
            c.sensitivity,
            c.specificity,
            c.tp,
            c.fp,
            c.tn,
            c.fn,
        )
    logger.info("%s: AUC=%.4f on %d test rows", name, auc, len(prob))

    return ModelEvaluation(name=name, probabilities=prob, roc=roc, auc=auc, confusion=confusion)


__all__ = [
    "DEFAULT_CUTOFFS",
    "roc_points",
    "roc_auc",
    "ConfusionSummary",
    "predict_labels",
    "confusion_at_threshold",
    "threshold_report",
    "ModelEvaluation",
    "evaluate_model",
]
