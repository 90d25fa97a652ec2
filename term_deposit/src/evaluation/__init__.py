"""Evaluation utilities.

- prediction: ROC curve, AUC and confusion matrices at fixed cutoffs;
- summaries: cross-tabulations and aggregate tables for the report.
"""

from __future__ import annotations

from .prediction import (
    ConfusionSummary,
    ModelEvaluation,
    confusion_at_threshold,
    evaluate_model,
    predict_labels,
    roc_auc,
    roc_points,
    threshold_report,
)
from .summaries import (
    coefficient_table,
    crosstab_with_label,
    job_summary,
    label_proportions,
    numeric_by_label,
)

__all__ = [
    "roc_points",
    "roc_auc",
    "ConfusionSummary",
    "predict_labels",
    "confusion_at_threshold",
    "threshold_report",
    "ModelEvaluation",
    "evaluate_model",
    "crosstab_with_label",
    "label_proportions",
    "job_summary",
    "numeric_by_label",
    "coefficient_table",
]
