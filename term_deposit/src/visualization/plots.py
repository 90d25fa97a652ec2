"""Report figures for the subscription analysis.

- ROC curves of one or more fitted models (from precomputed ROC tables).
- Sensitivity / specificity / accuracy per probability cutoff.
- Subscription share per category level (from
  :func:`~term_deposit.src.evaluation.summaries.label_proportions`).

All functions take already-computed frames, use matplotlib only, and return
the figure; pass ``save_path`` to also write it to disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _maybe_save(fig: plt.Figure, save_path: str | Path | None) -> None:
    if save_path is None:
        return
    path = Path(save_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight", dpi=200)


def plot_roc_curves(
    curves: Mapping[str, pd.DataFrame],
    aucs: Mapping[str, float] | None = None,
    title: str = "ROC curve",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Overlay ROC curves given as ``{name: frame with fpr/tpr columns}``."""
    aucs = dict(aucs or {})

    fig, ax = plt.subplots(figsize=(5.5, 4))
    for name, roc in curves.items():
        auc = aucs.get(name, float("nan"))
        label = f"{name} (AUC={auc:.3f})" if np.isfinite(auc) else name
        ax.step(roc["fpr"], roc["tpr"], where="post", label=label)
    ax.plot([0, 1], [0, 1], linestyle="--", linewidth=1, color="grey", label="Random")
    ax.set_xlabel("False Positive Rate (1 - specificity)")
    ax.set_ylabel("True Positive Rate (sensitivity)")
    ax.set_title(title)
    ax.legend(fontsize=9)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_threshold_comparison(
    report: pd.DataFrame,
    title: str = "Metrics by probability cutoff",
    *,
    metrics: Sequence[str] = ("accuracy", "sensitivity", "specificity"),
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Grouped bars of rate metrics per cutoff (and per model if present)."""
    data = report.copy()
    if "model" in data.columns:
        data["group"] = data["model"].astype(str) + " @ " + data["cutoff"].map("{:.2f}".format)
    else:
        data["group"] = data["cutoff"].map("{:.2f}".format)

    groups = list(data["group"])
    x = np.arange(len(groups))
    width = 0.8 / max(len(metrics), 1)

    fig, ax = plt.subplots(figsize=(max(6.0, 1.2 * len(groups)), 4))
    for i, metric in enumerate(metrics):
        ax.bar(x + i * width - 0.4 + width / 2, data[metric].to_numpy(dtype=float), width, label=metric)
    ax.set_xticks(x)
    ax.set_xticklabels(groups, rotation=30, ha="right")
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel("Rate")
    ax.set_title(title)
    ax.legend(fontsize=9)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_label_proportions(
    proportions: pd.DataFrame,
    column: str,
    *,
    overall_rate: float | None = None,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Bar chart of subscription share per level of ``column``."""
    levels = proportions["level"].astype(str).tolist()

    fig, ax = plt.subplots(figsize=(max(5.0, 0.45 * len(levels)), 4))
    ax.bar(levels, proportions["proportion"].to_numpy(dtype=float))
    if overall_rate is not None:
        ax.axhline(overall_rate, linestyle="--", color="black", linewidth=1, label="Overall")
        ax.legend()
    ax.set_xlabel(column)
    ax.set_ylabel("Share subscribed")
    ax.set_title(f"Subscription rate by {column}")
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


__all__ = ["plot_roc_curves", "plot_threshold_comparison", "plot_label_proportions"]
