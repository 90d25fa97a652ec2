"""Matplotlib figures built from precomputed summary and evaluation frames."""

from __future__ import annotations

from .plots import plot_label_proportions, plot_roc_curves, plot_threshold_comparison

__all__ = [
    "plot_roc_curves",
    "plot_threshold_comparison",
    "plot_label_proportions",
]
