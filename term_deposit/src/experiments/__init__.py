"""Experiment entrypoints.

``run_logit`` exposes both the programmatic pipeline (:func:`run_pipeline`)
and a CLI ``main`` re-exported here for ``term_deposit/run_analysis.py``.
"""

from __future__ import annotations

from .run_logit import AnalysisConfig, AnalysisResult, load_analysis_config, run_pipeline
from .run_logit import main as run_logit

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "load_analysis_config",
    "run_pipeline",
    "run_logit",
]
