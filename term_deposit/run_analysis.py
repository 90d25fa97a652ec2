"""Run the term-deposit subscription analysis end to end.

This launcher:
1) checks that the data file is in place;
2) runs the coercion -> features -> design matrix -> split -> fit -> evaluate
   pipeline (:func:`term_deposit.src.experiments.run_logit.run_pipeline`);
3) writes the summary, coefficient, ROC and confusion tables;
4) renders the report figures.

Usage
-----
From the repository root:

    python term_deposit/run_analysis.py

Outputs:
- ``term_deposit/outputs/tables``
- ``term_deposit/outputs/figures``
- ``term_deposit/outputs/logs/run_analysis.log``
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Make imports & paths robust to the current working directory.
# ---------------------------------------------------------------------------

import os
import sys
from pathlib import Path
from typing import Optional, Sequence

PROJECT_ROOT = Path(__file__).resolve().parent
REPO_ROOT = PROJECT_ROOT.parent

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# ---------------------------------------------------------------------------
# Standard imports
# ---------------------------------------------------------------------------

import argparse

import matplotlib

matplotlib.use("Agg")  # headless-safe
import matplotlib.pyplot as plt

from term_deposit.src.data.check_data import dataset_status
from term_deposit.src.data.load import load_raw_data
from term_deposit.src.exceptions import AnalysisError
from term_deposit.src.experiments.run_logit import (
    AnalysisResult,
    apply_overrides,
    load_analysis_config,
    run_pipeline,
    write_tables,
)
from term_deposit.src.utils import configure_logging, reproducible_numpy_rng, set_global_seed
from term_deposit.src.visualization import (
    plot_label_proportions,
    plot_roc_curves,
    plot_threshold_comparison,
)

# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------

OUTPUT_DIR = PROJECT_ROOT / "outputs"
FIG_DIR = OUTPUT_DIR / "figures"
TABLE_DIR = OUTPUT_DIR / "tables"
LOG_DIR = OUTPUT_DIR / "logs"

DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "analysis.yaml"

PROPORTION_FIGURES = ["age_categ", "job", "month", "poutcome", "contact_type", "was_contacted"]


def _ensure_dirs() -> None:
    for d in [OUTPUT_DIR, FIG_DIR, TABLE_DIR, LOG_DIR]:
        d.mkdir(parents=True, exist_ok=True)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the term-deposit subscription analysis.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="YAML config path.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory containing the data file.")
    parser.add_argument("--filename", type=str, default=None, help="Data file name.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the train/test permutation.")
    parser.add_argument("--train-frac", type=float, default=None, help="Training fraction.")
    parser.add_argument("--skip-plots", action="store_true", help="Do not render figures.")
    return parser.parse_args(argv)


def _generate_figures(logger, result: AnalysisResult) -> None:
    curves = {name: ev.roc for name, ev in result.evaluations.items()}
    aucs = {name: ev.auc for name, ev in result.evaluations.items()}
    fig = plot_roc_curves(curves, aucs, title="ROC: full vs reduced model", save_path=FIG_DIR / "roc_curves.png")
    plt.close(fig)

    fig = plot_threshold_comparison(result.metrics_table(), save_path=FIG_DIR / "threshold_comparison.png")
    plt.close(fig)

    overall = float(result.dataset["subscribed"].mean())
    for col in PROPORTION_FIGURES:
        fig = plot_label_proportions(
            result.tables[f"proportions_{col}"],
            col,
            overall_rate=overall,
            save_path=FIG_DIR / f"proportions_{col}.png",
        )
        plt.close(fig)
    logger.info("Figures written under %s", FIG_DIR)


def main(argv: Optional[Sequence[str]] = None) -> None:
    _ensure_dirs()
    os.chdir(REPO_ROOT)

    logger = configure_logging(log_file=LOG_DIR / "run_analysis.log")
    args = _parse_args(argv)
    config = apply_overrides(load_analysis_config(args.config), args)

    set_global_seed(config.seed)

    exists, csv_path = dataset_status(config.data_dir, config.filename)
    if not exists:
        logger.error("Dataset not found at %s", csv_path)
        logger.error("Place the semicolon-delimited bank file there or pass --data-dir/--filename.")
        sys.exit(1)
    logger.info("Found dataset at %s", csv_path)

    try:
        raw = load_raw_data(data_dir=config.data_dir, filename=config.filename)
        result = run_pipeline(raw, config, reproducible_numpy_rng(config.seed))
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        sys.exit(1)

    write_tables(result, TABLE_DIR)

    if not args.skip_plots:
        _generate_figures(logger, result)

    logger.info("All done.")


if __name__ == "__main__":
    main()
