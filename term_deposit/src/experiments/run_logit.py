"""Full and reduced logistic models for term-deposit subscription.

Pipeline
--------
1) Coerce raw columns (rename, yes/no -> bool, categories with reference levels).
2) Drop ``job == "unknown"`` rows and derive features.
3) Build the dummy-encoded design matrix.
4) Permute rows with the seeded generator; the first 80% train, the rest test.
5) Fit the full model on every design column, then the reduced model on the
   configured column subset.
6) Score the test partition: ROC/AUC and confusion matrices at 0.5 and 0.2.

The step sequence is :func:`run_pipeline`; :func:`main` wraps it as a CLI that
writes the tables to ``term_deposit/outputs/tables``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import yaml

from term_deposit.src.data.coerce import coerce_types
from term_deposit.src.data.design import DesignMatrix, build_design_matrix
from term_deposit.src.data.features import OrderNormTransformer, derive_features, sample_rows
from term_deposit.src.data.load import DEFAULT_DATA_DIR, DEFAULT_FILENAME, load_raw_data
from term_deposit.src.evaluation import prediction as prediction_eval
from term_deposit.src.evaluation import summaries
from term_deposit.src.exceptions import AnalysisError, SchemaError
from term_deposit.src.models.logistic import (
    FittedLogit,
    TrainTestSplit,
    fit_logistic,
    significant_columns,
    split_train_test,
)
from term_deposit.src.utils.logging_utils import configure_logging
from term_deposit.src.utils.seed_utils import DEFAULT_SEED, reproducible_numpy_rng

logger = logging.getLogger(__name__)

OUTPUT_DIR = Path("term_deposit/outputs")
TABLE_DIR = OUTPUT_DIR / "tables"
DEFAULT_CONFIG_PATH = Path("term_deposit/configs/analysis.yaml")

# Source variables kept after dropping the insignificant terms of the full fit.
# Variable names expand to all of their dummy columns.
DEFAULT_REDUCED_COLUMNS: List[str] = [
    "job",
    "marital",
    "education",
    "contact_type",
    "month",
    "poutcome",
    "campaign",
    "duration",
    "housing_loan",
    "personal_loan",
]

SUMMARY_COLUMNS: List[str] = [
    "age_categ",
    "job",
    "marital",
    "education",
    "contact_type",
    "month",
    "poutcome",
    "was_contacted",
]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class AnalysisConfig:
    data_dir: Path = DEFAULT_DATA_DIR
    filename: str = DEFAULT_FILENAME
    seed: int = DEFAULT_SEED
    train_frac: float = 0.8
    cutoffs: List[float] = field(default_factory=lambda: [0.5, 0.2])
    reduced_columns: List[str] = field(default_factory=lambda: list(DEFAULT_REDUCED_COLUMNS))
    alpha: float = 0.05
    sample_size: int = 1000


def load_analysis_config(config_path: Path = DEFAULT_CONFIG_PATH) -> AnalysisConfig:
    """Read the ``analysis`` block of a YAML file into :class:`AnalysisConfig`.

    Unknown keys are ignored; a missing file yields the defaults.
    """
    if not Path(config_path).is_file():
        logger.warning("Analysis config not found at %s; using defaults.", config_path)
        return AnalysisConfig()

    cfg_dict = yaml.safe_load(Path(config_path).read_text()) or {}
    block = cfg_dict.get("analysis", cfg_dict) or {}

    valid = {f.name for f in fields(AnalysisConfig)}
    ignored = sorted(k for k in block if k not in valid)
    if ignored:
        logger.warning("Ignoring unknown analysis config key(s): %s", ignored)
    kwargs: Dict[str, Any] = {k: v for k, v in block.items() if k in valid}

    if "data_dir" in kwargs:
        kwargs["data_dir"] = Path(kwargs["data_dir"])
    if "cutoffs" in kwargs:
        kwargs["cutoffs"] = [float(c) for c in kwargs["cutoffs"]]
    if "reduced_columns" in kwargs:
        kwargs["reduced_columns"] = [str(c) for c in kwargs["reduced_columns"]]
    for key, cast in (("seed", int), ("train_frac", float), ("alpha", float), ("sample_size", int)):
        if key in kwargs:
            kwargs[key] = cast(kwargs[key])

    return AnalysisConfig(**kwargs)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def resolve_columns(design: DesignMatrix, names: Sequence[str]) -> List[str]:
    """Map configured names to design columns.

    A name matching a design column is used as is; a source variable name
    (e.g. ``"month"``) expands to all of its dummy columns.
    """
    available = design.feature_names
    out: List[str] = []
    unknown: List[str] = []
    for name in names:
        if name in available:
            matched = [name]
        else:
            matched = [c for c in design.expanded_columns if c.startswith(f"{name}_")]
        if not matched:
            unknown.append(name)
        out.extend(c for c in matched if c not in out)
    if unknown:
        raise SchemaError(f"Reduced-model column(s) not found in design matrix: {unknown}")
    # keep design order
    return [c for c in available if c in out]


@dataclass(frozen=True)
class AnalysisResult:
    dataset: pd.DataFrame
    design: DesignMatrix
    split: TrainTestSplit
    balance_transformer: OrderNormTransformer
    full_model: FittedLogit
    reduced_model: FittedLogit
    evaluations: Dict[str, prediction_eval.ModelEvaluation]
    tables: Dict[str, pd.DataFrame]

    def metrics_table(self) -> pd.DataFrame:
        return pd.concat([e.report() for e in self.evaluations.values()], ignore_index=True)


def build_summary_tables(df: pd.DataFrame, rng: np.random.Generator, sample_size: int) -> Dict[str, pd.DataFrame]:
    tables: Dict[str, pd.DataFrame] = {
        "job_summary": summaries.job_summary(df),
        "numeric_by_label": summaries.numeric_by_label(df),
        "sample_rows": sample_rows(df, sample_size, rng),
    }
    for col in SUMMARY_COLUMNS:
        tables[f"crosstab_{col}"] = summaries.crosstab_with_label(df, col).reset_index()
        tables[f"proportions_{col}"] = summaries.label_proportions(df, col)
    tables["potential_clients"] = summaries.label_proportions(df, "potential_client")
    return tables


def run_pipeline(
    raw: pd.DataFrame,
    config: AnalysisConfig,
    rng: np.random.Generator,
) -> AnalysisResult:
    """Run coercion through evaluation on one raw frame."""
    typed = coerce_types(raw)
    dataset, balance_transformer = derive_features(typed)
    design = build_design_matrix(dataset)

    split = split_train_test(design.n_rows, rng, train_frac=config.train_frac)
    X_train, y_train = design.take(split.train_idx)
    X_test, y_test = design.take(split.test_idx)
    logger.info("Split sizes: train=%d, test=%d", split.n_train, split.n_test)

    full_model = fit_logistic(X_train, y_train)
    logger.info(
        "Full model: %d of %d predictors significant at alpha=%.2f",
        len(significant_columns(full_model, config.alpha)),
        len(full_model.feature_names),
        config.alpha,
    )

    reduced_cols = resolve_columns(design, config.reduced_columns)
    reduced_model = fit_logistic(X_train, y_train, columns=reduced_cols)

    evaluations = {
        "full": prediction_eval.evaluate_model(full_model, X_test, y_test, name="full", cutoffs=config.cutoffs),
        "reduced": prediction_eval.evaluate_model(
            reduced_model, X_test, y_test, name="reduced", cutoffs=config.cutoffs
        ),
    }

    tables = build_summary_tables(dataset, rng, config.sample_size)
    tables["coefficients_full"] = summaries.coefficient_table(full_model)
    tables["coefficients_reduced"] = summaries.coefficient_table(reduced_model)
    for name, ev in evaluations.items():
        tables[f"roc_{name}"] = ev.roc
        tables[f"confusion_{name}"] = ev.report()

    return AnalysisResult(
        dataset=dataset,
        design=design,
        split=split,
        balance_transformer=balance_transformer,
        full_model=full_model,
        reduced_model=reduced_model,
        evaluations=evaluations,
        tables=tables,
    )


def write_tables(result: AnalysisResult, table_dir: Path = TABLE_DIR) -> List[Path]:
    table_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for name, table in result.tables.items():
        path = table_dir / f"{name}.csv"
        table.to_csv(path, index=False)
        written.append(path)
    metrics_path = table_dir / "model_metrics.csv"
    result.metrics_table().to_csv(metrics_path, index=False)
    written.append(metrics_path)
    logger.info("Saved %d tables to %s", len(written), table_dir)
    return written


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fit and evaluate the subscription logistic models.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory containing the data file.")
    parser.add_argument("--filename", type=str, default=None, help="Data file name.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the train/test permutation.")
    parser.add_argument("--train-frac", type=float, default=None, help="Training fraction (default 0.8).")
    parser.add_argument("--table-dir", type=Path, default=TABLE_DIR, help="Output directory for CSV tables.")
    return parser.parse_args(argv)


def apply_overrides(config: AnalysisConfig, args: argparse.Namespace) -> AnalysisConfig:
    if args.data_dir is not None:
        config.data_dir = args.data_dir
    if args.filename is not None:
        config.filename = args.filename
    if args.seed is not None:
        config.seed = args.seed
    if args.train_frac is not None:
        config.train_frac = args.train_frac
    return config


def main(argv: Optional[Sequence[str]] = None) -> AnalysisResult:
    configure_logging()
    args = _parse_args(argv)
    config = apply_overrides(load_analysis_config(args.config), args)

    try:
        raw = load_raw_data(data_dir=config.data_dir, filename=config.filename)
        result = run_pipeline(raw, config, reproducible_numpy_rng(config.seed))
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        logger.error("Run `python -m term_deposit.src.data.check_data` to verify dataset placement.")
        sys.exit(1)
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        sys.exit(1)

    write_tables(result, args.table_dir)
    return result


if __name__ == "__main__":
    main()
