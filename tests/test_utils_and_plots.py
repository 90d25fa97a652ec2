import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from term_deposit.src.data import check_data
from term_deposit.src.utils import configure_logging, reproducible_numpy_rng, set_global_seed
from term_deposit.src.visualization import (
    plot_label_proportions,
    plot_roc_curves,
    plot_threshold_comparison,
)


def test_configure_logging_writes_file(tmp_path: Path) -> None:
    (tmp_path / "logs").mkdir()
    logger = configure_logging(log_file=tmp_path / "logs", logger_name="term_deposit.test_run")
    logging.getLogger("term_deposit.test_run.child").info("hello from child")
    for h in logger.handlers:
        h.flush()
    log_file = tmp_path / "logs" / "term_deposit.test_run.log"
    assert "hello from child" in log_file.read_text()

    again = configure_logging(logger_name="term_deposit.test_run")
    assert len(again.handlers) == 1
    for h in list(again.handlers):
        again.removeHandler(h)


def test_seeded_generators() -> None:
    a = reproducible_numpy_rng(5).permutation(10)
    b = reproducible_numpy_rng(5).permutation(10)
    assert np.array_equal(a, b)
    set_global_seed(3)
    x = np.random.rand()
    set_global_seed(3)
    assert np.random.rand() == x


def test_plots_are_saved(tmp_path: Path) -> None:
    roc = pd.DataFrame({"threshold": [np.inf, 0.7, 0.2], "fpr": [0.0, 0.0, 1.0], "tpr": [0.0, 1.0, 1.0]})
    fig = plot_roc_curves({"full": roc}, {"full": 1.0}, save_path=tmp_path / "roc.png")
    plt.close(fig)

    report = pd.DataFrame(
        {
            "model": ["full", "full"],
            "cutoff": [0.5, 0.2],
            "accuracy": [0.9, 0.8],
            "sensitivity": [0.4, 0.7],
            "specificity": [0.95, 0.85],
        }
    )
    fig = plot_threshold_comparison(report, save_path=tmp_path / "thresholds.png")
    plt.close(fig)

    props = pd.DataFrame({"level": ["low", "mid", "high"], "n": [10, 20, 5], "n_subscribed": [2, 3, 2]})
    props["proportion"] = props["n_subscribed"] / props["n"]
    fig = plot_label_proportions(props, "age_categ", overall_rate=0.2, save_path=tmp_path / "props.png")
    plt.close(fig)

    for name in ["roc.png", "thresholds.png", "props.png"]:
        assert (tmp_path / name).stat().st_size > 0


def test_check_data_cli(tmp_path: Path, bank_csv: Path, capsys) -> None:
    assert check_data.main(["--data-dir", str(tmp_path / "nowhere")]) == 1
    assert check_data.main(["--data-dir", str(bank_csv.parent)]) == 0
    out = capsys.readouterr().out
    assert "Rows: 3000" in out
    assert "job='unknown'" in out
