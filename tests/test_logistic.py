import numpy as np
import pandas as pd
import pytest

from term_deposit.src.exceptions import FitError, SchemaError
from term_deposit.src.models.logistic import (
    INTERCEPT,
    collinear_columns,
    fit_logistic,
    round_half_away_from_zero,
    significant_columns,
    split_train_test,
)


@pytest.fixture(scope="module")
def simulated() -> tuple[pd.DataFrame, pd.Series]:
    rng = np.random.default_rng(7)
    n = 4000
    X = pd.DataFrame(
        {
            "x1": rng.normal(size=n),
            "x2": rng.integers(0, 2, size=n),
            "noise": rng.normal(size=n),
        }
    )
    eta = -0.5 + 1.2 * X["x1"] - 0.8 * X["x2"]
    y = pd.Series(rng.random(n) < 1.0 / (1.0 + np.exp(-eta)), name="subscribed")
    return X, y


def test_split_sizes_and_disjointness() -> None:
    split = split_train_test(1001, np.random.default_rng(42))
    assert split.n_train == 801
    assert split.n_train + split.n_test == 1001
    assert np.intersect1d(split.train_idx, split.test_idx).size == 0
    assert np.array_equal(np.sort(np.concatenate([split.train_idx, split.test_idx])), np.arange(1001))


def test_split_is_reproducible() -> None:
    a = split_train_test(500, np.random.default_rng(42))
    b = split_train_test(500, np.random.default_rng(42))
    c = split_train_test(500, np.random.default_rng(43))
    assert np.array_equal(a.train_idx, b.train_idx)
    assert np.array_equal(a.test_idx, b.test_idx)
    assert not np.array_equal(a.train_idx, c.train_idx)


def test_split_rounding() -> None:
    assert split_train_test(7, np.random.default_rng(0)).n_train == 6  # 5.6
    assert split_train_test(11, np.random.default_rng(0)).n_train == 9  # 8.8
    assert split_train_test(13, np.random.default_rng(0)).n_train == 10  # 10.4
    assert round_half_away_from_zero(2.5) == 3
    assert round_half_away_from_zero(-2.5) == -3
    assert round_half_away_from_zero(2.4999) == 2


def test_split_rejects_bad_fraction() -> None:
    with pytest.raises(ValueError):
        split_train_test(10, np.random.default_rng(0), train_frac=1.0)


def test_fit_recovers_coefficients(simulated) -> None:
    X, y = simulated
    fitted = fit_logistic(X, y)
    assert fitted.feature_names == ("x1", "x2", "noise")
    assert list(fitted.params.index) == [INTERCEPT, "x1", "x2", "noise"]
    assert fitted.params["x1"] == pytest.approx(1.2, abs=0.15)
    assert fitted.params["x2"] == pytest.approx(-0.8, abs=0.2)
    assert fitted.params[INTERCEPT] == pytest.approx(-0.5, abs=0.15)
    assert fitted.n_obs == len(X)
    assert fitted.converged


def test_predict_proba_is_pure(simulated) -> None:
    X, y = simulated
    fitted = fit_logistic(X, y)
    p1 = fitted.predict_proba(X.iloc[:10])
    p2 = fitted.predict_proba(X.iloc[:10])
    pd.testing.assert_series_equal(p1, p2)
    assert ((p1 > 0) & (p1 < 1)).all()
    # extra columns are ignored, column order does not matter
    shuffled = X.iloc[:10][["noise", "x2", "x1"]].assign(other=1.0)
    pd.testing.assert_series_equal(fitted.predict_proba(shuffled), p1)


def test_reduced_model_uses_subset(simulated) -> None:
    X, y = simulated
    reduced = fit_logistic(X, y, columns=["x1", "x2"])
    assert reduced.feature_names == ("x1", "x2")
    assert "noise" not in reduced.params.index


def test_reduced_model_unknown_column(simulated) -> None:
    X, y = simulated
    with pytest.raises(SchemaError, match="missing_col"):
        fit_logistic(X, y, columns=["x1", "missing_col"])


def test_significant_columns(simulated) -> None:
    X, y = simulated
    fitted = fit_logistic(X, y)
    sig = significant_columns(fitted, alpha=0.01)
    assert "x1" in sig
    assert "x2" in sig
    assert INTERCEPT not in sig


def test_single_class_label_fails(simulated) -> None:
    X, _ = simulated
    y = pd.Series(np.zeros(len(X), dtype=bool), name="subscribed")
    with pytest.raises(FitError, match="single class"):
        fit_logistic(X, y)


def test_rank_deficient_design_fails(simulated) -> None:
    X, y = simulated
    X_bad = X.assign(x1_copy=2.0 * X["x1"])
    with pytest.raises(FitError, match="x1_copy"):
        fit_logistic(X_bad, y)


def test_all_zero_dummy_is_rank_deficient(simulated) -> None:
    X, y = simulated
    X_bad = X.assign(job_never=0)
    with pytest.raises(FitError, match="job_never"):
        fit_logistic(X_bad, y)


def test_collinear_columns() -> None:
    df = pd.DataFrame({"a": [1.0, 0.0, 1.0, 0.0], "b": [0.0, 1.0, 0.0, 1.0], "const": 1.0})
    assert collinear_columns(df[["const", "a", "b"]]) == ["b"]


def test_summary_frame(simulated) -> None:
    X, y = simulated
    summary = fit_logistic(X, y).summary_frame()
    assert list(summary.columns) == ["term", "estimate", "std_error", "z_value", "p_value", "odds_ratio"]
    assert summary["term"].tolist() == [INTERCEPT, "x1", "x2", "noise"]
    assert np.allclose(summary["odds_ratio"], np.exp(summary["estimate"]))
