import numpy as np
import pandas as pd
import pytest

from term_deposit.src.data.coerce import coerce_types
from term_deposit.src.data.features import (
    OrderNormTransformer,
    add_engagement_score,
    add_trans_balance,
    add_was_contacted,
    age_category,
    derive_features,
    drop_unknown_job,
    engagement_raw,
    min_max_scale,
    sample_rows,
)
from term_deposit.src.exceptions import DegenerateTransformError


@pytest.fixture()
def typed_small(raw_small: pd.DataFrame) -> pd.DataFrame:
    return coerce_types(raw_small)


@pytest.fixture(scope="module")
def derived_bank(raw_bank: pd.DataFrame) -> pd.DataFrame:
    df, _ = derive_features(coerce_types(raw_bank))
    return df


def test_drop_unknown_job_is_the_only_row_filter(raw_bank: pd.DataFrame) -> None:
    typed = coerce_types(raw_bank)
    n_unknown = int((typed["job"] == "unknown").sum())
    derived, _ = derive_features(typed)
    assert len(derived) == len(typed) - n_unknown
    assert "unknown" not in list(derived["job"].cat.categories)


def test_drop_unknown_job_does_not_mutate_input(typed_small: pd.DataFrame) -> None:
    before = typed_small.copy()
    out = drop_unknown_job(typed_small)
    pd.testing.assert_frame_equal(typed_small, before)
    assert len(out) == 5


def test_age_category_boundaries() -> None:
    ages = pd.Series([18, 24, 25, 26, 59, 60, 61, 99])
    assert age_category(ages).astype(str).tolist() == [
        "low",
        "low",
        "low",
        "mid",
        "mid",
        "mid",
        "high",
        "high",
    ]


def test_age_category_levels() -> None:
    cats = list(age_category(pd.Series([30])).cat.categories)
    assert cats == ["low", "mid", "high"]


def test_was_contacted() -> None:
    df = pd.DataFrame({"pdays": [-1, 45, 0]})
    assert add_was_contacted(df)["was_contacted"].tolist() == [False, True, True]


def test_engagement_raw_example() -> None:
    row = pd.DataFrame(
        {
            "age": [35],
            "balance": [2000],
            "duration": [300],
            "housing_loan": [False],
            "personal_loan": [False],
            "in_default": [False],
        }
    )
    assert engagement_raw(row).iloc[0] == pytest.approx(320.0)


def test_engagement_raw_loans_and_clamp() -> None:
    df = pd.DataFrame(
        {
            "balance": [0, 0, -50000],
            "duration": [100, 100, 10],
            "housing_loan": [True, True, False],
            "personal_loan": [False, True, False],
            "in_default": [False, False, False],
        }
    )
    assert engagement_raw(df).tolist() == pytest.approx([90.0, 70.0, 0.0])


def test_in_default_scores_zero(derived_bank: pd.DataFrame) -> None:
    in_default = derived_bank["in_default"]
    assert in_default.any()
    assert (derived_bank.loc[in_default, "engagement_score"] == 0.0).all()


def test_engagement_score_bounds_and_rounding(derived_bank: pd.DataFrame) -> None:
    score = derived_bank["engagement_score"]
    assert score.min() == 0.0
    assert score.max() == 1.0
    assert np.allclose(score, score.round(3))


def test_engagement_score_monotone_in_duration() -> None:
    df = pd.DataFrame(
        {
            "balance": [1000, 1000, 1000],
            "duration": [10, 200, 400],
            "housing_loan": [False, False, False],
            "personal_loan": [False, False, False],
            "in_default": [False, False, False],
        }
    )
    score = add_engagement_score(df)["engagement_score"]
    assert score.is_monotonic_increasing


def test_engagement_score_degenerate_is_nan() -> None:
    df = pd.DataFrame(
        {
            "balance": [500, 900],
            "duration": [100, 50],
            "housing_loan": [False, False],
            "personal_loan": [False, False],
            "in_default": [True, True],
        }
    )
    score = add_engagement_score(df)["engagement_score"]
    assert score.isna().all()


def test_min_max_scale_constant_series_is_nan() -> None:
    assert min_max_scale(pd.Series([3.0, 3.0], name="x")).isna().all()


def test_trans_balance_monotone_with_ties(derived_bank: pd.DataFrame) -> None:
    ordered = derived_bank.sort_values("balance")
    assert ordered["trans_balance"].is_monotonic_increasing
    # equal balances share a value
    per_balance = derived_bank.groupby("balance")["trans_balance"].nunique()
    assert (per_balance == 1).all()


def test_trans_balance_is_roughly_standard_normal(derived_bank: pd.DataFrame) -> None:
    z = derived_bank["trans_balance"]
    assert abs(z.mean()) < 0.05
    assert z.std() == pytest.approx(1.0, abs=0.05)


def test_order_norm_matches_rank_formula() -> None:
    from scipy import stats

    x = np.array([10.0, 20.0, 20.0, 30.0])
    t = OrderNormTransformer().fit(x)
    expected = stats.norm.ppf((np.array([1.0, 2.5, 2.5, 4.0]) - 0.5) / 4)
    assert np.allclose(t.transform(x), expected)


def test_order_norm_reuses_fitted_table() -> None:
    train = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    t = OrderNormTransformer().fit(train)
    new = np.array([-10.0, 1.5, 2.0, 4.5, 50.0])
    out = t.transform(new)
    assert np.all(np.diff(out) > 0)
    assert out[2] == pytest.approx(t.transform(np.array([2.0]))[0])

    df = pd.DataFrame({"balance": [2, 3]})
    out_df, same = add_trans_balance(df, transformer=t)
    assert same is t
    assert out_df["trans_balance"].tolist() == pytest.approx(t.transform(np.array([2.0, 3.0])).tolist())


def test_order_norm_degenerate_raises() -> None:
    with pytest.raises(DegenerateTransformError):
        OrderNormTransformer().fit(np.array([7.0, 7.0, 7.0]))


def test_order_norm_requires_fit() -> None:
    with pytest.raises(RuntimeError):
        OrderNormTransformer().transform(np.array([1.0]))


def test_potential_client(typed_small: pd.DataFrame) -> None:
    df, _ = derive_features(typed_small)
    flagged = df.loc[df["potential_client"]]
    # only the 35-year-old with balance 2000, no loans, never contacted
    assert flagged["age"].tolist() == [35]


def test_derived_columns_present(derived_bank: pd.DataFrame) -> None:
    for col in ["age_categ", "was_contacted", "trans_balance", "engagement_score", "potential_client"]:
        assert col in derived_bank.columns


def test_sample_rows_is_reproducible(derived_bank: pd.DataFrame) -> None:
    a = sample_rows(derived_bank, 50, np.random.default_rng(1))
    b = sample_rows(derived_bank, 50, np.random.default_rng(1))
    assert len(a) == 50
    pd.testing.assert_frame_equal(a, b)
    assert len(sample_rows(derived_bank, 10**6, np.random.default_rng(1))) == len(derived_bank)
