import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

JOBS = [
    "admin.",
    "blue-collar",
    "entrepreneur",
    "housemaid",
    "management",
    "retired",
    "self-employed",
    "services",
    "student",
    "technician",
    "unemployed",
]
MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]


def _yes_no(flags: np.ndarray) -> np.ndarray:
    return np.where(flags, "yes", "no")


def make_raw_bank(n: int = 3000, seed: int = 0, n_unknown_job: int = 20) -> pd.DataFrame:
    """Synthetic raw table with the bank marketing header and text values."""
    rng = np.random.default_rng(seed)

    age = rng.integers(18, 90, size=n)
    job = rng.choice(JOBS, size=n)
    job[:n_unknown_job] = "unknown"
    marital = rng.choice(["single", "married", "divorced"], size=n, p=[0.3, 0.55, 0.15])
    education = rng.choice(["primary", "secondary", "tertiary", "unknown"], size=n, p=[0.15, 0.5, 0.3, 0.05])
    in_default = rng.random(n) < 0.03
    balance = np.round(rng.normal(1300, 2500, size=n)).astype(int)
    housing = rng.random(n) < 0.55
    loan = rng.random(n) < 0.15
    contact = rng.choice(["cellular", "telephone", "unknown"], size=n, p=[0.65, 0.07, 0.28])
    day = rng.integers(1, 32, size=n)
    month = rng.choice(MONTHS, size=n)
    duration = np.round(rng.exponential(260, size=n)).astype(int)
    campaign = rng.integers(1, 8, size=n)

    contacted = rng.random(n) < 0.25
    pdays = np.where(contacted, rng.integers(1, 400, size=n), -1)
    previous = np.where(contacted, rng.integers(1, 6, size=n), 0)
    poutcome = np.where(
        contacted,
        rng.choice(["failure", "other", "success", "unknown"], size=n, p=[0.5, 0.2, 0.2, 0.1]),
        "unknown",
    )

    eta = (
        -2.2
        + 0.003 * duration
        + 1.2 * (poutcome == "success")
        - 0.5 * housing
        - 0.4 * loan
        + 0.4 * np.isin(month, ["mar", "sep", "oct", "dec"])
    )
    y = rng.random(n) < 1.0 / (1.0 + np.exp(-eta))

    return pd.DataFrame(
        {
            "age": age.astype(str),
            "job": job,
            "marital": marital,
            "education": education,
            "default": _yes_no(in_default),
            "balance": balance.astype(str),
            "housing": _yes_no(housing),
            "loan": _yes_no(loan),
            "contact": contact,
            "day": day.astype(str),
            "month": month,
            "duration": duration.astype(str),
            "campaign": campaign.astype(str),
            "pdays": pdays.astype(str),
            "previous": previous.astype(str),
            "poutcome": poutcome,
            "y": _yes_no(y),
        }
    )


@pytest.fixture(scope="session")
def raw_bank() -> pd.DataFrame:
    return make_raw_bank()


@pytest.fixture()
def raw_small() -> pd.DataFrame:
    # Small frame covering every reference level once.
    return pd.DataFrame(
        {
            "age": ["35", "24", "25", "60", "61", "40"],
            "job": ["admin.", "unemployed", "unknown", "technician", "retired", "admin."],
            "marital": ["married", "single", "single", "divorced", "married", "single"],
            "education": ["tertiary", "unknown", "secondary", "primary", "unknown", "secondary"],
            "default": ["no", "no", "yes", "no", "yes", "no"],
            "balance": ["2000", "-150", "0", "1500", "3000", "2000"],
            "housing": ["no", "yes", "no", "yes", "no", "no"],
            "loan": ["no", "no", "yes", "no", "no", "yes"],
            "contact": ["cellular", "unknown", "telephone", "unknown", "cellular", "cellular"],
            "day": ["5", "1", "17", "1", "30", "12"],
            "month": ["may", "jan", "jun", "jan", "dec", "aug"],
            "duration": ["300", "120", "45", "600", "80", "210"],
            "campaign": ["1", "2", "1", "3", "1", "1"],
            "pdays": ["-1", "45", "-1", "10", "-1", "-1"],
            "previous": ["0", "2", "0", "1", "0", "0"],
            "poutcome": ["unknown", "success", "unknown", "failure", "unknown", "unknown"],
            "y": ["yes", "no", "no", "yes", "no", "yes"],
        }
    )


@pytest.fixture()
def bank_csv(tmp_path: Path, raw_bank: pd.DataFrame) -> Path:
    path = tmp_path / "bank.csv"
    raw_bank.to_csv(path, sep=";", index=False, quoting=1)  # csv.QUOTE_ALL
    return path
