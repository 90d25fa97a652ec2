"""Source package for the bank term-deposit subscription analysis.

Package layout
--------------
- data: loading, type coercion, feature derivation, design matrix
- models: train/test split and unpenalized logistic regression
- evaluation: ROC/AUC, confusion matrices, exploratory summary tables
- visualization: report figures
- experiments: the runnable full/reduced model pipeline
- utils: logging and seeded random sources

Heavy dependencies (statsmodels, matplotlib) are imported by the submodules
that need them, not here.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "data",
    "models",
    "evaluation",
    "visualization",
    "experiments",
    "utils",
    "exceptions",
]
