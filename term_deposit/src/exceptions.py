"""Error taxonomy for the term-deposit analysis.

All errors are fatal to a run: the launcher logs them with the offending
column/value and exits. They derive from :class:`ValueError` so that callers
written against plain pandas/scikit-learn validation keep working.
"""

from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for every pipeline error."""


class SchemaError(AnalysisError):
    """A required column is absent or cannot be parsed into its declared type."""


class ValueDomainError(AnalysisError):
    """A column holds values outside its allowed domain.

    Raised for yes/no columns containing anything else, and for categorical
    columns whose reference level, or every level, is unobserved after filtering.
    """


class DegenerateTransformError(AnalysisError):
    """A fitted transform was requested on a zero-variance column."""


class FitError(AnalysisError):
    """The logistic model cannot be fit (rank deficiency, single class, no convergence)."""


__all__ = [
    "AnalysisError",
    "SchemaError",
    "ValueDomainError",
    "DegenerateTransformError",
    "FitError",
]
