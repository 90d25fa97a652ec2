"""Project-wide utilities (logging, seeds)."""

from __future__ import annotations

from .logging_utils import DEFAULT_LOG_FORMAT, PACKAGE_LOGGER, configure_logging
from .seed_utils import DEFAULT_SEED, reproducible_numpy_rng, set_global_seed

__all__ = [
    "configure_logging",
    "DEFAULT_LOG_FORMAT",
    "PACKAGE_LOGGER",
    "DEFAULT_SEED",
    "set_global_seed",
    "reproducible_numpy_rng",
]
