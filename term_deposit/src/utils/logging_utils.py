"""Logging configuration for the analysis launcher and CLI entry points.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once per entry point, so notebooks and repeated CLI calls do
not accumulate duplicate handlers.

Used by
-------
- ``term_deposit/run_analysis.py``
- ``term_deposit/src/experiments/run_logit.py``
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"

# Parent logger of every module in the package.
PACKAGE_LOGGER = "term_deposit"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    logger_name: Optional[str] = PACKAGE_LOGGER,
    *,
    force: bool = True,
    capture_warnings: bool = True,
) -> logging.Logger:
    """Configure and return a logger.

    Parameters
    ----------
    level:
        Log level (default: INFO).
    log_file:
        Optional path to a log file. A directory (existing, or a path ending
        with a separator) gets ``<logger_name>.log`` appended.
    logger_name:
        Logger to configure. Defaults to the package logger so that messages
        from ``term_deposit.src.*`` modules are routed through the same
        handlers. ``None`` configures the root logger.
    force:
        If True (default), remove existing handlers first.
    capture_warnings:
        If True (default), route Python warnings (pandas, statsmodels) through
        logging.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if force:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    console_handler = logging.StreamHandler(stream=sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        if log_path.is_dir() or str(log_path).endswith(("/", "\\")):
            name = (logger_name or "root").replace("/", "_")
            log_path = log_path / f"{name}.log"

        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    if capture_warnings:
        logging.captureWarnings(True)

    return logger


__all__ = ["configure_logging", "DEFAULT_LOG_FORMAT", "PACKAGE_LOGGER"]
