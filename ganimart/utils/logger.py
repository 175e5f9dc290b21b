"""Logging setup for the storefront.

Every module logs through the single ``ganimart`` logger; ``setup_logger`` is
called once from the Streamlit entry point.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = "ganimart",
    level: int | str = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure and return the application logger.

    Streamlit re-executes the entry script on every interaction, so a logger
    that already has handlers is returned as-is instead of stacking duplicates.

    Args:
        name: Logger name.
        level: Logging level, as an int or a name such as "DEBUG".
        log_file: Optional path to a log file. If None, logs to stderr only.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    log.setLevel(_resolve_level(level))
    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(fmt)
    log.addHandler(stream)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        log.addHandler(fh)

    return log


def get_logger(name: str = "ganimart") -> logging.Logger:
    """Return the application logger. Use after setup_logger has been called."""
    return logging.getLogger(name)
