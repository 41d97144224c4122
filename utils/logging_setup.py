"""Logger configuration shared by the command line entry points."""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_log_level(level_str: str) -> int:
    level = getattr(logging, str(level_str).upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def setup_logger(level: str = "INFO", log_file: Optional[str] = None, name: Optional[str] = None) -> logging.Logger:
    """Attach a stderr handler (and optionally a UTF-8 file handler) to the *name* logger.

    The root logger is used when *name* is omitted so that module loggers of
    the ``data`` and ``aggregation`` packages share the same handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_log_level(level))
    logger.handlers.clear()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(parse_log_level(level))
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(parse_log_level(level))
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


__all__ = ["parse_log_level", "setup_logger"]
