"""Logging setup shared by the command-line entry points."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Iterable, Optional

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

# Module loggers of the rule resolver and validators.
PACKAGE_LOGGERS = ("rules", "validator")


def setup_logging(
    level: int = logging.INFO,
    *,
    package_level: Optional[int] = None,
    packages: Iterable[str] = PACKAGE_LOGGERS,
) -> Logger:
    """Configure root logging and return the application logger.

    ``package_level`` overrides the level of the resolver and validator
    loggers, e.g. to trace rule resolution without debug output elsewhere.
    """

    logging.basicConfig(level=level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)
    if package_level is not None:
        for name in packages:
            logging.getLogger(name).setLevel(package_level)
    logger = logging.getLogger("pkmnrules")
    logger.debug("Logging initialized at %s.", logging.getLevelName(level))
    return logger


__all__ = ["DEFAULT_DATEFMT", "DEFAULT_FORMAT", "PACKAGE_LOGGERS", "setup_logging"]
