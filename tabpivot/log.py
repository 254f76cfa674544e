# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Logging helpers for tabpivot.

Library modules only call get_logger(__name__). The command-line entry
point calls configure_logging() once; nothing else attaches handlers,
and the root logger is never touched.
"""

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "tabpivot"
LOG_LEVEL_ENV = "TABPIVOT_LOG_LEVEL"

DEFAULT_FMT = "%(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger in the tabpivot hierarchy."""
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Attach a stderr handler to the tabpivot logger.

    Args:
        level: Logging level name or number. Defaults to the
            TABPIVOT_LOG_LEVEL environment variable, or WARNING.
        fmt: Log message format.
        force: Replace handlers installed by an earlier call.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers and not force:
        for handler in logger.handlers:
            handler.setLevel(level)
        return

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FMT))
    logger.addHandler(handler)
    logger.propagate = False
