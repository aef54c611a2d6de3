# justify/log.py
from __future__ import annotations

import logging

LOGGER_NAME = "justify"


def setup_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """
    Configure the `justify` logger with a single stderr handler.

    Safe to call more than once; handlers are replaced, not stacked.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
