"""Logging setup for the notebook-rag service."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "notebook_rag"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Every module logs through ``logging.getLogger(__name__)``, so all of
    them propagate to the logger configured here. Calling this twice
    replaces the handler instead of duplicating output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
