"""Logging configuration helpers for the quiz scripts."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(verbose: bool = False) -> Logger:
    """Configure basic logging and return the project logger.

    Stays at WARNING unless verbose so log lines do not interleave with the quiz.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("country_quiz")
