"""Verbosity-controlled logging of realization passes.

Every message is about one element kind, so rewrites() and checks() take the
kind and prefix it: "heading: applying recipe 'numbered' (#0)".
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

REWRITES_LEVEL = 25  # between INFO and WARNING
CHECKS_LEVEL = 15  # between DEBUG and INFO

logging.addLevelName(REWRITES_LEVEL, "REWRITES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_REWRITES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

# Indexed by verbosity
_LEVELS = (logging.ERROR, REWRITES_LEVEL, CHECKS_LEVEL, logging.DEBUG)


class StrataLogger(logging.Logger):
    """Logger with one method per verbosity step.

    - rewrites(): a recipe replaced a node (-v)
    - checks(): a recipe was considered and passed over (-vv)
    - debug(): finalize overlays and memo hits (-vvv)
    """

    def rewrites(self, kind: str, msg: str, *args: Any) -> None:
        """Log that content of `kind` was rewritten."""
        if self.isEnabledFor(REWRITES_LEVEL):
            self._log(REWRITES_LEVEL, f"{kind}: {msg}", args)

    def checks(self, kind: str, msg: str, *args: Any) -> None:
        """Log a recipe candidate check for content of `kind`, indented under its rewrite."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, f"  {kind}: {msg}", args)


def get_logger() -> StrataLogger:
    """The process-wide "strata" logger."""
    logging.setLoggerClass(StrataLogger)
    logger = logging.getLogger("strata")
    assert isinstance(logger, StrataLogger)
    return logger


def level_for(verbosity: int) -> int:
    """The logging level for a verbosity count, clamped to 0..3."""
    return _LEVELS[min(max(verbosity, VERBOSITY_SILENT), VERBOSITY_DEBUG)]


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Point the strata logger at `stream` (stderr by default) at a verbosity.

    Safe to call repeatedly; earlier handlers are replaced.
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(level_for(verbosity))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop all handlers and go back to errors only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def rewrites_enabled() -> bool:
    return get_logger().isEnabledFor(REWRITES_LEVEL)


def checks_enabled() -> bool:
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    return get_logger().isEnabledFor(logging.DEBUG)
