"""Logging setup for the logfold command.

Records go to stdout, so diagnostics always go to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.WARNING, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``logfold`` logger."""

    log = logging.getLogger("logfold")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(level.upper() if isinstance(level, str) else level)
    log.propagate = False
    return log
