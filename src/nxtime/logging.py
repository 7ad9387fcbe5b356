"""Diagnostic logging for nxtime.

Timing rows go to the report sink (stdout or the ``-o`` file); every
diagnostic goes through the ``nxtime`` logger to stderr instead, so a
redirected report never contains warnings such as an abnormal
termination of the measured command.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOGGER_NAME = "nxtime"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route nxtime diagnostics to the operator's error channel.

    ``-v`` shows per-run spawn details (DEBUG), ``-q`` leaves only
    warnings such as signaled runs.  Calling this again replaces the
    previous handler, so each CLI invocation starts clean.

    Args:
        verbose: Log at DEBUG. Wins over *quiet*.
        quiet: Log at WARNING.
        stream: Where diagnostics are written; the current ``sys.stderr``
            when omitted.  Never the report sink.

    Returns:
        The ``nxtime`` logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, e.g. ``nxtime.runner``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
