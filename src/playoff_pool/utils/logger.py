"""Logging set-up for the pool engine and its CLI.

Modules log through ``logging.getLogger(__name__)``; this module only
decides how much of that reaches the terminal.  The CLI picks one of four
verbosities:

* ``QUIET``: warnings only (dropped ratings, malformed data).
* ``NORMAL``: plus odds-run summaries and commits.
* ``VERBOSE``: plus one line per completed or reopened series.
* ``DEBUG``: plus cascade resets and cache invalidation.

``VERBOSE`` is a custom level (15) registered with :mod:`logging`.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import TextIO

VERBOSE: int = 15
"""Series-level edit messages from the bracket mutator."""

logging.addLevelName(VERBOSE, "VERBOSE")

QUIET: int = logging.WARNING
NORMAL: int = logging.INFO
DEBUG: int = logging.DEBUG

LOG_LEVEL_ENV: str = "PLAYOFF_POOL_LOG_LEVEL"

_LEVELS: dict[str, int] = {
    "QUIET": QUIET,
    "NORMAL": NORMAL,
    "VERBOSE": VERBOSE,
    "DEBUG": DEBUG,
}

_POOL_LOGGER: str = "playoff_pool"
_LOG_FORMAT: str = "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s"


def resolve_level(level: str | None = None, environ: Mapping[str, str] | None = None) -> int:
    """Map a verbosity name to a numeric log level.

    An explicit *level* wins over ``PLAYOFF_POOL_LOG_LEVEL``, which wins
    over ``NORMAL``.  Names are case-insensitive.

    Raises:
        ValueError: If the name is not one of the four verbosities.
    """
    env: Mapping[str, str] = os.environ if environ is None else environ
    name = level if level is not None else env.get(LOG_LEVEL_ENV, "NORMAL")
    try:
        return _LEVELS[name.upper()]
    except KeyError:
        msg = f"Unknown log level {name!r}. Valid levels: {', '.join(sorted(_LEVELS))}"
        raise ValueError(msg) from None


def configure_logging(level: str | None = None, *, stream: TextIO | None = None) -> int:
    """Send ``playoff_pool`` records at *level* or above to *stream*.

    Replaces any handler installed by an earlier call, so the CLI callback
    can run more than once per process.  Records do not propagate to the
    root logger.

    Args:
        level: Verbosity name; see :func:`resolve_level`.
        stream: Destination; defaults to ``sys.stderr`` so log lines never
            mix with tables printed on stdout.

    Returns:
        The numeric level applied.

    Raises:
        ValueError: If the verbosity name is unknown.
    """
    numeric_level = resolve_level(level)

    pool_logger = logging.getLogger(_POOL_LOGGER)
    pool_logger.setLevel(numeric_level)
    for handler in pool_logger.handlers[:]:
        pool_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    pool_logger.addHandler(handler)
    pool_logger.propagate = False
    return numeric_level
