"""Shared utilities module."""

from __future__ import annotations

from playoff_pool.utils.assertions import (
    assert_columns,
    assert_dtypes,
    assert_no_nulls,
    assert_value_range,
)
from playoff_pool.utils.logger import (
    DEBUG,
    NORMAL,
    QUIET,
    VERBOSE,
    configure_logging,
    resolve_level,
)

__all__ = [
    "DEBUG",
    "NORMAL",
    "QUIET",
    "VERBOSE",
    "assert_columns",
    "assert_dtypes",
    "assert_no_nulls",
    "assert_value_range",
    "configure_logging",
    "resolve_level",
]
