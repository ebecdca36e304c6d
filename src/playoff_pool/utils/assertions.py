"""DataFrame validation helpers backed by Pandera.

Provides a functional API for validating the tabular inputs of the pool
engine: column presence, dtypes, null values, and value ranges.

All functions delegate to Pandera and propagate
`pandera.errors.SchemaError` on failure.

Usage:
    >>> import pandas as pd
    >>> from playoff_pool.utils.assertions import assert_columns, assert_value_range
    >>> df = pd.DataFrame({"team_id": [1, 2], "rating": [3, 10]})
    >>> assert_columns(df, ["team_id", "rating"])
    >>> assert_value_range(df, "rating", min_val=1, max_val=10)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd  # type: ignore[import-untyped]
import pandera.pandas as pa


def assert_columns(df: pd.DataFrame, required: Sequence[str]) -> None:
    """Validate that all required columns exist in the DataFrame.

    Args:
        df: DataFrame to check.
        required: Column names that must be present.

    Raises:
        pa.errors.SchemaError: If any required columns are missing.
    """
    if not required:
        return
    pa.DataFrameSchema(
        {col: pa.Column() for col in required},
        strict=False,
    ).validate(df)


def assert_dtypes(df: pd.DataFrame, expected: Mapping[str, str | type]) -> None:
    """Validate column dtype mapping.

    Args:
        df: DataFrame to check.
        expected: Mapping of column name to expected dtype (as string or
            type, e.g. ``{"rating": "int64"}``).

    Raises:
        pa.errors.SchemaError: If any column's dtype does not match the
            expectation, or a specified column is not present.
    """
    if not expected:
        return
    pa.DataFrameSchema(
        {col: pa.Column(dtype=dtype) for col, dtype in expected.items()},
        strict=False,
    ).validate(df)


def assert_no_nulls(
    df: pd.DataFrame,
    columns: Sequence[str] | None = None,
) -> None:
    """Validate no null values in specified or all columns.

    Args:
        df: DataFrame to check.
        columns: Specific columns to check.  ``None`` checks all columns.

    Raises:
        pa.errors.SchemaError: If null values are found, or a specified
            column is not present.
    """
    cols = list(df.columns) if columns is None else list(columns)
    if not cols:
        return
    pa.DataFrameSchema(
        {col: pa.Column(nullable=False) for col in cols},
        strict=False,
    ).validate(df)


def assert_value_range(
    df: pd.DataFrame,
    column: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> None:
    """Validate that column values fall within the given bounds.

    Args:
        df: DataFrame to check.
        column: Column whose values to validate.
        min_val: Minimum allowed value (inclusive).  ``None`` to skip.
        max_val: Maximum allowed value (inclusive).  ``None`` to skip.

    Raises:
        pa.errors.SchemaError: If any values fall outside the specified range,
            or the column is not present.
    """
    checks: list[pa.Check] = []
    if min_val is not None:
        checks.append(pa.Check.ge(min_val))
    if max_val is not None:
        checks.append(pa.Check.le(max_val))
    # Build the schema even without bounds so column existence is checked.
    pa.DataFrameSchema(
        {column: pa.Column(checks=checks or None)},
        strict=False,
    ).validate(df)
