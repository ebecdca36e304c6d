"""Confidence-weight table construction and validation.

Turns stored :class:`ConfidenceRating` records into the nested
``participant_id -> {team_id -> weight}`` mapping the scoring engine
consumes.  The records pass through a pandas DataFrame so the whole table
can be validated in one Pandera pass before any scoring runs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import pandas as pd  # type: ignore[import-untyped]

from playoff_pool.bracket.schema import ConfidenceRating, Participant
from playoff_pool.utils.assertions import (
    assert_columns,
    assert_dtypes,
    assert_no_nulls,
    assert_value_range,
)

logger = logging.getLogger(__name__)

#: Inclusive bounds on a confidence weight.
MIN_RATING: int = 1
MAX_RATING: int = 10

#: Column order of the confidence table.
RATING_COLUMNS: tuple[str, ...] = ("participant_id", "team_id", "rating")

#: Integer columns of the confidence table.
RATING_DTYPES: dict[str, str] = {"team_id": "int64", "rating": "int64"}

ConfidenceWeights = Mapping[str, Mapping[int, int]]
"""Per-participant team weights: ``participant_id -> {team_id -> weight}``."""


def ratings_frame(ratings: Sequence[ConfidenceRating]) -> pd.DataFrame:
    """Build the confidence table DataFrame from rating records.

    Args:
        ratings: Stored rating records.

    Returns:
        DataFrame with columns ``participant_id``, ``team_id``, ``rating``.
    """
    rows = [r.model_dump(include=set(RATING_COLUMNS)) for r in ratings]
    return pd.DataFrame(rows, columns=list(RATING_COLUMNS)).astype(RATING_DTYPES)


def validate_ratings_frame(df: pd.DataFrame) -> None:
    """Validate a confidence table.

    Raises:
        pandera.errors.SchemaError: If a column is missing, holds nulls, is
            not an integer column where one is required, or a rating lies
            outside ``[MIN_RATING, MAX_RATING]``.
    """
    assert_columns(df, RATING_COLUMNS)
    assert_no_nulls(df, RATING_COLUMNS)
    assert_dtypes(df, RATING_DTYPES)
    assert_value_range(df, "rating", min_val=MIN_RATING, max_val=MAX_RATING)


def build_weights(
    participants: Sequence[Participant],
    ratings: Sequence[ConfidenceRating] | pd.DataFrame,
) -> dict[str, dict[int, int]]:
    """Pivot ratings into per-participant weight mappings.

    Every participant receives an entry, possibly empty.  Ratings for
    unknown participants are dropped; a repeated ``(participant, team)``
    pair keeps its last rating.

    Args:
        participants: Known pool participants.
        ratings: Rating records, or an already-built confidence table.

    Returns:
        ``participant_id -> {team_id -> weight}``.
    """
    df = ratings if isinstance(ratings, pd.DataFrame) else ratings_frame(ratings)
    validate_ratings_frame(df)

    weights: dict[str, dict[int, int]] = {p.id: {} for p in participants}
    known = df["participant_id"].isin(list(weights))
    if not known.all():
        dropped = sorted(set(df.loc[~known, "participant_id"]))
        logger.warning("Dropping ratings for unknown participants: %s", ", ".join(map(str, dropped)))

    for participant_id, team_id, rating in df.loc[known, list(RATING_COLUMNS)].itertuples(index=False):
        weights[str(participant_id)][int(team_id)] = int(rating)
    return weights
