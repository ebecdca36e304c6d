"""Bracket data model: schema records, the bracket tree, and confidence weights."""

from __future__ import annotations

from playoff_pool.bracket.confidence import ConfidenceWeights, build_weights, ratings_frame
from playoff_pool.bracket.schema import (
    WINS_TO_CLINCH,
    ConfidenceRating,
    Matchup,
    Participant,
    Team,
)
from playoff_pool.bracket.tree import BracketTree, MalformedBracketError, Side

__all__ = [
    "WINS_TO_CLINCH",
    "BracketTree",
    "ConfidenceRating",
    "ConfidenceWeights",
    "MalformedBracketError",
    "Matchup",
    "Participant",
    "Side",
    "Team",
    "build_weights",
    "ratings_frame",
]
