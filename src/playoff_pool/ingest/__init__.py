"""Pool data persistence module."""

from __future__ import annotations

from playoff_pool.ingest.repository import DEFAULT_RATING, JsonRepository, Repository, load_teams, load_tree

__all__ = [
    "DEFAULT_RATING",
    "JsonRepository",
    "Repository",
    "load_teams",
    "load_tree",
]
