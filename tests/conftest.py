"""Shared pytest fixtures for the playoff_pool test suite.

Fixtures defined here are available to all tests without explicit imports.
Brackets are built fresh per test so mutating tests never leak state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from playoff_pool.bracket.schema import ConfidenceRating, Matchup, Participant, Team
from playoff_pool.bracket.tree import BracketTree
from playoff_pool.ingest.repository import JsonRepository


def build_bracket(first_round_size: int, *, seeded: bool = True) -> list[Matchup]:
    """Return an open bracket whose first round holds *first_round_size* series.

    Ids run 1..n across rounds in order.  When *seeded*, first-round
    position ``p`` pairs teams ``2p - 1`` and ``2p``; later rounds start
    empty.
    """
    matchups: list[Matchup] = []
    next_id = 1
    size = first_round_size
    round_num = 1
    while size >= 1:
        for position in range(1, size + 1):
            seat = round_num == 1 and seeded
            matchups.append(
                Matchup(
                    id=next_id,
                    round=round_num,
                    position=position,
                    team1_id=2 * position - 1 if seat else None,
                    team2_id=2 * position if seat else None,
                )
            )
            next_id += 1
        size //= 2
        round_num += 1
    return matchups


@pytest.fixture(autouse=True)
def _restore_pool_logger() -> Iterator[None]:
    """Undo any `configure_logging` call so caplog sees project records."""
    yield
    root = logging.getLogger("playoff_pool")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Provide an isolated temporary directory for pool JSON files."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def small_tree() -> BracketTree:
    """Two semifinals (ids 1, 2; teams 1–4) feeding a final (id 3)."""
    return BracketTree(build_bracket(2))


@pytest.fixture
def playoff_tree() -> BracketTree:
    """A 16-team bracket: rounds of 8, 4, 2 and 1 series (ids 1–15)."""
    return BracketTree(build_bracket(8))


@pytest.fixture
def teams() -> list[Team]:
    """Sixteen teams, ids 1–16, seeded within two conferences."""
    return [
        Team(
            id=i,
            name=f"Team {i}",
            conference="East" if i <= 8 else "West",
            division="A" if i % 2 else "B",
            seed=(i - 1) % 8 + 1,
        )
        for i in range(1, 17)
    ]


@pytest.fixture
def participants() -> list[Participant]:
    """Three pool participants."""
    return [
        Participant(id="1", name="Alice"),
        Participant(id="2", name="Bob"),
        Participant(id="3", name="Carol"),
    ]


@pytest.fixture
def ratings() -> list[ConfidenceRating]:
    """Ratings for teams 1–4: Alice backs 1, Bob backs 3, Carol spreads evenly."""
    table = {
        "1": {1: 10, 2: 1, 3: 2, 4: 3},
        "2": {1: 1, 2: 2, 3: 10, 4: 3},
        "3": {1: 5, 2: 5, 3: 5, 4: 5},
    }
    return [
        ConfidenceRating(participant_id=pid, team_id=team_id, rating=rating)
        for pid, by_team in table.items()
        for team_id, rating in by_team.items()
    ]


@pytest.fixture
def pool_repo(
    temp_data_dir: Path,
    small_tree: BracketTree,
    teams: list[Team],
    participants: list[Participant],
    ratings: list[ConfidenceRating],
) -> JsonRepository:
    """A JSON repository holding the small bracket and its pool."""
    repo = JsonRepository(temp_data_dir)
    repo.save_matchups(small_tree.to_matchups())
    repo.save_teams(teams[:4])
    repo.save_participants(participants)
    repo.save_confidence_ratings(ratings)
    return repo


@pytest.fixture
def bracket_factory() -> Callable[..., list[Matchup]]:
    """Expose :func:`build_bracket` to tests needing a custom bracket size."""
    return build_bracket
