"""Repository pattern for playoff pool storage.

Defines an abstract ``Repository`` interface and a concrete
``JsonRepository`` backed by the pool's flat JSON files.  The engine only
reads a bracket, participants and confidence ratings, and writes back a
replacement matchup list; everything else here is plumbing for keeping
those files up to date.
"""

from __future__ import annotations

import abc
import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter

from playoff_pool.bracket.schema import ConfidenceRating, Matchup, Participant, Team
from playoff_pool.bracket.tree import BracketTree

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)

#: Rating given to every team when a participant joins the pool.
DEFAULT_RATING: int = 5

# ---------------------------------------------------------------------------
# Abstract Repository
# ---------------------------------------------------------------------------


class Repository(abc.ABC):
    """Abstract base class for pool persistence."""

    @abc.abstractmethod
    def get_matchups(self) -> list[Matchup]:
        """Return every bracket matchup."""

    @abc.abstractmethod
    def get_teams(self) -> list[Team]:
        """Return all stored teams."""

    @abc.abstractmethod
    def get_participants(self) -> list[Participant]:
        """Return all pool participants."""

    @abc.abstractmethod
    def get_confidence_ratings(self) -> list[ConfidenceRating]:
        """Return every participant's team ratings."""

    @abc.abstractmethod
    def save_matchups(self, matchups: list[Matchup]) -> None:
        """Persist a replacement bracket (overwrite)."""


def load_tree(repository: Repository) -> BracketTree:
    """Load, validate and return the stored bracket.

    Elimination state is derived from the completed matchups.

    Raises:
        MalformedBracketError: If the stored rounds do not form a bracket.
    """
    tree = BracketTree(repository.get_matchups())
    tree.validate()
    return tree


def load_teams(repository: Repository, tree: BracketTree) -> list[Team]:
    """Return the stored teams with ``is_eliminated`` recomputed from *tree*, ordered by seed."""
    teams = [t.model_copy(update={"is_eliminated": tree.is_eliminated(t.id)}) for t in repository.get_teams()]
    return sorted(teams, key=lambda t: (t.seed, t.id))


# ---------------------------------------------------------------------------
# JSON Repository
# ---------------------------------------------------------------------------


class JsonRepository(Repository):
    """Repository implementation backed by pretty-printed JSON files.

    Directory layout::

        {base_path}/
            bracket-matchups.json
            teams.json
            participants.json
            confidence-ratings.json
    """

    MATCHUPS_FILE = "bracket-matchups.json"
    TEAMS_FILE = "teams.json"
    PARTICIPANTS_FILE = "participants.json"
    RATINGS_FILE = "confidence-ratings.json"

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path

    # -- reads ---------------------------------------------------------------

    def get_matchups(self) -> list[Matchup]:
        return self._read(self.MATCHUPS_FILE, Matchup)

    def get_teams(self) -> list[Team]:
        return self._read(self.TEAMS_FILE, Team)

    def get_participants(self) -> list[Participant]:
        return self._read(self.PARTICIPANTS_FILE, Participant)

    def get_confidence_ratings(self) -> list[ConfidenceRating]:
        return self._read(self.RATINGS_FILE, ConfidenceRating)

    # -- writes --------------------------------------------------------------

    def save_matchups(self, matchups: list[Matchup]) -> None:
        if not isinstance(matchups, list):
            msg = f"matchups must be a list, got {type(matchups).__name__}"
            raise TypeError(msg)
        self._write(self.MATCHUPS_FILE, matchups)

    def save_teams(self, teams: list[Team]) -> None:
        """Persist the team list (overwrite)."""
        self._write(self.TEAMS_FILE, teams)

    def save_participants(self, participants: list[Participant]) -> None:
        """Persist the participant list (overwrite)."""
        self._write(self.PARTICIPANTS_FILE, participants)

    def save_confidence_ratings(self, ratings: list[ConfidenceRating]) -> None:
        """Persist the confidence table (overwrite)."""
        self._write(self.RATINGS_FILE, ratings)

    # -- participant maintenance --------------------------------------------

    def add_participant(self, name: str) -> Participant:
        """Add a participant rated :data:`DEFAULT_RATING` on every team.

        The new id is one past the highest numeric id in use.
        """
        participants = self.get_participants()
        numeric_ids = [int(p.id) for p in participants if p.id.isdigit()]
        participant = Participant(id=str(max(numeric_ids, default=0) + 1), name=name)
        self.save_participants([*participants, participant])

        defaults = [
            ConfidenceRating(participant_id=participant.id, team_id=t.id, rating=DEFAULT_RATING)
            for t in self.get_teams()
        ]
        self.save_confidence_ratings([*self.get_confidence_ratings(), *defaults])
        logger.info("Added participant %s (%s)", participant.id, name)
        return participant

    def remove_participant(self, participant_id: str) -> None:
        """Remove a participant and all of their ratings.  Unknown ids are ignored."""
        self.save_participants([p for p in self.get_participants() if p.id != participant_id])
        self.save_confidence_ratings(
            [r for r in self.get_confidence_ratings() if r.participant_id != participant_id]
        )

    def set_confidence_rating(self, participant_id: str, team_id: int, rating: int) -> ConfidenceRating:
        """Create or replace one participant's rating for one team.

        Raises:
            pydantic.ValidationError: If *rating* is outside 1–10.
        """
        updated = ConfidenceRating(participant_id=participant_id, team_id=team_id, rating=rating)
        ratings = [
            r
            for r in self.get_confidence_ratings()
            if not (r.participant_id == participant_id and r.team_id == team_id)
        ]
        self.save_confidence_ratings([*ratings, updated])
        return updated

    # -- helpers -------------------------------------------------------------

    def _read(self, file_name: str, model: type[_M]) -> list[_M]:
        path = self._base_path / file_name
        if not path.exists():
            return []
        adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
        records: list[_M] = adapter.validate_json(path.read_text(encoding="utf-8"))
        return records

    def _write(self, file_name: str, records: list[Any]) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json", by_alias=True) for r in records]
        (self._base_path / file_name).write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
