"""Pydantic v2 schema models for playoff pool entities.

Defines the records shared by every layer: Team, Matchup, Participant and
ConfidenceRating.  Field aliases follow the camelCase keys of the pool's
flat JSON files so stored data loads without translation.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

#: Games a team must win to take a best-of-seven series.
WINS_TO_CLINCH: int = 4


class Team(BaseModel):
    """A playoff team.

    ``is_eliminated`` is derived from bracket state and is never trusted
    as stored; see :meth:`BracketTree.derive_eliminated`.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    conference: str = ""
    division: str = ""
    seed: int = Field(default=1, ge=1)
    is_eliminated: bool = Field(default=False, alias="isEliminated")


class Participant(BaseModel):
    """A pool entrant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ConfidenceRating(BaseModel):
    """One participant's confidence weight for one team."""

    model_config = ConfigDict(populate_by_name=True)

    participant_id: str = Field(
        ...,
        min_length=1,
        alias="participantId",
        validation_alias=AliasChoices("participantId", "familyMemberId", "participant_id"),
    )
    team_id: int = Field(..., ge=1, alias="teamId")
    rating: int = Field(..., ge=1, le=10)


class Matchup(BaseModel):
    """A best-of-seven series occupying one bracket slot.

    A series is decided iff exactly one score equals :data:`WINS_TO_CLINCH`;
    ``is_completed`` and ``winner_id`` must agree with that at all times.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    round: int = Field(..., ge=1)
    position: int = Field(..., ge=1)
    team1_id: int | None = Field(default=None, alias="team1Id")
    team2_id: int | None = Field(default=None, alias="team2Id")
    score1: int = Field(default=0, ge=0, le=WINS_TO_CLINCH)
    score2: int = Field(default=0, ge=0, le=WINS_TO_CLINCH)
    is_completed: bool = Field(default=False, alias="isCompleted")
    winner_id: int | None = Field(default=None, alias="winnerId")

    @field_validator("score1", "score2", mode="before")
    @classmethod
    def _null_score_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @model_validator(mode="after")
    def _check_series_state(self) -> Matchup:
        if self.score1 == WINS_TO_CLINCH and self.score2 == WINS_TO_CLINCH:
            msg = f"matchup {self.id}: both sides cannot reach {WINS_TO_CLINCH} wins"
            raise ValueError(msg)
        if self.is_completed != self.is_decided:
            msg = (
                f"matchup {self.id}: isCompleted={self.is_completed} disagrees with "
                f"scores {self.score1}-{self.score2}"
            )
            raise ValueError(msg)
        if self.is_decided and self.winner_id != self.decided_winner:
            msg = f"matchup {self.id}: winnerId {self.winner_id} is not the team with {WINS_TO_CLINCH} wins"
            raise ValueError(msg)
        if not self.is_decided and self.winner_id is not None:
            msg = f"matchup {self.id}: undecided series cannot have winnerId {self.winner_id}"
            raise ValueError(msg)
        return self

    @property
    def is_decided(self) -> bool:
        """Return ``True`` if one side has clinched the series."""
        return (self.score1 == WINS_TO_CLINCH) != (self.score2 == WINS_TO_CLINCH)

    @property
    def decided_winner(self) -> int | None:
        """Return the team id holding the clinching score, if any."""
        if self.score1 == WINS_TO_CLINCH:
            return self.team1_id
        if self.score2 == WINS_TO_CLINCH:
            return self.team2_id
        return None

    @property
    def loser_id(self) -> int | None:
        """Return the eliminated team of a completed series."""
        if not self.is_completed:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id
