"""Bracket tree: an arena of matchups addressed by id and by slot.

The bracket is stored as a flat list of :class:`Matchup` records.  Team
association is by identifier only, so the same team may appear in several
matchups without any shared object graph.

Slot mapping::

    (round r, position p)  ──winner──▶  (round r+1, position ceil(p/2))
                                        as team1 if p is odd, team2 if even

The same mapping drives forward propagation (simulation and interactive
advancement) and backward reset (cascading a reversed result).
"""

from __future__ import annotations

import enum
from collections import Counter
from collections.abc import Iterable, Iterator

from playoff_pool.bracket.schema import Matchup


class MalformedBracketError(ValueError):
    """Raised when a bracket's round structure cannot form a single-elimination tree."""


class Side(enum.IntEnum):
    """One of the two team slots of a matchup."""

    TEAM1 = 1
    TEAM2 = 2

    @property
    def opponent(self) -> Side:
        """Return the other slot."""
        return Side.TEAM2 if self is Side.TEAM1 else Side.TEAM1


def feed_side(position: int) -> Side:
    """Return the next-round slot fed by the winner at *position*."""
    return Side.TEAM1 if position % 2 == 1 else Side.TEAM2


def parent_position(position: int) -> int:
    """Return the next-round position fed by *position* (``ceil(p / 2)``)."""
    return (position + 1) // 2


def get_team(matchup: Matchup, side: Side) -> int | None:
    """Return the team id occupying *side* of *matchup*."""
    return matchup.team1_id if side is Side.TEAM1 else matchup.team2_id


def set_team(matchup: Matchup, side: Side, team_id: int | None) -> None:
    """Place *team_id* (or clear the slot with ``None``) on *side* of *matchup*."""
    if side is Side.TEAM1:
        matchup.team1_id = team_id
    else:
        matchup.team2_id = team_id


def get_score(matchup: Matchup, side: Side) -> int:
    """Return the series wins held by *side*."""
    return matchup.score1 if side is Side.TEAM1 else matchup.score2


def set_score(matchup: Matchup, side: Side, value: int) -> None:
    """Set the series wins held by *side*."""
    if side is Side.TEAM1:
        matchup.score1 = value
    else:
        matchup.score2 = value


class BracketTree:
    """Full single-elimination bracket of best-of-seven matchups.

    Args:
        matchups: Every matchup of the bracket, in any order.
        eliminated: Team ids currently marked eliminated.  ``None`` derives
            the set from the completed matchups.

    Raises:
        MalformedBracketError: If two matchups share an id or a slot.
    """

    def __init__(self, matchups: Iterable[Matchup], eliminated: Iterable[int] | None = None) -> None:
        self._matchups: list[Matchup] = list(matchups)
        self._by_id: dict[int, Matchup] = {}
        self._by_slot: dict[tuple[int, int], Matchup] = {}
        for m in self._matchups:
            if m.id in self._by_id:
                msg = f"Duplicate matchup id {m.id}"
                raise MalformedBracketError(msg)
            if (m.round, m.position) in self._by_slot:
                msg = f"Duplicate slot round={m.round} position={m.position}"
                raise MalformedBracketError(msg)
            self._by_id[m.id] = m
            self._by_slot[(m.round, m.position)] = m
        self.eliminated: set[int] = (
            self.derive_eliminated() if eliminated is None else set(eliminated)
        )

    # -- structural queries --------------------------------------------------

    def __iter__(self) -> Iterator[Matchup]:
        return iter(self._matchups)

    def __len__(self) -> int:
        return len(self._matchups)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BracketTree):
            return NotImplemented
        return (
            sorted(self._matchups, key=lambda m: m.id) == sorted(other._matchups, key=lambda m: m.id)
            and self.eliminated == other.eliminated
        )

    def __repr__(self) -> str:
        return f"BracketTree(matchups={len(self._matchups)}, rounds={self.rounds})"

    def get(self, matchup_id: int) -> Matchup | None:
        """Return the matchup with *matchup_id*, or ``None`` if unknown."""
        return self._by_id.get(matchup_id)

    def at(self, round_num: int, position: int) -> Matchup | None:
        """Return the matchup at ``(round_num, position)``, or ``None``."""
        return self._by_slot.get((round_num, position))

    @property
    def rounds(self) -> list[int]:
        """Return the round numbers present, ascending."""
        return sorted({m.round for m in self._matchups})

    @property
    def final_round(self) -> int:
        """Return the highest round number (0 for an empty bracket)."""
        return max((m.round for m in self._matchups), default=0)

    def round_matchups(self, round_num: int) -> list[Matchup]:
        """Return the matchups of *round_num* sorted by position."""
        return sorted((m for m in self._matchups if m.round == round_num), key=lambda m: m.position)

    def next_slot(self, matchup: Matchup) -> tuple[Matchup, Side] | None:
        """Return the matchup and side fed by *matchup*'s winner.

        Returns ``None`` for the final (or a bracket missing the parent).
        """
        parent = self.at(matchup.round + 1, parent_position(matchup.position))
        if parent is None:
            return None
        return parent, feed_side(matchup.position)

    def validate(self) -> None:
        """Check the single-elimination round structure.

        Raises:
            MalformedBracketError: If the bracket is empty, round numbers are
                not contiguous from 1, positions within a round are not
                ``1..n``, a round is not exactly half the size of the
                previous one, or the final round holds more than one matchup.
        """
        if not self._matchups:
            msg = "Bracket has no matchups"
            raise MalformedBracketError(msg)

        sizes = Counter(m.round for m in self._matchups)
        rounds = sorted(sizes)
        if rounds != list(range(1, len(rounds) + 1)):
            msg = f"Round numbers must be contiguous from 1, got {rounds}"
            raise MalformedBracketError(msg)

        for r in rounds:
            positions = sorted(m.position for m in self._matchups if m.round == r)
            if positions != list(range(1, sizes[r] + 1)):
                msg = f"Round {r} positions must be 1..{sizes[r]}, got {positions}"
                raise MalformedBracketError(msg)
            if r > 1 and sizes[r] * 2 != sizes[r - 1]:
                msg = f"Round {r} has {sizes[r]} matchups; expected half of {sizes[r - 1]}"
                raise MalformedBracketError(msg)

        if sizes[rounds[-1]] != 1:
            msg = f"Final round {rounds[-1]} must hold exactly one matchup, got {sizes[rounds[-1]]}"
            raise MalformedBracketError(msg)

    # -- derived state -------------------------------------------------------

    def derive_eliminated(self) -> set[int]:
        """Return the losers of every completed matchup."""
        losers: set[int] = set()
        for m in self._matchups:
            loser = m.loser_id
            if loser is not None:
                losers.add(loser)
        return losers

    def is_eliminated(self, team_id: int) -> bool:
        """Return ``True`` if *team_id* has lost a completed series."""
        return team_id in self.eliminated

    def team_wins(self) -> dict[int, int]:
        """Tally the games actually won by each team across the bracket."""
        wins: dict[int, int] = {}
        for m in self._matchups:
            if m.team1_id is not None:
                wins[m.team1_id] = wins.get(m.team1_id, 0) + m.score1
            if m.team2_id is not None:
                wins[m.team2_id] = wins.get(m.team2_id, 0) + m.score2
        return wins

    # -- copies --------------------------------------------------------------

    def copy(self) -> BracketTree:
        """Return a deep copy sharing no records with this tree."""
        return BracketTree(
            (m.model_copy(deep=True) for m in self._matchups),
            eliminated=set(self.eliminated),
        )

    def to_matchups(self) -> list[Matchup]:
        """Return deep copies of the matchups in original order."""
        return [m.model_copy(deep=True) for m in self._matchups]
