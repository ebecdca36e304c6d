"""Monte Carlo simulation of the unresolved remainder of a playoff bracket.

Each game is an independent fair coin: the model ignores seed,
confidence and prior results, giving a pure 50/50 baseline for estimating
how participant scores are distributed.

Key components:

* :class:`SeriesOutcome` / :func:`simulate_series`: finish one best-of-seven.
* :class:`CompiledBracket` / :func:`compile_bracket`: validated, compact
  per-round slot table built once per estimation.
* :func:`simulate_tournament`: one full trial returning total wins per team.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from playoff_pool.bracket.schema import WINS_TO_CLINCH
from playoff_pool.bracket.tree import BracketTree

logger = logging.getLogger(__name__)

#: Maximum games in a series (best of seven).
MAX_SERIES_GAMES: int = 2 * WINS_TO_CLINCH - 1


# ---------------------------------------------------------------------------
# Series simulation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeriesOutcome:
    """Result of simulating the rest of one series.

    Attributes:
        winner_id: Team that reached :data:`WINS_TO_CLINCH` wins.
        added1: Newly simulated wins for team 1 (beyond its real wins).
        added2: Newly simulated wins for team 2 (beyond its real wins).
    """

    winner_id: int
    added1: int
    added2: int

    @property
    def games_played(self) -> int:
        """Return the number of simulated games."""
        return self.added1 + self.added2


def simulate_series(
    team1_id: int,
    team2_id: int,
    wins1: int,
    wins2: int,
    rng: np.random.Generator,
) -> SeriesOutcome:
    """Simulate an open series to completion with fair coin flips.

    Enough flips for the longest possible remainder are drawn in one call;
    play stops at the first side to reach :data:`WINS_TO_CLINCH` and any
    unused flips are discarded.

    Args:
        team1_id: Team in slot 1.
        team2_id: Team in slot 2.
        wins1: Real wins already held by team 1 (0–3).
        wins2: Real wins already held by team 2 (0–3).
        rng: NumPy random generator.

    Returns:
        :class:`SeriesOutcome` with the winner and the simulated deltas.

    Raises:
        ValueError: If either win count is outside ``0..WINS_TO_CLINCH - 1``,
            which includes an already-decided or corrupt series.
    """
    if not (0 <= wins1 < WINS_TO_CLINCH and 0 <= wins2 < WINS_TO_CLINCH):
        msg = f"Series {team1_id} vs {team2_id} is not open: {wins1}-{wins2}"
        raise ValueError(msg)

    w1, w2 = wins1, wins2
    flips = rng.integers(0, 2, size=MAX_SERIES_GAMES - wins1 - wins2).tolist()
    for flip in flips:
        if flip:
            w1 += 1
        else:
            w2 += 1
        if w1 == WINS_TO_CLINCH or w2 == WINS_TO_CLINCH:
            break

    winner = team1_id if w1 == WINS_TO_CLINCH else team2_id
    return SeriesOutcome(winner_id=winner, added1=w1 - wins1, added2=w2 - wins2)


# ---------------------------------------------------------------------------
# Compiled bracket
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompiledBracket:
    """Read-only snapshot of a bracket laid out for fast repeated trials.

    Round ``k`` (0-indexed) is a tuple ordered by position; entry ``i`` feeds
    entry ``i // 2`` of round ``k + 1``, as team 1 when ``i`` is even
    (odd 1-indexed position) and team 2 when ``i`` is odd.

    Attributes:
        teams: Per round, the ``(team1_id, team2_id)`` pairs.
        scores: Per round, the ``(score1, score2)`` pairs.
        base_wins: Real games won per team across the whole bracket.
    """

    teams: tuple[tuple[tuple[int | None, int | None], ...], ...]
    scores: tuple[tuple[tuple[int, int], ...], ...]
    base_wins: dict[int, int]

    @property
    def n_rounds(self) -> int:
        """Return the number of rounds."""
        return len(self.teams)


def compile_bracket(tree: BracketTree) -> CompiledBracket:
    """Validate *tree* and lay it out as a :class:`CompiledBracket`.

    Raises:
        MalformedBracketError: If the round structure is inconsistent.
    """
    tree.validate()
    teams = []
    scores = []
    for r in tree.rounds:
        matchups = tree.round_matchups(r)
        teams.append(tuple((m.team1_id, m.team2_id) for m in matchups))
        scores.append(tuple((m.score1, m.score2) for m in matchups))
    logger.debug(
        "Compiled bracket: %d rounds, %d open series",
        len(teams),
        sum(1 for m in tree if not m.is_decided),
    )
    return CompiledBracket(teams=tuple(teams), scores=tuple(scores), base_wins=tree.team_wins())


# ---------------------------------------------------------------------------
# Tournament propagation
# ---------------------------------------------------------------------------


def simulate_tournament(
    bracket: BracketTree | CompiledBracket,
    rng: np.random.Generator,
) -> dict[int, int]:
    """Run one trial of the remaining tournament.

    Rounds are resolved in ascending order.  A matchup still missing a team
    produces no winner; a decided matchup keeps its real winner and earns no
    extra wins; an open matchup is finished by :func:`simulate_series`.
    Winners are written into the next round's slots of a trial-private copy,
    so the input is never modified.

    Args:
        bracket: The bracket, or its compiled form when running many trials.
        rng: NumPy random generator.

    Returns:
        Mapping of ``team_id -> total wins`` (real plus simulated).

    Raises:
        MalformedBracketError: If *bracket* is an uncompiled, malformed tree.
    """
    compiled = bracket if isinstance(bracket, CompiledBracket) else compile_bracket(bracket)
    tally = dict(compiled.base_wins)
    slots = [[list(pair) for pair in round_teams] for round_teams in compiled.teams]

    for r, round_slots in enumerate(slots):
        round_scores = compiled.scores[r]
        winners: list[int | None] = []
        for (t1, t2), (s1, s2) in zip(round_slots, round_scores):
            if t1 is None or t2 is None:
                winners.append(None)
                continue
            if s1 == WINS_TO_CLINCH or s2 == WINS_TO_CLINCH:
                winners.append(t1 if s1 == WINS_TO_CLINCH else t2)
                continue
            outcome = simulate_series(t1, t2, s1, s2, rng)
            tally[t1] = tally.get(t1, 0) + outcome.added1
            tally[t2] = tally.get(t2, 0) + outcome.added2
            winners.append(outcome.winner_id)

        if r + 1 < len(slots):
            next_slots = slots[r + 1]
            for i, winner in enumerate(winners):
                if winner is not None:
                    next_slots[i // 2][i % 2] = winner

    return tally
