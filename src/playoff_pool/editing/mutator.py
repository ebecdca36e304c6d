"""Interactive score editing on a working copy of the bracket.

Each matchup moves between three derived states (open, decided for
team 1, decided for team 2) one game at a time:

* :func:`increment` adds a win.  Reaching :data:`WINS_TO_CLINCH` completes
  the series, eliminates the loser and advances the winner into the next
  round's slot.
* :func:`decrement` removes a win.  Dropping the winner below
  :data:`WINS_TO_CLINCH` reopens the series, restores the loser and
  cascades a reset through every downstream slot that depended on it.

Unknown matchup ids are no-ops; the tree is returned unchanged.
"""

from __future__ import annotations

import logging

from playoff_pool.bracket.schema import WINS_TO_CLINCH, Matchup
from playoff_pool.bracket.tree import BracketTree, Side, get_score, get_team, set_score, set_team
from playoff_pool.ingest.repository import Repository
from playoff_pool.utils.logger import VERBOSE

logger = logging.getLogger(__name__)


def increment(tree: BracketTree, matchup_id: int, side: Side | int) -> BracketTree:
    """Award one more game to *side* of matchup *matchup_id*.

    No-op when the matchup is unknown, either team slot is still empty, the
    side already holds :data:`WINS_TO_CLINCH` wins, or the opponent has already
    clinched and this win would clinch too.

    Returns:
        *tree*, mutated in place.
    """
    matchup = tree.get(matchup_id)
    if matchup is None:
        logger.debug("increment: unknown matchup %d", matchup_id)
        return tree
    side = Side(side)
    current = get_score(matchup, side)
    if current >= WINS_TO_CLINCH or matchup.team1_id is None or matchup.team2_id is None:
        return tree
    if current + 1 == WINS_TO_CLINCH and get_score(matchup, side.opponent) == WINS_TO_CLINCH:
        return tree

    set_score(matchup, side, current + 1)
    if current + 1 == WINS_TO_CLINCH:
        _complete(tree, matchup, side)
    return tree


def decrement(tree: BracketTree, matchup_id: int, side: Side | int) -> BracketTree:
    """Take one game away from *side* of matchup *matchup_id*.

    No-op when the matchup is unknown or the side has no wins.

    Returns:
        *tree*, mutated in place.
    """
    matchup = tree.get(matchup_id)
    if matchup is None:
        logger.debug("decrement: unknown matchup %d", matchup_id)
        return tree
    side = Side(side)
    current = get_score(matchup, side)
    if current <= 0:
        return tree

    was_winner = matchup.is_completed and current == WINS_TO_CLINCH
    set_score(matchup, side, current - 1)
    if was_winner:
        loser = get_team(matchup, side.opponent)
        matchup.is_completed = False
        matchup.winner_id = None
        if loser is not None:
            tree.eliminated.discard(loser)
        logger.log(VERBOSE, "Matchup %d reopened at %d-%d", matchup.id, matchup.score1, matchup.score2)
        _cascade_reset(tree, matchup)
    return tree


def apply_score_delta(
    tree: BracketTree,
    matchup_id: int,
    side: Side | int,
    direction: int,
) -> BracketTree:
    """Apply a ``+1`` or ``-1`` change to one side of a matchup.

    Raises:
        ValueError: If *direction* is neither ``1`` nor ``-1``.
    """
    if direction == 1:
        return increment(tree, matchup_id, side)
    if direction == -1:
        return decrement(tree, matchup_id, side)
    msg = f"direction must be +1 or -1, got {direction!r}"
    raise ValueError(msg)


def force_winner(tree: BracketTree, matchup_id: int, winner_id: int) -> bool:
    """Drive matchup *matchup_id* to a completed series won by *winner_id*.

    A series already won by the other team is first reopened (cascading
    as :func:`decrement` does).

    Returns:
        ``True`` if the matchup now shows *winner_id* as winner, ``False``
        when the matchup is unknown, either team slot is still empty, or
        *winner_id* does not play in it.
    """
    matchup = tree.get(matchup_id)
    if matchup is None or matchup.team1_id is None or matchup.team2_id is None:
        return False
    if winner_id not in (matchup.team1_id, matchup.team2_id):
        return False
    side = Side.TEAM1 if matchup.team1_id == winner_id else Side.TEAM2
    if get_score(matchup, side.opponent) == WINS_TO_CLINCH:
        decrement(tree, matchup_id, side.opponent)
    while (current := get_score(matchup, side)) < WINS_TO_CLINCH:
        increment(tree, matchup_id, side)
        if get_score(matchup, side) == current:
            break
    return matchup.winner_id == winner_id


def reset_to_baseline(baseline: BracketTree) -> BracketTree:
    """Return a fresh working copy of the committed *baseline*."""
    return baseline.copy()


def commit(working: BracketTree, repository: Repository) -> BracketTree:
    """Persist *working* and return it as the new baseline.

    The returned tree is a copy, so further edits to *working* do not leak
    into the baseline.
    """
    repository.save_matchups(working.to_matchups())
    logger.info("Committed bracket with %d matchups", len(working))
    return working.copy()


def _complete(tree: BracketTree, matchup: Matchup, side: Side) -> None:
    """Mark *matchup* won by *side*, eliminate the loser, advance the winner."""
    winner = get_team(matchup, side)
    loser = get_team(matchup, side.opponent)
    matchup.is_completed = True
    matchup.winner_id = winner
    if loser is not None:
        tree.eliminated.add(loser)

    nxt = tree.next_slot(matchup)
    if nxt is not None:
        parent, slot = nxt
        set_team(parent, slot, winner)
    logger.log(VERBOSE, "Matchup %d won by team %s; team %s eliminated", matchup.id, winner, loser)


def _cascade_reset(tree: BracketTree, origin: Matchup) -> None:
    """Clear every downstream slot that depended on *origin*'s result.

    Walks the forward slot mapping; each completed matchup on the path is
    reopened with both scores cleared and its loser restored.  Depth is
    bounded by the number of remaining rounds.
    """
    current = origin
    while (nxt := tree.next_slot(current)) is not None:
        parent, slot = nxt
        downstream_loser = parent.loser_id
        set_team(parent, slot, None)
        if not parent.is_completed:
            break
        parent.is_completed = False
        parent.winner_id = None
        parent.score1 = 0
        parent.score2 = 0
        if downstream_loser is not None:
            tree.eliminated.discard(downstream_loser)
        logger.debug("Cascade reset matchup %d (round %d)", parent.id, parent.round)
        current = parent
