"""Confidence-weighted pool scoring and leader determination.

A participant's score is ``sum(weight(team) * wins(team))`` over every team
with recorded wins.  The engine cannot tell real wins from simulated ones;
the same functions serve the live leaderboard and every simulation trial.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from playoff_pool.bracket.confidence import ConfidenceWeights
from playoff_pool.bracket.schema import Participant
from playoff_pool.bracket.tree import BracketTree


def score_participant(team_wins: Mapping[int, int], weights: Mapping[int, int]) -> int:
    """Return one participant's score.

    Teams absent from *weights* contribute zero.
    """
    return sum(weights.get(team_id, 0) * wins for team_id, wins in team_wins.items() if wins)


def score_all(team_wins: Mapping[int, int], weights: ConfidenceWeights) -> dict[str, int]:
    """Return the score of every participant in *weights*."""
    return {pid: score_participant(team_wins, member) for pid, member in weights.items()}


def leader_shares(scores: Mapping[str, float]) -> dict[str, float]:
    """Split one trial's win between every participant tied for the top score.

    Args:
        scores: ``participant_id -> score`` for one trial.

    Returns:
        ``participant_id -> share`` for the leaders only; shares sum to 1.
        Empty when *scores* is empty.
    """
    if not scores:
        return {}
    top = max(scores.values())
    leaders = [pid for pid, score in scores.items() if score == top]
    share = 1.0 / len(leaders)
    return dict.fromkeys(leaders, share)


def compute_scores(
    tree: BracketTree,
    participants: Sequence[Participant],
    weights: ConfidenceWeights,
) -> list[tuple[str, int]]:
    """Compute the live leaderboard from games actually played.

    Args:
        tree: Current bracket.
        participants: Pool participants, in display order.
        weights: Confidence weights; participants without an entry score 0.

    Returns:
        ``(participant_id, score)`` pairs sorted by descending score; ties
        keep *participants* order.
    """
    team_wins = tree.team_wins()
    board = [(p.id, score_participant(team_wins, weights.get(p.id, {}))) for p in participants]
    board.sort(key=lambda entry: entry[1], reverse=True)
    return board
