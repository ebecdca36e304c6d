"""Monte Carlo estimation of each participant's chance to finish first.

Every trial simulates the rest of the bracket, scores every participant on
the resulting win tally, and splits one unit of credit evenly among the
participants tied for the top score.  A participant's odds are
``100 * accumulated_share / n_trials``.

Trials run in fixed-size blocks.  Each block owns an independent random
stream spawned from one :class:`numpy.random.SeedSequence`, accumulates its
own partial win-shares, and the partials are merged once at the end, so
blocks can run on ``joblib.Parallel`` workers without shared state and a
given seed reproduces the same estimate for any worker count.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass

import joblib  # type: ignore[import-untyped]
import numpy as np

from playoff_pool.bracket.confidence import ConfidenceWeights
from playoff_pool.bracket.schema import Participant
from playoff_pool.bracket.tree import BracketTree
from playoff_pool.editing.mutator import force_winner
from playoff_pool.evaluation.scoring import leader_shares, score_all
from playoff_pool.evaluation.simulation import CompiledBracket, compile_bracket, simulate_tournament

logger = logging.getLogger(__name__)

#: Trial count for the authoritative (server-side) computation.
AUTHORITATIVE_TRIALS: int = 100_000

#: Trial count for low-latency recomputation while editing.
INTERACTIVE_TRIALS: int = 10_000

#: Trials per independently seeded block.
DEFAULT_BLOCK_SIZE: int = 5_000


def round_odds(pct: float) -> float:
    """Round a percentage for display.

    Below 10 rounds half-up to one decimal place; at or above 10 rounds
    half-up to the nearest integer.

    Example:
        >>> round_odds(3.14159)
        3.1
        >>> round_odds(42.5)
        43.0
    """
    if pct < 10:
        return math.floor(pct * 10 + 0.5) / 10
    return float(math.floor(pct + 0.5))


@dataclass(frozen=True)
class OddsEstimate:
    """Result of a Monte Carlo odds estimation.

    Attributes:
        percentages: Full-precision odds per participant, in input order.
        n_trials: Number of trials run.
        elapsed_seconds: Wall-clock time for the estimation.
    """

    percentages: dict[str, float]
    n_trials: int
    elapsed_seconds: float

    def rounded(self) -> dict[str, float]:
        """Return display-rounded odds ordered by descending odds."""
        display = {pid: round_odds(pct) for pid, pct in self.percentages.items()}
        return dict(sorted(display.items(), key=lambda item: item[1], reverse=True))

    @property
    def total(self) -> float:
        """Return the sum of all percentages (100 up to float error)."""
        return math.fsum(self.percentages.values())


def _run_block(
    compiled: CompiledBracket,
    weights: ConfidenceWeights,
    n_trials: int,
    seed_seq: np.random.SeedSequence,
) -> dict[str, float]:
    """Run *n_trials* trials and return the block's accumulated win-shares."""
    rng = np.random.default_rng(seed_seq)
    shares = dict.fromkeys(weights, 0.0)
    for _ in range(n_trials):
        tally = simulate_tournament(compiled, rng)
        for pid, share in leader_shares(score_all(tally, weights)).items():
            shares[pid] += share
    return shares


def estimate_odds(  # noqa: PLR0913
    tree: BracketTree,
    participants: Sequence[Participant],
    weights: ConfidenceWeights,
    n_trials: int,
    *,
    n_jobs: int = 1,
    block_size: int = DEFAULT_BLOCK_SIZE,
    seed: int | None = None,
) -> OddsEstimate:
    """Estimate every participant's probability of finishing with the top score.

    Args:
        tree: Bracket snapshot; never modified.
        participants: Pool participants.  Participants absent from
            *weights* compete with an empty weighting (score 0).
        weights: ``participant_id -> {team_id -> weight}``.
        n_trials: Number of independent trials.
        n_jobs: joblib worker count (``-1`` = all cores, ``1`` = in process).
        block_size: Trials per independently seeded block.
        seed: Seed for reproducible estimates; ``None`` draws fresh entropy.

    Returns:
        :class:`OddsEstimate` with full-precision percentages.

    Raises:
        ValueError: If *n_trials* or *block_size* is not positive.
        MalformedBracketError: If *tree*'s round structure is inconsistent.
    """
    if n_trials <= 0:
        msg = f"n_trials must be positive, got {n_trials}"
        raise ValueError(msg)
    if block_size <= 0:
        msg = f"block_size must be positive, got {block_size}"
        raise ValueError(msg)

    start = time.perf_counter()
    compiled = compile_bracket(tree)
    member_weights = {p.id: dict(weights.get(p.id, {})) for p in participants}
    if not member_weights:
        return OddsEstimate(percentages={}, n_trials=n_trials, elapsed_seconds=0.0)

    block_sizes = [block_size] * (n_trials // block_size)
    if n_trials % block_size:
        block_sizes.append(n_trials % block_size)
    seeds = np.random.SeedSequence(seed).spawn(len(block_sizes))

    logger.info(
        "Odds estimation: %d trials in %d blocks, %d participants, n_jobs=%d",
        n_trials,
        len(block_sizes),
        len(member_weights),
        n_jobs,
    )
    partials: list[dict[str, float]] = joblib.Parallel(n_jobs=n_jobs)(
        joblib.delayed(_run_block)(compiled, member_weights, size, block_seed)
        for size, block_seed in zip(block_sizes, seeds)
    )

    percentages = {
        pid: 100.0 * math.fsum(part[pid] for part in partials) / n_trials for pid in member_weights
    }
    elapsed = time.perf_counter() - start
    logger.info("Odds estimation complete: %d trials in %.2fs", n_trials, elapsed)
    return OddsEstimate(percentages=percentages, n_trials=n_trials, elapsed_seconds=elapsed)


def compute_odds(  # noqa: PLR0913
    tree: BracketTree,
    participants: Sequence[Participant],
    weights: ConfidenceWeights,
    n_trials: int,
    *,
    n_jobs: int = 1,
    block_size: int = DEFAULT_BLOCK_SIZE,
    seed: int | None = None,
) -> dict[str, float]:
    """Return display-rounded odds per participant, highest first.

    See :func:`estimate_odds` for arguments and errors.
    """
    estimate = estimate_odds(
        tree,
        participants,
        weights,
        n_trials,
        n_jobs=n_jobs,
        block_size=block_size,
        seed=seed,
    )
    return estimate.rounded()


class WhatIfOddsCache:
    """Memo of odds computed under a forced series outcome.

    Keys are ``(matchup_id, forced_winner_id)``.  Entries describe one
    committed bracket; the owner must call :meth:`invalidate` whenever that
    bracket changes.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[int, int], OddsEstimate] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, matchup_id: int, winner_id: int) -> OddsEstimate | None:
        """Return the cached estimate for a forced outcome, if any."""
        return self._entries.get((matchup_id, winner_id))

    def invalidate(self) -> None:
        """Drop every cached estimate."""
        if self._entries:
            logger.debug("Invalidating %d what-if entries", len(self._entries))
        self._entries.clear()

    def odds(  # noqa: PLR0913
        self,
        tree: BracketTree,
        participants: Sequence[Participant],
        weights: ConfidenceWeights,
        matchup_id: int,
        winner_id: int,
        n_trials: int,
        *,
        n_jobs: int = 1,
        block_size: int = DEFAULT_BLOCK_SIZE,
        seed: int | None = None,
    ) -> dict[str, float]:
        """Return display-rounded odds assuming *winner_id* takes *matchup_id*.

        The outcome is forced on a private copy of *tree*.  An unknown
        matchup, a matchup with an empty team slot, or a team not playing in
        it yields an empty result.  A cached entry is reused only when it was
        computed with at least *n_trials* trials; otherwise it is replaced.
        """
        key = (matchup_id, winner_id)
        cached = self._entries.get(key)
        if cached is not None and cached.n_trials >= n_trials:
            return cached.rounded()

        forced = tree.copy()
        if not force_winner(forced, matchup_id, winner_id):
            return {}
        estimate = estimate_odds(
            forced,
            participants,
            weights,
            n_trials,
            n_jobs=n_jobs,
            block_size=block_size,
            seed=seed,
        )
        self._entries[key] = estimate
        return estimate.rounded()
