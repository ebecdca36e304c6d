"""Single-writer editing session over a committed bracket.

``BracketSession`` owns the committed baseline and a working copy.  Every
edit, reset and commit runs under one re-entrant lock, so a reader taking a
:meth:`~BracketSession.snapshot` or asking for odds never sees a
half-applied cascade.
"""

from __future__ import annotations

import logging
import threading

from playoff_pool.bracket.confidence import build_weights
from playoff_pool.bracket.schema import Participant
from playoff_pool.bracket.tree import BracketTree, Side
from playoff_pool.config import EngineSettings
from playoff_pool.editing import mutator
from playoff_pool.evaluation.odds import WhatIfOddsCache, compute_odds
from playoff_pool.evaluation.scoring import compute_scores
from playoff_pool.ingest.repository import Repository, load_tree

logger = logging.getLogger(__name__)


class BracketSession:
    """Editable view of the pool backed by a :class:`Repository`.

    Args:
        repository: Source of the bracket, participants and ratings, and
            destination for commits.
        settings: Engine tunables; defaults to :class:`EngineSettings`.

    Raises:
        MalformedBracketError: If the stored bracket is inconsistent.
    """

    def __init__(self, repository: Repository, settings: EngineSettings | None = None) -> None:
        self._repository = repository
        self._settings = settings or EngineSettings()
        self._lock = threading.RLock()
        self._baseline = load_tree(repository)
        self._working = self._baseline.copy()
        self._participants: list[Participant] = repository.get_participants()
        self._weights = build_weights(self._participants, repository.get_confidence_ratings())
        self.what_if_cache = WhatIfOddsCache()

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # -- editing -------------------------------------------------------------

    def increment(self, matchup_id: int, side: Side | int) -> BracketTree:
        with self._lock:
            mutator.increment(self._working, matchup_id, side)
            return self._working.copy()

    def decrement(self, matchup_id: int, side: Side | int) -> BracketTree:
        with self._lock:
            mutator.decrement(self._working, matchup_id, side)
            return self._working.copy()

    def apply_score_delta(self, matchup_id: int, side: Side | int, direction: int) -> BracketTree:
        """Apply a ``+1``/``-1`` edit and return a snapshot of the result."""
        with self._lock:
            mutator.apply_score_delta(self._working, matchup_id, side, direction)
            return self._working.copy()

    def reset(self) -> BracketTree:
        """Discard uncommitted edits."""
        with self._lock:
            self._working = mutator.reset_to_baseline(self._baseline)
            return self._working.copy()

    def commit(self) -> BracketTree:
        """Persist the working copy and make it the new baseline.

        Cached what-if odds describe the old baseline and are dropped.
        """
        with self._lock:
            self._baseline = mutator.commit(self._working, self._repository)
            self.what_if_cache.invalidate()
            return self._baseline.copy()

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> BracketTree:
        """Return a private copy of the working bracket."""
        with self._lock:
            return self._working.copy()

    def baseline(self) -> BracketTree:
        """Return a private copy of the committed bracket."""
        with self._lock:
            return self._baseline.copy()

    def is_dirty(self) -> bool:
        """Return ``True`` when the working copy differs from the baseline."""
        with self._lock:
            return self._working != self._baseline

    def scores(self) -> list[tuple[str, int]]:
        """Return the live leaderboard for the working copy."""
        return compute_scores(self.snapshot(), self._participants, self._weights)

    def odds(self, n_trials: int | None = None) -> dict[str, float]:
        """Return display-rounded odds for the working copy.

        Defaults to the interactive trial count.
        """
        trials = n_trials if n_trials is not None else self._settings.interactive_trials
        return compute_odds(
            self.snapshot(),
            self._participants,
            self._weights,
            trials,
            n_jobs=self._settings.n_jobs,
            block_size=self._settings.block_size,
            seed=self._settings.seed,
        )

    def what_if(self, matchup_id: int, winner_id: int, n_trials: int | None = None) -> dict[str, float]:
        """Return odds for the committed bracket with one series outcome forced."""
        trials = n_trials if n_trials is not None else self._settings.interactive_trials
        with self._lock:
            baseline = self._baseline.copy()
            logger.debug("What-if: matchup %d won by team %d", matchup_id, winner_id)
            return self.what_if_cache.odds(
                baseline,
                self._participants,
                self._weights,
                matchup_id,
                winner_id,
                trials,
                n_jobs=self._settings.n_jobs,
                block_size=self._settings.block_size,
                seed=self._settings.seed,
            )
