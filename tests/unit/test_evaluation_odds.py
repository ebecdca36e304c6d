"""Unit tests for Monte Carlo odds estimation and the what-if cache."""

from __future__ import annotations

import logging

import pytest

from playoff_pool.bracket.schema import Matchup, Participant
from playoff_pool.bracket.tree import BracketTree
from playoff_pool.evaluation.odds import (
    OddsEstimate,
    WhatIfOddsCache,
    compute_odds,
    estimate_odds,
    round_odds,
)

PAIR = [Participant(id="a", name="Ann"), Participant(id="b", name="Ben")]
# Each participant backs one finalist only.
SPLIT_WEIGHTS = {"a": {1: 10}, "b": {2: 10}}


def _final_only(score1: int = 0, score2: int = 0) -> BracketTree:
    """A one-series bracket between teams 1 and 2."""
    return BracketTree(
        [Matchup(id=1, round=1, position=1, team1_id=1, team2_id=2, score1=score1, score2=score2)]
    )


def _decided_final() -> BracketTree:
    return BracketTree(
        [
            Matchup(
                id=1,
                round=1,
                position=1,
                team1_id=1,
                team2_id=2,
                score1=1,
                score2=4,
                is_completed=True,
                winner_id=2,
            )
        ]
    )


@pytest.mark.smoke
class TestRoundOdds:
    """Tests for the display rounding rule."""

    @pytest.mark.parametrize(
        ("pct", "expected"),
        [
            (0.0, 0.0),
            (3.14159, 3.1),
            (2.25, 2.3),
            (9.94, 9.9),
            (10.0, 10.0),
            (12.5, 13.0),
            (42.4, 42.0),
            (99.6, 100.0),
        ],
    )
    def test_rounding(self, pct: float, expected: float) -> None:
        assert round_odds(pct) == expected

    def test_rounded_orders_descending(self) -> None:
        estimate = OddsEstimate(percentages={"a": 12.4, "b": 80.0, "c": 7.66}, n_trials=10, elapsed_seconds=0.0)
        assert list(estimate.rounded().items()) == [("b", 80.0), ("a", 12.0), ("c", 7.7)]
        assert estimate.total == pytest.approx(100.06)


class TestEstimateOdds:
    """Tests for `estimate_odds` and `compute_odds`."""

    @pytest.mark.smoke
    @pytest.mark.parametrize("n_trials", [0, -10])
    def test_rejects_non_positive_trials(self, n_trials: int) -> None:
        with pytest.raises(ValueError, match="n_trials"):
            estimate_odds(_final_only(), PAIR, SPLIT_WEIGHTS, n_trials)

    @pytest.mark.smoke
    def test_rejects_non_positive_block_size(self) -> None:
        with pytest.raises(ValueError, match="block_size"):
            estimate_odds(_final_only(), PAIR, SPLIT_WEIGHTS, 100, block_size=0)

    @pytest.mark.smoke
    def test_no_participants(self) -> None:
        estimate = estimate_odds(_final_only(), [], SPLIT_WEIGHTS, 100)
        assert estimate.percentages == {}

    @pytest.mark.smoke
    def test_decided_bracket_is_certain(self) -> None:
        assert compute_odds(_decided_final(), PAIR, SPLIT_WEIGHTS, 500) == {"b": 100.0, "a": 0.0}

    @pytest.mark.smoke
    def test_tie_splits_credit(self) -> None:
        # Nobody rates anything: every trial is an all-way tie.
        odds = compute_odds(_final_only(), PAIR, {}, 300, seed=1)
        assert odds == {"a": 50.0, "b": 50.0}

    @pytest.mark.smoke
    def test_sums_to_one_hundred(self, playoff_tree: BracketTree, participants: list[Participant]) -> None:
        weights = {"1": {1: 10, 9: 3}, "2": {2: 7, 16: 10}, "3": {t: 5 for t in range(1, 17)}}
        estimate = estimate_odds(playoff_tree, participants, weights, 2_345, block_size=500, seed=3)
        assert estimate.n_trials == 2_345
        assert set(estimate.percentages) == {"1", "2", "3"}
        assert estimate.total == pytest.approx(100.0)

    @pytest.mark.smoke
    def test_seed_is_reproducible(self, playoff_tree: BracketTree, participants: list[Participant]) -> None:
        weights = {"1": {1: 10}, "2": {3: 10}, "3": {5: 10}}
        a = estimate_odds(playoff_tree, participants, weights, 1_000, block_size=250, seed=42)
        b = estimate_odds(playoff_tree, participants, weights, 1_000, block_size=250, seed=42)
        assert a.percentages == b.percentages

    def test_input_tree_untouched(self, small_tree: BracketTree, participants: list[Participant]) -> None:
        before = small_tree.copy()
        estimate_odds(small_tree, participants, {"1": {1: 3}}, 200)
        assert small_tree == before

    def test_logs_trial_count(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="playoff_pool"):
            estimate_odds(_final_only(), PAIR, SPLIT_WEIGHTS, 250)
        assert "250 trials" in caplog.text

    @pytest.mark.slow
    def test_worker_count_does_not_change_result(
        self, playoff_tree: BracketTree, participants: list[Participant]
    ) -> None:
        weights = {"1": {1: 10}, "2": {3: 10}, "3": {5: 10}}
        serial = estimate_odds(playoff_tree, participants, weights, 4_000, block_size=1_000, seed=8)
        parallel = estimate_odds(playoff_tree, participants, weights, 4_000, block_size=1_000, seed=8, n_jobs=2)
        assert parallel.percentages == pytest.approx(serial.percentages)

    @pytest.mark.slow
    @pytest.mark.property
    def test_symmetric_pool_converges_to_even_odds(self) -> None:
        errors = []
        for n_trials in (200, 20_000):
            odds = estimate_odds(_final_only(), PAIR, SPLIT_WEIGHTS, n_trials, seed=2026).percentages
            assert sum(odds.values()) == pytest.approx(100.0)
            errors.append(abs(odds["a"] - 50.0))
        assert errors[-1] < 2.0

    @pytest.mark.slow
    def test_leading_series_favours_its_backer(self) -> None:
        # Team 1 leads 3-0: it takes the series unless it drops four straight.
        odds = estimate_odds(_final_only(score1=3), PAIR, SPLIT_WEIGHTS, 20_000, seed=5).percentages
        assert odds["a"] == pytest.approx(100 * (1 - 0.5**4), abs=1.5)


class TestWhatIfOddsCache:
    """Tests for `WhatIfOddsCache`."""

    @pytest.mark.smoke
    def test_forced_winner_decides_pool(self) -> None:
        cache = WhatIfOddsCache()
        tree = _final_only(score2=2)
        assert cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 1, 200) == {"a": 100.0, "b": 0.0}
        assert cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 2, 200) == {"b": 100.0, "a": 0.0}
        assert len(cache) == 2
        assert (1, 1) in cache

    @pytest.mark.smoke
    def test_source_tree_not_modified(self) -> None:
        tree = _final_only(score1=1)
        before = tree.copy()
        WhatIfOddsCache().odds(tree, PAIR, SPLIT_WEIGHTS, 1, 2, 100)
        assert tree == before

    @pytest.mark.smoke
    def test_overturns_decided_series(self) -> None:
        cache = WhatIfOddsCache()
        assert cache.odds(_decided_final(), PAIR, SPLIT_WEIGHTS, 1, 1, 100) == {"a": 100.0, "b": 0.0}

    def test_cached_entry_reused(self) -> None:
        cache = WhatIfOddsCache()
        tree = _final_only()
        first = cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 1, 200)
        cached = cache.get(1, 1)
        assert cached is not None
        assert cached.n_trials == 200
        # A smaller request is served from the larger cached run.
        assert cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 1, 50) == first
        assert cache.get(1, 1) is cached

    def test_larger_trial_count_recomputes(self) -> None:
        cache = WhatIfOddsCache()
        tree = _final_only()
        cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 1, 100)
        cache.odds(tree, PAIR, SPLIT_WEIGHTS, 1, 1, 400, block_size=100)
        refreshed = cache.get(1, 1)
        assert refreshed is not None
        assert refreshed.n_trials == 400
        assert len(cache) == 1

    def test_block_size_is_forwarded(self) -> None:
        with pytest.raises(ValueError, match="block_size"):
            WhatIfOddsCache().odds(_final_only(), PAIR, SPLIT_WEIGHTS, 1, 1, 100, block_size=0)

    def test_invalidate_clears(self) -> None:
        cache = WhatIfOddsCache()
        cache.odds(_final_only(), PAIR, SPLIT_WEIGHTS, 1, 2, 100)
        cache.invalidate()
        assert len(cache) == 0
        assert cache.get(1, 2) is None

    @pytest.mark.parametrize(("matchup_id", "winner_id"), [(99, 1), (1, 7)])
    def test_unknown_matchup_or_team_is_empty(self, matchup_id: int, winner_id: int) -> None:
        cache = WhatIfOddsCache()
        assert cache.odds(_final_only(), PAIR, SPLIT_WEIGHTS, matchup_id, winner_id, 100) == {}
        assert len(cache) == 0

    @pytest.mark.smoke
    def test_final_with_empty_slot_is_empty(self) -> None:
        # Semifinal 1 is decided; semifinal 2 is still open, so the final lacks team2.
        tree = BracketTree(
            [
                Matchup(
                    id=1,
                    round=1,
                    position=1,
                    team1_id=1,
                    team2_id=2,
                    score1=4,
                    score2=0,
                    is_completed=True,
                    winner_id=1,
                ),
                Matchup(id=2, round=1, position=2, team1_id=3, team2_id=4),
                Matchup(id=3, round=2, position=1, team1_id=1, team2_id=None),
            ],
            eliminated={2},
        )
        before = tree.copy()
        cache = WhatIfOddsCache()
        assert cache.odds(tree, PAIR, {"a": {1: 5}}, 3, 1, 100) == {}
        assert len(cache) == 0
        assert tree == before
