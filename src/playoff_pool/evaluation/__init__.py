"""Tournament simulation, pool scoring, and win-odds estimation module."""

from __future__ import annotations

from playoff_pool.evaluation.odds import (
    AUTHORITATIVE_TRIALS,
    INTERACTIVE_TRIALS,
    OddsEstimate,
    WhatIfOddsCache,
    compute_odds,
    estimate_odds,
    round_odds,
)
from playoff_pool.evaluation.scoring import compute_scores, leader_shares, score_all, score_participant
from playoff_pool.evaluation.simulation import (
    CompiledBracket,
    SeriesOutcome,
    compile_bracket,
    simulate_series,
    simulate_tournament,
)

__all__ = [
    "AUTHORITATIVE_TRIALS",
    "INTERACTIVE_TRIALS",
    "CompiledBracket",
    "OddsEstimate",
    "SeriesOutcome",
    "WhatIfOddsCache",
    "compile_bracket",
    "compute_odds",
    "compute_scores",
    "estimate_odds",
    "leader_shares",
    "round_odds",
    "score_all",
    "score_participant",
    "simulate_series",
    "simulate_tournament",
]
