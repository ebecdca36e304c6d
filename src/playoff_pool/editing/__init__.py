"""Interactive bracket editing."""

from __future__ import annotations

from playoff_pool.editing.mutator import (
    apply_score_delta,
    commit,
    decrement,
    force_winner,
    increment,
    reset_to_baseline,
)

__all__ = [
    "apply_score_delta",
    "commit",
    "decrement",
    "force_winner",
    "increment",
    "reset_to_baseline",
]
