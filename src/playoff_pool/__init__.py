"""playoff_pool: confidence-weighted playoff pool scoring and Monte Carlo win odds."""

from __future__ import annotations

__version__ = "0.1.0"
