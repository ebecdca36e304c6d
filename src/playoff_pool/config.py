"""Engine configuration.

``EngineSettings`` collects the tunables of the odds engine and where the
pool's JSON files live.  Values come from keyword arguments, or from
``PLAYOFF_POOL_*`` environment variables via :meth:`EngineSettings.from_env`;
CLI options override both.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from playoff_pool.evaluation.odds import AUTHORITATIVE_TRIALS, DEFAULT_BLOCK_SIZE, INTERACTIVE_TRIALS

ENV_PREFIX: str = "PLAYOFF_POOL_"


class EngineSettings(BaseModel):
    """Tunables for odds estimation and storage.

    Attributes:
        authoritative_trials: Trials for the full (server-side) odds run.
        interactive_trials: Trials for recomputation while editing.
        block_size: Trials per independently seeded block.
        n_jobs: joblib worker count (``-1`` uses every core).
        seed: Base seed; ``None`` draws fresh entropy each run.
        data_dir: Directory holding the pool's JSON files.
    """

    authoritative_trials: int = Field(default=AUTHORITATIVE_TRIALS, gt=0)
    interactive_trials: int = Field(default=INTERACTIVE_TRIALS, gt=0)
    block_size: int = Field(default=DEFAULT_BLOCK_SIZE, gt=0)
    n_jobs: int = 1
    seed: int | None = None
    data_dir: Path = Path("data/")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """Build settings from ``PLAYOFF_POOL_<FIELD>`` environment variables.

        Unset variables keep their defaults.  An empty ``PLAYOFF_POOL_SEED``
        means no seed.

        Raises:
            pydantic.ValidationError: If a variable does not parse.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ
        values: dict[str, str | None] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            values[name] = (raw or None) if name == "seed" else raw
        return cls.model_validate(values)
