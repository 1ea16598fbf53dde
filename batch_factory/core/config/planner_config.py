"""Planner configuration model.

This module defines the search and timing constants shared by the prep
and hack planners: decay step and floor, replica stagger, per-stage
completion offsets and the trailing batch policy.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StageOffsets(BaseModel):
    """Fixed completion biases (ms) of the four hack-batch stages."""

    hack: int = Field(default=0, ge=0)
    weaken_hack: int = Field(default=20, ge=0)
    grow: int = Field(default=40, ge=0)
    weaken_grow: int = Field(default=60, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_strictly_increasing(self) -> StageOffsets:
        """Offsets must order completions hack < weaken_hack < grow < weaken_grow."""
        if not self.hack < self.weaken_hack < self.grow < self.weaken_grow:
            raise ValueError("stage offsets must be strictly increasing")
        return self


class PlannerConfig(BaseModel):
    """Tunables for the decaying plan searches.

    JSON example:
        "planner": {
          "decay_step": 0.05,
          "replica_stagger_ms": 150,
          "trailing_batch": "refit"
        }
    """

    decay_step: float = Field(default=0.05, gt=0, le=1)
    decay_floor: float = Field(default=0.05, ge=0, lt=1)

    # Hack search fails once hack_percent <= min_hack_percent.
    min_hack_percent: float = Field(default=0.0, ge=0, lt=1)

    replica_stagger_ms: int = Field(default=150, ge=0)
    stage_offsets_ms: StageOffsets = Field(default_factory=StageOffsets)

    # Strictly positive floor for money left after a full hack.
    money_epsilon: float = Field(default=0.001, gt=0)

    # "refit": re-search leftover RAM once and append a smaller batch.
    trailing_batch: Literal["none", "refit"] = "none"

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, planner_obj: dict[str, Any]) -> PlannerConfig:
        """Create a PlannerConfig instance from a JSON-compatible object."""
        return cls.model_validate(planner_obj)

    @property
    def max_decay_iterations(self) -> int:
        """Upper bound on the walk of one decay parameter from 1.0."""
        return int(round(1.0 / self.decay_step))
