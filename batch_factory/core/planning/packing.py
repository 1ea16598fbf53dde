"""
Shared packing and timing logic for the prep and hack planners.

A batch is a small list of stages (one per operation instance). Stage
delays are computed so that every stage finishes at the longest stage run
time plus its own fixed offset, and identical batches are replicated as
many times as the RAM budget allows, each replica staggered by a constant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

from batch_factory.core.domain.plan import Plan
from batch_factory.core.domain.types import PlanStep

if TYPE_CHECKING:
    from batch_factory.core.domain.types import OperationKind


@dataclass(frozen=True, slots=True)
class BatchStage:
    """One stage of a batch before timing is applied."""

    kind: OperationKind
    threads: int
    run_time_ms: int
    offset_ms: int = 0


@dataclass(frozen=True, slots=True)
class PlanningOutcome:
    """
    Result of one planner invocation.

    ``plan`` is empty when the search was exhausted; ``failure_reason``
    then names why. ``search_state`` holds the final decay parameters for
    reporting only.
    """

    plan: Plan
    available_ram: float
    ram_per_batch: float
    parallel_loops: int
    iterations: int
    failure_reason: str | None = None
    search_state: dict[str, float] = field(default_factory=dict)

    @property
    def feasible(self) -> bool:
        return not self.plan.is_empty()


def quantize(value: float) -> float:
    """Round a decay parameter to hundredths."""
    return round(value, 2)


def ceil_threads(value: float) -> int | None:
    """Ceil an analytic thread figure.

    None for non-finite or negative input: the model reports a negative
    thread count for a request it cannot satisfy.
    """
    if not math.isfinite(value) or value < 0:
        return None
    return math.ceil(value)


def floor_threads(value: float) -> int | None:
    """Floor an analytic thread figure; None for non-finite input."""
    if not math.isfinite(value):
        return None
    return math.floor(value)


def to_millis(run_time: float) -> int:
    """Convert a model run time to whole milliseconds (rounded up)."""
    if not math.isfinite(run_time) or run_time <= 0:
        return 0
    return math.ceil(run_time)


def batch_ram(
    stages: list[BatchStage],
    costs: Mapping[OperationKind, float],
) -> float:
    """RAM needed to run one batch."""
    return sum(stage.threads * costs[stage.kind] for stage in stages)


def fits_budget(ram: float, available_ram: float) -> bool:
    """A negative RAM figure is a model anomaly and never fits."""
    return 0 <= ram <= available_ram


def synchronized_delays(stages: list[BatchStage]) -> list[int]:
    """Delays that land every stage at ``longest run time + offset``."""
    if not stages:
        return []
    longest = max(stage.run_time_ms for stage in stages)
    return [longest - stage.run_time_ms + stage.offset_ms for stage in stages]


def parallel_loops(available_ram: float, ram_per_batch: float) -> int:
    """How many identical batches fit the budget.

    A batch that needs no RAM (nothing left to do) is emitted once.
    """
    if ram_per_batch <= 0:
        return 1
    return math.floor(available_ram / ram_per_batch)


def replicate(
    stages: list[BatchStage],
    *,
    loops: int,
    stagger_ms: int,
    first_index: int = 0,
) -> list[PlanStep]:
    """Emit ``loops`` replicas of a batch, replica ``i`` delayed by ``i * stagger_ms``."""
    delays = synchronized_delays(stages)
    steps: list[PlanStep] = []

    for loop in range(loops):
        batch_index = first_index + loop
        stagger = batch_index * stagger_ms

        for stage, delay in zip(stages, delays, strict=True):
            steps.append(
                PlanStep(
                    kind=stage.kind,
                    script_threads=stage.threads,
                    start_delay_ms=delay + stagger,
                    expected_run_time_ms=stage.run_time_ms,
                    batch_index=batch_index,
                )
            )

    return steps
