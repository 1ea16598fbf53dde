"""Prep plan builder.

Drives a target toward max money and min security in one coordinated
grow + weaken batch, replicated across the host RAM budget.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.plan import Plan
from batch_factory.core.domain.types import OperationKind
from batch_factory.core.planning.packing import (
    BatchStage,
    PlanningOutcome,
    batch_ram,
    ceil_threads,
    fits_budget,
    parallel_loops,
    quantize,
    replicate,
    to_millis,
)

if TYPE_CHECKING:
    from batch_factory.core.config.planner_config import PlannerConfig
    from batch_factory.core.domain.types import HostBudget, TargetSnapshot
    from batch_factory.core.ports.model_provider import AnalyticModelProvider

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PrepSearch:
    """Outcome of the decaying grow/weaken search."""

    stages: list[BatchStage] | None
    ram_per_batch: float
    grow_decay: float
    weaken_decay: float
    iterations: int


def search_prep_batch(
    *,
    snapshot: TargetSnapshot,
    available_ram: float,
    model: AnalyticModelProvider,
    costs: Mapping[OperationKind, float],
    config: PlannerConfig,
) -> PrepSearch:
    """
    Find the largest grow/weaken pair that fits ``available_ram``.

    Grow threads shrink first (``grow_decay``); once grow reaches the floor,
    weaken threads shrink too (``weaken_decay``). The search fails when both
    decays are at or below the floor. Each decay walks at most
    ``config.max_decay_iterations`` steps.
    """
    target = snapshot.hostname
    step = config.decay_step
    floor = config.decay_floor

    grow_decay = 1.0
    weaken_decay = 1.0
    iterations = 0
    ram_used = 0.0

    multiplier = snapshot.max_money / max(snapshot.money_available, 1.0)
    grow_run_ms = to_millis(model.run_time(OperationKind.GROW, target))
    weaken_run_ms = to_millis(model.run_time(OperationKind.WEAKEN, target))

    while True:
        iterations += 1
        stages: list[BatchStage] | None = None

        grow_threads = ceil_threads(
            grow_decay * model.threads_for(OperationKind.GROW, target, multiplier)
        )
        weaken_threads: int | None = None
        if grow_threads is not None:
            grow_security = model.security_delta(OperationKind.GROW, grow_threads)
            total_security = grow_security + snapshot.security_deficit
            weaken_threads = ceil_threads(
                weaken_decay * model.threads_for(OperationKind.WEAKEN, target, total_security)
            )

        if grow_threads is None or weaken_threads is None:
            ram_used = -1.0
        else:
            stages = [
                BatchStage(OperationKind.GROW, grow_threads, grow_run_ms),
                BatchStage(OperationKind.WEAKEN, weaken_threads, weaken_run_ms),
            ]
            ram_used = batch_ram(stages, costs)

        LOGGER.debug(
            "Prep search step",
            extra={
                "target": target,
                "grow_decay": grow_decay,
                "weaken_decay": weaken_decay,
                "grow_threads": grow_threads,
                "weaken_threads": weaken_threads,
                "ram": ram_used,
            },
        )

        if stages is not None and fits_budget(ram_used, available_ram):
            return PrepSearch(
                stages=stages,
                ram_per_batch=ram_used,
                grow_decay=grow_decay,
                weaken_decay=weaken_decay,
                iterations=iterations,
            )

        if grow_decay > floor:
            grow_decay = quantize(grow_decay - step)
        if grow_decay <= floor and weaken_decay > floor:
            weaken_decay = quantize(weaken_decay - step)

        if grow_decay <= floor and weaken_decay <= floor:
            return PrepSearch(
                stages=None,
                ram_per_batch=ram_used,
                grow_decay=grow_decay,
                weaken_decay=weaken_decay,
                iterations=iterations,
            )


def build_prep_plan(
    *,
    snapshot: TargetSnapshot,
    budget: HostBudget,
    model: AnalyticModelProvider,
    costs: Mapping[OperationKind, float],
    config: PlannerConfig,
) -> PlanningOutcome:
    """
    Build a prep plan: grow and weaken land together in every replica.

    Pure with respect to its inputs and the model's current readings.
    Returns an outcome with an empty plan when no pair fits the budget.
    """
    available_ram = budget.available_ram

    search = search_prep_batch(
        snapshot=snapshot,
        available_ram=available_ram,
        model=model,
        costs=costs,
        config=config,
    )
    search_state = {
        "grow_decay": search.grow_decay,
        "weaken_decay": search.weaken_decay,
    }

    if search.stages is None:
        LOGGER.info(
            "No prep plan found",
            extra={
                "target": snapshot.hostname,
                "host": budget.hostname,
                "lowest_ram": search.ram_per_batch,
                "available_ram": available_ram,
            },
        )
        return PlanningOutcome(
            plan=Plan.empty(),
            available_ram=available_ram,
            ram_per_batch=search.ram_per_batch,
            parallel_loops=0,
            iterations=search.iterations,
            failure_reason=FailureReason.NO_PREP_PLAN,
            search_state=search_state,
        )

    loops = parallel_loops(available_ram, search.ram_per_batch)
    steps = replicate(
        search.stages,
        loops=loops,
        stagger_ms=config.replica_stagger_ms,
    )

    if config.trailing_batch == "refit" and search.ram_per_batch > 0:
        leftover = available_ram - loops * search.ram_per_batch
        trailing = search_prep_batch(
            snapshot=snapshot,
            available_ram=leftover,
            model=model,
            costs=costs,
            config=config,
        )
        if trailing.stages is not None and trailing.ram_per_batch > 0:
            steps.extend(
                replicate(
                    trailing.stages,
                    loops=1,
                    stagger_ms=config.replica_stagger_ms,
                    first_index=loops,
                )
            )

    LOGGER.info(
        "Prep plan determined",
        extra={
            "target": snapshot.hostname,
            "host": budget.hostname,
            "grow_decay": search.grow_decay,
            "weaken_decay": search.weaken_decay,
            "ram_per_batch": search.ram_per_batch,
            "parallel_loops": loops,
        },
    )

    return PlanningOutcome(
        plan=Plan(steps=tuple(steps)),
        available_ram=available_ram,
        ram_per_batch=search.ram_per_batch,
        parallel_loops=loops,
        iterations=search.iterations,
        search_state=search_state,
    )
