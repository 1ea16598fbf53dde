"""Hack plan builder.

Each batch extracts ``hack_percent * max_money`` and restores the target
within the same batch. Stages complete in the strict order:

    hack -> weaken (hack cost) -> grow -> weaken (grow cost)

                      |= hack ====================|
    |= weaken (hack) =================================|
                  |= grow ==========================|
      |= weaken (grow) =================================|
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
    floor_threads,
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
class HackSearch:
    """Outcome of the decaying hack-percent search."""

    stages: list[BatchStage] | None
    ram_per_batch: float
    hack_percent: float
    iterations: int
    failure_reason: str | None = None


# pylint: disable=too-many-locals
def search_hack_batch(
    *,
    snapshot: TargetSnapshot,
    available_ram: float,
    model: AnalyticModelProvider,
    costs: Mapping[OperationKind, float],
    config: PlannerConfig,
) -> HackSearch:
    """
    Find the largest hack percentage whose four-stage batch fits.

    ``hack_percent`` starts at 1.0 and drops by ``config.decay_step`` until
    the batch fits or it reaches ``config.min_hack_percent``. An invalid
    hack thread count from the model ends the search immediately.
    """
    target = snapshot.hostname
    max_money = snapshot.max_money
    offsets = config.stage_offsets_ms

    hack_run_ms = to_millis(model.run_time(OperationKind.HACK, target))
    grow_run_ms = to_millis(model.run_time(OperationKind.GROW, target))
    weaken_run_ms = to_millis(model.run_time(OperationKind.WEAKEN, target))

    hack_percent = 1.0
    iterations = 0
    ram_used = 0.0

    while True:
        if hack_percent <= config.min_hack_percent:
            return HackSearch(
                stages=None,
                ram_per_batch=ram_used,
                hack_percent=hack_percent,
                iterations=iterations,
                failure_reason=FailureReason.NO_HACK_PLAN,
            )

        iterations += 1
        stages: list[BatchStage] | None = None

        hack_amount = min(max_money * hack_percent, max_money)
        hack_threads = floor_threads(
            model.threads_for(OperationKind.HACK, target, hack_amount)
        )
        if hack_threads is None or hack_threads <= -1:
            LOGGER.info(
                "Invalid hack thread count",
                extra={
                    "target": target,
                    "hack_amount": hack_amount,
                    "hack_percent": hack_percent,
                    "hack_threads": hack_threads,
                },
            )
            return HackSearch(
                stages=None,
                ram_per_batch=ram_used,
                hack_percent=hack_percent,
                iterations=iterations,
                failure_reason=FailureReason.INVALID_HACK_THREADS,
            )

        weaken_per_thread = model.security_delta(OperationKind.WEAKEN, 1)

        money_after_hack = max(max_money * (1.0 - hack_percent), config.money_epsilon)
        grow_threads = ceil_threads(
            model.threads_for(OperationKind.GROW, target, max_money / money_after_hack)
        )

        if weaken_per_thread <= 0 or grow_threads is None:
            ram_used = -1.0
        else:
            hack_security = model.security_delta(OperationKind.HACK, hack_threads)
            grow_security = model.security_delta(OperationKind.GROW, grow_threads)

            weaken_for_hack = ceil_threads(hack_security / weaken_per_thread)
            weaken_for_grow = ceil_threads(grow_security / weaken_per_thread)

            if weaken_for_hack is None or weaken_for_grow is None:
                ram_used = -1.0
            else:
                stages = [
                    BatchStage(OperationKind.HACK, hack_threads, hack_run_ms, offsets.hack),
                    BatchStage(OperationKind.WEAKEN, weaken_for_hack, weaken_run_ms, offsets.weaken_hack),
                    BatchStage(OperationKind.GROW, grow_threads, grow_run_ms, offsets.grow),
                    BatchStage(OperationKind.WEAKEN, weaken_for_grow, weaken_run_ms, offsets.weaken_grow),
                ]
                ram_used = batch_ram(stages, costs)

        LOGGER.debug(
            "Hack search step",
            extra={
                "target": target,
                "hack_percent": hack_percent,
                "hack_threads": hack_threads,
                "grow_threads": grow_threads,
                "ram": ram_used,
            },
        )

        if stages is not None and fits_budget(ram_used, available_ram):
            return HackSearch(
                stages=stages,
                ram_per_batch=ram_used,
                hack_percent=hack_percent,
                iterations=iterations,
            )

        hack_percent = quantize(hack_percent - config.decay_step)


def build_hack_plan(
    *,
    snapshot: TargetSnapshot,
    budget: HostBudget,
    model: AnalyticModelProvider,
    costs: Mapping[OperationKind, float],
    config: PlannerConfig,
) -> PlanningOutcome:
    """
    Build a hack plan of replicated four-stage batches.

    Returns an outcome with an empty plan when no hack percentage above
    ``config.min_hack_percent`` fits the budget.
    """
    available_ram = budget.available_ram

    search = search_hack_batch(
        snapshot=snapshot,
        available_ram=available_ram,
        model=model,
        costs=costs,
        config=config,
    )
    search_state = {"hack_percent": search.hack_percent}

    if search.stages is None:
        LOGGER.info(
            "No hack plan found",
            extra={
                "target": snapshot.hostname,
                "host": budget.hostname,
                "reason": search.failure_reason,
                "available_ram": available_ram,
            },
        )
        return PlanningOutcome(
            plan=Plan.empty(),
            available_ram=available_ram,
            ram_per_batch=search.ram_per_batch,
            parallel_loops=0,
            iterations=search.iterations,
            failure_reason=search.failure_reason,
            search_state=search_state,
        )

    # how many times does this batch fit the budget? e.g. 1,000 GB free and
    # 250 GB per batch runs four staggered batches back to back.
    loops = parallel_loops(available_ram, search.ram_per_batch)
    steps = replicate(
        search.stages,
        loops=loops,
        stagger_ms=config.replica_stagger_ms,
    )

    if config.trailing_batch == "refit" and search.ram_per_batch > 0:
        leftover = available_ram - loops * search.ram_per_batch
        trailing = search_hack_batch(
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
        "Hack plan determined",
        extra={
            "target": snapshot.hostname,
            "host": budget.hostname,
            "hack_percent": search.hack_percent,
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
