"""
Semantic test: a negative grow or weaken thread count never reaches a plan.

Invariant:
When the model answers a grow or weaken request with a negative thread
count, the batch is treated as not fitting and the search keeps decaying.
Both planners return an empty plan with their usual reason instead of
raising, however much RAM is available.
"""

from __future__ import annotations

import pytest

from batch_factory.core.config.planner_config import PlannerConfig
from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.types import HostBudget, OperationKind, TargetSnapshot
from batch_factory.core.planning.hack_plan import build_hack_plan
from batch_factory.core.planning.prep_plan import build_prep_plan


class _NegativeStageModel:
    def __init__(self, negative_kind: OperationKind) -> None:
        self._negative_kind = negative_kind

    def threads_for(self, kind: OperationKind, target: str, amount: float) -> float:
        if kind is self._negative_kind:
            return -1.0
        if kind is OperationKind.HACK:
            return 10.0
        return 40.0

    def security_delta(self, kind: OperationKind, threads: int) -> float:
        if kind is OperationKind.WEAKEN:
            return 0.05 * threads
        return 0.004 * threads

    def run_time(self, kind: OperationKind, target: str) -> float:
        return 1_000.0


def _snapshot(money: float, security: float) -> TargetSnapshot:
    return TargetSnapshot(
        hostname="n00dles",
        max_money=1_000_000,
        money_available=money,
        min_security=10,
        security_level=security,
    )


BUDGET = HostBudget(hostname="home", available_ram=10_000)
COSTS = {kind: 1.75 for kind in OperationKind}


@pytest.mark.parametrize("negative_kind", [OperationKind.GROW, OperationKind.WEAKEN])
def test_prep_plan_decays_past_negative_threads(negative_kind: OperationKind) -> None:
    config = PlannerConfig()

    outcome = build_prep_plan(
        snapshot=_snapshot(money=250_000, security=14),
        budget=BUDGET,
        model=_NegativeStageModel(negative_kind),
        costs=COSTS,
        config=config,
    )

    assert outcome.plan.is_empty()
    assert outcome.failure_reason == FailureReason.NO_PREP_PLAN
    assert outcome.iterations < 2 * config.max_decay_iterations


def test_hack_plan_decays_past_negative_grow_threads() -> None:
    config = PlannerConfig()

    outcome = build_hack_plan(
        snapshot=_snapshot(money=1_000_000, security=10),
        budget=BUDGET,
        model=_NegativeStageModel(OperationKind.GROW),
        costs=COSTS,
        config=config,
    )

    assert outcome.plan.is_empty()
    assert outcome.failure_reason == FailureReason.NO_HACK_PLAN
    assert outcome.iterations == config.max_decay_iterations
