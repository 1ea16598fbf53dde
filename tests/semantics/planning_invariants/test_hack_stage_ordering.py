"""
Semantic test: hack batch completion order.

Invariant:
Within a hack batch the stages finish strictly in the order
hack < weaken(hack) < grow < weaken(grow), separated by at least the
configured stage offsets, even when every run time is equal.
"""

from __future__ import annotations

from batch_factory.core.config.planner_config import PlannerConfig
from batch_factory.core.domain.types import HostBudget, OperationKind, TargetSnapshot
from batch_factory.core.planning.hack_plan import build_hack_plan


class _FlatModel:
    """Every operation takes the same time; simple linear thread math."""

    def __init__(self, run_time_ms: float) -> None:
        self._run_time_ms = run_time_ms

    def threads_for(self, kind: OperationKind, target: str, amount: float) -> float:
        if kind is OperationKind.WEAKEN:
            return amount / 0.05
        if kind is OperationKind.GROW:
            return max(0.0, 100.0 * (amount - 1.0))
        return amount / 1000.0

    def security_delta(self, kind: OperationKind, threads: int) -> float:
        per_thread = {
            OperationKind.WEAKEN: 0.05,
            OperationKind.GROW: 0.004,
            OperationKind.HACK: 0.002,
        }
        return per_thread[kind] * threads

    def run_time(self, kind: OperationKind, target: str) -> float:
        return self._run_time_ms


def _baseline() -> TargetSnapshot:
    return TargetSnapshot(
        hostname="n00dles",
        max_money=1_000_000,
        money_available=1_000_000,
        min_security=10,
        security_level=10,
    )


def test_equal_run_times_still_finish_in_order() -> None:
    config = PlannerConfig()

    outcome = build_hack_plan(
        snapshot=_baseline(),
        budget=HostBudget(hostname="home", available_ram=2_000),
        model=_FlatModel(run_time_ms=1_000),
        costs={kind: 1.0 for kind in OperationKind},
        config=config,
    )

    assert outcome.feasible

    hack, weaken_hack, grow, weaken_grow = outcome.plan.batch(0)
    assert [s.kind for s in (hack, weaken_hack, grow, weaken_grow)] == [
        OperationKind.HACK,
        OperationKind.WEAKEN,
        OperationKind.GROW,
        OperationKind.WEAKEN,
    ]

    offsets = config.stage_offsets_ms
    assert hack.finish_time_ms == 1_000 + offsets.hack
    assert weaken_hack.finish_time_ms == 1_000 + offsets.weaken_hack
    assert grow.finish_time_ms == 1_000 + offsets.grow
    assert weaken_grow.finish_time_ms == 1_000 + offsets.weaken_grow


def test_every_replica_keeps_strict_order() -> None:
    config = PlannerConfig()

    outcome = build_hack_plan(
        snapshot=_baseline(),
        budget=HostBudget(hostname="home", available_ram=10_000),
        model=_FlatModel(run_time_ms=2_500),
        costs={kind: 1.0 for kind in OperationKind},
        config=config,
    )

    assert outcome.plan.batch_count >= 2

    for batch_index in range(outcome.plan.batch_count):
        finishes = [step.finish_time_ms for step in outcome.plan.batch(batch_index)]
        assert finishes == sorted(finishes)
        assert len(set(finishes)) == 4
        assert finishes[1] - finishes[0] >= config.stage_offsets_ms.weaken_hack - config.stage_offsets_ms.hack
        assert finishes[3] - finishes[2] >= config.stage_offsets_ms.weaken_grow - config.stage_offsets_ms.grow


def test_hack_uses_decayed_percent_that_fits() -> None:
    outcome = build_hack_plan(
        snapshot=_baseline(),
        budget=HostBudget(hostname="home", available_ram=2_000),
        model=_FlatModel(run_time_ms=1_000),
        costs={kind: 1.0 for kind in OperationKind},
        config=PlannerConfig(),
    )

    hack_percent = outcome.search_state["hack_percent"]
    assert 0.0 < hack_percent < 1.0
    assert outcome.ram_per_batch <= 2_000
