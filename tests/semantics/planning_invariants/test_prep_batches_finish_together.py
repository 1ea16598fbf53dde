"""
Semantic test: prep grow and weaken land together.

Invariant:
In every replica of a prep plan, grow and weaken finish at the same
instant (delay + run time), and replica i finishes i * stagger after
replica 0.
"""

from __future__ import annotations

from batch_factory.core.config.planner_config import PlannerConfig
from batch_factory.core.domain.types import HostBudget, OperationKind
from batch_factory.core.planning.prep_plan import build_prep_plan
from batch_factory.simulation.server import SimulatedModelProvider, SimulatedServer


def test_prep_grow_and_weaken_finish_together() -> None:
    server = SimulatedServer(
        hostname="n00dles",
        max_money=1_000_000,
        money_available=250_000,
        min_security=10,
        security_level=15,
    )
    config = PlannerConfig()
    costs = {kind: 1.75 for kind in OperationKind}

    outcome = build_prep_plan(
        snapshot=server.snapshot(),
        budget=HostBudget(hostname="home", available_ram=4096),
        model=SimulatedModelProvider({"n00dles": server}),
        costs=costs,
        config=config,
    )

    assert outcome.feasible
    assert outcome.plan.batch_count >= 2

    first_finish = None
    for batch_index in range(outcome.plan.batch_count):
        grow, weaken = outcome.plan.batch(batch_index)
        assert grow.kind is OperationKind.GROW
        assert weaken.kind is OperationKind.WEAKEN

        assert grow.start_delay_ms + grow.expected_run_time_ms == (
            weaken.start_delay_ms + weaken.expected_run_time_ms
        )

        if first_finish is None:
            first_finish = grow.finish_time_ms
        assert grow.finish_time_ms == first_finish + batch_index * config.replica_stagger_ms


def test_prep_longer_stage_starts_immediately() -> None:
    server = SimulatedServer(
        hostname="n00dles",
        max_money=1_000_000,
        money_available=500_000,
        min_security=10,
        security_level=12,
    )

    outcome = build_prep_plan(
        snapshot=server.snapshot(),
        budget=HostBudget(hostname="home", available_ram=10_000),
        model=SimulatedModelProvider({"n00dles": server}),
        costs={kind: 1.75 for kind in OperationKind},
        config=PlannerConfig(),
    )

    grow, weaken = outcome.plan.batch(0)

    # weaken is the slower operation, so it carries no delay
    assert weaken.start_delay_ms == 0
    assert grow.start_delay_ms == weaken.expected_run_time_ms - grow.expected_run_time_ms
