from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Mapping

if TYPE_CHECKING:
    from batch_factory.core.domain.plan import Plan
    from batch_factory.core.domain.types import OperationKind
    from batch_factory.core.planning.packing import PlanningOutcome


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_duration(millis: float) -> str:
    """Render milliseconds as seconds, minutes or hours with two decimals."""
    seconds = millis / 1000
    minutes = seconds / 60
    hours = minutes / 60

    if hours >= 1:
        return f"{hours:.2f} hours"
    if minutes >= 1:
        return f"{minutes:.2f} minutes"
    return f"{seconds:.2f} seconds"


def describe_plan(plan: Plan) -> list[str]:
    """One human-readable line per step, in plan order."""
    lines: list[str] = []
    for step in plan:
        lines.append(
            f"[batch {step.batch_index}] {step.kind.value} "
            f"x{step.script_threads} | "
            f"delay {step.start_delay_ms} ms | "
            f"finishes in {format_duration(step.finish_time_ms)}"
        )
    return lines


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlanSummary:
    target: str
    mode: str
    feasible: bool
    batches: int
    steps: int
    threads: dict[str, int]
    total_ram: float
    available_ram: float
    finish_time_ms: int
    search_state: dict[str, float]
    failure_reason: str | None
    lines: List[str]
    warnings: List[str]


# ---------------------------------------------------------------------------
# Summary builder
# ---------------------------------------------------------------------------

def summarize_plan(
    *,
    target: str,
    mode: str,
    outcome: PlanningOutcome,
    costs: Mapping[OperationKind, float],
) -> PlanSummary:
    plan = outcome.plan
    warnings: list[str] = []

    total_ram = plan.total_ram(lambda kind: costs[kind])

    if not outcome.feasible:
        warnings.append(f"No feasible {mode} plan ({outcome.failure_reason})")
    elif plan.batch_count == 1 and outcome.ram_per_batch > 0:
        warnings.append("Budget fits a single batch only")

    if outcome.available_ram > 0 and total_ram > outcome.available_ram:
        warnings.append(
            f"Plan exceeds the RAM budget ({total_ram:.2f} > {outcome.available_ram:.2f})"
        )

    noops = sum(1 for step in plan if step.is_noop())
    if noops:
        warnings.append(f"{noops} step(s) have zero threads and will be skipped")

    return PlanSummary(
        target=target,
        mode=mode,
        feasible=outcome.feasible,
        batches=plan.batch_count,
        steps=len(plan),
        threads={kind.value: count for kind, count in plan.threads_by_kind().items()},
        total_ram=total_ram,
        available_ram=outcome.available_ram,
        finish_time_ms=plan.finish_time_ms(),
        search_state=dict(outcome.search_state),
        failure_reason=outcome.failure_reason,
        lines=describe_plan(plan),
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def print_plan_summary(summary: PlanSummary) -> None:
    print(f"Target: {summary.target} ({summary.mode})")
    print(f"Feasible: {summary.feasible}")
    print(f"Batches: {summary.batches}")
    print(f"Steps: {summary.steps}")
    print(f"RAM: {summary.total_ram:.2f} / {summary.available_ram:.2f}")
    print(f"Completes in: {format_duration(summary.finish_time_ms)}")
    if summary.search_state:
        state = ", ".join(f"{k}={v}" for k, v in summary.search_state.items())
        print(f"Search state: {state}")
    print()

    if summary.warnings:
        print("Warnings:")
        for w in summary.warnings:
            print(f"  - {w}")
        print()

    if summary.lines:
        print("Steps:")
        for line in summary.lines:
            print(f"  - {line}")
        print()
