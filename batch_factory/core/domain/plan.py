"""
Plan container.

A plan is an ordered, immutable sequence of plan steps produced by one
planner invocation. It either fits the host RAM budget or is empty, which
means "no feasible plan was found".
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

if TYPE_CHECKING:
    from batch_factory.core.domain.types import OperationKind, PlanStep


@dataclass(frozen=True, slots=True)
class Plan:
    """
    Ordered batch of timed operation instances.

    Plans have no identity beyond their contents: two plans with the same
    steps compare equal.
    """

    steps: tuple[PlanStep, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> Plan:
        return cls(steps=())

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[PlanStep]:
        return iter(self.steps)

    def is_empty(self) -> bool:
        return not self.steps

    @property
    def batch_count(self) -> int:
        """Number of distinct replicas in the plan."""
        return len({step.batch_index for step in self.steps})

    def batch(self, batch_index: int) -> tuple[PlanStep, ...]:
        """Return the steps of a single replica, in plan order."""
        return tuple(step for step in self.steps if step.batch_index == batch_index)

    def finish_time_ms(self) -> int:
        """Latest expected completion (delay + run time) over all steps."""
        if not self.steps:
            return 0
        return max(step.finish_time_ms for step in self.steps)

    def threads_by_kind(self) -> dict[OperationKind, int]:
        counts: Counter[OperationKind] = Counter()
        for step in self.steps:
            counts[step.kind] += step.script_threads
        return dict(counts)

    def total_ram(self, script_cost: Callable[[OperationKind], float]) -> float:
        """Total RAM needed to run every step of the plan at once."""
        return sum(
            step.script_threads * script_cost(step.kind)
            for step in self.steps
        )
