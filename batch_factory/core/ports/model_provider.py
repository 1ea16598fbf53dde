"""Analytic model provider protocol.

The planner consults this boundary for every thread count, security delta
and run time it needs. Implementations read the target's current state and
must be deterministic for a given state and free of side effects.
"""

from __future__ import annotations

from typing import Protocol

from batch_factory.core.domain.types import OperationKind


class AnalyticModelProvider(Protocol):
    """Read-only analytic model of the remote substrate.

    Thread counts are returned unrounded; the planner applies ceil/floor.
    A negative thread count signals an invalid request (e.g. hacking more
    money than the target holds).
    """

    def threads_for(self, kind: OperationKind, target: str, amount: float) -> float:
        """Return the threads needed for ``amount`` of effect.

        - GROW:   ``amount`` is the money multiplier to reach
        - HACK:   ``amount`` is the money to extract
        - WEAKEN: ``amount`` is the security to remove
        """

    def security_delta(self, kind: OperationKind, threads: int) -> float:
        """Return the security change magnitude produced by ``threads``.

        GROW and HACK increase security by the returned value; WEAKEN
        decreases it by the returned value.
        """

    def run_time(self, kind: OperationKind, target: str) -> float:
        """Return the wall-clock run time of one instance in milliseconds."""
