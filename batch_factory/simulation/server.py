"""Deterministic in-process target model.

The formulas are deliberately simple but keep the shape of the real
substrate:

- weaken removes ``WEAKEN_SECURITY_PER_THREAD`` security per thread
- grow multiplies money by ``(1 + growth_per_thread) ** threads`` and adds
  ``GROW_SECURITY_PER_THREAD`` security per thread
- hack steals ``hack_fraction_per_thread`` of the current money per thread
  and adds ``HACK_SECURITY_PER_THREAD`` security per thread
- run times scale with ``security_level / min_security``; grow takes 3.2x
  and weaken 4x the hack time
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from batch_factory.core.domain.types import OperationKind, TargetSnapshot

WEAKEN_SECURITY_PER_THREAD = 0.05
GROW_SECURITY_PER_THREAD = 0.004
HACK_SECURITY_PER_THREAD = 0.002

GROW_TIME_FACTOR = 3.2
WEAKEN_TIME_FACTOR = 4.0


@dataclass(slots=True)
class SimulatedServer:
    """Mutable target state plus its analytic formulas."""

    hostname: str

    max_money: float
    money_available: float

    min_security: float
    security_level: float

    base_hack_time_ms: float = 1000.0
    growth_per_thread: float = 0.0025
    hack_fraction_per_thread: float = 0.002

    def snapshot(self) -> TargetSnapshot:
        return TargetSnapshot(
            hostname=self.hostname,
            max_money=self.max_money,
            money_available=self.money_available,
            min_security=self.min_security,
            security_level=self.security_level,
        )

    # ------------------------------------------------------------------
    # Analytic formulas
    # ------------------------------------------------------------------

    def run_time(self, kind: OperationKind) -> float:
        scale = self.security_level / self.min_security if self.min_security > 0 else 1.0
        hack_time = self.base_hack_time_ms * scale

        if kind is OperationKind.HACK:
            return hack_time
        if kind is OperationKind.GROW:
            return hack_time * GROW_TIME_FACTOR
        return hack_time * WEAKEN_TIME_FACTOR

    def threads_for(self, kind: OperationKind, amount: float) -> float:
        if kind is OperationKind.WEAKEN:
            if amount <= 0:
                return 0.0
            return amount / WEAKEN_SECURITY_PER_THREAD

        if kind is OperationKind.GROW:
            if amount <= 1:
                return 0.0
            return math.log(amount) / math.log1p(self.growth_per_thread)

        # Stealing more than the target holds is an invalid request.
        if self.money_available <= 0 or amount > self.money_available:
            return -1.0
        if amount <= 0:
            return 0.0
        return amount / (self.money_available * self.hack_fraction_per_thread)

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def apply_weaken(self, threads: int) -> None:
        self.security_level = max(
            self.min_security,
            self.security_level - threads * WEAKEN_SECURITY_PER_THREAD,
        )

    def apply_grow(self, threads: int) -> None:
        grown = max(self.money_available, 1.0) * (1.0 + self.growth_per_thread) ** threads
        self.money_available = min(self.max_money, grown)
        self.security_level += threads * GROW_SECURITY_PER_THREAD

    def apply_hack(self, threads: int) -> float:
        """Apply a hack and return the amount stolen."""
        fraction = min(1.0, threads * self.hack_fraction_per_thread)
        stolen = self.money_available * fraction
        self.money_available -= stolen
        self.security_level += threads * HACK_SECURITY_PER_THREAD
        return stolen


def security_delta(kind: OperationKind, threads: int) -> float:
    per_thread = {
        OperationKind.WEAKEN: WEAKEN_SECURITY_PER_THREAD,
        OperationKind.GROW: GROW_SECURITY_PER_THREAD,
        OperationKind.HACK: HACK_SECURITY_PER_THREAD,
    }[kind]
    return threads * per_thread


class SimulatedModelProvider:
    """AnalyticModelProvider over simulated servers."""

    def __init__(self, servers: Mapping[str, SimulatedServer]) -> None:
        self._servers = servers

    def threads_for(self, kind: OperationKind, target: str, amount: float) -> float:
        return self._servers[target].threads_for(kind, amount)

    def security_delta(self, kind: OperationKind, threads: int) -> float:
        return security_delta(kind, threads)

    def run_time(self, kind: OperationKind, target: str) -> float:
        return self._servers[target].run_time(kind)


class SimulatedSnapshotReader:
    """SnapshotReader over simulated servers."""

    def __init__(self, servers: Mapping[str, SimulatedServer]) -> None:
        self._servers = servers

    def snapshot(self, target: str) -> TargetSnapshot:
        return self._servers[target].snapshot()
