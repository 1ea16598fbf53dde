"""RAM headroom and per-operation cost estimation."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from batch_factory.core.domain.operations import OperationCatalog
    from batch_factory.core.domain.types import OperationKind
    from batch_factory.core.ports.host_backend import HostInspector

from batch_factory.core.domain.types import HostBudget

LOGGER = logging.getLogger(__name__)


class HostResourceEstimator:
    """ResourceEstimator backed by a HostInspector.

    Available RAM is ``max - used``, minus a reserve when the host is the
    operator's primary machine, clamped at zero. Nothing is cached: every
    call reads the inspector again.
    """

    def __init__(
        self,
        *,
        inspector: HostInspector,
        catalog: OperationCatalog,
        primary_host: str = "home",
        primary_host_ram_reserve: float = 0.0,
    ) -> None:
        if primary_host_ram_reserve < 0:
            raise ValueError("primary_host_ram_reserve must be >= 0")

        self._inspector = inspector
        self._catalog = catalog
        self._primary_host = primary_host
        self._reserve = float(primary_host_ram_reserve)

    def available_ram(self, host: str) -> float:
        reserve = self._reserve if host == self._primary_host else 0.0
        free = self._inspector.max_ram(host) - self._inspector.used_ram(host) - reserve
        return max(0.0, free)

    def script_cost(self, kind: OperationKind) -> float:
        cost = self._inspector.script_ram(self._catalog.script_for(kind))
        if cost < 0:
            raise ValueError(f"Negative RAM cost reported for {kind.value}: {cost}")
        return cost

    def budget(self, host: str) -> HostBudget:
        return HostBudget(hostname=host, available_ram=self.available_ram(host))

    def max_threads_for(self, kind: OperationKind, host: str) -> int:
        """Return how many threads of one operation fit the current headroom."""
        cost = self.script_cost(kind)
        available = self.available_ram(host)
        if cost <= 0:
            return 0

        threads = math.floor(available / cost)
        LOGGER.debug(
            "Max threads computed",
            extra={
                "host": host,
                "kind": kind.value,
                "available_ram": available,
                "script_cost": cost,
                "threads": threads,
            },
        )
        return threads
