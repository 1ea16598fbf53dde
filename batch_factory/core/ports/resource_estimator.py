from __future__ import annotations

from typing import Protocol

from batch_factory.core.domain.types import OperationKind


class ResourceEstimator(Protocol):
    """RAM budget boundary consulted at the start of each planning attempt."""

    def available_ram(self, host: str) -> float:
        """Return the RAM headroom of ``host`` (never cached)."""

    def script_cost(self, kind: OperationKind) -> float:
        """Return the per-thread RAM cost of one operation kind."""
