from __future__ import annotations

from typing import Protocol

from batch_factory.core.domain.types import TargetSnapshot


class SnapshotReader(Protocol):
    """Live target state boundary. Readings are never memoized by the core."""

    def snapshot(self, target: str) -> TargetSnapshot:
        """Return a fresh TargetSnapshot for ``target``."""
