from __future__ import annotations

from typing import Protocol


class ResultsChannel(Protocol):
    """Append-only side channel filled by hack instances.

    The controller drains it once per HACK cycle and sums the entries as
    the cycle's yield. ``drain`` must be atomic with respect to ``append``.
    """

    def append(self, amount: float) -> None:
        """Record the amount extracted by one instance."""

    def drain(self) -> list[float]:
        """Return and clear every recorded amount."""
