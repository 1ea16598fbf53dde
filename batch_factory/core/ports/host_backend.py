"""Executing-host protocols.

These boundaries hide the remote execution substrate from the planner and
the controller. Concrete implementations adapt a specific substrate (or the
in-process simulation) to these protocols.
"""

from __future__ import annotations

from typing import Protocol, Sequence


class HostInspector(Protocol):
    """Read-only RAM accounting of an executing host."""

    def max_ram(self, host: str) -> float:
        """Return the installed RAM of ``host``."""

    def used_ram(self, host: str) -> float:
        """Return the RAM currently used on ``host``."""

    def script_ram(self, script: str) -> float:
        """Return the per-thread RAM cost of ``script``."""


class LaunchBackend(Protocol):
    """Remote execution boundary used by the dispatcher."""

    def copy_files(self, files: Sequence[str], host: str) -> bool:
        """Ensure ``files`` are present on ``host``. Return False on failure."""

    def launch(self, script: str, host: str, threads: int, args: Sequence[str]) -> int:
        """Start ``script`` on ``host``.

        Returns:
            A positive instance id, or 0 when the launch failed.
        """


class CompletionBackend(Protocol):
    """Polling boundary used by the completion monitor."""

    def is_running(self, instance_id: int) -> bool:
        """Return True while the instance is still active."""

    def sleep(self, millis: int) -> None:
        """Cooperatively yield for ``millis`` milliseconds."""
