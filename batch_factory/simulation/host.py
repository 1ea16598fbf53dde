"""Simulated executing host with a virtual clock.

Implements the HostInspector, LaunchBackend and CompletionBackend ports.
Instances complete in (finish time, launch order) order when the clock
advances; their effects are applied to the simulated target at that
moment and hack yields are appended to the results channel.
"""

# pylint: disable=too-many-arguments,too-many-instance-attributes
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Sequence

from batch_factory.core.domain.types import OperationKind

if TYPE_CHECKING:
    from batch_factory.core.domain.operations import OperationCatalog
    from batch_factory.core.ports.results_channel import ResultsChannel
    from batch_factory.simulation.server import SimulatedServer

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SimulatedInstance:
    instance_id: int
    kind: OperationKind
    target: str
    threads: int
    ram: float
    finish_ms: int


class SimulatedHost:
    """One executing host: RAM accounting, launches and completion."""

    def __init__(
        self,
        *,
        hostname: str,
        max_ram: float,
        servers: Mapping[str, SimulatedServer],
        catalog: OperationCatalog,
        script_ram: Mapping[str, float],
        results: ResultsChannel,
        used_ram: float = 0.0,
    ) -> None:
        self._hostname = hostname
        self._max_ram = float(max_ram)
        self._base_used_ram = float(used_ram)
        self._servers = servers
        self._catalog = catalog
        self._script_ram = dict(script_ram)
        self._results = results

        self._files: set[str] = set()
        self._running: dict[int, SimulatedInstance] = {}
        self._next_id = 1
        self._now_ms = 0

    @property
    def hostname(self) -> str:
        return self._hostname

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def running(self) -> int:
        return len(self._running)

    @property
    def files(self) -> frozenset[str]:
        """Files copied to this host so far."""
        return frozenset(self._files)

    # ------------------------------------------------------------------
    # HostInspector
    # ------------------------------------------------------------------

    def max_ram(self, host: str) -> float:
        self._check_host(host)
        return self._max_ram

    def used_ram(self, host: str) -> float:
        self._check_host(host)
        return self._base_used_ram + sum(inst.ram for inst in self._running.values())

    def script_ram(self, script: str) -> float:
        return self._script_ram[script]

    # ------------------------------------------------------------------
    # LaunchBackend
    # ------------------------------------------------------------------

    def copy_files(self, files: Sequence[str], host: str) -> bool:
        if host != self._hostname:
            return False
        self._files.update(files)
        return True

    def launch(self, script: str, host: str, threads: int, args: Sequence[str]) -> int:
        if host != self._hostname or script not in self._files or threads <= 0:
            return 0

        ram = threads * self._script_ram[script]
        if self.used_ram(host) + ram > self._max_ram:
            return 0

        target, delay = args[0], int(args[1])
        kind = self._catalog.kind_for_script(script)
        run_time = math.ceil(self._servers[target].run_time(kind))

        instance_id = self._next_id
        self._next_id += 1
        self._running[instance_id] = SimulatedInstance(
            instance_id=instance_id,
            kind=kind,
            target=target,
            threads=threads,
            ram=ram,
            finish_ms=self._now_ms + delay + run_time,
        )
        return instance_id

    # ------------------------------------------------------------------
    # CompletionBackend
    # ------------------------------------------------------------------

    def is_running(self, instance_id: int) -> bool:
        return instance_id in self._running

    def sleep(self, millis: int) -> None:
        self.advance(millis)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def advance(self, millis: int) -> int:
        """Move the clock forward and complete due instances. Returns how many finished."""
        self._now_ms += millis

        due = sorted(
            (inst for inst in self._running.values() if inst.finish_ms <= self._now_ms),
            key=lambda inst: (inst.finish_ms, inst.instance_id),
        )
        for inst in due:
            del self._running[inst.instance_id]
            self._complete(inst)

        return len(due)

    def _complete(self, inst: SimulatedInstance) -> None:
        server = self._servers[inst.target]

        if inst.kind is OperationKind.WEAKEN:
            server.apply_weaken(inst.threads)
        elif inst.kind is OperationKind.GROW:
            server.apply_grow(inst.threads)
        else:
            self._results.append(server.apply_hack(inst.threads))

        LOGGER.debug(
            "Instance finished",
            extra={
                "instance_id": inst.instance_id,
                "kind": inst.kind.value,
                "threads": inst.threads,
                "at_ms": inst.finish_ms,
            },
        )

    def _check_host(self, host: str) -> None:
        if host != self._hostname:
            raise KeyError(f"Unknown host: {host}")
