"""Plan dispatcher.

Issues every non-empty step of a plan to the launch backend in one burst.
Start delays are passed to the instances as positional arguments; the
dispatcher itself never sleeps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from batch_factory.core.domain.failure_reasons import FailureReason

if TYPE_CHECKING:
    from batch_factory.core.domain.operations import OperationCatalog
    from batch_factory.core.domain.plan import Plan
    from batch_factory.core.domain.types import PlanStep
    from batch_factory.core.ports.host_backend import LaunchBackend

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Instances launched for one cycle.

    ``instance_ids`` is local to the cycle. When ``ok`` is False the burst
    stopped at ``failed_step`` and ``instance_ids`` holds what was started
    before it.
    """

    instance_ids: tuple[int, ...] = field(default_factory=tuple)
    ok: bool = True
    failed_step: PlanStep | None = None
    reason: str | None = None
    skipped: int = 0


def launch_args(target: str, step: PlanStep) -> list[str]:
    """Positional arguments passed to every operation instance."""
    return [target, str(step.start_delay_ms)]


class Dispatcher:
    """Launches plan steps on one executing host."""

    def __init__(
        self,
        *,
        backend: LaunchBackend,
        catalog: OperationCatalog,
        host: str,
        files: Sequence[str] = (),
    ) -> None:
        self._backend = backend
        self._catalog = catalog
        self._host = host

        # Scripts first, then any extra payload, without duplicates.
        self._files: list[str] = []
        for name in (*catalog.scripts(), *files):
            if name not in self._files:
                self._files.append(name)

    @property
    def host(self) -> str:
        return self._host

    def dispatch(self, plan: Plan, *, target: str) -> DispatchResult:
        """Launch every step with threads > 0, stopping at the first failure."""
        if not self._backend.copy_files(self._files, self._host):
            LOGGER.warning(
                "Payload copy failed",
                extra={"host": self._host, "files": self._files},
            )
            return DispatchResult(ok=False, reason=FailureReason.PAYLOAD_COPY_FAILED)

        launched: list[int] = []
        skipped = 0

        for step in plan:
            if step.is_noop():
                skipped += 1
                continue

            script = self._catalog.script_for(step.kind)
            instance_id = self._backend.launch(
                script,
                self._host,
                step.script_threads,
                launch_args(target, step),
            )

            if instance_id <= 0:
                LOGGER.warning(
                    "Launch failed",
                    extra={
                        "host": self._host,
                        "target": target,
                        "script": script,
                        "threads": step.script_threads,
                        "delay_ms": step.start_delay_ms,
                        "launched": len(launched),
                    },
                )
                return DispatchResult(
                    instance_ids=tuple(launched),
                    ok=False,
                    failed_step=step,
                    reason=FailureReason.LAUNCH_FAILED,
                    skipped=skipped,
                )

            LOGGER.debug(
                "Step launched",
                extra={
                    "host": self._host,
                    "script": script,
                    "threads": step.script_threads,
                    "delay_ms": step.start_delay_ms,
                    "finish_ms": step.finish_time_ms,
                    "instance_id": instance_id,
                },
            )
            launched.append(instance_id)

        return DispatchResult(instance_ids=tuple(launched), skipped=skipped)
