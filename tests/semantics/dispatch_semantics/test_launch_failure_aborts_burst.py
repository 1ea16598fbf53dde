"""
Semantic test: a failed launch aborts the dispatch burst.

Invariant:
When the backend reports a failed launch (instance id 0) the dispatcher
stops immediately, issues no further launches, and reports the failed step
together with the instances already started.
"""

from __future__ import annotations

from batch_factory.core.config.scripts_config import ScriptsConfig
from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.operations import OperationCatalog
from batch_factory.core.domain.plan import Plan
from batch_factory.core.domain.types import OperationKind, PlanStep
from batch_factory.core.execution.dispatcher import Dispatcher


class _FailingBackend:
    def __init__(self, *, fail_on_launch: int | None = None, copy_ok: bool = True) -> None:
        self._fail_on_launch = fail_on_launch
        self._copy_ok = copy_ok
        self.launches: list[str] = []

    def copy_files(self, files, host) -> bool:
        return self._copy_ok

    def launch(self, script, host, threads, args) -> int:
        self.launches.append(script)
        if len(self.launches) == self._fail_on_launch:
            return 0
        return 100 + len(self.launches)


def _hack_batch() -> Plan:
    return Plan(
        steps=(
            PlanStep(kind=OperationKind.HACK, script_threads=40, start_delay_ms=3000, expected_run_time_ms=1000),
            PlanStep(kind=OperationKind.WEAKEN, script_threads=2, start_delay_ms=20, expected_run_time_ms=4000),
            PlanStep(kind=OperationKind.GROW, script_threads=30, start_delay_ms=840, expected_run_time_ms=3200),
            PlanStep(kind=OperationKind.WEAKEN, script_threads=3, start_delay_ms=60, expected_run_time_ms=4000),
        )
    )


def test_launch_failure_stops_remaining_steps() -> None:
    backend = _FailingBackend(fail_on_launch=2)
    dispatcher = Dispatcher(
        backend=backend,
        catalog=OperationCatalog.from_scripts_config(ScriptsConfig()),
        host="home",
    )
    plan = _hack_batch()

    result = dispatcher.dispatch(plan, target="n00dles")

    assert not result.ok
    assert result.reason == FailureReason.LAUNCH_FAILED
    assert result.failed_step == plan.steps[1]
    assert result.instance_ids == (101,)
    assert backend.launches == ["hack.js", "weaken.js"]


def test_payload_copy_failure_launches_nothing() -> None:
    backend = _FailingBackend(copy_ok=False)
    dispatcher = Dispatcher(
        backend=backend,
        catalog=OperationCatalog.from_scripts_config(ScriptsConfig()),
        host="home",
    )

    result = dispatcher.dispatch(_hack_batch(), target="n00dles")

    assert not result.ok
    assert result.reason == FailureReason.PAYLOAD_COPY_FAILED
    assert result.failed_step is None
    assert result.instance_ids == ()
    assert backend.launches == []
