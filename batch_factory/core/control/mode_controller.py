"""PREP/HACK mode controller.

Drives one target engagement as a single sequential loop:

    plan -> dispatch -> wait -> re-read -> choose next mode

Every cycle re-derives its plan from a fresh snapshot and a fresh RAM
budget; nothing dispatched in one cycle is tracked by the next.
"""

# pylint: disable=too-many-arguments,too-many-instance-attributes
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from batch_factory.core.domain.cycle_mode import (
    is_valid_transition,
    select_entry_mode,
    should_revert_to_prep,
)
from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.types import CycleMode, HostBudget, OperationKind
from batch_factory.core.events.events import (
    CycleCompletedEvent,
    EngagementStoppedEvent,
    LaunchFailedEvent,
    ModeTransitionEvent,
    PlanBuiltEvent,
    PlanInfeasibleEvent,
)
from batch_factory.core.events.sinks.null_event_bus import NullEventBus
from batch_factory.core.planning.hack_plan import build_hack_plan
from batch_factory.core.planning.prep_plan import build_prep_plan

if TYPE_CHECKING:
    from batch_factory.core.config.controller_config import ControllerConfig
    from batch_factory.core.config.planner_config import PlannerConfig
    from batch_factory.core.domain.types import TargetSnapshot
    from batch_factory.core.events.event_bus import EventBus
    from batch_factory.core.execution.completion_monitor import CompletionMonitor
    from batch_factory.core.execution.dispatcher import DispatchResult, Dispatcher
    from batch_factory.core.planning.packing import PlanningOutcome
    from batch_factory.core.ports.model_provider import AnalyticModelProvider
    from batch_factory.core.ports.resource_estimator import ResourceEstimator
    from batch_factory.core.ports.results_channel import ResultsChannel
    from batch_factory.core.ports.snapshot_reader import SnapshotReader

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CycleReport:
    """What happened during one cycle.

    - snapshot: reading taken before planning
    - after: reading taken after completion (None if nothing was awaited)
    """

    mode: CycleMode
    snapshot: TargetSnapshot
    planning: PlanningOutcome
    dispatch: DispatchResult | None = None
    after: TargetSnapshot | None = None
    extracted: float = 0.0

    @property
    def completed(self) -> bool:
        return self.after is not None


@dataclass(frozen=True, slots=True)
class EngagementOutcome:
    target: str
    stop_reason: str
    cycles: int
    total_extracted: float
    final_mode: CycleMode | None


class ModeController:
    """Runs PREP and HACK cycles against one target until a stop condition.

    Stop conditions:
    - the target holds no money at all
    - the prep plan is infeasible
    - the hack plan is infeasible while the target already sits at baseline
    - ``ControllerConfig.max_cycles`` cycles were run
    """

    def __init__(
        self,
        *,
        snapshot_reader: SnapshotReader,
        model: AnalyticModelProvider,
        estimator: ResourceEstimator,
        dispatcher: Dispatcher,
        monitor: CompletionMonitor,
        results: ResultsChannel,
        planner_config: PlannerConfig,
        controller_config: ControllerConfig,
        event_bus: EventBus | None = None,
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self._reader = snapshot_reader
        self._model = model
        self._estimator = estimator
        self._dispatcher = dispatcher
        self._monitor = monitor
        self._results = results
        self._planner_config = planner_config
        self._config = controller_config
        self._event_bus = event_bus if event_bus is not None else NullEventBus()
        self._clock_ns = clock_ns

    # ------------------------------------------------------------------
    # Engagement loop
    # ------------------------------------------------------------------

    def engage(self, target: str) -> EngagementOutcome:
        """Engage ``target`` until a stop condition is reached."""
        snapshot = self._reader.snapshot(target)
        if snapshot.max_money <= 0:
            return self._stop(target, None, FailureReason.NO_MONEY, 0, 0.0)

        mode = select_entry_mode(snapshot)
        self._transition(target, None, mode, FailureReason.ENGAGEMENT_STARTED)

        cycles = 0
        total_extracted = 0.0
        max_cycles = self._config.max_cycles

        while True:
            if max_cycles is not None and cycles >= max_cycles:
                return self._stop(
                    target, mode, FailureReason.MAX_CYCLES_REACHED, cycles, total_extracted
                )

            report = self.run_cycle(target, mode, cycle=cycles)
            cycles += 1
            total_extracted += report.extracted

            if not report.planning.feasible:
                if mode is CycleMode.PREP:
                    return self._stop(
                        target, mode, FailureReason.NO_PREP_PLAN, cycles, total_extracted
                    )

                if report.snapshot.is_baseline():
                    # PREP would have nothing to do and HACK would fail again.
                    return self._stop(
                        target,
                        mode,
                        FailureReason.HACK_INFEASIBLE_AT_BASELINE,
                        cycles,
                        total_extracted,
                    )

                mode = self._transition(target, mode, CycleMode.PREP, FailureReason.NO_HACK_PLAN)
                continue

            if not report.completed:
                # Launch failure: re-plan from fresh state in the same mode.
                continue

            next_mode = self.next_mode(mode, report.after)
            if next_mode is not mode:
                reason = (
                    FailureReason.BASELINE_REACHED
                    if next_mode is CycleMode.HACK
                    else FailureReason.THRESHOLDS_BREACHED
                )
                mode = self._transition(target, mode, next_mode, reason)

    def next_mode(self, mode: CycleMode, after: TargetSnapshot) -> CycleMode:
        """Mode to run after a completed cycle, given the post-cycle reading."""
        if mode is CycleMode.PREP:
            return CycleMode.HACK if after.is_baseline() else CycleMode.PREP

        if should_revert_to_prep(
            after,
            money_threshold=self._config.money_threshold,
            security_threshold=self._config.security_threshold,
        ):
            return CycleMode.PREP
        return CycleMode.HACK

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------

    def plan(self, target: str, mode: CycleMode) -> tuple[TargetSnapshot, PlanningOutcome]:
        """Build the plan for ``mode`` from a fresh snapshot and budget."""
        snapshot = self._reader.snapshot(target)

        host = self._dispatcher.host
        budget = HostBudget(hostname=host, available_ram=self._estimator.available_ram(host))
        costs = {kind: self._estimator.script_cost(kind) for kind in OperationKind}

        builder = build_prep_plan if mode is CycleMode.PREP else build_hack_plan
        outcome = builder(
            snapshot=snapshot,
            budget=budget,
            model=self._model,
            costs=costs,
            config=self._planner_config,
        )
        return snapshot, outcome

    def run_cycle(self, target: str, mode: CycleMode, *, cycle: int = 0) -> CycleReport:
        """Plan, dispatch and wait for one cycle in ``mode``."""
        host = self._dispatcher.host
        snapshot, outcome = self.plan(target, mode)

        if not outcome.feasible:
            self._event_bus.emit(
                PlanInfeasibleEvent(
                    ts_ns=self._clock_ns(),
                    target=target,
                    host=host,
                    mode=mode.value,
                    reason=outcome.failure_reason or "",
                    available_ram=outcome.available_ram,
                    iterations=outcome.iterations,
                )
            )
            return CycleReport(mode=mode, snapshot=snapshot, planning=outcome)

        self._event_bus.emit(
            PlanBuiltEvent(
                ts_ns=self._clock_ns(),
                target=target,
                host=host,
                mode=mode.value,
                steps=len(outcome.plan),
                batches=outcome.plan.batch_count,
                ram_per_batch=outcome.ram_per_batch,
                available_ram=outcome.available_ram,
                iterations=outcome.iterations,
            )
        )

        dispatch = self._dispatcher.dispatch(outcome.plan, target=target)
        if not dispatch.ok:
            failed = dispatch.failed_step
            self._event_bus.emit(
                LaunchFailedEvent(
                    ts_ns=self._clock_ns(),
                    target=target,
                    host=host,
                    mode=mode.value,
                    kind=failed.kind.value if failed is not None else "",
                    threads=failed.script_threads if failed is not None else 0,
                    reason=dispatch.reason or FailureReason.LAUNCH_FAILED,
                    launched_before_failure=len(dispatch.instance_ids),
                )
            )
            return CycleReport(mode=mode, snapshot=snapshot, planning=outcome, dispatch=dispatch)

        self._monitor.wait_for(dispatch.instance_ids)

        extracted = 0.0
        if mode is CycleMode.HACK:
            extracted = sum(self._results.drain())

        after = self._reader.snapshot(target)

        self._event_bus.emit(
            CycleCompletedEvent(
                ts_ns=self._clock_ns(),
                target=target,
                host=host,
                mode=mode.value,
                cycle=cycle,
                instances=len(dispatch.instance_ids),
                extracted=extracted,
                money_available=after.money_available,
                security_level=after.security_level,
            )
        )

        LOGGER.info(
            "Cycle completed",
            extra={
                "target": target,
                "mode": mode.value,
                "extracted": extracted,
                "money_available": after.money_available,
                "security_level": after.security_level,
            },
        )

        return CycleReport(
            mode=mode,
            snapshot=snapshot,
            planning=outcome,
            dispatch=dispatch,
            after=after,
            extracted=extracted,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(
        self,
        target: str,
        prev_mode: CycleMode | None,
        next_mode: CycleMode,
        reason: str,
    ) -> CycleMode:
        if not is_valid_transition(prev_mode, next_mode):
            raise RuntimeError(f"Invalid mode transition {prev_mode} -> {next_mode}")

        self._event_bus.emit(
            ModeTransitionEvent(
                ts_ns=self._clock_ns(),
                target=target,
                prev_mode=prev_mode.value if prev_mode is not None else None,
                next_mode=next_mode.value,
                reason=reason,
            )
        )
        return next_mode

    def _stop(
        self,
        target: str,
        mode: CycleMode | None,
        reason: str,
        cycles: int,
        total_extracted: float,
    ) -> EngagementOutcome:
        self._event_bus.emit(
            EngagementStoppedEvent(
                ts_ns=self._clock_ns(),
                target=target,
                mode=mode.value if mode is not None else "",
                reason=reason,
                cycles=cycles,
                total_extracted=total_extracted,
            )
        )
        return EngagementOutcome(
            target=target,
            stop_reason=reason,
            cycles=cycles,
            total_extracted=total_extracted,
            final_mode=mode,
        )
