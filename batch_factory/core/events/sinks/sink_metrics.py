"""
Metrics event sink.

Folds engagement events into Prometheus gauges and pushes them to the
Pushgateway when the bus is closed.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from batch_factory.core.events.events import (
    CycleCompletedEvent,
    EngagementStoppedEvent,
    LaunchFailedEvent,
    PlanBuiltEvent,
    PlanInfeasibleEvent,
)

if TYPE_CHECKING:
    from batch_factory.runtime.prometheus_metrics import PrometheusMetricsClient

LOGGER = logging.getLogger(__name__)


class MetricsEventSink:
    """Tracks per-target counters and last readings as gauges."""

    def __init__(
        self,
        metrics: PrometheusMetricsClient,
        *,
        job: str = "batch_factory",
    ) -> None:
        self._metrics = metrics
        self._job = job
        self._counters: dict[tuple[str, str], float] = {}
        self._closed = False

    def _bump(self, name: str, target: str, amount: float = 1.0) -> float:
        key = (name, target)
        value = self._counters.get(key, 0.0) + amount
        self._counters[key] = value
        return value

    def on_event(self, event: Any) -> None:
        if isinstance(event, CycleCompletedEvent):
            labels = {"target": event.target}
            self._metrics.set_gauge(
                name=f"batch_factory_{event.mode}_cycles",
                value=self._bump(f"{event.mode}_cycles", event.target),
                labels=labels,
            )
            self._metrics.set_gauge(
                name="batch_factory_extracted_total",
                value=self._bump("extracted", event.target, event.extracted),
                labels=labels,
            )
            self._metrics.set_gauge(
                name="batch_factory_target_money_available",
                value=event.money_available,
                labels=labels,
            )
            self._metrics.set_gauge(
                name="batch_factory_target_security_level",
                value=event.security_level,
                labels=labels,
            )

        elif isinstance(event, PlanBuiltEvent):
            self._metrics.set_gauge(
                name="batch_factory_plan_ram_per_batch",
                value=event.ram_per_batch,
                labels={"target": event.target, "mode": event.mode},
            )
            self._metrics.set_gauge(
                name="batch_factory_plan_batches",
                value=float(event.batches),
                labels={"target": event.target, "mode": event.mode},
            )

        elif isinstance(event, PlanInfeasibleEvent):
            self._metrics.set_gauge(
                name="batch_factory_plan_infeasible",
                value=self._bump(f"infeasible_{event.mode}", event.target),
                labels={"target": event.target, "mode": event.mode},
            )

        elif isinstance(event, LaunchFailedEvent):
            self._metrics.set_gauge(
                name="batch_factory_launch_failures",
                value=self._bump("launch_failures", event.target),
                labels={"target": event.target},
            )

        elif isinstance(event, EngagementStoppedEvent):
            self._metrics.set_gauge(
                name="batch_factory_engagement_cycles",
                value=float(event.cycles),
                labels={"target": event.target, "reason": event.reason},
            )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if not self._metrics.is_enabled():
            return

        try:
            self._metrics.push_all(job=self._job)
        except Exception:
            LOGGER.exception("Prometheus push failed")
