"""
Domain event models.

These events represent immutable facts observed while engaging a target.
They are consumed by loggers, recorders, and monitoring pipelines. Every
infeasibility and launch failure is reported here rather than swallowed.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PlanBuiltEvent:
    ts_ns: int
    target: str
    host: str
    mode: str

    steps: int
    batches: int
    ram_per_batch: float
    available_ram: float
    iterations: int


@dataclass(slots=True)
class PlanInfeasibleEvent:
    ts_ns: int
    target: str
    host: str
    mode: str

    reason: str
    available_ram: float
    iterations: int


@dataclass(slots=True)
class LaunchFailedEvent:
    ts_ns: int
    target: str
    host: str
    mode: str

    kind: str
    threads: int
    reason: str
    launched_before_failure: int


@dataclass(slots=True)
class CycleCompletedEvent:
    ts_ns: int
    target: str
    host: str
    mode: str

    cycle: int
    instances: int
    extracted: float

    money_available: float
    security_level: float


@dataclass(slots=True)
class ModeTransitionEvent:
    ts_ns: int
    target: str
    prev_mode: str | None
    next_mode: str
    reason: str


@dataclass(slots=True)
class EngagementStoppedEvent:
    ts_ns: int
    target: str
    mode: str

    reason: str
    cycles: int
    total_extracted: float


# Every event the controller emits. Sinks may rely on this set being closed.
DomainEvent = (
    PlanBuiltEvent
    | PlanInfeasibleEvent
    | LaunchFailedEvent
    | CycleCompletedEvent
    | ModeTransitionEvent
    | EngagementStoppedEvent
)
