"""Core shared data models.

This module defines the canonical models exchanged between the planner,
the dispatcher and the mode controller: live target readings, the host RAM
budget, operation kinds and plan steps. These types mirror the JSON Schemas
under ``batch_factory/core/schemas`` and are validated against them in tests.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class OperationKind(str, Enum):
    """Closed set of remote operations. No kinds are added at runtime."""

    WEAKEN = "weaken"
    GROW = "grow"
    HACK = "hack"


class CycleMode(str, Enum):
    """Mode held by the controller for one target engagement."""

    PREP = "prep"
    HACK = "hack"


# ---------------------------------------------------------------------------
# Live readings
# ---------------------------------------------------------------------------


class TargetSnapshot(BaseModel):
    """Fresh reading of a target's money and security.

    Snapshots are never cached across a cycle boundary; the controller
    re-reads one every time it needs the target state.
    """

    hostname: str = Field(..., min_length=1)

    max_money: float = Field(..., ge=0)
    money_available: float = Field(..., ge=0)

    min_security: float = Field(..., ge=0)
    security_level: float = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_ranges(self) -> TargetSnapshot:
        """
        Enforce the reading invariants:
        - money_available must lie within [0, max_money]
        - security_level must not be below min_security
        """
        if self.money_available > self.max_money:
            raise ValueError("money_available must be <= max_money")
        if self.security_level < self.min_security:
            raise ValueError("security_level must be >= min_security")
        return self

    @property
    def security_deficit(self) -> float:
        return self.security_level - self.min_security

    def is_baseline(self) -> bool:
        """Return True when money is maxed out and security is minimal."""
        return (
            self.money_available == self.max_money
            and self.security_level == self.min_security
        )


class HostBudget(BaseModel):
    """RAM headroom on the executing host for one planning attempt."""

    hostname: str = Field(..., min_length=1)
    available_ram: float = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Plan steps
# ---------------------------------------------------------------------------


class PlanStep(BaseModel):
    """One dispatchable operation instance.

    A step with ``script_threads == 0`` is a no-op and is skipped by the
    dispatcher. ``batch_index`` is the replica the step belongs to.
    """

    kind: OperationKind
    script_threads: int = Field(..., ge=0)
    start_delay_ms: int = Field(..., ge=0)
    expected_run_time_ms: int = Field(..., ge=0)
    batch_index: int = Field(default=0, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def finish_time_ms(self) -> int:
        return self.start_delay_ms + self.expected_run_time_ms

    def is_noop(self) -> bool:
        return self.script_threads == 0
