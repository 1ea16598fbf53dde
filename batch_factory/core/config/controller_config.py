"""Mode controller configuration model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ControllerConfig(BaseModel):
    """Thresholds and loop timing for the PREP/HACK controller.

    A HACK cycle reverts to PREP only when money fell below
    ``max_money * money_threshold`` AND security rose above
    ``min_security * security_threshold``.
    """

    money_threshold: float = Field(default=0.8, gt=0, le=1)
    security_threshold: float = Field(default=1.15, ge=1)

    poll_interval_ms: int = Field(default=500, gt=0)

    # RAM kept free when the executing host is the operator's own machine.
    primary_host: str = Field(default="home", min_length=1)
    primary_host_ram_reserve: float = Field(default=0.0, ge=0)

    # None keeps the engagement running until a stop condition is hit.
    max_cycles: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, controller_obj: dict[str, Any]) -> ControllerConfig:
        """Create a ControllerConfig instance from a JSON-compatible object."""
        return cls.model_validate(controller_obj)
