"""Simulation scenario model and wiring.

JSON example:
    {
      "target": {"hostname": "n00dles", "max_money": 1000000, "money_available": 250000,
                 "min_security": 10, "security_level": 15},
      "host": {"hostname": "home", "max_ram": 4096},
      "config": {"controller": {"max_cycles": 10}}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from batch_factory.core.config.factory_config import FactoryConfig
from batch_factory.core.control.mode_controller import ModeController
from batch_factory.core.domain.operations import OperationCatalog
from batch_factory.core.execution.completion_monitor import CompletionMonitor
from batch_factory.core.execution.dispatcher import Dispatcher
from batch_factory.core.execution.results_channel import InMemoryResultsChannel
from batch_factory.core.resources.host_resource_estimator import HostResourceEstimator
from batch_factory.simulation.host import SimulatedHost
from batch_factory.simulation.server import (
    SimulatedModelProvider,
    SimulatedServer,
    SimulatedSnapshotReader,
)

if TYPE_CHECKING:
    from batch_factory.core.events.event_bus import EventBus


class ServerScenario(BaseModel):
    hostname: str = Field(..., min_length=1)

    max_money: float = Field(..., ge=0)
    money_available: float = Field(..., ge=0)

    min_security: float = Field(..., gt=0)
    security_level: float = Field(..., gt=0)

    base_hack_time_ms: float = Field(default=1000.0, gt=0)
    growth_per_thread: float = Field(default=0.0025, gt=0)
    hack_fraction_per_thread: float = Field(default=0.002, gt=0, le=1)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_ranges(self) -> ServerScenario:
        if self.money_available > self.max_money:
            raise ValueError("money_available must be <= max_money")
        if self.security_level < self.min_security:
            raise ValueError("security_level must be >= min_security")
        return self


class HostScenario(BaseModel):
    hostname: str = Field(default="home", min_length=1)
    max_ram: float = Field(..., ge=0)
    used_ram: float = Field(default=0.0, ge=0)

    # Per-thread RAM cost by script name; missing scripts use default_script_ram.
    script_ram: dict[str, float] = Field(default_factory=dict)
    default_script_ram: float = Field(default=1.75, gt=0)

    model_config = ConfigDict(extra="forbid")


class Scenario(BaseModel):
    """One simulated target, one simulated host and a factory configuration."""

    target: ServerScenario
    host: HostScenario
    config: FactoryConfig = Field(default_factory=FactoryConfig)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, scenario_obj: dict[str, Any]) -> Scenario:
        """Create a Scenario instance from a JSON-compatible object."""
        return cls.model_validate(scenario_obj)

    @classmethod
    def from_path(cls, path: str | Path) -> Scenario:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        return cls.from_json_obj(json.loads(path.read_text(encoding="utf-8")))


@dataclass(frozen=True, slots=True)
class SimulationRig:
    """Every wired component of one simulated engagement."""

    scenario: Scenario
    server: SimulatedServer
    host: SimulatedHost
    catalog: OperationCatalog
    estimator: HostResourceEstimator
    model: SimulatedModelProvider
    results: InMemoryResultsChannel
    controller: ModeController


def build_simulation(scenario: Scenario, *, event_bus: EventBus | None = None) -> SimulationRig:
    cfg = scenario.config
    target = scenario.target

    server = SimulatedServer(
        hostname=target.hostname,
        max_money=target.max_money,
        money_available=target.money_available,
        min_security=target.min_security,
        security_level=target.security_level,
        base_hack_time_ms=target.base_hack_time_ms,
        growth_per_thread=target.growth_per_thread,
        hack_fraction_per_thread=target.hack_fraction_per_thread,
    )
    servers = {server.hostname: server}

    catalog = OperationCatalog.from_scripts_config(cfg.scripts)
    results = InMemoryResultsChannel()

    script_ram = {
        script: scenario.host.script_ram.get(script, scenario.host.default_script_ram)
        for script in catalog.scripts()
    }
    host = SimulatedHost(
        hostname=scenario.host.hostname,
        max_ram=scenario.host.max_ram,
        used_ram=scenario.host.used_ram,
        servers=servers,
        catalog=catalog,
        script_ram=script_ram,
        results=results,
    )

    estimator = HostResourceEstimator(
        inspector=host,
        catalog=catalog,
        primary_host=cfg.controller.primary_host,
        primary_host_ram_reserve=cfg.controller.primary_host_ram_reserve,
    )
    model = SimulatedModelProvider(servers)

    controller = ModeController(
        snapshot_reader=SimulatedSnapshotReader(servers),
        model=model,
        estimator=estimator,
        dispatcher=Dispatcher(
            backend=host,
            catalog=catalog,
            host=host.hostname,
            files=cfg.scripts.payload_files,
        ),
        monitor=CompletionMonitor(
            backend=host,
            poll_interval_ms=cfg.controller.poll_interval_ms,
        ),
        results=results,
        planner_config=cfg.planner,
        controller_config=cfg.controller,
        event_bus=event_bus,
        clock_ns=lambda: host.now_ms * 1_000_000,
    )

    return SimulationRig(
        scenario=scenario,
        server=server,
        host=host,
        catalog=catalog,
        estimator=estimator,
        model=model,
        results=results,
        controller=controller,
    )


def build_controller(scenario: Scenario, *, event_bus: EventBus | None = None) -> ModeController:
    return build_simulation(scenario, event_bus=event_bus).controller
