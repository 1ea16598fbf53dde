"""
Semantic test: a scenario document wires a working controller.

Invariant:
build_controller() returns a controller whose engagement honors the
scenario's controller section (max_cycles) and reports through the given
event bus. Payload files listed in the scripts section reach the host
together with the operation scripts before anything is launched.
"""

from __future__ import annotations

from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.types import CycleMode
from batch_factory.core.events.event_bus import EventBus
from batch_factory.core.events.events import CycleCompletedEvent, EngagementStoppedEvent
from batch_factory.simulation.scenario import Scenario, build_controller, build_simulation


class _RecordingSink:
    def __init__(self) -> None:
        self.events: list = []

    def on_event(self, event) -> None:
        self.events.append(event)


SCENARIO = {
    "target": {
        "hostname": "n00dles",
        "max_money": 1_000_000,
        "money_available": 250_000,
        "min_security": 10,
        "security_level": 15,
    },
    "host": {"hostname": "home", "max_ram": 4_096},
    "config": {
        "scripts": {"payload_files": ["lib.js"]},
        "controller": {"max_cycles": 1},
    },
}


def test_build_controller_runs_the_configured_engagement() -> None:
    sink = _RecordingSink()
    controller = build_controller(
        Scenario.from_json_obj(SCENARIO),
        event_bus=EventBus(sinks=[sink]),
    )

    outcome = controller.engage("n00dles")

    assert outcome.stop_reason == FailureReason.MAX_CYCLES_REACHED
    assert outcome.cycles == 1
    assert outcome.final_mode is CycleMode.HACK

    cycles = [e for e in sink.events if isinstance(e, CycleCompletedEvent)]
    assert [e.mode for e in cycles] == ["prep"]
    assert cycles[0].instances > 0

    stopped = [e for e in sink.events if isinstance(e, EngagementStoppedEvent)]
    assert len(stopped) == 1
    assert stopped[0].reason == FailureReason.MAX_CYCLES_REACHED


def test_scenario_payload_files_are_copied_with_scripts() -> None:
    rig = build_simulation(Scenario.from_json_obj(SCENARIO))
    assert rig.host.files == frozenset()

    rig.controller.engage("n00dles")

    assert rig.host.files == {"weaken.js", "grow.js", "hack.js", "lib.js"}
