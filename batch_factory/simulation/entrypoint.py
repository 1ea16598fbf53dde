from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from batch_factory.core.domain.types import CycleMode, OperationKind
from batch_factory.core.events.event_bus import EventBus
from batch_factory.core.events.sinks.file_recorder import FileRecorderSink
from batch_factory.core.events.sinks.sink_logging import LoggingEventSink
from batch_factory.core.events.sinks.sink_metrics import MetricsEventSink
from batch_factory.core.planning.summary import (
    format_duration,
    print_plan_summary,
    summarize_plan,
)
from batch_factory.runtime.prometheus_metrics import PrometheusMetricsClient
from batch_factory.simulation.scenario import Scenario, build_simulation

# Simulated engagements never stop on their own once the target is hackable.
DEFAULT_SIMULATION_CYCLES = 100

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_event_bus(*, events_path: Path | None) -> EventBus:
    logger = logging.getLogger("bus")

    sinks = [LoggingEventSink(logger)]
    if events_path is not None:
        sinks.append(FileRecorderSink(events_path))

    metrics = PrometheusMetricsClient()
    if metrics.is_enabled():
        sinks.append(MetricsEventSink(metrics))

    return EventBus(sinks=sinks)


def _dry_run(scenario: Scenario) -> int:
    """Print the prep and hack plans the scenario's target would get right now."""
    rig = build_simulation(scenario)
    target = scenario.target.hostname
    costs = {kind: rig.estimator.script_cost(kind) for kind in OperationKind}

    for mode in (CycleMode.PREP, CycleMode.HACK):
        _, outcome = rig.controller.plan(target, mode)
        summary = summarize_plan(
            target=target,
            mode=mode.value,
            outcome=outcome,
            costs=costs,
        )
        print_plan_summary(summary)

    return 0


def _simulate(scenario: Scenario, *, events_path: Path | None) -> int:
    event_bus = _build_event_bus(events_path=events_path)
    rig = build_simulation(scenario, event_bus=event_bus)

    try:
        outcome = rig.controller.engage(scenario.target.hostname)
    finally:
        event_bus.close()

    server = rig.server
    print(f"Target: {outcome.target}")
    print(f"Stopped: {outcome.stop_reason}")
    print(f"Final mode: {outcome.final_mode.value if outcome.final_mode else '-'}")
    print(f"Cycles: {outcome.cycles}")
    print(f"Extracted: {outcome.total_extracted:,.2f}")
    print(f"Simulated time: {format_duration(rig.host.now_ms)}")
    print(f"Money: {server.money_available:,.2f} / {server.max_money:,.2f}")
    print(f"Security: {server.security_level:.3f} (min {server.min_security:.3f})")

    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Batch factory against a simulated target (plan or engage)"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Python logging level (default: WARNING).",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    dry_run = commands.add_parser(
        "dry-run",
        help="Print the prep and hack plans for the scenario (no execution).",
    )
    dry_run.add_argument(
        "--scenario",
        type=Path,
        required=True,
        help="Path to scenario JSON.",
    )

    simulate = commands.add_parser(
        "simulate",
        help="Engage the simulated target until a stop condition.",
    )
    simulate.add_argument(
        "--scenario",
        type=Path,
        required=True,
        help="Path to scenario JSON.",
    )
    simulate.add_argument(
        "--cycles",
        type=int,
        default=None,
        help=(
            "Stop after this many cycles (overrides controller.max_cycles; "
            f"default {DEFAULT_SIMULATION_CYCLES} when neither is set)."
        ),
    )
    simulate.add_argument(
        "--events-path",
        type=Path,
        default=None,
        help="Append every domain event as a JSON line to this file.",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    scenario = Scenario.from_path(args.scenario)

    if args.command == "dry-run":
        return _dry_run(scenario)

    cycles = args.cycles
    if cycles is None and scenario.config.controller.max_cycles is None:
        cycles = DEFAULT_SIMULATION_CYCLES

    if cycles is not None:
        if cycles <= 0:
            print("Error: --cycles must be > 0.", file=sys.stderr)
            return 2
        controller_cfg = scenario.config.controller.model_copy(
            update={"max_cycles": cycles}
        )
        scenario = scenario.model_copy(
            update={
                "config": scenario.config.model_copy(update={"controller": controller_cfg})
            }
        )

    return _simulate(scenario, events_path=args.events_path)


if __name__ == "__main__":
    sys.exit(main())
