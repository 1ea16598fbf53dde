"""Canonical failure and stop reasons reported through status events."""

from __future__ import annotations


class FailureReason:
    """String constants used as ``reason`` on status events."""

    NO_PREP_PLAN = "no_prep_plan"
    NO_HACK_PLAN = "no_hack_plan"
    INVALID_HACK_THREADS = "invalid_hack_threads"

    LAUNCH_FAILED = "launch_failed"
    PAYLOAD_COPY_FAILED = "payload_copy_failed"

    NO_MONEY = "no_money"
    MAX_CYCLES_REACHED = "max_cycles_reached"
    HACK_INFEASIBLE_AT_BASELINE = "hack_infeasible_at_baseline"

    # Mode transition reasons (not failures)
    BASELINE_REACHED = "baseline_reached"
    THRESHOLDS_BREACHED = "thresholds_breached"
    ENGAGEMENT_STARTED = "engagement_started"
