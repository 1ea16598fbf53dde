"""
Engagement mode state machine definitions.

This module defines the allowed transitions between the PREP and HACK
cycle modes and the threshold rules that drive them. It is passive: it
computes decisions from snapshots but never dispatches or sleeps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from batch_factory.core.domain.types import CycleMode

if TYPE_CHECKING:
    from batch_factory.core.domain.types import TargetSnapshot


# Allowed mode transitions.
#
# Key   : previous mode (or None when an engagement starts)
# Value : set of allowed next modes
#
# Notes:
# - Self transitions are the normal steady state of both modes.
# - There is no terminal mode: an engagement ends between cycles.
CYCLE_ALLOWED_TRANSITIONS: dict[CycleMode | None, frozenset[CycleMode]] = {
    None: frozenset({CycleMode.PREP, CycleMode.HACK}),

    CycleMode.PREP: frozenset(
        {
            CycleMode.PREP,
            CycleMode.HACK,
        }
    ),

    CycleMode.HACK: frozenset(
        {
            CycleMode.HACK,
            CycleMode.PREP,
        }
    ),
}


def is_valid_transition(prev_mode: CycleMode | None, next_mode: CycleMode) -> bool:
    """Return True if the transition prev_mode -> next_mode is allowed."""
    allowed = CYCLE_ALLOWED_TRANSITIONS.get(prev_mode)
    if allowed is None:
        return False
    return next_mode in allowed


def select_entry_mode(snapshot: TargetSnapshot) -> CycleMode:
    """Pick the starting mode: HACK only when the target sits at baseline."""
    if snapshot.is_baseline():
        return CycleMode.HACK
    return CycleMode.PREP


def should_revert_to_prep(
    snapshot: TargetSnapshot,
    *,
    money_threshold: float,
    security_threshold: float,
) -> bool:
    """Return True when a post-HACK snapshot drifted on both axes.

    A one-sided drift (low money OR high security) is tolerated.
    """
    money_low = snapshot.money_available < snapshot.max_money * money_threshold
    security_high = snapshot.security_level > snapshot.min_security * security_threshold
    return money_low and security_high
