"""
Semantic test: mode transition table.

Invariant:
An engagement may start in either mode, and each mode may repeat or move
to the other one. There is no terminal mode.
"""

from __future__ import annotations

from batch_factory.core.domain.cycle_mode import CYCLE_ALLOWED_TRANSITIONS, is_valid_transition
from batch_factory.core.domain.types import CycleMode


def test_every_transition_between_modes_is_allowed() -> None:
    for prev_mode in (None, CycleMode.PREP, CycleMode.HACK):
        for next_mode in CycleMode:
            assert is_valid_transition(prev_mode, next_mode)


def test_table_covers_every_mode() -> None:
    assert set(CYCLE_ALLOWED_TRANSITIONS) == {None, CycleMode.PREP, CycleMode.HACK}
