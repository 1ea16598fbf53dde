"""
Event sink interface.

Sinks receive every engagement event the mode controller emits, in emission
order, on the controller's own thread.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from batch_factory.core.events.events import DomainEvent


class EventSink(Protocol):
    def on_event(self, event: DomainEvent) -> None:
        """Consume one engagement event."""
