"""Bus used when a controller is built without one."""
from __future__ import annotations

from typing import TYPE_CHECKING

from batch_factory.core.events.event_bus import EventBus

if TYPE_CHECKING:
    from batch_factory.core.events.events import DomainEvent


class NullEventBus(EventBus):
    """EventBus without sinks that drops every event, even after close()."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def emit(self, event: DomainEvent) -> None:
        return
