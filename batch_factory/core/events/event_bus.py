"""
Synchronous fan-out of engagement events.

The sink list is fixed at construction. Once closed, the bus accepts no
further events.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from batch_factory.core.events.event_sink import EventSink
    from batch_factory.core.events.events import DomainEvent


class EventBus:
    """Delivers each event to every sink, in sink order."""

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: tuple[EventSink, ...] = tuple(sinks) if sinks is not None else ()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: DomainEvent) -> None:
        if self._closed:
            raise RuntimeError(f"Event bus is closed, cannot emit {type(event).__name__}")

        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        """
        Finalize all sinks that expose a close() method. Safe to call twice.
        """
        if self._closed:
            return

        self._closed = True
        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()
