"""
Logging event sink.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any


class LoggingEventSink:
    """Logs domain events using the standard logging module.

    Infeasibility and failure events are logged at WARNING, everything
    else at INFO.
    """

    _WARNING_EVENTS = frozenset(
        {
            "PlanInfeasibleEvent",
            "LaunchFailedEvent",
            "EngagementStoppedEvent",
        }
    )

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        name = type(event).__name__
        level = logging.WARNING if name in self._WARNING_EVENTS else logging.INFO
        payload = asdict(event) if is_dataclass(event) else {"event": str(event)}
        self._logger.log(level, name, extra={"event": payload})
