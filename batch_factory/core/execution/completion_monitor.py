"""Completion monitor: the single suspension point of a cycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from batch_factory.core.ports.host_backend import CompletionBackend

LOGGER = logging.getLogger(__name__)


class CompletionMonitor:
    """Polls the completion backend until no tracked instance is running."""

    def __init__(self, *, backend: CompletionBackend, poll_interval_ms: int = 500) -> None:
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be > 0")
        self._backend = backend
        self._poll_interval_ms = poll_interval_ms

    def wait_for(self, instance_ids: Iterable[int]) -> int:
        """
        Block until every instance in ``instance_ids`` has finished.

        Returns the number of sleeps performed. An empty set returns
        immediately.
        """
        pending = [instance_id for instance_id in instance_ids]
        polls = 0

        while True:
            pending = [i for i in pending if self._backend.is_running(i)]
            if not pending:
                break
            self._backend.sleep(self._poll_interval_ms)
            polls += 1

        LOGGER.debug("Instances finished", extra={"polls": polls})
        return polls
