"""In-memory results channel: worker yields appended, drained once per HACK cycle."""

from __future__ import annotations

import threading


class InMemoryResultsChannel:
    """Thread-safe append/drain buffer of extracted amounts."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[float] = []

    def append(self, amount: float) -> None:
        with self._lock:
            self._entries.append(float(amount))

    def drain(self) -> list[float]:
        with self._lock:
            entries, self._entries = self._entries, []
        return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
