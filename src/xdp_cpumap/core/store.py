"""
Double buffer holding the current and previous snapshot.
"""

from __future__ import annotations

from typing import Optional

from .records import StatsSnapshot


class SnapshotStore:
    """Owns exactly two snapshots and swaps their roles on ``rotate``.

    Callers must be done with ``previous`` before the next ``rotate``: its
    buffer becomes ``current`` and is overwritten by the following collect.
    """

    def __init__(self, current: StatsSnapshot, previous: StatsSnapshot) -> None:
        if current is previous:
            raise ValueError("SnapshotStore needs two distinct buffers")
        self._current: Optional[StatsSnapshot] = current
        self._previous: Optional[StatsSnapshot] = previous

    @property
    def current(self) -> StatsSnapshot:
        if self._current is None:
            raise RuntimeError("SnapshotStore already closed")
        return self._current

    @property
    def previous(self) -> StatsSnapshot:
        if self._previous is None:
            raise RuntimeError("SnapshotStore already closed")
        return self._previous

    def rotate(self) -> None:
        self._current, self._previous = self._previous, self._current

    def close(self) -> None:
        self._current = None
        self._previous = None

    @property
    def closed(self) -> bool:
        return self._current is None
