"""
In-process counter source used for replays and tests.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ...core.records import DataPoint
from .base import CounterSource, CounterTable


class MemoryCounterSource(CounterSource):
    """Holds counters keyed by ``(table, key)``, like a set of per-CPU arrays.

    Keys in ``0..max_entries-1`` that were never written read as zeros, the
    same as a freshly created BPF array map.
    """

    def __init__(self, num_cpus: int, max_entries: int = 12) -> None:
        self._num_cpus = num_cpus
        self.max_entries = max_entries
        self._tables: Dict[Tuple[CounterTable, int], List[DataPoint]] = {}
        self._failing: set[Tuple[CounterTable, int]] = set()

    @property
    def num_cpus(self) -> int:
        return self._num_cpus

    def set(self, table: CounterTable, key: int, values: Iterable[Sequence[int]]) -> None:
        self._tables[(table, key)] = [DataPoint(int(p), int(d)) for p, d in values]

    def set_processed(self, table: CounterTable, key: int, processed: Iterable[int]) -> None:
        self.set(table, key, ((value, 0) for value in processed))

    def advance(
        self, table: CounterTable, key: int, cpu: int, processed: int = 0, dropped: int = 0
    ) -> None:
        values = self._tables.setdefault(
            (table, key), [DataPoint(0, 0) for _ in range(self._num_cpus)]
        )
        old = values[cpu]
        values[cpu] = DataPoint(old.processed + processed, old.dropped + dropped)

    def fail(self, table: CounterTable, key: int, failing: bool = True) -> None:
        """Make lookups of ``(table, key)`` raise until called with ``failing=False``."""
        if failing:
            self._failing.add((table, key))
        else:
            self._failing.discard((table, key))

    def lookup(self, table: CounterTable, key: int) -> Sequence[DataPoint]:
        if (table, key) in self._failing:
            raise LookupError(f"{table.value}[{key}] unavailable")
        if key < 0 or key >= self.max_entries:
            raise LookupError(f"Key {key} out of range for {table.value}")
        values = self._tables.get((table, key))
        if values is None:
            return [DataPoint(0, 0) for _ in range(self._num_cpus)]
        return list(values)
