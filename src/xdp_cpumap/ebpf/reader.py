"""
Copies per-CPU counter values from a source into snapshot records.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Sequence

import numpy as np

from ..core.records import COUNTER_DTYPE, Record, StatsSnapshot
from ..exceptions import CollectionError
from .sources.base import (
    KTHREAD_KEY,
    REDIRECT_ERR_KEY,
    RX_KEY,
    CounterSource,
    CounterTable,
)

LOG = logging.getLogger(__name__)


def _as_pair(value: Any) -> tuple[int, int]:
    if hasattr(value, "processed"):
        processed, dropped = int(value.processed), int(value.dropped)
    else:
        processed, dropped = (int(item) for item in value)
    if processed < 0 or dropped < 0:
        raise ValueError(f"negative counter ({processed}, {dropped})")
    return processed, dropped


class MapReader:
    def __init__(self, num_cpus: int, clock: Callable[[], int] = time.monotonic_ns) -> None:
        self.num_cpus = num_cpus
        self._clock = clock
        self._scratch = np.zeros((num_cpus, 2), dtype=COUNTER_DTYPE)

    def collect(
        self, source: CounterSource, table: CounterTable, key: int, record: Record
    ) -> Record:
        """Fill ``record`` from ``source``; on failure ``record`` is left as it was."""
        try:
            values: Sequence[Any] = source.lookup(table, key)
        except LookupError as exc:
            raise CollectionError(table.value, key, str(exc)) from exc
        # Stamp as close as possible to the read
        timestamp = self._clock()

        if len(values) != self.num_cpus:
            raise CollectionError(
                table.value, key, f"expected {self.num_cpus} per-CPU values, got {len(values)}"
            )
        try:
            for cpu, value in enumerate(values):
                self._scratch[cpu] = _as_pair(value)
        except (TypeError, ValueError, AttributeError, OverflowError) as exc:
            raise CollectionError(table.value, key, f"malformed value: {exc}") from exc

        record.store(self._scratch, timestamp)
        return record

    def collect_snapshot(
        self, source: CounterSource, snapshot: StatsSnapshot
    ) -> List[CollectionError]:
        """Collect every table, carrying on past individual failures."""
        failures: List[CollectionError] = []
        plan = [
            (CounterTable.RX, RX_KEY, snapshot.rx),
            (CounterTable.REDIRECT_ERR, REDIRECT_ERR_KEY, snapshot.redirect_err),
        ]
        plan.extend(
            (CounterTable.ENQUEUE, target, record)
            for target, record in enumerate(snapshot.enqueue)
        )
        plan.append((CounterTable.KTHREAD, KTHREAD_KEY, snapshot.kthread))

        for table, key, record in plan:
            try:
                self.collect(source, table, key, record)
            except CollectionError as exc:
                LOG.warning("%s", exc)
                failures.append(exc)
        return failures
