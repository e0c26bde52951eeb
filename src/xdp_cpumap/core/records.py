"""
Fixed-shape snapshot records backed by unsigned 64-bit numpy arrays.

Each record stores one row per logical CPU with two columns (processed,
dropped). Arrays are allocated once and overwritten in place on every
collection, so summation and subtraction keep the producer's u64 semantics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Tuple

import numpy as np

from ..exceptions import AllocationError

PROCESSED = 0
DROPPED = 1

COUNTER_DTYPE = np.uint64


class DataPoint(NamedTuple):
    processed: int
    dropped: int


@dataclass(eq=False)
class Record:
    timestamp: int
    total: np.ndarray
    per_cpu: np.ndarray

    @classmethod
    def zeros(cls, num_cpus: int) -> "Record":
        return cls(
            timestamp=0,
            total=np.zeros(2, dtype=COUNTER_DTYPE),
            per_cpu=np.zeros((num_cpus, 2), dtype=COUNTER_DTYPE),
        )

    @property
    def num_cpus(self) -> int:
        return int(self.per_cpu.shape[0])

    def cpu(self, index: int) -> DataPoint:
        row = self.per_cpu[index]
        return DataPoint(int(row[PROCESSED]), int(row[DROPPED]))

    def summary(self) -> DataPoint:
        return DataPoint(int(self.total[PROCESSED]), int(self.total[DROPPED]))

    def store(self, values: np.ndarray, timestamp: int) -> None:
        """Overwrite the per-CPU rows and recompute the total."""
        self.per_cpu[...] = values
        np.sum(self.per_cpu, axis=0, dtype=COUNTER_DTYPE, out=self.total)
        self.timestamp = timestamp


@dataclass(eq=False)
class StatsSnapshot:
    rx: Record
    redirect_err: Record
    kthread: Record
    enqueue: List[Record]

    @property
    def num_cpus(self) -> int:
        return self.rx.num_cpus

    @property
    def max_targets(self) -> int:
        return len(self.enqueue)

    def records(self) -> Iterator[Tuple[str, Record]]:
        yield "rx", self.rx
        yield "redirect_err", self.redirect_err
        yield "kthread", self.kthread
        for target, record in enumerate(self.enqueue):
            yield f"enqueue[{target}]", record


class SnapshotAllocator:
    """Builds snapshots whose shape is fixed for the process lifetime."""

    def __init__(self, num_cpus: int, max_targets: int) -> None:
        if num_cpus <= 0 or max_targets <= 0:
            raise ValueError("num_cpus and max_targets must be positive")
        self.num_cpus = num_cpus
        self.max_targets = max_targets

    def allocate(self) -> StatsSnapshot:
        try:
            return StatsSnapshot(
                rx=Record.zeros(self.num_cpus),
                redirect_err=Record.zeros(self.num_cpus),
                kthread=Record.zeros(self.num_cpus),
                enqueue=[Record.zeros(self.num_cpus) for _ in range(self.max_targets)],
            )
        except MemoryError as exc:
            raise AllocationError(
                f"Unable to allocate snapshot (nr_cpus:{self.num_cpus}, "
                f"max_targets:{self.max_targets})"
            ) from exc
