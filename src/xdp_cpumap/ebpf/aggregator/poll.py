"""
Poll loop that collects, rates and reports cpumap counters every interval.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
from enum import Enum
from typing import Callable, Optional, TextIO

from ...core.config import StatsConfig
from ...core.records import SnapshotAllocator
from ...core.report import Reporter
from ...core.store import SnapshotStore
from ..reader import MapReader
from ..sources.base import CounterSource

LOG = logging.getLogger(__name__)


class LoopState(str, Enum):
    IDLE = "idle"
    BASELINE = "baseline"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class PollLoop:
    def __init__(
        self,
        source: CounterSource,
        config: StatsConfig,
        out: Optional[TextIO] = None,
        reader: Optional[MapReader] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.source = source
        self.config = config
        self.num_cpus = config.resolve_num_cpus()
        self.out = out
        self.reader = reader or MapReader(self.num_cpus)
        self.reporter = reporter or Reporter()
        self.state = LoopState.IDLE
        self.cycles = 0
        self.store: Optional[SnapshotStore] = None

    def _setup(self) -> SnapshotStore:
        allocator = SnapshotAllocator(self.num_cpus, self.config.max_targets)
        store = SnapshotStore(allocator.allocate(), allocator.allocate())
        self.state = LoopState.BASELINE
        self.reader.collect_snapshot(self.source, store.current)
        return store

    def run(
        self,
        cancel: threading.Event,
        cleanup: Optional[Callable[[], None]] = None,
    ) -> int:
        """Report until ``cancel`` is set or ``max_cycles`` reports were written.

        ``cleanup`` runs once on the way out, whatever stopped the loop.
        Returns the number of reports written.
        """
        try:
            self.store = self._setup()
            self.state = LoopState.RUNNING
            while not cancel.is_set():
                start = time.monotonic()
                self._cycle(self.store, cancel)
                if self.config.max_cycles and self.cycles >= self.config.max_cycles:
                    break
                LOG.debug("Cycle %d took %.6fs", self.cycles, time.monotonic() - start)
                if cancel.wait(self.config.interval):
                    break
        finally:
            self.state = LoopState.CANCELLED if cancel.is_set() else LoopState.FINISHED
            if self.store is not None:
                self.store.close()
            if cleanup is not None:
                cleanup()
        if cancel.is_set():
            LOG.info("Poll loop cancelled after %d reports", self.cycles)
        return self.cycles

    def _cycle(self, store: SnapshotStore, cancel: threading.Event) -> None:
        store.rotate()
        failures = self.reader.collect_snapshot(self.source, store.current)
        if failures:
            LOG.debug("%d table(s) kept stale data this cycle", len(failures))
        text = self.reporter.render(store.current, store.previous)
        if cancel.is_set():
            return
        out = self.out or sys.stdout
        out.write(text)
        out.flush()
        self.cycles += 1
