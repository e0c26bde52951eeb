"""
BCC-facing half of the package.

Exposes the counter sources, the map reader that fills snapshots from them,
the poll loop driving a reporting cycle, and the dataplane program wrapper.
"""

from .aggregator.poll import LoopState, PollLoop
from .program import XDPProgram
from .reader import MapReader
from .sources import BPFCounterSource, CounterSource, CounterTable, MemoryCounterSource

__all__ = [
    "CounterSource",
    "CounterTable",
    "BPFCounterSource",
    "MemoryCounterSource",
    "MapReader",
    "LoopState",
    "PollLoop",
    "XDPProgram",
]
