"""
xdp-cpumap-stats: per-CPU throughput and drop-rate reporting for XDP cpumap
redirect programs.
"""

from xdp_cpumap.core.config import ProgramConfig, StatsConfig
from xdp_cpumap.core.rates import RateCalculator
from xdp_cpumap.core.records import DataPoint, Record, SnapshotAllocator, StatsSnapshot
from xdp_cpumap.core.report import Reporter
from xdp_cpumap.core.store import SnapshotStore
from xdp_cpumap.ebpf.aggregator.poll import PollLoop
from xdp_cpumap.ebpf.reader import MapReader

__version__ = "0.1.0"

__all__ = [
    "DataPoint",
    "Record",
    "StatsSnapshot",
    "SnapshotAllocator",
    "SnapshotStore",
    "MapReader",
    "RateCalculator",
    "Reporter",
    "PollLoop",
    "StatsConfig",
    "ProgramConfig",
    "__version__",
]
