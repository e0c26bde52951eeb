from .config import ProgramConfig, StatsConfig, parse_cpu_list
from .rates import RateCalculator, RecordRates
from .records import DataPoint, Record, SnapshotAllocator, StatsSnapshot
from .report import Reporter
from .store import SnapshotStore

__all__ = [
    "DataPoint",
    "Record",
    "StatsSnapshot",
    "SnapshotAllocator",
    "SnapshotStore",
    "RateCalculator",
    "RecordRates",
    "Reporter",
    "StatsConfig",
    "ProgramConfig",
    "parse_cpu_list",
]
