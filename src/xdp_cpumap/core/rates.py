"""
Rate computation between two records of the same counter table.

Counters are assumed to never wrap or reset. Deltas are taken in unsigned
64-bit arithmetic, so a counter that goes backwards yields a huge rate
instead of an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .records import DROPPED, PROCESSED, DataPoint, Record

NANOSEC_PER_SEC = 1_000_000_000
U64_MASK = (1 << 64) - 1

CounterPair = Union[DataPoint, np.ndarray]


@dataclass(frozen=True)
class RecordRates:
    period: float
    per_cpu_pps: np.ndarray
    per_cpu_drop_pps: np.ndarray
    total_pps: int
    total_drop_pps: int


class RateCalculator:
    """Elapsed time and per-second rates between ``curr`` and ``prev``."""

    @staticmethod
    def period(curr: Record, prev: Record) -> float:
        elapsed = int(curr.timestamp) - int(prev.timestamp)
        if elapsed <= 0:
            return 0.0
        return elapsed / NANOSEC_PER_SEC

    @staticmethod
    def _rate(curr: int, prev: int, period: float) -> int:
        if period <= 0:
            return 0
        delta = (int(curr) - int(prev)) & U64_MASK
        return math.floor(delta / period)

    @classmethod
    def pps(cls, curr: CounterPair, prev: CounterPair, period: float) -> int:
        return cls._rate(curr[PROCESSED], prev[PROCESSED], period)

    @classmethod
    def drop_pps(cls, curr: CounterPair, prev: CounterPair, period: float) -> int:
        return cls._rate(curr[DROPPED], prev[DROPPED], period)

    @classmethod
    def record_rates(cls, curr: Record, prev: Record) -> RecordRates:
        period = cls.period(curr, prev)
        if period > 0:
            # uint64 subtraction wraps the same way the scalar path masks
            delta = np.subtract(curr.per_cpu, prev.per_cpu, dtype=np.uint64)
            per_cpu = np.floor(delta.astype(np.float64) / period)
        else:
            per_cpu = np.zeros(curr.per_cpu.shape, dtype=np.float64)
        return RecordRates(
            period=period,
            per_cpu_pps=per_cpu[:, PROCESSED],
            per_cpu_drop_pps=per_cpu[:, DROPPED],
            total_pps=cls.pps(curr.total, prev.total, period),
            total_drop_pps=cls.drop_pps(curr.total, prev.total, period),
        )
