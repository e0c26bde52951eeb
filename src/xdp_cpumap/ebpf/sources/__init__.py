"""Available counter source implementations."""

from .base import (
    KTHREAD_KEY,
    REDIRECT_ERR_KEY,
    RX_KEY,
    CounterSource,
    CounterTable,
)
from .bpf_maps import BPFCounterSource
from .memory import MemoryCounterSource

__all__ = [
    "CounterSource",
    "CounterTable",
    "BPFCounterSource",
    "MemoryCounterSource",
    "RX_KEY",
    "REDIRECT_ERR_KEY",
    "KTHREAD_KEY",
]
