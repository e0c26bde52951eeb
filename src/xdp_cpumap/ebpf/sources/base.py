"""
Counter sources the statistics engine reads from.
"""

from __future__ import annotations

import abc
from enum import Enum
from typing import Any, Sequence


class CounterTable(str, Enum):
    """Per-CPU array maps exported by the cpumap redirect program."""

    RX = "rx_cnt"
    REDIRECT_ERR = "redirect_err_cnt"
    ENQUEUE = "cpumap_enqueue_cnt"
    KTHREAD = "cpumap_kthread_cnt"


RX_KEY = 0
# key 0 counts successful redirects, key 1 counts failures
REDIRECT_ERR_KEY = 1
KTHREAD_KEY = 0


class CounterSource(abc.ABC):
    """Contract for anything that exposes per-CPU ``(processed, dropped)`` pairs."""

    @abc.abstractmethod
    def lookup(self, table: CounterTable, key: int) -> Sequence[Any]:
        """Return one value per logical CPU.

        Values are ``DataPoint`` instances, ``(processed, dropped)`` pairs or
        objects exposing ``processed`` and ``dropped`` attributes. Raises
        ``LookupError`` for an unknown table or key.
        """

    @property
    def num_cpus(self) -> int | None:
        """CPU count reported by the source itself, if it knows one."""
        return None
