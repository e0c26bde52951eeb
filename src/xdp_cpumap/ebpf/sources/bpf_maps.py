"""
Counter source backed by the per-CPU array maps of a loaded BCC program.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from .base import CounterSource, CounterTable

LOG = logging.getLogger(__name__)


class BPFCounterSource(CounterSource):
    """Reads ``struct datarec { u64 processed; u64 dropped; }`` per-CPU values."""

    def __init__(self, bpf: Any, num_cpus: Optional[int] = None) -> None:
        self._bpf = bpf
        self._num_cpus = num_cpus
        self._tables: Dict[CounterTable, Any] = {}

    @property
    def num_cpus(self) -> Optional[int]:
        return self._num_cpus

    def _table(self, table: CounterTable) -> Any:
        cached = self._tables.get(table)
        if cached is not None:
            return cached
        try:
            handle = self._bpf[table.value]
        except KeyError as exc:
            raise LookupError(f"Map {table.value} not found in dataplane program") from exc
        self._tables[table] = handle
        LOG.debug("Opened map %s", table.value)
        return handle

    def lookup(self, table: CounterTable, key: int) -> Sequence[Any]:
        handle = self._table(table)
        try:
            return handle.getvalue(handle.Key(key))
        except KeyError as exc:
            raise LookupError(f"bpf_map_lookup_elem failed {table.value} key:0x{key:X}") from exc
