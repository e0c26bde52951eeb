"""
Configuration objects for the poll loop and the dataplane program.
"""

from __future__ import annotations

import logging
import math
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import psutil

from ..exceptions import ConfigurationError

LOG = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0
DEFAULT_MAX_TARGETS = 12
DEFAULT_QUEUE_SIZE = 128 + 64
DEFAULT_CPUS: tuple[int, ...] = (0, 1, 2, 3, 4)
DEFAULT_PROG_NAME = "xdp_prognum0_no_touch"

# Values from include/uapi/linux/if_link.h
XDP_FLAGS_SKB_MODE = 1 << 1
XDP_FLAGS_DRV_MODE = 1 << 2


def detect_num_cpus() -> int:
    count = psutil.cpu_count(logical=True)
    if not count:
        raise ConfigurationError("Unable to determine the logical CPU count of this host")
    return int(count)


@dataclass
class StatsConfig:
    """Settings shared by the snapshot allocator, reader and poll loop."""

    interval: float = DEFAULT_INTERVAL
    num_cpus: Optional[int] = None
    max_targets: int = DEFAULT_MAX_TARGETS
    max_cycles: Optional[int] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.interval) or self.interval <= 0:
            raise ConfigurationError(
                f"Poll interval must be a positive finite number, got {self.interval}"
            )
        if self.num_cpus is not None and self.num_cpus <= 0:
            raise ConfigurationError(f"CPU count must be positive, got {self.num_cpus}")
        if self.max_targets <= 0:
            raise ConfigurationError(f"Max targets must be positive, got {self.max_targets}")
        if self.max_cycles is not None and self.max_cycles <= 0:
            raise ConfigurationError(f"Cycle count must be positive, got {self.max_cycles}")

    def resolve_num_cpus(self) -> int:
        """Pin the CPU count for the rest of the process lifetime."""
        if self.num_cpus is None:
            self.num_cpus = detect_num_cpus()
            LOG.debug("Detected %d logical CPUs", self.num_cpus)
        return self.num_cpus


@dataclass
class ProgramConfig:
    """Where the dataplane program lives and how to attach it."""

    device: str
    source_path: Path
    prog_name: str = DEFAULT_PROG_NAME
    skb_mode: bool = False
    queue_size: int = DEFAULT_QUEUE_SIZE
    cpus: tuple[int, ...] = DEFAULT_CPUS
    max_targets: int = DEFAULT_MAX_TARGETS
    bcc_paths: tuple[str, ...] = ()
    extra_cflags: tuple[str, ...] = field(default=(), repr=False)
    ifindex: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if not self.device:
            raise ConfigurationError("A network device is required (--dev)")
        if len(self.device) >= 16:
            raise ConfigurationError(f"Device name too long: {self.device!r}")
        try:
            self.ifindex = socket.if_nametoindex(self.device)
        except OSError as exc:
            raise ConfigurationError(f"Unknown device {self.device!r}: {exc}") from exc
        self.source_path = Path(self.source_path)
        if not self.source_path.is_file():
            raise ConfigurationError(f"Dataplane source not found: {self.source_path}")
        if self.queue_size <= 0:
            raise ConfigurationError(f"Queue size must be positive, got {self.queue_size}")
        for cpu in self.cpus:
            if cpu < 0 or cpu >= self.max_targets:
                raise ConfigurationError(
                    f"CPU {cpu} is outside the cpumap range 0..{self.max_targets - 1}"
                )

    def xdp_flags(self) -> int:
        return XDP_FLAGS_SKB_MODE if self.skb_mode else 0

    def cflags(self) -> list[str]:
        flags = [f"-DMAX_CPUS={self.max_targets}"]
        flags.extend(self.extra_cflags)
        return flags


def parse_cpu_list(raw: str) -> tuple[int, ...]:
    """Parse ``"0,2-4"`` into ``(0, 2, 3, 4)``."""
    cpus: list[int] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            if "-" in item:
                start, end = item.split("-", 1)
                lo, hi = int(start), int(end)
                if hi < lo:
                    raise ConfigurationError(f"Invalid CPU range {item!r}")
                cpus.extend(range(lo, hi + 1))
            else:
                cpus.append(int(item))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid CPU list entry {item!r}") from exc
    if not cpus:
        raise ConfigurationError("CPU list is empty")
    return tuple(sorted(set(cpus)))
