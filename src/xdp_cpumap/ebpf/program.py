"""
Loading and attaching the cpumap redirect dataplane through BCC.

The packet-steering program itself is user supplied C source; this module
only compiles it, fills the cpumap and manages the XDP attachment.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.config import ProgramConfig
from ..exceptions import AttachError, CpumapEntryError, ProgramLoadError
from .bpf_loader import BPFHandle, load_bpf_module
from .sources.bpf_maps import BPFCounterSource

LOG = logging.getLogger(__name__)

CPUMAP_NAME = "cpu_map"


class XDPProgram:
    def __init__(self, config: ProgramConfig, handle: Optional[BPFHandle] = None) -> None:
        self.config = config
        self._handle = handle
        self._bpf: Optional[Any] = None
        self._attached = False

    @property
    def bpf(self) -> Any:
        if self._bpf is None:
            raise RuntimeError("Dataplane program not loaded yet")
        return self._bpf

    @property
    def attached(self) -> bool:
        return self._attached

    def ensure_loaded(self) -> Any:
        if self._bpf is not None:
            return self._bpf
        if self._handle is None:
            self._handle = load_bpf_module(extra_paths=self.config.bcc_paths)
        try:
            self._bpf = self._handle.new(
                src_file=self.config.source_path, cflags=self.config.cflags()
            )
        except Exception as exc:
            raise ProgramLoadError(
                f"Failed to load {self.config.source_path}: {exc}"
            ) from exc
        LOG.debug("Loaded dataplane program %s", self.config.source_path)
        return self._bpf

    def create_cpu_entries(self) -> None:
        """Allocate a kernel cpumap entry with the configured queue size per CPU."""
        bpf = self.ensure_loaded()
        try:
            cpu_map = bpf[CPUMAP_NAME]
        except KeyError as exc:
            raise CpumapEntryError(f"Map {CPUMAP_NAME} not found in dataplane program") from exc
        for cpu in self.config.cpus:
            try:
                cpu_map[cpu_map.Key(cpu)] = cpu_map.Leaf(self.config.queue_size)
            except Exception as exc:
                raise CpumapEntryError(
                    f"Create CPU entry failed (cpu:{cpu} qsize:{self.config.queue_size}): {exc}"
                ) from exc
        LOG.info(
            "Created cpumap entries for CPUs %s (qsize:%d)",
            ",".join(map(str, self.config.cpus)),
            self.config.queue_size,
        )

    def attach(self) -> None:
        if self._attached:
            return
        bpf = self.ensure_loaded()
        try:
            fn = bpf.load_func(self.config.prog_name, self._handle.bpf_class.XDP)
            bpf.attach_xdp(self.config.device, fn, self.config.xdp_flags())
        except Exception as exc:
            raise AttachError(
                f"Failed to attach {self.config.prog_name} to {self.config.device}: {exc}"
            ) from exc
        self._attached = True
        LOG.info("Attached %s to device %s", self.config.prog_name, self.config.device)

    def detach(self) -> None:
        """Remove the XDP program from the device. Safe to call more than once."""
        if not self._attached:
            return
        try:
            self.bpf.remove_xdp(self.config.device, self.config.xdp_flags())
            LOG.info("Removed XDP program from device %s", self.config.device)
        finally:
            self._attached = False

    def counter_source(self) -> BPFCounterSource:
        bpf = self.ensure_loaded()
        return BPFCounterSource(bpf, num_cpus=self._handle.possible_cpus())

    def trace_print(self) -> None:
        """Stream the kernel trace pipe until interrupted."""
        self.ensure_loaded().trace_print()
