"""
Shared helpers for loading BCC programs with resilient search paths.
"""

from __future__ import annotations

import importlib
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from ..exceptions import BPFUnavailableError

_BCC_FALLBACK_PATHS: tuple[Path, ...] = (
    Path("/usr/share/bcc/python"),
    Path("/usr/lib/python3/dist-packages"),
    Path("/usr/lib/python3/site-packages"),
)


@dataclass(frozen=True)
class BPFHandle:
    """Small wrapper so imports stay lazy until we really need BCC."""

    module: Any
    utils: Any

    @property
    def bpf_class(self) -> Any:
        return getattr(self.module, "BPF")

    def new(self, *, src_file: Path, cflags: Optional[Iterable[str]] = None) -> Any:
        BPF = self.bpf_class
        if cflags is None:
            return BPF(src_file=str(src_file))
        return BPF(src_file=str(src_file), cflags=list(cflags))

    def possible_cpus(self) -> int:
        """Per-CPU maps return one slot per possible CPU, not per online CPU."""
        return len(self.utils.get_possible_cpus())


def _import_bcc() -> str:
    try:
        from bcc import BPF  # type: ignore[import-untyped]

        return BPF.__module__
    except Exception as exc:  # pragma: no cover - dependent on system availability
        raise BPFUnavailableError(
            "Unable to import bcc.BPF. Install bcc (e.g., `sudo apt-get install bpfcc-tools "
            "python3-bpfcc`) and make sure the python module is on PYTHONPATH."
        ) from exc


def load_bpf_module(extra_paths: Iterable[Path] | None = None) -> BPFHandle:
    """
    Try importing bcc.BPF using well known fallbacks.

    Parameters
    ----------
    extra_paths:
        Additional paths to consider before the built-in fallbacks.
    """

    ordered_paths = [Path(path) for path in extra_paths or []]
    ordered_paths.extend(_BCC_FALLBACK_PATHS)

    seen = set()
    for candidate in ordered_paths:
        if not candidate.exists():
            continue
        as_str = str(candidate.resolve())
        if as_str in seen:
            continue
        seen.add(as_str)
        if as_str not in sys.path:
            sys.path.append(as_str)

    module = _import_bcc()
    return BPFHandle(
        module=importlib.import_module(module),
        utils=importlib.import_module("bcc.utils"),
    )
