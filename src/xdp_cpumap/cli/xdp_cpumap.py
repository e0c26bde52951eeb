"""
`xdp-cpumap` command line interface: attach a cpumap redirect program and
report its per-CPU counters.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from ..core.config import (
    DEFAULT_CPUS,
    DEFAULT_INTERVAL,
    DEFAULT_MAX_TARGETS,
    DEFAULT_PROG_NAME,
    DEFAULT_QUEUE_SIZE,
    ProgramConfig,
    StatsConfig,
    parse_cpu_list,
)
from ..ebpf import PollLoop, XDPProgram
from ..exceptions import (
    AllocationError,
    AttachError,
    BPFUnavailableError,
    ConfigurationError,
    CpumapEntryError,
    ProgramLoadError,
)

LOG = logging.getLogger("xdp_cpumap")

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_FAIL_OPTION = 2
EXIT_FAIL_XDP = 3
EXIT_FAIL_BPF = 4
EXIT_FAIL_MEM = 5


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="xdp-cpumap",
        description='XDP redirect with a CPU-map type "BPF_MAP_TYPE_CPUMAP".',
    )
    parser.add_argument("-d", "--dev", type=str, help="Network device to attach the XDP program to.")
    parser.add_argument(
        "--program",
        type=Path,
        help="Dataplane C source compiled with BCC (must define the cpumap and counter maps).",
    )
    parser.add_argument(
        "-p",
        "--prog",
        type=str,
        default=DEFAULT_PROG_NAME,
        help="XDP function in the dataplane source to attach.",
    )
    parser.add_argument(
        "-S", "--skb-mode", action="store_true", help="Attach in generic (SKB) mode."
    )
    parser.add_argument(
        "-s", "--sec", type=float, default=DEFAULT_INTERVAL, help="Report interval in seconds."
    )
    parser.add_argument(
        "-q",
        "--qsize",
        type=int,
        default=DEFAULT_QUEUE_SIZE,
        help="Queue size of each cpumap entry.",
    )
    parser.add_argument(
        "--cpus",
        type=str,
        default=",".join(map(str, DEFAULT_CPUS)),
        help="CPUs to create cpumap entries for, e.g. 0-4 or 0,2,3.",
    )
    parser.add_argument(
        "--max-targets",
        type=int,
        default=DEFAULT_MAX_TARGETS,
        help="Number of redirect targets (must match MAX_CPUS in the dataplane source).",
    )
    parser.add_argument("--count", type=int, help="Stop after this many reports.")
    parser.add_argument(
        "-D",
        "--debug",
        action="store_true",
        help="Stream the kernel trace pipe instead of reporting counters.",
    )
    parser.add_argument(
        "--log",
        type=str,
        default="INFO",
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_configs(args: argparse.Namespace) -> tuple[ProgramConfig, StatsConfig]:
    if not args.dev:
        raise ConfigurationError("required option --dev missing")
    if args.program is None:
        raise ConfigurationError("required option --program missing")
    program_cfg = ProgramConfig(
        device=args.dev,
        source_path=args.program,
        prog_name=args.prog,
        skb_mode=args.skb_mode,
        queue_size=args.qsize,
        cpus=parse_cpu_list(args.cpus),
        max_targets=args.max_targets,
    )
    stats_cfg = StatsConfig(
        interval=args.sec,
        max_targets=args.max_targets,
        max_cycles=args.count,
    )
    return program_cfg, stats_cfg


def install_signal_handlers(cancel: threading.Event) -> None:
    def _stop(signum: int, frame: object) -> None:
        del signum, frame
        cancel.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)


def run(
    program: XDPProgram,
    stats_cfg: StatsConfig,
    cancel: threading.Event,
    debug: bool = False,
) -> int:
    program.create_cpu_entries()
    program.attach()
    try:
        if debug:
            LOG.info("Debug mode: reading trace pipe")
            program.trace_print()
            return EXIT_OK
        source = program.counter_source()
        if stats_cfg.num_cpus is None:
            stats_cfg.num_cpus = source.num_cpus
        loop = PollLoop(source, stats_cfg)
        loop.run(cancel, cleanup=program.detach)
    finally:
        program.detach()
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log)

    try:
        program_cfg, stats_cfg = build_configs(args)
    except ConfigurationError as exc:
        LOG.error("Invalid options: %s", exc)
        return EXIT_FAIL_OPTION

    cancel = threading.Event()
    if not args.debug:
        install_signal_handlers(cancel)
    program = XDPProgram(program_cfg)
    try:
        return run(program, stats_cfg, cancel, debug=args.debug)
    except KeyboardInterrupt:
        return EXIT_OK
    except ConfigurationError as exc:
        LOG.error("Invalid configuration: %s", exc)
        return EXIT_FAIL_OPTION
    except AllocationError as exc:
        LOG.error("Snapshot allocation failed: %s", exc)
        return EXIT_FAIL_MEM
    except CpumapEntryError as exc:
        LOG.error("cpumap setup failed: %s", exc)
        return EXIT_FAIL_BPF
    except AttachError as exc:
        LOG.error("XDP attach failed: %s", exc)
        return EXIT_FAIL_XDP
    except (BPFUnavailableError, ProgramLoadError) as exc:
        LOG.error("Loading dataplane program failed: %s", exc)
        return EXIT_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
