"""
Text rendering of one reporting cycle.
"""

from __future__ import annotations

from typing import List

from .rates import RateCalculator, RecordRates
from .records import Record, StatsSnapshot

RX_LABEL = "XDP-RX"
ENQUEUE_LABEL = "cpumap-enqueue"
KTHREAD_LABEL = "cpumap_kthread"
REDIRECT_ERR_LABEL = "redirect_err"
NO_DROP = "(nan)"


def _header() -> str:
    return (
        f"{'XDP-cpumap':<15} {'CPU:to':<7} {'pps ':<10} {'pps-human-readable':<18} "
        f"{'drop-pps':<12} {'period':<9}"
    )


def _row(label: str, ident: str, pps: int, drop: str, period: float) -> str:
    return f"{label:<15} {ident:<7} {pps:<10d} {pps:<18,d} {drop:<12} {period:f}"


class Reporter:
    """Renders the RX, enqueue, kthread and redirect-error blocks.

    ``render`` only reads its two arguments, so the same pair of snapshots
    always produces the same text.
    """

    def __init__(self, calculator: RateCalculator | None = None) -> None:
        self.calculator = calculator or RateCalculator()

    def render(self, curr: StatsSnapshot, prev: StatsSnapshot) -> str:
        lines: List[str] = [_header()]
        self._rx_block(lines, curr.rx, prev.rx)
        for target, (rec, old) in enumerate(zip(curr.enqueue, prev.enqueue)):
            self._enqueue_block(lines, target, rec, old)
        self._drop_block(lines, KTHREAD_LABEL, curr.kthread, prev.kthread)
        self._drop_block(lines, REDIRECT_ERR_LABEL, curr.redirect_err, prev.redirect_err)
        return "\n".join(lines) + "\n\n"

    def _rates(self, rec: Record, prev: Record) -> RecordRates:
        return self.calculator.record_rates(rec, prev)

    def _rx_block(self, lines: List[str], rec: Record, prev: Record) -> None:
        rates = self._rates(rec, prev)
        for cpu, pps in enumerate(rates.per_cpu_pps):
            if pps > 0:
                lines.append(_row(RX_LABEL, str(cpu), int(pps), NO_DROP, rates.period))
        lines.append(_row(RX_LABEL, "total", rates.total_pps, NO_DROP, rates.period))

    def _enqueue_block(self, lines: List[str], target: int, rec: Record, prev: Record) -> None:
        rates = self._rates(rec, prev)
        for cpu, (pps, drop) in enumerate(zip(rates.per_cpu_pps, rates.per_cpu_drop_pps)):
            if pps > 0:
                lines.append(
                    _row(ENQUEUE_LABEL, f"{cpu:>3d}:{target:<3d}", int(pps),
                         f"{int(drop):,d}", rates.period)
                )
        if rates.total_pps > 0:
            lines.append(
                _row(ENQUEUE_LABEL, f"{'sum':>3}:{target:<3d}", rates.total_pps,
                     f"{rates.total_drop_pps:,d}", rates.period)
            )

    def _drop_block(self, lines: List[str], label: str, rec: Record, prev: Record) -> None:
        rates = self._rates(rec, prev)
        for cpu, (pps, drop) in enumerate(zip(rates.per_cpu_pps, rates.per_cpu_drop_pps)):
            if pps > 0:
                lines.append(_row(label, str(cpu), int(pps), f"{int(drop):,d}", rates.period))
        lines.append(
            _row(label, "total", rates.total_pps, f"{rates.total_drop_pps:,d}", rates.period)
        )
