import numpy as np
import pytest

from xdp_cpumap.core.records import SnapshotAllocator
from xdp_cpumap.core.report import Reporter

SECOND = 1_000_000_000


def _fill(record, processed, timestamp, dropped=None):
    dropped = dropped or [0] * len(processed)
    record.store(np.array(list(zip(processed, dropped)), dtype=np.uint64), timestamp)


@pytest.fixture
def pair():
    allocator = SnapshotAllocator(num_cpus=4, max_targets=12)
    return allocator.allocate(), allocator.allocate()


def _rows(text, label):
    return [line.split() for line in text.splitlines() if line.startswith(label + " ")]


def test_header_and_block_order(pair):
    curr, prev = pair
    text = Reporter().render(curr, prev)
    lines = text.splitlines()
    assert lines[0].split() == [
        "XDP-cpumap", "CPU:to", "pps", "pps-human-readable", "drop-pps", "period",
    ]
    labels = [line.split()[0] for line in lines[1:] if line]
    assert labels == ["XDP-RX", "cpumap_kthread", "redirect_err"]
    assert text.endswith("\n\n")


def test_rx_rows(pair):
    curr, prev = pair
    _fill(prev.rx, [100, 0, 0, 0], 0)
    _fill(curr.rx, [200, 50, 0, 0], SECOND)
    rows = _rows(Reporter().render(curr, prev), "XDP-RX")
    assert rows == [
        ["XDP-RX", "0", "100", "100", "(nan)", "1.000000"],
        ["XDP-RX", "1", "50", "50", "(nan)", "1.000000"],
        ["XDP-RX", "total", "150", "150", "(nan)", "1.000000"],
    ]


def test_unchanged_counters_render_only_totals(pair):
    curr, prev = pair
    for snapshot in (prev, curr):
        _fill(snapshot.rx, [10, 10, 10, 10], SECOND)
        _fill(snapshot.kthread, [5, 5, 5, 5], SECOND)
        for record in snapshot.enqueue:
            _fill(record, [3, 3, 3, 3], SECOND)
    text = Reporter().render(curr, prev)
    body = [line.split() for line in text.splitlines()[1:] if line]
    assert body == [
        ["XDP-RX", "total", "0", "0", "(nan)", "0.000000"],
        ["cpumap_kthread", "total", "0", "0", "0", "0.000000"],
        ["redirect_err", "total", "0", "0", "0", "0.000000"],
    ]


def test_enqueue_rows_and_sum(pair):
    curr, prev = pair
    _fill(prev.enqueue[3], [0, 0, 0, 0], 0)
    _fill(curr.enqueue[3], [0, 2_000_000, 0, 0], SECOND, dropped=[0, 1500, 0, 0])
    text = Reporter().render(curr, prev)
    lines = [line for line in text.splitlines() if line.startswith("cpumap-enqueue")]
    assert len(lines) == 2
    assert lines[0].split() == ["cpumap-enqueue", "1:3", "2000000", "2,000,000", "1,500", "1.000000"]
    assert lines[1].split() == ["cpumap-enqueue", "sum:3", "2000000", "2,000,000", "1,500", "1.000000"]
    assert "  1:3  " in lines[0]


def test_enqueue_targets_in_ascending_order(pair):
    curr, prev = pair
    for target in (7, 2):
        _fill(curr.enqueue[target], [1, 0, 0, 0], SECOND)
    text = Reporter().render(curr, prev)
    idents = [line.split()[1] for line in text.splitlines() if line.startswith("cpumap-enqueue")]
    assert idents == ["0:2", "sum:2", "0:7", "sum:7"]


def test_kthread_and_error_blocks_show_drops(pair):
    curr, prev = pair
    _fill(curr.kthread, [0, 0, 4, 0], 2 * SECOND, dropped=[0, 0, 2, 0])
    _fill(curr.redirect_err, [0, 0, 0, 8], 2 * SECOND, dropped=[0, 0, 0, 8])
    text = Reporter().render(curr, prev)
    assert _rows(text, "cpumap_kthread") == [
        ["cpumap_kthread", "2", "2", "2", "1", "2.000000"],
        ["cpumap_kthread", "total", "2", "2", "1", "2.000000"],
    ]
    assert _rows(text, "redirect_err") == [
        ["redirect_err", "3", "4", "4", "4", "2.000000"],
        ["redirect_err", "total", "4", "4", "4", "2.000000"],
    ]


def test_render_is_idempotent(pair):
    curr, prev = pair
    _fill(prev.rx, [1, 2, 3, 4], 0)
    _fill(curr.rx, [10, 20, 30, 40], SECOND // 2)
    reporter = Reporter()
    first = reporter.render(curr, prev)
    assert reporter.render(curr, prev) == first
    assert Reporter().render(curr, prev) == first
    assert curr.rx.summary().processed == 100
