import numpy as np
import pytest

from xdp_cpumap.core.records import DataPoint, Record, SnapshotAllocator, StatsSnapshot
from xdp_cpumap.exceptions import AllocationError


def test_allocate_shapes():
    """Every record group is sized to the CPU count, enqueue to the target count."""
    snapshot = SnapshotAllocator(num_cpus=4, max_targets=12).allocate()
    assert isinstance(snapshot, StatsSnapshot)
    assert snapshot.num_cpus == 4
    assert snapshot.max_targets == 12
    for _, record in snapshot.records():
        assert record.per_cpu.shape == (4, 2)
        assert record.per_cpu.dtype == np.uint64
        assert record.timestamp == 0
        assert record.summary() == DataPoint(0, 0)


def test_allocate_returns_independent_buffers():
    allocator = SnapshotAllocator(num_cpus=2, max_targets=3)
    first = allocator.allocate()
    second = allocator.allocate()
    first.rx.per_cpu[0, 0] = 7
    assert second.rx.per_cpu[0, 0] == 0
    assert first.enqueue[0] is not first.enqueue[1]


def test_allocator_rejects_empty_shapes():
    with pytest.raises(ValueError):
        SnapshotAllocator(num_cpus=0, max_targets=12)
    with pytest.raises(ValueError):
        SnapshotAllocator(num_cpus=4, max_targets=0)


def test_allocation_failure_is_fatal_error(monkeypatch):
    def _no_memory(num_cpus):
        raise MemoryError

    monkeypatch.setattr(Record, "zeros", classmethod(lambda cls, n: _no_memory(n)))
    with pytest.raises(AllocationError):
        SnapshotAllocator(num_cpus=4, max_targets=12).allocate()


def test_store_sums_per_cpu_values_in_place():
    record = Record.zeros(3)
    per_cpu_buffer = record.per_cpu
    record.store(np.array([[1, 10], [2, 20], [3, 30]], dtype=np.uint64), timestamp=42)
    assert record.per_cpu is per_cpu_buffer
    assert record.timestamp == 42
    assert record.summary() == DataPoint(6, 60)
    assert record.cpu(1) == DataPoint(2, 20)


def test_store_total_keeps_u64_semantics():
    record = Record.zeros(2)
    big = (1 << 64) - 1
    record.store(np.array([[big, 0], [2, 0]], dtype=np.uint64), timestamp=1)
    assert record.summary().processed == 1
