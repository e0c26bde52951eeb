import numpy as np
import pytest

from xdp_cpumap.core.records import SnapshotAllocator
from xdp_cpumap.core.store import SnapshotStore


@pytest.fixture
def store():
    allocator = SnapshotAllocator(num_cpus=4, max_targets=2)
    return SnapshotStore(allocator.allocate(), allocator.allocate())


def test_rotate_swaps_references(store):
    current, previous = store.current, store.previous
    store.rotate()
    assert store.current is previous
    assert store.previous is current
    store.rotate()
    assert store.current is current
    assert store.previous is previous


def test_rotate_keeps_contents(store):
    store.current.rx.store(np.array([[5, 1]] * 4, dtype=np.uint64), timestamp=99)
    before = store.current.rx.per_cpu.tobytes()
    buffer = store.current.rx.per_cpu

    store.rotate()

    assert store.previous.rx.per_cpu is buffer
    assert store.previous.rx.per_cpu.tobytes() == before
    assert store.previous.rx.timestamp == 99


def test_store_requires_two_buffers():
    snapshot = SnapshotAllocator(num_cpus=1, max_targets=1).allocate()
    with pytest.raises(ValueError):
        SnapshotStore(snapshot, snapshot)


def test_close_releases_buffers(store):
    store.close()
    assert store.closed
    with pytest.raises(RuntimeError):
        store.current
