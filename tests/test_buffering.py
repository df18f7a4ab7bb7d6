from __future__ import annotations

import numpy as np
import pytest

from seqops.errors import IndexOutOfRangeError, InvalidArgumentError, InvalidStateError, OutOfMemoryError
from seqops.streaming.buffering import RingBuffer, SlidingWindow


@pytest.mark.parametrize("extra", [0, 1, 3, 4, 9])
def test_ring_buffer_keeps_newest_values_oldest_first(extra: int) -> None:
    capacity = 4
    ring = RingBuffer(capacity)
    for v in range(capacity + extra):
        ring.push(float(v))

    assert len(ring) == capacity
    assert [ring.get(i) for i in range(capacity)] == [float(extra + i) for i in range(capacity)]


def test_push_reports_evicted_value_only_when_full() -> None:
    ring = RingBuffer(2)
    assert ring.push(1.0) is None
    assert ring.push(2.0) is None
    assert ring.push(3.0) == 1.0
    assert ring.to_array().tolist() == [2.0, 3.0]
    assert ring.start == 1
    assert ring.head == 1


def test_primed_ring_acts_as_delay_line() -> None:
    ring = RingBuffer(2, fill=-1.0)
    assert ring.is_full()
    assert [ring.exchange(x) for x in (1.0, 2.0, 3.0)] == [-1.0, -1.0, 1.0]


def test_exchange_requires_full_buffer() -> None:
    ring = RingBuffer(3)
    ring.push(1.0)
    with pytest.raises(InvalidStateError):
        ring.exchange(2.0)


def test_get_past_live_count_is_out_of_range() -> None:
    ring = RingBuffer(3)
    ring.push(1.0)
    with pytest.raises(IndexOutOfRangeError):
        ring.get(1)
    with pytest.raises(IndexError):
        ring.get(-1)


@pytest.mark.parametrize("capacity", [0, -2])
def test_non_positive_capacity_is_rejected(capacity: int) -> None:
    with pytest.raises(InvalidArgumentError):
        RingBuffer(capacity)


def test_allocation_failure_surfaces_as_out_of_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise MemoryError("no room")

    monkeypatch.setattr(np, "full", fail)
    with pytest.raises(OutOfMemoryError):
        RingBuffer(8)


def test_dispose_is_idempotent_and_blocks_further_use() -> None:
    ring = RingBuffer(2)
    ring.push(1.0)
    ring.dispose()
    ring.dispose()
    assert ring.disposed
    assert len(ring) == 0
    with pytest.raises(InvalidStateError):
        ring.push(2.0)


def test_sliding_window_recent_slice_is_chronological_across_wraparound() -> None:
    window = SlidingWindow(3)
    window.extend([1.0, 2.0, 3.0, 4.0, 5.0])

    assert window.count == 3
    assert window.total_pushed == 5
    assert window.values() == [3.0, 4.0, 5.0]
    assert window.get(0) == 3.0
    assert window.recent(2).tolist() == [4.0, 5.0]
    with pytest.raises(IndexOutOfRangeError):
        window.recent(4)


def test_sliding_window_reset_and_dispose() -> None:
    window = SlidingWindow(2)
    window.extend([1.0, 2.0, 3.0])
    window.reset()
    assert window.count == 0 and window.total_pushed == 0
    window.push(7.0)
    assert window.values() == [7.0]

    window.dispose()
    window.dispose()
    assert window.disposed
