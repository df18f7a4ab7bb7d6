"""Fixed-capacity circular storage for streaming operators."""

from __future__ import annotations

from typing import Iterable, Iterator, List

import numpy as np

from ..errors import IndexOutOfRangeError, InvalidArgumentError, InvalidStateError, OutOfMemoryError


def _allocate(capacity: int, fill: float) -> np.ndarray:
    try:
        return np.full(capacity, fill, dtype=float)
    except (MemoryError, ValueError) as exc:
        raise OutOfMemoryError(f"cannot allocate ring storage of {capacity} samples") from exc


class RingBuffer:
    """Circular scalar store that overwrites its oldest element once full.

    Storage is a preallocated array indexed through ``start`` (oldest live
    slot) and ``count`` (live elements); every access goes through
    :meth:`push`, :meth:`get` or :meth:`exchange`, so ``count <= capacity``
    always holds.
    """

    def __init__(self, capacity: int, *, fill: float | None = None) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, (int, np.integer)):
            raise InvalidArgumentError(f"capacity must be an integer (got {capacity!r})")
        if capacity <= 0:
            raise InvalidArgumentError(f"capacity must be positive (got {capacity})")
        self._capacity = int(capacity)
        self._data: np.ndarray | None = _allocate(self._capacity, 0.0 if fill is None else float(fill))
        self._start = 0
        # a fill value primes the buffer as if ``capacity`` samples were pushed
        self._count = 0 if fill is None else self._capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def start(self) -> int:
        """Slot holding the oldest live element."""

        return self._start

    @property
    def head(self) -> int:
        """Slot the next push writes to."""

        return (self._start + self._count) % self._capacity

    @property
    def disposed(self) -> bool:
        return self._data is None

    def __len__(self) -> int:
        return self._count

    def is_full(self) -> bool:
        return self._count == self._capacity

    def _storage(self) -> np.ndarray:
        if self._data is None:
            raise InvalidStateError("ring buffer has been disposed")
        return self._data

    def push(self, value: float) -> float | None:
        """Append ``value``; return the evicted oldest element when full."""

        data = self._storage()
        if self._count < self._capacity:
            data[(self._start + self._count) % self._capacity] = value
            self._count += 1
            return None
        evicted = float(data[self._start])
        data[self._start] = value
        self._start = (self._start + 1) % self._capacity
        return evicted

    def exchange(self, value: float) -> float:
        """Pop the oldest element and push ``value`` in its place.

        Only valid on a full buffer; this is the delay-line primitive.
        """

        if not self.is_full():
            raise InvalidStateError(
                f"exchange requires a full buffer ({self._count}/{self._capacity} live)"
            )
        data = self._storage()
        evicted = float(data[self._start])
        data[self._start] = value
        self._start = (self._start + 1) % self._capacity
        return evicted

    def get(self, index: int) -> float:
        """Return the ``index``-th oldest live element."""

        data = self._storage()
        if index < 0 or index >= self._count:
            raise IndexOutOfRangeError(f"index out of range (i={index}, count={self._count})")
        return float(data[(self._start + index) % self._capacity])

    def to_array(self) -> np.ndarray:
        """Live elements oldest-first, as a new array."""

        data = self._storage()
        idx = (self._start + np.arange(self._count)) % self._capacity
        return data[idx]

    def clear(self) -> None:
        self._storage()
        self._start = 0
        self._count = 0

    def dispose(self) -> None:
        """Release storage. Safe to call repeatedly."""

        self._data = None
        self._start = 0
        self._count = 0

    def __iter__(self) -> Iterator[float]:
        return iter(self.to_array().tolist())

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else f"{self._count}/{self._capacity}"
        return f"{type(self).__name__}({state})"


class SlidingWindow:
    """The most recent ``capacity`` samples of a stream, oldest first."""

    def __init__(self, capacity: int) -> None:
        self._ring = RingBuffer(capacity)
        self._pushed = 0

    @property
    def capacity(self) -> int:
        return self._ring.capacity

    @property
    def count(self) -> int:
        """Live samples, capped at capacity."""

        return len(self._ring)

    @property
    def start(self) -> int:
        return self._ring.start

    @property
    def total_pushed(self) -> int:
        return self._pushed

    @property
    def disposed(self) -> bool:
        return self._ring.disposed

    def __len__(self) -> int:
        return self.count

    def push(self, value: float) -> None:
        self._ring.push(float(value))
        self._pushed += 1

    def extend(self, values: Iterable[float]) -> None:
        for value in values:
            self.push(value)

    def get(self, index: int) -> float:
        return self._ring.get(index)

    def recent(self, k: int) -> np.ndarray:
        """The newest ``k`` live samples in chronological order."""

        if k < 0 or k > self.count:
            raise IndexOutOfRangeError(f"cannot take {k} recent samples (count={self.count})")
        values = self._ring.to_array()
        return values[self.count - k :]

    def values(self) -> List[float]:
        return self._ring.to_array().tolist()

    def reset(self) -> None:
        self._ring.clear()
        self._pushed = 0

    def dispose(self) -> None:
        self._ring.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(count={self.count}, capacity={self.capacity})"


__all__ = ["RingBuffer", "SlidingWindow"]
