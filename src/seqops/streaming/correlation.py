"""Running Pearson correlation over two synchronized sliding windows.

Both windows must be pushed in lockstep, one sample each per tick. The
engine pairs the newest ``L`` samples of each window by position, not by
timestamp, so a window that receives extra or missing pushes silently
misaligns the pairing.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Iterator, List, Tuple

from ..errors import UNAVAILABLE, InvalidArgumentError
from ..transforms import pearson
from .buffering import SlidingWindow

logger = logging.getLogger(__name__)


def correlate_windows(
    window_a: SlidingWindow,
    window_b: SlidingWindow,
    *,
    min_samples: int = 1,
) -> float:
    """Pearson coefficient of the newest ``min(count_a, count_b)`` aligned samples.

    Returns :data:`~seqops.errors.UNAVAILABLE` (NaN) when fewer than
    ``min_samples`` pairs are live or either slice has zero variance.
    """

    if window_a.capacity != window_b.capacity:
        raise InvalidArgumentError(
            f"window capacities differ ({window_a.capacity} and {window_b.capacity})"
        )
    length = min(window_a.count, window_b.count)
    if length == 0 or length < min_samples:
        return UNAVAILABLE
    return pearson(window_a.recent(length), window_b.recent(length))


class CorrelationEngine:
    """Owns two equally sized windows and reports a coefficient per tick.

    ``min_samples`` defaults to the window capacity, so the coefficient is
    unavailable until both windows are full. Pass ``min_samples=2`` to
    report as soon as a variance can exist.
    """

    def __init__(self, capacity: int, *, min_samples: int | None = None) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidArgumentError(f"window capacity must be a positive integer (got {capacity!r})")
        if min_samples is None:
            min_samples = capacity
        if min_samples <= 0 or min_samples > capacity:
            raise InvalidArgumentError(f"min_samples must be within [1, {capacity}] (got {min_samples})")
        self.capacity = capacity
        self.min_samples = min_samples
        self.window_a = SlidingWindow(capacity)
        self.window_b = SlidingWindow(capacity)
        self.ticks = 0
        self.unavailable = 0

    def update(self, a: float, b: float) -> float:
        """Push one pair in lockstep and return the current coefficient or NaN."""

        self.window_a.push(a)
        self.window_b.push(b)
        self.ticks += 1
        rho = correlate_windows(self.window_a, self.window_b, min_samples=self.min_samples)
        if math.isnan(rho):
            self.unavailable += 1
        return rho

    def coefficient(self) -> float:
        """Coefficient for the current window contents without pushing."""

        return correlate_windows(self.window_a, self.window_b, min_samples=self.min_samples)

    def run(self, pairs: Iterable[Tuple[float, float]]) -> Iterator[float]:
        for a, b in pairs:
            yield self.update(a, b)

    def reset(self) -> None:
        self.window_a.reset()
        self.window_b.reset()
        self.ticks = 0
        self.unavailable = 0

    def dispose(self) -> None:
        self.window_a.dispose()
        self.window_b.dispose()
        logger.debug("correlation engine disposed after %d ticks (%d unavailable)", self.ticks, self.unavailable)

    def __enter__(self) -> "CorrelationEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


def stream_correlation(
    pairs: Iterable[Tuple[float, float]],
    window: int,
    *,
    min_samples: int | None = None,
) -> List[float]:
    """Coefficient per pair for a finite list of pairs."""

    with CorrelationEngine(window, min_samples=min_samples) as engine:
        return list(engine.run(pairs))


__all__ = ["correlate_windows", "CorrelationEngine", "stream_correlation"]
