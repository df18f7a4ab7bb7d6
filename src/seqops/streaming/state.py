"""Per-operator auxiliary state for one-sample-at-a-time processing.

Each streamable operator gets its own variant holding exactly the state it
needs. ``feed`` consumes one input sample, ``flush`` asks for one queued
output without input; both return ``None`` when nothing is emitted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict

from ..errors import InvalidArgumentError, InvalidStateError, UnsupportedOperationError
from ..operators import OperatorKind, OperatorSpec
from .buffering import RingBuffer


@dataclass
class OperatorState(ABC):
    """Base variant; ``kind`` tags which operator the state belongs to."""

    kind: ClassVar[OperatorKind]

    @abstractmethod
    def feed(self, x: float) -> float | None:
        """Consume one input sample."""

    def flush(self) -> float | None:
        """Emit one queued output, if any."""

        return None

    @property
    def pending(self) -> int:
        """Outputs owed before the next input may be accepted."""

        return 0

    def release(self) -> None:
        """Drop any owned storage."""

    def _refuse_input_while_pending(self) -> None:
        if self.pending:
            raise InvalidStateError(
                f"{self.kind.value}: input not allowed while {self.pending} queued output(s) remain; drain first"
            )


@dataclass
class PadFrontState(OperatorState):
    kind: ClassVar[OperatorKind] = OperatorKind.PAD_FRONT

    remaining: int = 0

    @property
    def pending(self) -> int:
        return self.remaining

    def feed(self, x: float) -> float | None:
        self._refuse_input_while_pending()
        return x

    def flush(self) -> float | None:
        if self.remaining <= 0:
            return None
        self.remaining -= 1
        return 0.0


@dataclass
class DelayState(OperatorState):
    """Delay line: a ring primed with ``amount`` copies of ``fill``."""

    kind: ClassVar[OperatorKind] = OperatorKind.DELAY

    amount: int = 0
    fill: float = 0.0
    ring: RingBuffer | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.ring is None and self.amount > 0:
            self.ring = RingBuffer(self.amount, fill=self.fill)

    def feed(self, x: float) -> float | None:
        if self.ring is None:
            return x
        return self.ring.exchange(x)

    def release(self) -> None:
        if self.ring is not None:
            self.ring.dispose()
            self.ring = None


@dataclass
class UpsampleState(OperatorState):
    kind: ClassVar[OperatorKind] = OperatorKind.UPSAMPLE

    factor: int = 1
    remaining: int = 0

    @property
    def pending(self) -> int:
        return self.remaining

    def feed(self, x: float) -> float | None:
        self._refuse_input_while_pending()
        self.remaining = self.factor - 1
        return x

    def flush(self) -> float | None:
        if self.remaining <= 0:
            return None
        self.remaining -= 1
        return 0.0


@dataclass
class DownsampleState(OperatorState):
    kind: ClassVar[OperatorKind] = OperatorKind.DOWNSAMPLE

    factor: int = 1
    # phase within the current group of ``factor`` inputs, kept below factor
    counter: int = 0

    def feed(self, x: float) -> float | None:
        keep = self.counter == 0
        self.counter = (self.counter + 1) % self.factor
        return x if keep else None


@dataclass
class DiffState(OperatorState):
    kind: ClassVar[OperatorKind] = OperatorKind.DIFF

    last: float | None = None

    def feed(self, x: float) -> float | None:
        y = x if self.last is None else x - self.last
        self.last = x
        return y


@dataclass
class CumsumState(OperatorState):
    kind: ClassVar[OperatorKind] = OperatorKind.CUMSUM

    acc: float = 0.0

    def feed(self, x: float) -> float | None:
        self.acc += x
        return self.acc


def _positive_factor(spec: OperatorSpec) -> int:
    if spec.amount <= 0:
        raise InvalidArgumentError(f"{spec.kind.value} factor must be > 0 (got {spec.amount})")
    return spec.amount


_BUILDERS: Dict[OperatorKind, Callable[[OperatorSpec], OperatorState]] = {
    OperatorKind.PAD_FRONT: lambda spec: PadFrontState(remaining=spec.amount),
    OperatorKind.DELAY: lambda spec: DelayState(amount=spec.amount, fill=spec.fill),
    OperatorKind.UPSAMPLE: lambda spec: UpsampleState(factor=_positive_factor(spec)),
    OperatorKind.DOWNSAMPLE: lambda spec: DownsampleState(factor=_positive_factor(spec)),
    OperatorKind.DIFF: lambda spec: DiffState(),
    OperatorKind.CUMSUM: lambda spec: CumsumState(),
}


def build_state(spec: OperatorSpec) -> OperatorState:
    """Construct the state variant for ``spec``.

    Raises :class:`UnsupportedOperationError` for operators that need the
    whole sequence (pad-back, advance, reverse).
    """

    builder = _BUILDERS.get(spec.kind)
    if builder is None:
        raise UnsupportedOperationError(
            f"{spec.kind.value} has no streaming realization; use the offline transform"
        )
    return builder(spec)


__all__ = [
    "OperatorState",
    "PadFrontState",
    "DelayState",
    "UpsampleState",
    "DownsampleState",
    "DiffState",
    "CumsumState",
    "build_state",
]
