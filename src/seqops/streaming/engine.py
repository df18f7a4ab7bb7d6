"""Step engine driving one operator over a stream of samples."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List

from ..errors import InvalidArgumentError, InvalidStateError
from ..operators import OperatorKind, OperatorSpec
from .state import OperatorState, build_state

logger = logging.getLogger(__name__)


class EngineStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one ``step`` call."""

    has_output: bool
    value: float = 0.0

    def __bool__(self) -> bool:
        return self.has_output


NO_OUTPUT = StepResult(has_output=False)


class StepEngine:
    """Runs ``init -> step* -> dispose`` for a single streamable operator.

    Each :meth:`step` consumes zero or one input sample and produces zero or
    one output sample. Operators that can owe outputs without input
    (pad-front, upsample) must be drained until no output remains before the
    next input is accepted; :meth:`drain` does exactly that and
    :meth:`process` pairs a feed with its drain.

    Usage::

        with StepEngine(OperatorSpec(OperatorKind.UPSAMPLE, 2)) as engine:
            for x in samples:
                sink.extend(engine.process(x))
    """

    def __init__(self, spec: OperatorSpec) -> None:
        if not isinstance(spec, OperatorSpec):
            raise InvalidArgumentError(f"StepEngine requires an OperatorSpec (got {type(spec).__name__})")
        self.spec = spec
        self._state: OperatorState | None = None
        self._status = EngineStatus.UNINITIALIZED
        self.inputs = 0
        self.outputs = 0

    @classmethod
    def open(cls, spec: OperatorSpec) -> "StepEngine":
        """Construct and initialize in one call."""

        engine = cls(spec)
        engine.init()
        return engine

    @property
    def kind(self) -> OperatorKind:
        return self.spec.kind

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def active(self) -> bool:
        return self._status is EngineStatus.ACTIVE

    @property
    def state(self) -> OperatorState:
        return self._require_active()

    @property
    def pending(self) -> int:
        """Outputs owed before the next input may be fed."""

        return self._require_active().pending

    def init(self) -> "StepEngine":
        """Allocate operator state and enter the active state.

        Raises :class:`UnsupportedOperationError` for operators without a
        streaming form, :class:`InvalidArgumentError` for bad factors and
        :class:`OutOfMemoryError` when the delay line cannot be allocated.
        """

        if self._status is EngineStatus.ACTIVE:
            raise InvalidStateError("engine is already initialized")
        if self._status is EngineStatus.DISPOSED:
            raise InvalidStateError("engine has been disposed")
        self._state = build_state(self.spec)
        self._status = EngineStatus.ACTIVE
        logger.debug("step engine active: %s", self.spec.describe())
        return self

    def _require_active(self) -> OperatorState:
        if self._status is not EngineStatus.ACTIVE or self._state is None:
            raise InvalidStateError(f"step requires an active engine (status={self._status.value})")
        if self._state.kind is not self.spec.kind:
            raise InvalidStateError(
                f"state variant {self._state.kind.value} does not match operator {self.spec.kind.value}"
            )
        return self._state

    def step(self, has_input: bool, x: float = 0.0) -> StepResult:
        """Advance by one call; ``has_input=False`` is a flush call."""

        state = self._require_active()
        if has_input:
            y = state.feed(float(x))
            self.inputs += 1
        else:
            y = state.flush()
        if y is None:
            return NO_OUTPUT
        self.outputs += 1
        return StepResult(has_output=True, value=y)

    def feed(self, x: float) -> float | None:
        """Feed one sample; return its output or ``None``."""

        result = self.step(True, x)
        return result.value if result else None

    def drain(self) -> List[float]:
        """Flush until a call produces no output and return what was emitted."""

        out: list[float] = []
        while True:
            result = self.step(False)
            if not result:
                return out
            out.append(result.value)

    def process(self, x: float) -> List[float]:
        """Feed ``x`` then drain; every output owed for this input, in order."""

        first = self.feed(x)
        out = [] if first is None else [first]
        out.extend(self.drain())
        return out

    def run(self, samples: Iterable[float]) -> Iterator[float]:
        """Stream ``samples`` through the operator, yielding outputs as produced.

        Drains once before the first input (pad-front emits its zeros up
        front), after every input, and once more when the input ends.
        """

        yield from self.drain()
        for x in samples:
            yield from self.process(x)
        yield from self.drain()

    def transform(self, samples: Iterable[float]) -> List[float]:
        return list(self.run(samples))

    def dispose(self) -> None:
        """Release operator state; terminal and idempotent."""

        if self._state is not None:
            self._state.release()
            self._state = None
        if self._status is not EngineStatus.DISPOSED:
            logger.debug("step engine disposed: %s (in=%d out=%d)", self.spec.kind.value, self.inputs, self.outputs)
        self._status = EngineStatus.DISPOSED

    def __enter__(self) -> "StepEngine":
        if self._status is EngineStatus.UNINITIALIZED:
            self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec.kind.value}, status={self._status.value})"


def stream_transform(spec: OperatorSpec, samples: Iterable[float]) -> List[float]:
    """Run a finite sequence through a fresh engine."""

    with StepEngine(spec) as engine:
        return engine.transform(samples)


__all__ = ["EngineStatus", "StepResult", "NO_OUTPUT", "StepEngine", "stream_transform"]
