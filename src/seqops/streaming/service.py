"""Streaming service wiring a sample source through a step engine into a sink."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Tuple

from ..errors import UnsupportedOperationError
from ..logging_utils import log_event
from ..operators import OperatorSpec
from ..transforms import apply_operator
from .capability import CAUSAL_BOUNDED, is_streamable
from .engine import StepEngine
from .sources import build_source

logger = logging.getLogger(__name__)

Sink = Callable[[float], None]


@dataclass
class StreamSummary:
    operator: str
    online: bool
    consumed: int
    produced: int
    stopped_early: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "operator": self.operator,
            "online": self.online,
            "consumed": self.consumed,
            "produced": self.produced,
            "stopped_early": self.stopped_early,
        }


class StreamingService:
    """Runs one operator over a source, emitting every output to ``sink``.

    The sink is called once per produced sample, in emission order, which is
    not necessarily once per input sample.
    """

    def __init__(
        self,
        spec: OperatorSpec,
        source: Callable[[], Iterable[float]],
        *,
        sink: Sink | None = None,
        unbounded: bool = True,
    ) -> None:
        self.spec = spec
        self.source = source
        self.unbounded = unbounded
        self.emitted: List[float] = []
        self.sink: Sink = sink or self.emitted.append
        self._running = False
        self._stopped_early = False

    @classmethod
    def create_from_config(
        cls,
        cfg: Mapping[str, Any],
        *,
        sink: Sink | None = None,
    ) -> "StreamingService":
        spec = OperatorSpec.from_mapping(cfg)
        source = build_source(cfg.get("source"))
        unbounded = bool(cfg.get("unbounded", True))
        return cls(spec, source, sink=sink, unbounded=unbounded)

    @property
    def online(self) -> bool:
        return is_streamable(self.spec.kind, self.unbounded)

    def _emit(self, values: Iterable[float]) -> int:
        count = 0
        for value in values:
            self.sink(value)
            count += 1
        return count

    def run(self, *, max_samples: int | None = None) -> StreamSummary:
        """Consume the source until it ends, ``max_samples`` inputs, or :meth:`stop`."""

        if not self.online:
            logger.warning("Rejecting stream: %s is not realizable online", self.spec.kind.value)
            raise UnsupportedOperationError(
                f"{self.spec.kind.value} cannot run on {'unbounded' if self.unbounded else 'bounded'} streaming input"
            )

        self._running = True
        log_event(logger, "stream_started", **self.spec.describe(), unbounded=self.unbounded)
        try:
            if self.spec.kind in CAUSAL_BOUNDED:
                inputs, outputs, stopped_early = self._run_engine(max_samples)
            else:
                inputs, outputs, stopped_early = self._run_buffered(max_samples)
        finally:
            self._running = False

        summary = StreamSummary(
            operator=self.spec.kind.value,
            online=True,
            consumed=inputs,
            produced=outputs,
            stopped_early=stopped_early,
        )
        log_event(logger, "stream_finished", **summary.as_dict())
        return summary

    def _inputs(self, max_samples: int | None) -> Iterator[float]:
        samples = iter(self.source())
        count = 0
        while self._running and (max_samples is None or count < max_samples):
            x = next(samples, None)
            if x is None:
                return
            yield x
            count += 1
        # hitting max_samples only counts as early when the source had more
        self._stopped_early = not self._running or next(samples, None) is not None

    def _run_engine(self, max_samples: int | None) -> Tuple[int, int, bool]:
        self._stopped_early = False
        outputs = 0
        with StepEngine(self.spec) as engine:
            outputs += self._emit(engine.drain())
            for x in self._inputs(max_samples):
                outputs += self._emit(engine.process(x))
            outputs += self._emit(engine.drain())
            return engine.inputs, outputs, self._stopped_early

    def _run_buffered(self, max_samples: int | None) -> Tuple[int, int, bool]:
        # finite input only: hold everything until the source ends
        self._stopped_early = False
        buffered = list(self._inputs(max_samples))
        logger.debug("Buffered %d samples for %s", len(buffered), self.spec.kind.value)
        return len(buffered), self._emit(apply_operator(self.spec, buffered)), self._stopped_early

    def stop(self) -> None:
        self._running = False


__all__ = ["StreamSummary", "StreamingService"]
