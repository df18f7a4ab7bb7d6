"""Orchestration shared by the command line and the HTTP service.

The offline/streaming choice is driven solely by the capability verdict:
finite runs always go through the offline transforms, stream runs go
through :class:`~seqops.streaming.service.StreamingService` and are
rejected up front when the operator is not realizable online.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

from .config import RunConfig
from .errors import InvalidArgumentError
from .logging_utils import log_event
from .operators import OperatorSpec, parse_sample
from .samples import read_finite
from .streaming.capability import is_streamable
from .streaming.correlation import CorrelationEngine
from .streaming.service import StreamingService
from .streaming.sources import PairSource, build_source
from .transforms import apply_binary, apply_operator

logger = logging.getLogger(__name__)

Sink = Callable[[float], None]


def run_finite(spec: OperatorSpec, samples: Sequence[float]) -> Dict[str, Any]:
    """Apply ``spec`` to a whole finite sequence."""

    outputs = apply_operator(spec, samples)
    online = is_streamable(spec.kind, unbounded=False)
    log_event(
        logger,
        "finite_transform_complete",
        **spec.describe(),
        inputs=len(samples),
        outputs=len(outputs),
    )
    return {**spec.describe(), "online": online, "outputs": outputs}


def run_stream(
    spec: OperatorSpec,
    source: Mapping[str, Any] | Callable[[], Iterable[float]] | None,
    *,
    unbounded: bool = True,
    sink: Sink | None = None,
    max_samples: int | None = None,
) -> Dict[str, Any]:
    """Stream a source through ``spec``.

    Outputs go to ``sink`` as they are produced; without a sink they are
    collected and returned under ``outputs``. Raises
    :class:`UnsupportedOperationError` when the operator is not realizable
    for the requested horizon.
    """

    service = StreamingService(spec, build_source(source), sink=sink, unbounded=unbounded)
    summary = service.run(max_samples=max_samples)
    result = summary.as_dict()
    if sink is None:
        result["outputs"] = service.emitted
    return result


def run_corr_window(
    pairs: Iterable[Tuple[float, float]],
    window: int,
    *,
    min_samples: int | None = None,
    sink: Sink | None = None,
) -> Dict[str, Any]:
    """Windowed Pearson coefficient per ``(a, b)`` pair; NaN when unavailable."""

    coefficients: list[float] = []
    emit = sink or coefficients.append
    with CorrelationEngine(window, min_samples=min_samples) as engine:
        for rho in engine.run(pairs):
            emit(rho)
        ticks, unavailable = engine.ticks, engine.unavailable
    log_event(logger, "corr_window_complete", window=window, ticks=ticks, unavailable=unavailable)
    result: Dict[str, Any] = {"window": window, "ticks": ticks, "unavailable": unavailable}
    if sink is None:
        result["coefficients"] = coefficients
    return result


def run_binary(name: str, a: Sequence[float], b: Sequence[float]) -> Dict[str, Any]:
    outputs = apply_binary(name, a, b)
    log_event(logger, "binary_operation_complete", operation=name, lengths=[len(a), len(b)], outputs=len(outputs))
    return {"operation": name, "length": len(outputs), "outputs": outputs}


def _finite_samples(source: Mapping[str, Any] | None) -> List[float]:
    if source is None or str(source.get("type", "stdin")).lower() in {"stdin", "-"}:
        return read_finite(sys.stdin)
    return list(build_source(source)())


def _pairs(source: Mapping[str, Any] | None) -> Iterator[Tuple[float, float]]:
    source_type = "stdin" if source is None else str(source.get("type", "stdin")).lower()
    if source_type in {"stdin", "-"}:
        yield from PairSource(sys.stdin)
    elif source_type == "file":
        with Path(str(source["path"])).open("r", encoding="utf-8") as handle:  # type: ignore[index]
            yield from PairSource(handle)
    elif source_type == "values":
        for index, pair in enumerate(source["values"]):  # type: ignore[index]
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise InvalidArgumentError(f"pair #{index} must be a two-element list (got {pair!r})")
            yield parse_sample(pair[0], name=f"pair #{index} a"), parse_sample(pair[1], name=f"pair #{index} b")
    else:
        raise InvalidArgumentError(f"corr-window cannot read pairs from a '{source_type}' source")


def run_config(run: RunConfig, *, sink: Sink | None = None) -> Dict[str, Any]:
    """Execute a validated :class:`RunConfig`."""

    for warning in run.warnings:
        logger.warning(warning)
    if run.mode == "corr-window":
        if run.window is None:
            raise InvalidArgumentError("corr-window run configuration has no window")
        return run_corr_window(_pairs(run.source), run.window, min_samples=run.min_samples, sink=sink)
    if run.spec is None:
        raise InvalidArgumentError(f"{run.mode} run configuration has no operator")
    if run.mode == "stream":
        return run_stream(run.spec, run.source, unbounded=run.unbounded, sink=sink)
    return run_finite(run.spec, _finite_samples(run.source))


__all__ = ["run_finite", "run_stream", "run_corr_window", "run_binary", "run_config"]
