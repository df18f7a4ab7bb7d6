"""Sample sources feeding the streaming engines."""

from __future__ import annotations

import itertools
import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, Iterator, Mapping, Sequence, TextIO, Tuple

import numpy as np

from ..errors import InvalidArgumentError
from ..operators import parse_sample

logger = logging.getLogger(__name__)

END_TOKEN = "END"


def is_end_token(token: str) -> bool:
    return token.strip().upper() == END_TOKEN


def iter_tokens(lines: Iterable[str]) -> Iterator[str]:
    """Whitespace-separated tokens across ``lines``, stopping at ``END``."""

    for line in lines:
        for token in line.split():
            if is_end_token(token):
                return
            yield token


class StreamingSource:
    """Iterable source contract."""

    def __iter__(self) -> Iterator[float]:  # pragma: no cover - interface only
        raise NotImplementedError


class ValuesSource(StreamingSource):
    """A finite, already materialized sequence."""

    def __init__(self, values: Sequence[float]) -> None:
        self.values = [float(v) for v in values]

    def __iter__(self) -> Iterator[float]:
        return iter(self.values)


class TokenSource(StreamingSource):
    """Numeric tokens from a text stream, terminated by ``END`` or end of input."""

    def __init__(self, stream: TextIO | Iterable[str]) -> None:
        self.stream = stream

    def __iter__(self) -> Iterator[float]:
        for position, token in enumerate(iter_tokens(self.stream)):
            yield parse_sample(token, name=f"stream token #{position}")


class FileSource(TokenSource):
    """Token source reading from a file on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(())

    def __iter__(self) -> Iterator[float]:
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        logger.debug("Reading stream samples from %s", self.path)
        with self.path.open("r", encoding="utf-8") as handle:
            self.stream = handle
            yield from super().__iter__()


class PairSource:
    """``a b`` sample pairs from a text stream, for windowed correlation."""

    def __init__(self, stream: TextIO | Iterable[str]) -> None:
        self.stream = stream

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        tokens = iter_tokens(self.stream)
        for index in itertools.count():
            pair = list(itertools.islice(tokens, 2))
            if not pair:
                return
            if len(pair) == 1:
                raise InvalidArgumentError(f"pair #{index} is missing its second sample")
            yield parse_sample(pair[0], name=f"pair #{index} a"), parse_sample(pair[1], name=f"pair #{index} b")


class SimulatedSource(StreamingSource):
    """Gaussian noise around an optional sinusoid; unbounded unless ``count`` is set."""

    def __init__(
        self,
        count: int | None = None,
        *,
        amplitude: float = 1.0,
        period: int = 32,
        noise_std: float = 0.1,
        seed: int | None = None,
    ) -> None:
        if count is not None and count < 0:
            raise InvalidArgumentError(f"count must be non-negative (got {count})")
        if period <= 0:
            raise InvalidArgumentError(f"period must be positive (got {period})")
        self.count = count
        self.amplitude = amplitude
        self.period = period
        self.noise_std = noise_std
        self._rng = np.random.default_rng(seed)

    def __iter__(self) -> Iterator[float]:
        indices = itertools.count() if self.count is None else range(self.count)
        for n in indices:
            base = self.amplitude * np.sin(2 * np.pi * n / self.period)
            yield float(base + self._rng.normal(scale=self.noise_std))


def build_source(cfg: Mapping[str, object] | Callable[[], Iterable[float]] | None) -> Callable[[], Iterable[float]]:
    """Factory for sample sources based on a config mapping."""

    if cfg is None:
        return lambda: TokenSource(sys.stdin)

    if callable(cfg):
        return cfg  # type: ignore[return-value]

    source_type = str(cfg.get("type", "stdin")).lower()
    if source_type in {"stdin", "-"}:
        return lambda: TokenSource(sys.stdin)
    if source_type == "values":
        values = cfg.get("values")
        if not isinstance(values, (list, tuple)):
            raise InvalidArgumentError("values source requires a 'values' list")
        return lambda: ValuesSource(values)  # type: ignore[arg-type]
    if source_type == "file":
        path = cfg.get("path")
        if not path:
            raise InvalidArgumentError("file source requires 'path'")
        return lambda: FileSource(str(path))
    if source_type in {"simulated", "demo"}:
        count = cfg.get("count")
        seed = cfg.get("seed")
        return lambda: SimulatedSource(
            count=int(count) if count is not None else None,  # type: ignore[arg-type]
            amplitude=float(cfg.get("amplitude", 1.0)),  # type: ignore[arg-type]
            period=int(cfg.get("period", 32)),  # type: ignore[arg-type]
            noise_std=float(cfg.get("noise_std", 0.1)),  # type: ignore[arg-type]
            seed=int(seed) if seed is not None else None,  # type: ignore[arg-type]
        )

    raise InvalidArgumentError(f"Unknown source type '{source_type}'")


__all__ = [
    "END_TOKEN",
    "is_end_token",
    "iter_tokens",
    "StreamingSource",
    "ValuesSource",
    "TokenSource",
    "FileSource",
    "PairSource",
    "SimulatedSource",
    "build_source",
]
