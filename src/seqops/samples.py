"""Reading sample sequences and formatting results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, List, TextIO, Tuple

import pandas as pd

from .errors import InvalidArgumentError
from .operators import parse_sample, parse_size


def _tokens(source: str | TextIO | Iterable[str]) -> Iterator[str]:
    lines = source.splitlines() if isinstance(source, str) else source
    for line in lines:
        yield from line.split()


def _read_sequence(tokens: Iterator[str], label: str) -> List[float]:
    header = next(tokens, None)
    if header is None:
        raise InvalidArgumentError(f"Failed to read {label} length")
    length = parse_size(header, name=f"{label} length")
    values: list[float] = []
    for index in range(length):
        token = next(tokens, None)
        if token is None:
            raise InvalidArgumentError(f"Failed to read {label} element at index {index} (expected {length})")
        values.append(parse_sample(token, name=f"{label} element {index}"))
    return values


def read_finite(source: str | TextIO | Iterable[str]) -> List[float]:
    """Parse ``N v0 ... vN-1``; extra trailing tokens are ignored."""

    return _read_sequence(_tokens(source), "sequence")


def read_two_sequences(source: str | TextIO | Iterable[str]) -> Tuple[List[float], List[float]]:
    """Parse two length-prefixed sequences back to back."""

    tokens = _tokens(source)
    a = _read_sequence(tokens, "first sequence")
    b = _read_sequence(tokens, "second sequence")
    return a, b


def ingest_samples(path: str | Path, value_column: str | None = None) -> List[float]:
    """Load samples from a CSV, JSON list, JSONL or plain ``N v...`` text file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        values = []
        for number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
            if not line.strip():
                continue
            obj = json.loads(line)
            if isinstance(obj, dict) and value_column:
                obj = obj.get(value_column)
            if isinstance(obj, bool) or not isinstance(obj, (int, float)):
                raise InvalidArgumentError(f"{path}:{number}: expected a number (got {obj!r})")
            values.append(float(obj))
        return values
    if suffix == ".json":
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(loaded, list):
            raise InvalidArgumentError("JSON sample file must contain a list of numbers")
        for index, x in enumerate(loaded):
            if isinstance(x, bool) or not isinstance(x, (int, float)):
                raise InvalidArgumentError(f"{path}: element {index} is not a number (got {x!r})")
        return [float(x) for x in loaded]
    if suffix == ".csv":
        df = pd.read_csv(path)
        if value_column is None:
            value_column = df.columns[0]
        elif value_column not in df.columns:
            raise InvalidArgumentError(f"Column '{value_column}' not found in {path} (have {list(df.columns)})")
        return df[value_column].astype(float).tolist()

    with path.open("r", encoding="utf-8") as handle:
        return read_finite(handle)


def format_sample(value: float) -> str:
    return "%.10g" % value


def format_samples(values: Iterable[float]) -> str:
    """Space separated, ``%.10g`` each; NaN renders as ``nan``."""

    return " ".join(format_sample(v) for v in values)


def format_sequence(values: List[float]) -> str:
    """Length line followed by the values line."""

    return f"{len(values)}\n{format_samples(values)}"


__all__ = [
    "read_finite",
    "read_two_sequences",
    "ingest_samples",
    "format_sample",
    "format_samples",
    "format_sequence",
]
