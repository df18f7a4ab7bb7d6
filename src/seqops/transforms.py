"""Offline whole-sequence transforms.

Every function takes a finite sequence, never mutates it, and returns a new
list of floats. The single-sequence operators here are the reference the
streaming engine must reproduce sample for sample.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence

import numpy as np
from scipy import signal

from .errors import InvalidArgumentError
from .operators import OperatorKind, OperatorSpec


def _as_array(samples: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.array(samples, dtype=float, copy=True)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"Expected a one-dimensional sequence (got shape {arr.shape})")
    return arr


def pad_front(samples: Sequence[float], zeros: int) -> List[float]:
    """Prepend ``zeros`` zero samples."""

    arr = _as_array(samples)
    return np.concatenate([np.zeros(int(zeros)), arr]).tolist()


def pad_back(samples: Sequence[float], zeros: int) -> List[float]:
    """Append ``zeros`` zero samples."""

    arr = _as_array(samples)
    return np.concatenate([arr, np.zeros(int(zeros))]).tolist()


def delay(samples: Sequence[float], amount: int, fill: float = 0.0) -> List[float]:
    """y[n] = x[n - amount]; positions before the start take ``fill``."""

    arr = _as_array(samples)
    out = np.full(arr.size, float(fill))
    if amount < arr.size:
        out[amount:] = arr[: arr.size - amount]
    return out.tolist()


def advance(samples: Sequence[float], amount: int, fill: float = 0.0) -> List[float]:
    """y[n] = x[n + amount]; positions past the end take ``fill``."""

    arr = _as_array(samples)
    out = np.full(arr.size, float(fill))
    if amount < arr.size:
        out[: arr.size - amount] = arr[amount:]
    return out.tolist()


def reverse(samples: Sequence[float]) -> List[float]:
    return _as_array(samples)[::-1].tolist()


def upsample(samples: Sequence[float], factor: int) -> List[float]:
    """Insert ``factor - 1`` zeros after every sample."""

    if factor <= 0:
        raise InvalidArgumentError(f"upsample factor must be > 0 (got {factor})")
    arr = _as_array(samples)
    out = np.zeros(arr.size * factor)
    out[::factor] = arr
    return out.tolist()


def downsample(samples: Sequence[float], factor: int) -> List[float]:
    """Keep x[0], x[factor], x[2*factor], ... for every index inside the input."""

    if factor <= 0:
        raise InvalidArgumentError(f"downsample factor must be > 0 (got {factor})")
    return _as_array(samples)[::factor].tolist()


def diff(samples: Sequence[float]) -> List[float]:
    """First difference with x[-1] taken as zero."""

    arr = _as_array(samples)
    if arr.size == 0:
        return []
    out = np.empty_like(arr)
    out[0] = arr[0]
    out[1:] = arr[1:] - arr[:-1]
    return out.tolist()


def cumsum(samples: Sequence[float]) -> List[float]:
    """Running prefix sum, accumulated left to right."""

    return np.cumsum(_as_array(samples)).tolist()


_OPERATORS: Dict[OperatorKind, Callable[[np.ndarray, OperatorSpec], List[float]]] = {
    OperatorKind.PAD_FRONT: lambda x, spec: pad_front(x, spec.amount),
    OperatorKind.PAD_BACK: lambda x, spec: pad_back(x, spec.amount),
    OperatorKind.DELAY: lambda x, spec: delay(x, spec.amount, spec.fill),
    OperatorKind.ADVANCE: lambda x, spec: advance(x, spec.amount, spec.fill),
    OperatorKind.REVERSE: lambda x, spec: reverse(x),
    OperatorKind.UPSAMPLE: lambda x, spec: upsample(x, spec.amount),
    OperatorKind.DOWNSAMPLE: lambda x, spec: downsample(x, spec.amount),
    OperatorKind.DIFF: lambda x, spec: diff(x),
    OperatorKind.CUMSUM: lambda x, spec: cumsum(x),
}


def apply_operator(spec: OperatorSpec, samples: Sequence[float]) -> List[float]:
    """Run ``spec`` over a whole finite sequence."""

    return _OPERATORS[spec.kind](_as_array(samples), spec.validate())


def add(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Point-wise sum over the shorter of the two lengths."""

    x, y = _as_array(a), _as_array(b)
    n = min(x.size, y.size)
    return (x[:n] + y[:n]).tolist()


def mul(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Point-wise product over the shorter of the two lengths."""

    x, y = _as_array(a), _as_array(b)
    n = min(x.size, y.size)
    return (x[:n] * y[:n]).tolist()


def conv_linear(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Full linear convolution, length La + Lb - 1 (empty if either is empty)."""

    x, y = _as_array(a), _as_array(b)
    if x.size == 0 or y.size == 0:
        return []
    return signal.convolve(x, y, mode="full", method="direct").tolist()


def conv_circular(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """y[n] = sum_k a[k] * b[(n - k) mod N]; both inputs must share a length N > 0."""

    x, y = _as_array(a), _as_array(b)
    if x.size == 0 or y.size == 0:
        raise InvalidArgumentError("circular convolution requires non-empty inputs")
    if x.size != y.size:
        raise InvalidArgumentError(
            f"circular convolution requires equal lengths (got {x.size} and {y.size})"
        )
    n = np.arange(x.size)
    idx = (n[:, None] - n[None, :]) % x.size
    return (y[idx] * x[None, :]).sum(axis=1).tolist()


def corr_cross(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Cross-correlation r[lag] = sum_k a[k] * b[k + lag].

    The output has length La + Lb - 1 and index ``n`` holds lag ``n - (La - 1)``.
    """

    x, y = _as_array(a), _as_array(b)
    if x.size == 0 or y.size == 0:
        return []
    return signal.correlate(y, x, mode="full", method="direct").tolist()


BINARY_OPERATIONS: Dict[str, Callable[[Sequence[float], Sequence[float]], List[float]]] = {
    "add": add,
    "mul": mul,
    "conv-linear": conv_linear,
    "conv-circular": conv_circular,
    "corr": corr_cross,
}


def apply_binary(name: str, a: Sequence[float], b: Sequence[float]) -> List[float]:
    op = BINARY_OPERATIONS.get(str(name).lower())
    if op is None:
        raise InvalidArgumentError(
            f"Unknown two-sequence operation '{name}'. Available: {sorted(BINARY_OPERATIONS)}"
        )
    return op(a, b)


def pearson(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson coefficient of two aligned series, NaN when either has zero variance."""

    if x.size == 0 or x.size != y.size:
        return math.nan
    dx = x - np.sum(x) / x.size
    dy = y - np.sum(y) / y.size
    sx2 = float(np.dot(dx, dx))
    sy2 = float(np.dot(dy, dy))
    if not (sx2 > 0.0 and sy2 > 0.0):
        return math.nan
    denom = math.sqrt(sx2 * sy2)
    if denom == 0.0 or not math.isfinite(denom):
        return math.nan
    rho = float(np.dot(dx, dy)) / denom
    return min(1.0, max(-1.0, rho))


def rolling_correlation(
    a: Sequence[float],
    b: Sequence[float],
    window: int,
    *,
    min_samples: int | None = None,
) -> List[float]:
    """Sliding-window Pearson coefficient for each aligned pair of ``a`` and ``b``.

    Output ``t`` correlates the most recent ``min(t + 1, window)`` pairs and is
    NaN while fewer than ``min_samples`` (default: ``window``) pairs are
    available or either slice is constant.
    """

    if window <= 0:
        raise InvalidArgumentError(f"window must be > 0 (got {window})")
    x, y = _as_array(a), _as_array(b)
    if x.size != y.size:
        raise InvalidArgumentError(f"series lengths differ ({x.size} and {y.size})")
    required = window if min_samples is None else max(int(min_samples), 1)
    out: list[float] = []
    for t in range(x.size):
        start = max(0, t + 1 - window)
        if t + 1 - start < required:
            out.append(math.nan)
            continue
        out.append(pearson(x[start : t + 1], y[start : t + 1]))
    return out


__all__ = [
    "pad_front",
    "pad_back",
    "delay",
    "advance",
    "reverse",
    "upsample",
    "downsample",
    "diff",
    "cumsum",
    "apply_operator",
    "add",
    "mul",
    "conv_linear",
    "conv_circular",
    "corr_cross",
    "apply_binary",
    "BINARY_OPERATIONS",
    "pearson",
    "rolling_correlation",
]
