"""Error taxonomy shared by the offline transforms and the streaming core."""

from __future__ import annotations

import math

# Returned by the correlation engine when a coefficient cannot be computed
# for the current tick. It is a data condition, never raised.
UNAVAILABLE = math.nan


class SeqOpsError(Exception):
    """Base class for every error raised by seqops."""

    kind = "error"


class InvalidArgumentError(SeqOpsError, ValueError):
    """A parameter is missing, non-positive, or inconsistent with another one."""

    kind = "invalid_argument"


class OutOfMemoryError(SeqOpsError, MemoryError):
    """Ring storage could not be allocated."""

    kind = "out_of_memory"


class InvalidStateError(SeqOpsError, RuntimeError):
    """Use before init, use after dispose, or input during a mandatory drain."""

    kind = "invalid_state"


class IndexOutOfRangeError(SeqOpsError, IndexError):
    """A window read went past the live element count."""

    kind = "index_out_of_range"


class UnsupportedOperationError(SeqOpsError, NotImplementedError):
    """The operator has no streaming realization."""

    kind = "unsupported"


def is_unavailable(value: float | None) -> bool:
    """Return True when ``value`` is the correlation sentinel."""

    return value is None or (isinstance(value, float) and math.isnan(value))


__all__ = [
    "UNAVAILABLE",
    "SeqOpsError",
    "InvalidArgumentError",
    "OutOfMemoryError",
    "InvalidStateError",
    "IndexOutOfRangeError",
    "UnsupportedOperationError",
    "is_unavailable",
]
