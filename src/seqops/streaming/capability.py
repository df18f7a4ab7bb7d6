"""Which operators can run one sample at a time."""

from __future__ import annotations

from typing import Dict, List

from ..operators import OperatorKind

# Realizable by a causal system with bounded state no matter how long the
# input runs. The others need the end of the sequence or future samples.
CAUSAL_BOUNDED = frozenset(
    {
        OperatorKind.PAD_FRONT,
        OperatorKind.DELAY,
        OperatorKind.UPSAMPLE,
        OperatorKind.DOWNSAMPLE,
        OperatorKind.DIFF,
        OperatorKind.CUMSUM,
    }
)


def is_streamable(op: OperatorKind | str, unbounded: bool) -> bool:
    """Return whether ``op`` can be realized incrementally.

    With ``unbounded`` input only causal bounded-state operators qualify. A
    finite input can always be buffered, so every operator qualifies.
    Parameter values never affect the verdict.
    """

    kind = OperatorKind.parse(op)
    if unbounded:
        return kind in CAUSAL_BOUNDED
    return True


def streamable_operators(unbounded: bool) -> List[OperatorKind]:
    return [kind for kind in OperatorKind if is_streamable(kind, unbounded)]


def capability_table() -> Dict[str, Dict[str, bool]]:
    """Verdicts for every operator under both input horizons."""

    return {
        kind.value: {
            "bounded": is_streamable(kind, unbounded=False),
            "unbounded": is_streamable(kind, unbounded=True),
        }
        for kind in OperatorKind
    }


__all__ = ["CAUSAL_BOUNDED", "is_streamable", "streamable_operators", "capability_table"]
