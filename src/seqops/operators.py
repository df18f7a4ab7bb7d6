"""Operator identities and their parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from .errors import InvalidArgumentError


class OperatorKind(str, Enum):
    """The nine single-sequence operators, valued by their command-line name."""

    PAD_FRONT = "pad-front"
    PAD_BACK = "pad-back"
    DELAY = "delay"
    ADVANCE = "advance"
    REVERSE = "reverse"
    UPSAMPLE = "upsample"
    DOWNSAMPLE = "downsample"
    DIFF = "diff"
    CUMSUM = "cumsum"

    @classmethod
    def parse(cls, name: str | OperatorKind) -> "OperatorKind":
        if isinstance(name, OperatorKind):
            return name
        key = str(name).strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown operator '{name}'. Available: {sorted(k.value for k in cls)}"
            ) from None


# Positional parameters accepted by each operator, in command-line order.
PARAMETERS: dict[OperatorKind, tuple[str, ...]] = {
    OperatorKind.PAD_FRONT: ("amount",),
    OperatorKind.PAD_BACK: ("amount",),
    OperatorKind.DELAY: ("amount", "fill"),
    OperatorKind.ADVANCE: ("amount", "fill"),
    OperatorKind.REVERSE: (),
    OperatorKind.UPSAMPLE: ("amount",),
    OperatorKind.DOWNSAMPLE: ("amount",),
    OperatorKind.DIFF: (),
    OperatorKind.CUMSUM: (),
}

# Operators whose amount is a rate factor and therefore must be positive.
FACTOR_KINDS = frozenset({OperatorKind.UPSAMPLE, OperatorKind.DOWNSAMPLE})


def parse_size(token: str | int, *, name: str = "amount") -> int:
    """Parse a non-negative integer parameter."""

    if isinstance(token, bool):
        raise InvalidArgumentError(f"{name} must be a non-negative integer (got {token!r})")
    if isinstance(token, int):
        value = token
    else:
        text = str(token).strip()
        if not text.isdigit():
            raise InvalidArgumentError(f"{name} must be a non-negative integer (got {token!r})")
        value = int(text)
    if value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer (got {value})")
    return value


def parse_sample(token: str | float, *, name: str = "value") -> float:
    """Parse a double-precision sample or fill value."""

    try:
        return float(token)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{name} must be a number (got {token!r})") from None


@dataclass(frozen=True)
class OperatorSpec:
    """A fully parameterized operator: kind, integer amount and fill value.

    ``amount`` is the zero count for padding, the shift for delay/advance and
    the rate factor for up/downsampling. ``fill`` is only meaningful for
    delay/advance and is ignored elsewhere.
    """

    kind: OperatorKind
    amount: int = 0
    fill: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", OperatorKind.parse(self.kind))
        object.__setattr__(self, "amount", parse_size(self.amount))
        object.__setattr__(self, "fill", parse_sample(self.fill, name="fill"))

    @property
    def factor(self) -> int:
        """The rate factor, validated positive."""

        if self.amount <= 0:
            raise InvalidArgumentError(f"{self.kind.value} factor must be > 0 (got {self.amount})")
        return self.amount

    def validate(self) -> "OperatorSpec":
        if self.kind in FACTOR_KINDS and self.amount <= 0:
            raise InvalidArgumentError(f"{self.kind.value} factor must be > 0 (got {self.amount})")
        return self

    @classmethod
    def from_tokens(cls, name: str, params: Sequence[str]) -> "OperatorSpec":
        """Build a spec from an operator name and its positional parameters."""

        kind = OperatorKind.parse(name)
        expected = PARAMETERS[kind]
        if len(params) != len(expected):
            usage = " ".join(f"<{p}>" for p in expected) or "(no parameters)"
            raise InvalidArgumentError(
                f"{kind.value} expects {len(expected)} parameter(s): {usage} (got {len(params)})"
            )
        values: dict[str, Any] = {}
        for field_name, token in zip(expected, params):
            if field_name == "amount":
                values["amount"] = parse_size(token)
            else:
                values["fill"] = parse_sample(token, name="fill")
        return cls(kind=kind, **values)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "OperatorSpec":
        name = cfg.get("operator") or cfg.get("op")
        if not name:
            raise InvalidArgumentError("Operator config requires an 'operator' field")
        kind = OperatorKind.parse(str(name))
        expected = PARAMETERS[kind]
        if "amount" in expected and cfg.get("amount") is None:
            raise InvalidArgumentError(f"{kind.value} requires 'amount'")
        amount = cfg.get("amount", 0) if "amount" in expected else 0
        fill = cfg.get("fill", 0.0) if "fill" in expected else 0.0
        return cls(kind=kind, amount=amount, fill=fill)

    def describe(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"operator": self.kind.value}
        for field_name in PARAMETERS[self.kind]:
            payload[field_name] = getattr(self, field_name)
        return payload


__all__ = [
    "OperatorKind",
    "OperatorSpec",
    "PARAMETERS",
    "FACTOR_KINDS",
    "parse_size",
    "parse_sample",
]
