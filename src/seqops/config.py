"""Run configuration loading and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .errors import InvalidArgumentError
from .operators import FACTOR_KINDS, PARAMETERS, OperatorKind, OperatorSpec
from .streaming.capability import is_streamable

MODES = ("finite", "stream", "corr-window")
SOURCE_TYPES = {"stdin", "-", "values", "file", "simulated", "demo"}

MODE_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "finite": {
        "required": {"operator": str},
        "optional": {"amount": int, "fill": (int, float), "source": dict},
        "defaults": {"fill": 0.0},
    },
    "stream": {
        "required": {"operator": str},
        "optional": {"amount": int, "fill": (int, float), "unbounded": bool, "source": dict},
        "defaults": {"fill": 0.0, "unbounded": True},
    },
    "corr-window": {
        "required": {"window": int},
        "optional": {"min_samples": int, "source": dict},
        "defaults": {},
    },
}


@dataclass
class ValidationResult:
    mode: str
    errors: list[str]
    warnings: list[str]
    normalized: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "errors": self.errors,
            "warnings": self.warnings,
            "normalized": self.normalized,
        }


def _type_name(expected: Any) -> str:
    if isinstance(expected, tuple):
        return " or ".join(_type_name(e) for e in expected)
    if isinstance(expected, type):
        return expected.__name__
    return str(expected)


def _is_instance(value: Any, expected: Any) -> bool:
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and expected is not bool:
        return False
    return isinstance(value, expected)


def _check_operator(normalized: Dict[str, Any], mode: str, errors: list[str], warnings: list[str]) -> None:
    try:
        kind = OperatorKind.parse(normalized["operator"])
    except InvalidArgumentError as exc:
        errors.append(str(exc))
        return
    normalized["operator"] = kind.value
    expected = PARAMETERS[kind]

    if "amount" in expected:
        amount = normalized.get("amount")
        if amount is None:
            errors.append(f"Missing required field 'amount' for operator '{kind.value}'")
        elif _is_instance(amount, int):
            if amount < 0:
                errors.append(f"Field 'amount' must be >= 0 (got {amount})")
            elif kind in FACTOR_KINDS and amount == 0:
                errors.append(f"Field 'amount' is a {kind.value} factor and must be > 0")
    elif "amount" in normalized:
        warnings.append(f"Field 'amount' is ignored by operator '{kind.value}'")

    if "fill" in expected:
        normalized.setdefault("fill", 0.0)
    else:
        normalized.pop("fill", None)

    if mode == "stream" and not is_streamable(kind, bool(normalized.get("unbounded", True))):
        warnings.append(f"Operator '{kind.value}' is not realizable on unbounded input; the run will report ONLINE:false")


def _check_source(source: Any, mode: str, errors: list[str]) -> None:
    if not isinstance(source, dict):
        return
    source_type = str(source.get("type", "stdin")).lower()
    if source_type not in SOURCE_TYPES:
        errors.append(f"Unknown source type '{source_type}'. Available: {sorted(SOURCE_TYPES)}")
    elif source_type == "file" and not source.get("path"):
        errors.append("File source requires 'path'")
    elif source_type == "values" and not isinstance(source.get("values"), list):
        errors.append("Values source requires a 'values' list")
    elif source_type in {"simulated", "demo"} and mode != "stream" and source.get("count") is None:
        errors.append(f"Simulated source needs a 'count' in {mode} mode")


def validate_config(config: Mapping[str, Any]) -> ValidationResult:
    """Validate a run configuration against its mode's schema.

    Validation does not mutate the original config. It applies defaults where
    possible and reports errors for missing or mistyped required fields while
    emitting warnings for fields that are present but have no effect.
    """

    errors: list[str] = []
    warnings: list[str] = []
    normalized: Dict[str, Any] = dict(config)
    if "op" in normalized and "operator" not in normalized:
        normalized["operator"] = normalized.pop("op")

    mode = str(normalized.get("mode", "finite")).lower()
    if mode not in MODE_SCHEMAS:
        errors.append(f"Unknown mode '{mode}'. Available: {list(MODES)}")
        return ValidationResult(mode=mode, errors=errors, warnings=warnings, normalized=normalized)
    normalized["mode"] = mode

    schema = MODE_SCHEMAS[mode]
    for key, value in schema["defaults"].items():
        normalized.setdefault(key, value)

    for name, expected_type in schema["required"].items():
        if name not in normalized:
            errors.append(f"Missing required field '{name}' for mode '{mode}'")
        elif not _is_instance(normalized[name], expected_type):
            errors.append(
                f"Field '{name}' should be of type {_type_name(expected_type)} "
                f"(got {type(normalized[name]).__name__})"
            )

    for name, expected_type in schema["optional"].items():
        if name in normalized and not _is_instance(normalized[name], expected_type):
            errors.append(
                f"Field '{name}' should be of type {_type_name(expected_type)} "
                f"(got {type(normalized[name]).__name__})"
            )

    if mode != "stream" and "unbounded" in normalized:
        warnings.append(f"Field 'unbounded' only applies to stream mode (mode is '{mode}')")

    if mode == "corr-window":
        window = normalized.get("window")
        if _is_instance(window, int) and window <= 0:
            errors.append(f"Field 'window' must be > 0 (got {window})")
        min_samples = normalized.get("min_samples")
        if _is_instance(min_samples, int) and _is_instance(window, int) and not 0 < min_samples <= window:
            errors.append(f"Field 'min_samples' must be within [1, {window}] (got {min_samples})")
    elif isinstance(normalized.get("operator"), str):
        _check_operator(normalized, mode, errors, warnings)

    _check_source(normalized.get("source"), mode, errors)

    logging_cfg = normalized.get("logging")
    if logging_cfg is not None and not isinstance(logging_cfg, dict):
        warnings.append("Field 'logging' should be a mapping with 'level' and 'json'")

    return ValidationResult(mode=mode, errors=errors, warnings=warnings, normalized=normalized)


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load a run configuration from YAML or JSON."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        loaded = json.loads(text)
    else:
        loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration in {path} must be a mapping (got {type(loaded).__name__})")
    return loaded


def validate_config_file(path: str | Path) -> ValidationResult:
    """Load and validate a configuration file."""
    return validate_config(load_config(path))


@dataclass
class RunConfig:
    """A validated run: what to execute and where samples come from."""

    mode: str
    spec: OperatorSpec | None = None
    unbounded: bool = True
    window: int | None = None
    min_samples: int | None = None
    source: Dict[str, Any] | None = None
    log_level: str | None = None
    json_logs: bool | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RunConfig":
        result = validate_config(config)
        if not result.ok:
            raise InvalidArgumentError("Invalid run configuration: " + "; ".join(result.errors))
        cfg = result.normalized
        logging_cfg = cfg.get("logging") if isinstance(cfg.get("logging"), dict) else {}
        spec = OperatorSpec.from_mapping(cfg) if result.mode != "corr-window" else None
        return cls(
            mode=result.mode,
            spec=spec,
            unbounded=bool(cfg.get("unbounded", True)),
            window=cfg.get("window"),
            min_samples=cfg.get("min_samples"),
            source=cfg.get("source"),
            log_level=logging_cfg.get("level"),
            json_logs=logging_cfg.get("json"),
            warnings=result.warnings,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "RunConfig":
        return cls.from_mapping(load_config(path))


__all__ = [
    "MODES",
    "ValidationResult",
    "validate_config",
    "validate_config_file",
    "load_config",
    "RunConfig",
]
