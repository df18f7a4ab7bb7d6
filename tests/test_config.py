from __future__ import annotations

import json
from pathlib import Path

import pytest

from seqops.config import RunConfig, load_config, validate_config, validate_config_file
from seqops.errors import InvalidArgumentError
from seqops.operators import OperatorKind


def test_yaml_stream_config_applies_defaults(tmp_path: Path) -> None:
    path = tmp_path / "run.yaml"
    path.write_text("operator: delay\namount: 2\nmode: stream\nsource:\n  type: values\n  values: [1, 2]\n", encoding="utf-8")

    result = validate_config_file(path)
    assert result.ok
    assert result.mode == "stream"
    assert result.normalized["unbounded"] is True
    assert result.normalized["fill"] == 0.0


def test_validation_does_not_mutate_input() -> None:
    config = {"op": "upsample", "amount": 2}
    result = validate_config(config)
    assert result.ok
    assert config == {"op": "upsample", "amount": 2}
    assert result.normalized["operator"] == "upsample"
    assert "fill" not in result.normalized


@pytest.mark.parametrize(
    "config, fragment",
    [
        ({"operator": "delay"}, "amount"),
        ({"operator": "upsample", "amount": 0}, "factor"),
        ({"operator": "pad-front", "amount": -3}, ">= 0"),
        ({"operator": "pad-front", "amount": "3"}, "type int"),
        ({"operator": "wobble"}, "Unknown operator"),
        ({"mode": "corr-window"}, "window"),
        ({"mode": "corr-window", "window": 0}, "> 0"),
        ({"mode": "corr-window", "window": 3, "min_samples": 5}, "min_samples"),
        ({"mode": "batch", "operator": "diff"}, "Unknown mode"),
        ({"operator": "diff", "source": {"type": "mqtt"}}, "source type"),
        ({"operator": "diff", "source": {"type": "simulated"}}, "count"),
    ],
)
def test_invalid_configs_report_errors(config: dict, fragment: str) -> None:
    result = validate_config(config)
    assert not result.ok
    assert any(fragment in error for error in result.errors)


def test_non_streamable_operator_in_stream_mode_warns() -> None:
    result = validate_config({"operator": "reverse", "mode": "stream"})
    assert result.ok
    assert any("ONLINE:false" in w for w in result.warnings)

    bounded = validate_config({"operator": "reverse", "mode": "stream", "unbounded": False})
    assert bounded.warnings == []


def test_load_config_rejects_missing_and_non_mapping(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(listing)


def test_run_config_from_json_file(tmp_path: Path) -> None:
    path = tmp_path / "run.json"
    path.write_text(
        json.dumps({"operator": "advance", "amount": 1, "fill": 9, "logging": {"level": "DEBUG"}}),
        encoding="utf-8",
    )
    run = RunConfig.from_file(path)
    assert run.mode == "finite"
    assert run.spec is not None and run.spec.kind is OperatorKind.ADVANCE
    assert run.spec.fill == 9.0
    assert run.log_level == "DEBUG"


def test_run_config_corr_window_has_no_operator() -> None:
    run = RunConfig.from_mapping({"mode": "corr-window", "window": 4})
    assert run.spec is None
    assert run.window == 4


def test_run_config_raises_on_errors() -> None:
    with pytest.raises(InvalidArgumentError, match="amount"):
        RunConfig.from_mapping({"operator": "downsample"})
