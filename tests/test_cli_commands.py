from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from seqops import __version__, cli, logging_utils


def _run(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], argv: list[str], stdin: str = "") -> tuple[int, str]:
    monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    code = cli.main(argv)
    return code, capsys.readouterr().out


def test_cli_stream_delay_with_fill(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["apply", "delay", "2", "0", "stream"], "1 2\n3 4 END 5\n")
    assert code == 0
    assert out == "ONLINE:true\n0 0 1 2\n"


def test_cli_stream_pad_front_emits_zeros_first(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["apply", "pad-front", "2", "stream"], "5 6 end")
    assert code == 0
    assert out == "ONLINE:true\n0 0 5 6\n"


def test_cli_stream_rejects_reverse(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["apply", "reverse", "stream"], "1 2 3 END")
    assert code == 1
    assert out == "ONLINE:false\n"


def test_cli_bounded_stream_buffers_reverse(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["apply", "reverse", "stream", "--bounded"], "1 2 3")
    assert code == 0
    assert out == "ONLINE:true\n3 2 1\n"


def test_cli_finite_mode(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["apply", "upsample", "2", "finite"], "3\n1 2 3\n")
    assert code == 0
    assert out == "ONLINE:true\n1 0 2 0 3 0\n"

    code, out = _run(monkeypatch, capsys, ["apply", "delay", "1", "-1.5", "finite"], "2\n4 5\n")
    assert code == 0
    assert out == "ONLINE:true\n-1.5 4\n"


def test_cli_finite_reads_input_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    samples = tmp_path / "samples.json"
    samples.write_text(json.dumps([1, 2, 3, 4]), encoding="utf-8")
    assert cli.main(["apply", "downsample", "3", "finite", "--input", str(samples)]) == 0
    assert capsys.readouterr().out == "ONLINE:true\n1 4\n"


def test_cli_bad_arguments_return_error(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(monkeypatch, capsys, ["apply", "delay", "2", "finite"], "1\n1\n")[0] == 1
    assert _run(monkeypatch, capsys, ["apply", "diff", "online"], "")[0] == 1
    assert _run(monkeypatch, capsys, ["apply", "upsample", "0", "stream"], "1 END")[0] == 1
    assert _run(monkeypatch, capsys, ["apply", "cumsum", "finite"], "3\n1 2\n")[0] == 1


def test_cli_corr_window(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["corr-window", "3"], "1 2\n2 4\n3 6\n4 8\n5 10\n")
    assert code == 0
    assert out.splitlines() == ["nan", "nan", "1", "1", "1"]


def test_cli_corr_window_min_samples_one_reports_from_second_pair(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    code, out = _run(monkeypatch, capsys, ["corr-window", "3", "--min-samples", "1"], "1 2\n2 4\n3 6\n4 8\n5 10\n")
    assert code == 0
    assert out.splitlines() == ["nan", "1", "1", "1", "1"]


def test_cli_two_sequence_modes(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(monkeypatch, capsys, ["conv-linear"], "3 1 2 3\n3 0 1 0.5\n")
    assert code == 0
    assert out == "5\n0 1 2.5 4 1.5\n"

    code, out = _run(monkeypatch, capsys, ["conv-circular"], "2 1 2\n3 1 0 0\n")
    assert code == 1

    code, out = _run(monkeypatch, capsys, ["add", "--json"], "2 1 2\n2 10 20\n")
    assert json.loads(out)["outputs"] == [11.0, 22.0]


def test_cli_capability_table(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["capability", "--json"]) == 0
    table = json.loads(capsys.readouterr().out)
    assert table["reverse"] == {"bounded": True, "unbounded": False}
    assert table["cumsum"]["unbounded"] is True


def test_cli_run_and_validate_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "run.yaml"
    config.write_text(
        "operator: cumsum\nmode: stream\nsource:\n  type: values\n  values: [1, 2, 3]\n",
        encoding="utf-8",
    )
    assert cli.main(["run", str(config)]) == 0
    assert capsys.readouterr().out == "ONLINE:true\n1 3 6\n"

    assert cli.main(["validate", str(config), "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["errors"] == []

    broken = tmp_path / "broken.yaml"
    broken.write_text("operator: delay\n", encoding="utf-8")
    assert cli.main(["validate", str(broken), "--json"]) == 1
    assert json.loads(capsys.readouterr().out)["errors"]
    assert cli.main(["run", str(broken)]) == 1


def test_cli_run_config_logging_block_switches_to_json(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("SEQOPS_JSON_LOGS", raising=False)
    monkeypatch.setattr(logging_utils, "_json_logs", None)
    config = tmp_path / "run.yaml"
    config.write_text(
        "operator: diff\nmode: stream\nsource:\n  type: values\n  values: [1, 4]\nlogging:\n  level: INFO\n  json: true\n",
        encoding="utf-8",
    )
    with caplog.at_level(logging.INFO):
        assert cli.main(["run", str(config)]) == 0

    assert capsys.readouterr().out == "ONLINE:true\n1 3\n"
    events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "seqops.streaming.service"]
    assert events[-1] == {
        "event": "stream_finished",
        "operator": "diff",
        "online": True,
        "consumed": 2,
        "produced": 2,
        "stopped_early": False,
    }
    assert logging_utils.json_logs_enabled()


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__
