from __future__ import annotations

import io
from pathlib import Path

import pytest

from seqops.errors import InvalidArgumentError, UnsupportedOperationError
from seqops.operators import OperatorKind, OperatorSpec
from seqops.streaming.service import StreamingService
from seqops.streaming.sources import FileSource, PairSource, SimulatedSource, TokenSource, ValuesSource, build_source


def test_service_runs_with_custom_source() -> None:
    def source():
        yield from [1.0, 2.0, 3.0]

    service = StreamingService.create_from_config({"operator": "cumsum", "source": source})
    summary = service.run()
    assert service.emitted == [1.0, 3.0, 6.0]
    assert summary.as_dict() == {
        "operator": "cumsum",
        "online": True,
        "consumed": 3,
        "produced": 3,
        "stopped_early": False,
    }


def test_sink_receives_each_output_including_drained_ones() -> None:
    seen: list[float] = []
    service = StreamingService(
        OperatorSpec(OperatorKind.UPSAMPLE, 2),
        build_source({"type": "values", "values": [4, 5]}),
        sink=seen.append,
    )
    summary = service.run()
    assert seen == [4.0, 0.0, 5.0, 0.0]
    assert service.emitted == []
    assert summary.produced == 4


def test_non_causal_operator_rejected_on_unbounded_input() -> None:
    service = StreamingService(OperatorSpec(OperatorKind.REVERSE), lambda: [1.0, 2.0])
    assert not service.online
    with pytest.raises(UnsupportedOperationError):
        service.run()


def test_bounded_input_buffers_non_causal_operator() -> None:
    service = StreamingService.create_from_config(
        {"operator": "advance", "amount": 1, "fill": -1, "unbounded": False, "source": {"type": "values", "values": [1, 2, 3]}}
    )
    summary = service.run()
    assert service.emitted == [2.0, 3.0, -1.0]
    assert summary.consumed == 3


def test_max_samples_bounds_an_unbounded_source() -> None:
    service = StreamingService.create_from_config(
        {"operator": "downsample", "amount": 2, "source": {"type": "simulated", "seed": 1}}
    )
    summary = service.run(max_samples=10)
    assert summary.consumed == 10
    assert summary.produced == 5
    assert summary.stopped_early


def test_stop_from_sink_ends_the_run() -> None:
    spec = OperatorSpec(OperatorKind.DIFF)
    service = StreamingService(spec, lambda: SimulatedSource(seed=3))

    def sink(value: float) -> None:
        if len(collected) == 4:
            service.stop()
        collected.append(value)

    collected: list[float] = []
    service.sink = sink
    summary = service.run()
    assert summary.stopped_early
    assert summary.consumed == 5


def test_source_exhausted_at_max_samples_is_not_stopped_early() -> None:
    spec = OperatorSpec(OperatorKind.CUMSUM)
    service = StreamingService(spec, lambda: ValuesSource([1, 2, 3]))
    summary = service.run(max_samples=3)
    assert service.emitted == [1.0, 3.0, 6.0]
    assert summary.consumed == 3
    assert not summary.stopped_early

    longer = StreamingService(spec, lambda: ValuesSource([1, 2, 3, 4]))
    assert longer.run(max_samples=3).stopped_early


def test_failed_run_leaves_service_reusable() -> None:
    calls = {"n": 0}

    def source():
        calls["n"] += 1
        yield 1.0
        if calls["n"] == 1:
            raise InvalidArgumentError("bad token")
        yield 2.0

    service = StreamingService(OperatorSpec(OperatorKind.CUMSUM), source)
    with pytest.raises(InvalidArgumentError):
        service.run()
    assert not service._running

    summary = service.run()
    assert summary.consumed == 2
    assert not summary.stopped_early


def test_token_sources_stop_at_end_sentinel(tmp_path: Path) -> None:
    assert list(TokenSource(io.StringIO("1 2\n3 end 4"))) == [1.0, 2.0, 3.0]
    path = tmp_path / "stream.txt"
    path.write_text("5\n6 END\n7\n", encoding="utf-8")
    assert list(FileSource(path)) == [5.0, 6.0]
    with pytest.raises(FileNotFoundError):
        list(FileSource(tmp_path / "missing.txt"))


def test_pair_source_requires_complete_pairs() -> None:
    assert list(PairSource(["1 2", "3 4 END"])) == [(1.0, 2.0), (3.0, 4.0)]
    with pytest.raises(InvalidArgumentError):
        list(PairSource(["1 2 3"]))


def test_simulated_source_is_reproducible() -> None:
    assert list(SimulatedSource(8, seed=5)) == list(SimulatedSource(8, seed=5))
    assert len(list(SimulatedSource(0))) == 0


def test_build_source_rejects_unknown_type() -> None:
    with pytest.raises(InvalidArgumentError):
        build_source({"type": "mqtt"})
