"""Command line interface for seqops."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

from . import __version__
from .config import RunConfig, validate_config_file
from .errors import InvalidArgumentError, SeqOpsError
from .logging_utils import apply_logging_options, configure_logging
from .operators import OperatorSpec
from .pipeline import run_binary, run_config, run_corr_window, run_finite, run_stream
from .samples import format_sample, format_samples, format_sequence, ingest_samples, read_finite, read_two_sequences
from .service import create_app
from .streaming.capability import capability_table, is_streamable
from .streaming.sources import PairSource
from .transforms import BINARY_OPERATIONS

logger = logging.getLogger(__name__)

MODES = ("finite", "stream")


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(result)


def _print_online(online: bool) -> None:
    print(f"ONLINE:{'true' if online else 'false'}", flush=True)


class _TokenPrinter:
    """Sink writing samples to stdout as they arrive, on one line."""

    def __init__(self) -> None:
        self.count = 0

    def __call__(self, value: float) -> None:
        print(("" if self.count == 0 else " ") + format_sample(value), end="", flush=True)
        self.count += 1

    def close(self) -> None:
        print()


def _line_printer(value: float) -> None:
    print(format_sample(value), flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seqops",
        description="Apply discrete-time sequence operators offline or one sample at a time.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser(
        "apply",
        help="Apply one operator in finite or stream mode",
        description=(
            "Operators: pad-front <n>, pad-back <n>, delay <d> <fill>, advance <d> <fill>, "
            "reverse, upsample <f>, downsample <f>, diff, cumsum. Finite input is 'N v0 ... vN-1'; "
            "stream input is whitespace separated values terminated by END or end of input."
        ),
    )
    apply.add_argument("operator", help="Operator name")
    apply.add_argument("args", nargs="+", metavar="ARG", help="Operator parameters followed by finite|stream")
    apply.add_argument("--input", type=Path, help="Read samples from a file instead of stdin")
    apply.add_argument("--bounded", action="store_true", help="Declare stream input finite")

    corr_window = subparsers.add_parser("corr-window", help="Streaming normalized correlation of 'a b' pairs")
    corr_window.add_argument("size", type=int, help="Window capacity")
    corr_window.add_argument(
        "--min-samples",
        type=int,
        help=(
            "Pairs required before reporting (default: size, which waits for a full window). "
            "Use 1 to report from the second pair on, whenever both series have non-zero variance"
        ),
    )
    corr_window.add_argument("--input", type=Path, help="Read pairs from a file instead of stdin")

    for name in BINARY_OPERATIONS:
        binary = subparsers.add_parser(name, help=f"Two-sequence '{name}' of '<len> values...' inputs")
        binary.add_argument("--input", type=Path, help="Read both sequences from a file instead of stdin")
        binary.add_argument("--json", action="store_true", help="Emit the result as JSON")

    capability = subparsers.add_parser("capability", help="Show which operators can run online")
    capability.add_argument("--json", action="store_true", help="Emit the table as JSON")

    run = subparsers.add_parser("run", help="Execute a YAML/JSON run configuration")
    run.add_argument("config", type=Path, help="Path to run configuration")

    validate = subparsers.add_parser("validate", help="Validate a run configuration file")
    validate.add_argument("config", type=Path, help="Path to configuration file")
    validate.add_argument("--json", action="store_true", help="Emit validation result as JSON")

    serve = subparsers.add_parser("serve", help="Run FastAPI service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def _read_text(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


def _stream(spec: OperatorSpec, source: Any, unbounded: bool) -> int:
    spec.validate()
    if not is_streamable(spec.kind, unbounded):
        _print_online(False)
        logger.error("%s is not supported for online %s input", spec.kind.value, "unbounded" if unbounded else "bounded")
        return 1
    _print_online(True)
    printer = _TokenPrinter()
    try:
        run_stream(spec, source, unbounded=unbounded, sink=printer)
    finally:
        printer.close()
    return 0


def _apply(args: argparse.Namespace) -> int:
    mode = args.args[-1].lower()
    if mode not in MODES:
        logger.error("Last argument must be one of %s (got '%s')", "|".join(MODES), args.args[-1])
        return 1
    spec = OperatorSpec.from_tokens(args.operator, args.args[:-1])
    if mode == "stream":
        source = {"type": "file", "path": str(args.input)} if args.input else None
        return _stream(spec, source, unbounded=not args.bounded)

    samples = ingest_samples(args.input) if args.input else read_finite(sys.stdin)
    result = run_finite(spec, samples)
    _print_online(result["online"])
    print(format_samples(result["outputs"]))
    return 0


def _corr_window(args: argparse.Namespace) -> int:
    if args.input is None:
        run_corr_window(PairSource(sys.stdin), args.size, min_samples=args.min_samples, sink=_line_printer)
        return 0
    with args.input.open("r", encoding="utf-8") as handle:
        run_corr_window(PairSource(handle), args.size, min_samples=args.min_samples, sink=_line_printer)
    return 0


def _run(args: argparse.Namespace) -> int:
    run = RunConfig.from_file(args.config)
    apply_logging_options(run.log_level, run.json_logs)
    if run.mode == "stream":
        if run.spec is None:
            raise InvalidArgumentError("stream run configuration has no operator")
        for warning in run.warnings:
            logger.warning(warning)
        return _stream(run.spec, run.source, run.unbounded)
    if run.mode == "corr-window":
        run_config(run, sink=_line_printer)
        return 0
    result = run_config(run)
    _print_online(result["online"])
    print(format_samples(result["outputs"]))
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "apply":
        return _apply(args)
    if args.command == "corr-window":
        return _corr_window(args)
    if args.command in BINARY_OPERATIONS:
        a, b = read_two_sequences(_read_text(args.input))
        result = run_binary(args.command, a, b)
        if args.json:
            _print_result(result, as_json=True)
        else:
            print(format_sequence(result["outputs"]))
        return 0
    if args.command == "capability":
        table = capability_table()
        if args.json:
            _print_result(table, as_json=True)
        else:
            print(f"{'operator':<12} {'bounded':<8} unbounded")
            for name, verdict in table.items():
                print(f"{name:<12} {str(verdict['bounded']).lower():<8} {str(verdict['unbounded']).lower()}")
        return 0
    if args.command == "run":
        return _run(args)
    if args.command == "validate":
        result = validate_config_file(args.config)
        _print_result(result.as_dict(), as_json=args.json)
        return 0 if result.ok else 1
    if args.command == "serve":
        app = create_app()
        try:
            import uvicorn
        except ModuleNotFoundError:
            raise SystemExit("uvicorn is required to run the service. Install with `pip install seqops[serve]`.")
        uvicorn.run(app, host=args.host, port=args.port)
        return 0
    if args.command == "version":
        print(__version__)
        return 0
    raise AssertionError(f"unhandled command {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs or None)

    try:
        return _dispatch(args)
    except (SeqOpsError, ValueError, FileNotFoundError, yaml.YAMLError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
