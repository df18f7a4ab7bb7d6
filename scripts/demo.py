"""Stream simulated samples through one operator and print each output."""

from __future__ import annotations

import argparse

from seqops import OperatorSpec, StreamingService
from seqops.samples import format_sample
from seqops.streaming.sources import build_source


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an operator over simulated noisy sine samples")
    parser.add_argument("operator", help="Operator name, e.g. cumsum")
    parser.add_argument("params", nargs="*", help="Operator parameters")
    parser.add_argument("--count", type=int, default=16, help="Number of samples to generate")
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    spec = OperatorSpec.from_tokens(args.operator, args.params)
    source = build_source({"type": "simulated", "count": args.count, "seed": args.seed})
    service = StreamingService(spec, source, sink=lambda y: print(format_sample(y)), unbounded=False)
    summary = service.run()
    print(f"{summary.consumed} inputs -> {summary.produced} outputs ({spec.kind.value})")


if __name__ == "__main__":
    main()
