"""Command line entry point: run, time and verify benchmarks."""

from __future__ import annotations

import argparse
import time
from typing import Callable, Dict, List, Optional

from .harness import Benchmark, run_benchmark
from .statemate import Statemate
from .tarfind import TarFind
from .ud import Ud
from .wikisort_cases import WikiSortBenchmark

BENCHMARKS: Dict[str, Callable[[int], Benchmark]] = {
    "statemate": Statemate,
    "tarfind": TarFind,
    "ud": Ud,
    "wikisort": WikiSortBenchmark,
}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embenchpy",
        description="Run benchmarks and verify their results.",
    )
    parser.add_argument(
        "names", nargs="*", choices=sorted(BENCHMARKS), metavar="NAME",
        help="benchmarks to run (default: all of %s)" % ", ".join(sorted(BENCHMARKS)),
    )
    parser.add_argument("--cpu-mhz", type=int, default=1,
                        help="scale for the number of repetitions (default 1)")
    parser.add_argument("--warmup-heat", type=int, default=1,
                        help="repetitions used to warm up (default 1)")
    parser.add_argument("--list", action="store_true",
                        help="list the available benchmarks and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the selected benchmarks; return 0 if every one verified."""
    parser = _parser()
    args = parser.parse_args(argv)
    if args.list:
        for name in sorted(BENCHMARKS):
            print(name)
        return 0
    if args.cpu_mhz < 1:
        parser.error("--cpu-mhz must be at least 1")
    if args.warmup_heat < 0:
        parser.error("--warmup-heat must not be negative")

    names = args.names or sorted(BENCHMARKS)
    failures = 0
    for name in names:
        bench = BENCHMARKS[name](args.cpu_mhz)
        started = time.perf_counter()
        passed = run_benchmark(bench, args.warmup_heat)
        elapsed = time.perf_counter() - started
        print(f"{name}: {'PASS' if passed else 'FAIL'} ({elapsed:.3f} s)")
        if not passed:
            failures += 1
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())