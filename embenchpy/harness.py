"""Common driver for benchmarks: initialise, warm up, run and verify."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Benchmark(ABC):
    """A benchmark whose workload is repeated ``scale_factor * cpu_mhz`` times."""

    scale_factor: int = 1

    def __init__(self, cpu_mhz: int = 1) -> None:
        self.cpu_mhz = cpu_mhz
        self.initialised = False

    def initialise(self) -> None:
        """One-off initialisation: check the configuration and mark it ready."""
        if self.cpu_mhz < 0:
            raise ValueError(f"cpu_mhz must not be negative, got {self.cpu_mhz}")
        self.initialised = True

    @abstractmethod
    def benchmark_body(self, rpt: int) -> int:
        """Run the workload ``rpt`` times and return its result."""

    def warm_caches(self, heat: int) -> None:
        """Run the workload ``heat`` times, discarding the result."""
        self.benchmark_body(heat)

    def benchmark(self) -> int:
        """Run the full, scaled workload."""
        return self.benchmark_body(self.scale_factor * self.cpu_mhz)

    @abstractmethod
    def verify(self, result: int) -> bool:
        """Return True if the benchmark produced the expected state."""


def run_benchmark(bench: Benchmark, warmup_heat: int = 1) -> bool:
    """Initialise, warm up, run and verify ``bench``; return whether it passed."""
    bench.initialise()
    bench.warm_caches(warmup_heat)
    result = bench.benchmark()
    return bool(bench.verify(result))