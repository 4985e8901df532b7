# embenchpy

A small collection of embedded-style benchmark kernels, together with the
deterministic runtime they rely on:

- `tarfind` (`embenchpy.tarfind.TarFind`) builds a synthetic tar archive of
  35 headers with random upper-case names and looks up five of them.
- `ud` (`embenchpy.ud.Ud`) solves a small fixed linear system by integer LU
  decomposition (`make_system`, `ludcmp`).
- `wikisort` (`embenchpy.wikisort_cases.WikiSortBenchmark`) sorts nine input
  patterns of 400 items with a stable, in-place block merge sort and checks
  the last result against a fixed array.
- `statemate` (`embenchpy.statemate.Statemate`) runs the statecharts of a
  car window lift controller (`embenchpy.statemate_charts`) until they
  settle, then checks the flags and chart states left behind.

Each benchmark is a subclass of `embenchpy.harness.Benchmark`, which has
`initialise`, `warm_caches`, `benchmark`, `benchmark_body` and `verify`.
`benchmark()` repeats the workload `scale_factor * cpu_mhz` times.
`run_benchmark(bench, warmup_heat)` runs them in order: it initialises the
benchmark, warms it up `warmup_heat` times, runs it and returns whether
`verify` accepted the result.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
embenchpy
```

This runs every benchmark and prints one line per benchmark with `PASS` or
`FAIL` and the time taken in seconds. The time covers initialisation,
warm-up and the run itself. The exit status is 1 if any benchmark failed
verification and 0 otherwise.

Options:

- `NAME ...` runs only the named benchmarks (`statemate`, `tarfind`, `ud`,
  `wikisort`).
- `--cpu-mhz N` multiplies the number of repetitions (default 1, at least 1).
- `--warmup-heat N` sets the number of warm-up repetitions (default 1).
- `--list` prints the available benchmark names and exits.

```
embenchpy ud wikisort --cpu-mhz 2
```

## Library use

```python
from embenchpy.harness import run_benchmark
from embenchpy.ud import Ud

bench = Ud(cpu_mhz=1)
ok = run_benchmark(bench, 1)
```

The runtime pieces in `embenchpy.beebs` can be used on their own as well:

```python
from embenchpy.beebs import Heap, Random

rng = Random(0)
values = [rng.rand() for _ in range(3)]   # always the same sequence

heap = Heap(64, 8)
offset = heap.malloc(10)                  # rounded up to the word size
assert heap.check()
```

- `Random` yields values in `[0, RAND_MAX]` (`2**15 - 1`) from a fixed
  linear congruential generator, so results match on every platform;
  `srand` restarts the sequence.
- `Heap` is a bump allocator over a `bytearray` whose size must be a multiple
  of the word size. `malloc`, `calloc` and `realloc` return byte offsets into
  `heap.memory`, or `None` when the block is exhausted; `free` reclaims
  nothing and raises `BeebsError` for an offset outside the heap; `check`
  reports whether more was ever requested than was available since the last
  `init`.
- `check(condition)` raises `BeebsError` when the condition is false;
  `float_eq` and `double_eq` compare results within fixed tolerances.

`embenchpy.wikisort.wiki_sort(array, compare)` sorts a list in place, where
`compare(x, y)` means "x is less than y", and keeps equal items in their
original order. The building blocks it uses (`Range`, `rotate`,
`block_swap`, `binary_first`, `binary_last`, `insertion_sort`,
`wiki_merge`, ...) are public in the same module.

## What it does not do

The benchmarks run as ordinary Python code in the interpreter. There is no
support for building or running them on target boards, no board or chip
start/stop triggers, no code size measurement and no comparison of results
between machines; the only measurement is the wall-clock time printed by
the `embenchpy` command.