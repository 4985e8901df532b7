"""Search a simulated tar archive for a set of file names."""

from __future__ import annotations

from dataclasses import dataclass

from .beebs import BeebsError, Heap, Random
from .harness import Benchmark

ARCHIVE_FILES = 35
N_SEARCHES = 5


def _roundup(value: int, unit: int) -> int:
    return ((value + unit) // unit) * unit


@dataclass
class TarHeader:
    """ASCII tar header record."""

    filename: str = ""
    mode: str = ""
    uid: str = ""
    gid: str = ""
    size: str = "0"
    mtime: str = ""
    checksum: str = ""
    is_link: str = "0"
    linked_file: str = ""

    RECORD_SIZE = 100 + 8 + 8 + 8 + 12 + 12 + 8 + 1 + 100


HEAP_SIZE = _roundup(TarHeader.RECORD_SIZE * ARCHIVE_FILES, 8)


def make_archive(rng: Random, files: int = ARCHIVE_FILES) -> list[TarHeader]:
    """Create ``files`` headers with random upper-case names of varying length."""
    headers = []
    for i in range(files):
        length = 5 + i % 94
        name = "".join(chr(rng.rand() % 26 + 65) for _ in range(length))
        headers.append(TarHeader(filename=name))
    return headers


def count_found(headers: list[TarHeader], searches: int = N_SEARCHES) -> int:
    """Look up names taken from the middle of the archive; count the hits."""
    total = len(headers)
    found = 0
    for p in range(searches):
        wanted = headers[(p + total // 2) % total].filename
        if any(header.filename == wanted for header in headers):
            found += 1
    return found


class TarFind(Benchmark):
    """Repeatedly build an archive and search it."""

    scale_factor = 47

    def __init__(self, cpu_mhz: int = 1) -> None:
        super().__init__(cpu_mhz)
        self.rng = Random(0)
        self.heap = Heap(HEAP_SIZE, 8)

    def benchmark_body(self, rpt: int) -> int:
        found = 0
        for _ in range(rpt):
            self.heap.init(HEAP_SIZE)
            block = self.heap.malloc(TarHeader.RECORD_SIZE * ARCHIVE_FILES)
            if block is None:
                raise BeebsError("archive does not fit in the heap")
            headers = make_archive(self.rng, ARCHIVE_FILES)
            found = count_found(headers, N_SEARCHES)
            self.heap.free(block)
        return int(found == N_SEARCHES)

    def verify(self, result: int) -> bool:
        return result == 1