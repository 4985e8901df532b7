"""Input patterns for the block merge sort and the benchmark that sorts them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from .beebs import RAND_MAX, Random
from .harness import Benchmark
from .wikisort import wiki_sort

MAX_SIZE = 400
EQUAL_VALUE = 1000


@dataclass(frozen=True)
class Item:
    """A value tagged with its original position, to check sort stability."""

    value: int
    index: int


def item_less(item1: Item, item2: Item) -> bool:
    """Order items by value only."""
    return item1.value < item2.value


def _check_position(index: int, total: int) -> None:
    if not 0 <= index < total:
        raise ValueError(f"index {index} is outside an array of {total} items")


def pathological(rng: Random, index: int, total: int) -> int:
    """10, then 11 up to the middle, then 9, ending with 10."""
    _check_position(index, total)
    if index == 0:
        return 10
    if index < total // 2:
        return 11
    if index == total - 1:
        return 10
    return 9


def random_values(rng: Random, index: int, total: int) -> int:
    """A fresh random value."""
    _check_position(index, total)
    return rng.rand()


def mostly_descending(rng: Random, index: int, total: int) -> int:
    """Descending values with a small random jitter."""
    _check_position(index, total)
    return int(total - index + rng.rand() * 1.0 / RAND_MAX * 5 - 2.5)


def mostly_ascending(rng: Random, index: int, total: int) -> int:
    """Ascending values with a small random jitter."""
    _check_position(index, total)
    return int(index + rng.rand() * 1.0 / RAND_MAX * 5 - 2.5)


def ascending(rng: Random, index: int, total: int) -> int:
    """The position itself."""
    _check_position(index, total)
    return index


def descending(rng: Random, index: int, total: int) -> int:
    """Distance from the end."""
    _check_position(index, total)
    return total - index


def equal(rng: Random, index: int, total: int) -> int:
    """The same value everywhere."""
    _check_position(index, total)
    return EQUAL_VALUE


def jittered(rng: Random, index: int, total: int) -> int:
    """The position, occasionally moved back by two."""
    _check_position(index, total)
    return index if rng.rand() * 1.0 / RAND_MAX <= 0.9 else index - 2


def mostly_equal(rng: Random, index: int, total: int) -> int:
    """One of four neighbouring values."""
    _check_position(index, total)
    return EQUAL_VALUE + rng.rand() % 4


TestCase = Callable[[Random, int, int], int]

TEST_CASES: Tuple[TestCase, ...] = (
    pathological,
    random_values,
    mostly_descending,
    mostly_ascending,
    ascending,
    descending,
    equal,
    jittered,
    mostly_equal,
)


def run_cases(total: int = MAX_SIZE) -> List[List[Item]]:
    """Generate and sort every test pattern in turn; return the sorted arrays."""
    rng = Random(0)
    results = []
    for case in TEST_CASES:
        array = [Item(case(rng, index, total), index) for index in range(total)]
        wiki_sort(array, item_less)
        results.append(array)
    return results


_EXPECTED_INDICES = {
    1000: (
        1, 2, 13, 18, 19, 26, 31, 32, 35, 36, 37, 46, 49, 55, 61, 62, 66, 72,
        73, 74, 75, 76, 77, 81, 82, 83, 87, 89, 91, 92, 95, 99, 101, 105, 108,
        109, 114, 119, 120, 128, 137, 143, 144, 151, 158, 161, 162, 165, 169,
        181, 182, 187, 188, 190, 195, 196, 198, 200, 201, 205, 206, 211, 212,
        213, 214, 215, 217, 221, 223, 225, 226, 227, 233, 242, 245, 249, 250,
        266, 270, 271, 273, 274, 280, 287, 291, 295, 299, 303, 304, 312, 328,
        330, 333, 339, 342, 346, 350, 361, 371, 376, 378, 382, 384, 385, 390,
        396,
    ),
    1001: (
        5, 7, 8, 11, 16, 20, 21, 22, 29, 34, 39, 40, 41, 42, 47, 54, 63, 68,
        71, 78, 84, 85, 93, 96, 97, 103, 104, 107, 117, 129, 139, 140, 148,
        156, 160, 167, 172, 174, 175, 179, 185, 186, 193, 194, 207, 208, 216,
        219, 224, 228, 229, 235, 237, 240, 246, 252, 255, 256, 257, 259, 260,
        261, 265, 267, 269, 275, 286, 288, 289, 294, 301, 302, 308, 309, 314,
        322, 323, 325, 326, 327, 334, 337, 341, 347, 352, 357, 360, 363, 365,
        366, 369, 375, 379, 381, 393, 394, 398,
    ),
    1002: (
        9, 17, 23, 24, 30, 33, 38, 43, 45, 53, 57, 59, 60, 64, 69, 70, 79, 88,
        94, 98, 100, 110, 111, 115, 118, 123, 125, 127, 130, 131, 134, 136,
        138, 142, 146, 149, 150, 152, 153, 157, 163, 166, 168, 170, 171, 173,
        176, 177, 180, 183, 184, 189, 191, 197, 202, 203, 204, 210, 218, 220,
        232, 236, 238, 241, 243, 244, 251, 253, 254, 258, 264, 272, 277, 279,
        282, 283, 284, 290, 292, 296, 297, 298, 300, 306, 307, 310, 311, 315,
        316, 319, 321, 324, 331, 335, 340, 344, 349, 353, 354, 358, 362, 364,
        370, 374, 380, 383, 386, 389, 391, 392, 397,
    ),
    1003: (
        0, 3, 4, 6, 10, 12, 14, 15, 25, 27, 28, 44, 48, 50, 51, 52, 56, 58, 65,
        67, 80, 86, 90, 102, 106, 112, 113, 116, 121, 122, 124, 126, 132, 133,
        135, 141, 145, 147, 154, 155, 159, 164, 178, 192, 199, 209, 222, 230,
        231, 234, 239, 247, 248, 262, 263, 268, 276, 278, 281, 285, 293, 305,
        313, 317, 318, 320, 329, 332, 336, 338, 343, 345, 348, 351, 355, 356,
        359, 367, 368, 372, 373, 377, 387, 388, 395, 399,
    ),
}

EXPECTED: List[Item] = [
    Item(value, index)
    for value, indices in _EXPECTED_INDICES.items()
    for index in indices
]
"""The array left behind by the last pattern of a run."""


class WikiSortBenchmark(Benchmark):
    """Sort all nine patterns of 400 items per repetition."""

    scale_factor = 1

    def __init__(self, cpu_mhz: int = 1) -> None:
        super().__init__(cpu_mhz)
        self.array: List[Item] = [Item(0, 0)] * MAX_SIZE

    def benchmark_body(self, rpt: int) -> int:
        for _ in range(rpt):
            self.array = run_cases(MAX_SIZE)[-1]
        return 0

    def verify(self, result: int) -> bool:
        return self.array == EXPECTED