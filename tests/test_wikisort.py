import bisect
import random

import pytest

from embenchpy.wikisort import (
    Range,
    binary_first,
    binary_last,
    block_swap,
    floor_power_of_two,
    insertion_sort,
    reverse,
    rotate,
    wiki_merge,
    wiki_sort,
)


def less(x, y):
    return x < y


def value_less(x, y):
    return x[0] < y[0]


def tagged(values):
    return [(value, index) for index, value in enumerate(values)]


def stable_sorted(items):
    return sorted(items, key=lambda item: item[0])


def test_range_length():
    assert len(Range(3, 7)) == 4
    assert len(Range(5, 5)) == 0


@pytest.mark.parametrize("value, expected", [(63, 32), (64, 64), (1, 1), (0, 0)])
def test_floor_power_of_two(value, expected):
    assert floor_power_of_two(value) == expected


def test_floor_power_of_two_invariant():
    for value in range(1, 5000):
        power = floor_power_of_two(value)
        assert power <= value < 2 * power
        assert power & (power - 1) == 0


def test_binary_first_and_last_match_bisect():
    rng = random.Random(7)
    values = sorted(rng.randrange(10) for _ in range(60))
    for probe in range(10):
        array = values + [probe]
        index = len(array) - 1
        whole = Range(0, len(values))
        assert binary_first(array, index, whole, less) == bisect.bisect_left(values, probe)
        assert binary_last(array, index, whole, less) == bisect.bisect_right(values, probe)


def test_binary_search_empty_range():
    array = [4, 5, 6]
    assert binary_first(array, 0, Range(2, 2), less) == 2
    assert binary_last(array, 0, Range(2, 2), less) == 2


def test_insertion_sort_is_stable():
    rng = random.Random(3)
    items = tagged([rng.randrange(5) for _ in range(40)])
    array = list(items)
    insertion_sort(array, Range(0, len(array)), value_less)
    assert array == stable_sorted(items)


def test_insertion_sort_subrange_only():
    array = [9, 8, 3, 1, 2, 0]
    insertion_sort(array, Range(2, 5), less)
    assert array[:2] == [9, 8]
    assert array[2:5] == [1, 2, 3]
    assert array[5] == 0


def test_reverse_subrange():
    array = list(range(8))
    reverse(array, Range(2, 6))
    assert array == [0, 1, 5, 4, 3, 2, 6, 7]


def test_block_swap():
    array = list(range(10))
    block_swap(array, 1, 6, 3)
    assert array == [0, 6, 7, 8, 4, 5, 1, 2, 3, 9]


@pytest.mark.parametrize("cache_size", [0, 1, 512])
def test_rotate_documented_example(cache_size):
    array = [0, 1, 2, 3]
    rotate(array, 1, Range(0, 4), [None] * max(cache_size, 1), cache_size)
    assert array == [1, 2, 3, 0]


@pytest.mark.parametrize("cache_size", [0, 2, 512])
@pytest.mark.parametrize("amount", [-5, -1, 0, 1, 3, 7])
def test_rotate_matches_slice_rotation(cache_size, amount):
    array = list(range(12))
    span = Range(2, 10)
    values = array[2:10]
    shift = amount % len(values)
    rotate(array, amount, span, [None] * max(cache_size, 1), cache_size)
    assert array[2:10] == values[shift:] + values[:shift]
    assert array[:2] == [0, 1]
    assert array[10:] == [10, 11]


def test_rotate_without_cache_leaves_cache_untouched():
    cache = ["kept"] * 4
    array = list(range(6))
    rotate(array, 2, Range(0, 6), cache, 0)
    assert cache == ["kept"] * 4
    assert array == [2, 3, 4, 5, 0, 1]


def test_wiki_merge_with_cache():
    a_values = [1, 4, 4, 9]
    b_values = [0, 2, 4, 10, 11]
    array = a_values + b_values
    cache = [None] * 8
    cache[0:4] = a_values
    wiki_merge(array, Range(0, 0), Range(0, 4), Range(4, 9), less, cache, 8)
    assert array == sorted(a_values + b_values)


def test_wiki_merge_with_cache_is_stable():
    a_items = [(1, "a0"), (3, "a1"), (3, "a2")]
    b_items = [(1, "b0"), (3, "b1"), (5, "b2")]
    array = a_items + b_items
    cache = list(a_items) + [None] * 5
    wiki_merge(array, Range(0, 0), Range(0, 3), Range(3, 6), value_less, cache, 8)
    assert array == stable_sorted(a_items + b_items)


def test_wiki_merge_with_internal_buffer():
    a_values = [2, 5, 8]
    b_values = [1, 3, 5, 9]
    junk = [-30, -20, -10]
    array = a_values + junk + b_values
    wiki_merge(array, Range(0, 3), Range(3, 6), Range(6, 10), less, [], 0)
    assert array[3:] == sorted(a_values + b_values)
    assert sorted(array[:3]) == junk


def _patterns(size, seed):
    rng = random.Random(seed)
    return {
        "random_wide": [rng.randrange(1 << 15) for _ in range(size)],
        "random_narrow": [rng.randrange(4) for _ in range(size)],
        "ascending": list(range(size)),
        "descending": list(range(size, 0, -1)),
        "equal": [1000] * size,
        "pathological": [
            10 if i == 0 or i == size - 1 else (11 if i < size // 2 else 9)
            for i in range(size)
        ],
        "jittered": [i if rng.random() <= 0.9 else i - 2 for i in range(size)],
    }


@pytest.mark.parametrize("size", [0, 1, 2, 32, 33, 64, 100, 400, 1025, 3000])
def test_wiki_sort_is_stable_sort(size):
    for name, values in _patterns(size, size).items():
        items = tagged(values)
        array = list(items)
        wiki_sort(array, value_less)
        assert array == stable_sorted(items), name


def test_wiki_sort_many_duplicates_large():
    rng = random.Random(11)
    items = tagged([rng.randrange(3) for _ in range(5000)])
    array = list(items)
    wiki_sort(array, value_less)
    assert array == stable_sorted(items)


def test_wiki_sort_distinct_large():
    rng = random.Random(12)
    values = list(range(4000))
    rng.shuffle(values)
    wiki_sort(values, less)
    assert values == list(range(4000))


def test_wiki_sort_custom_order():
    values = [5, 1, 4, 2, 3] * 20
    wiki_sort(values, lambda x, y: x > y)
    assert values == sorted(values, reverse=True)
    assert values[0] == 5 and values[-1] == 1