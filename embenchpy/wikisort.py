"""In-place, stable block merge sort using O(1) extra memory."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, List, MutableSequence, Optional, Tuple

Comparison = Callable[[Any, Any], bool]

CACHE_SIZE = 512
"""Number of items held by the fixed-size scratch cache."""


@dataclass
class Range:
    """Half-open span ``[start, end)`` of positions in a sequence."""

    start: int = 0
    end: int = 0

    def __len__(self) -> int:
        return self.end - self.start


def _dup(rng: Range) -> Range:
    return Range(rng.start, rng.end)


def _swap(array: MutableSequence[Any], i: int, j: int) -> None:
    array[i], array[j] = array[j], array[i]


def floor_power_of_two(value: int) -> int:
    """Largest power of two not exceeding ``value`` (63 -> 32, 64 -> 64)."""
    if value <= 0:
        return 0
    return 1 << (value.bit_length() - 1)


def binary_first(
    array: MutableSequence[Any], index: int, rng: Range, compare: Comparison
) -> int:
    """First position in ``rng`` whose item is not less than ``array[index]``."""
    start, end = rng.start, rng.end - 1
    while start < end:
        mid = start + (end - start) // 2
        if compare(array[mid], array[index]):
            start = mid + 1
        else:
            end = mid
    if start == rng.end - 1 and compare(array[start], array[index]):
        start += 1
    return start


def binary_last(
    array: MutableSequence[Any], index: int, rng: Range, compare: Comparison
) -> int:
    """Position after the last item in ``rng`` not greater than ``array[index]``."""
    start, end = rng.start, rng.end - 1
    while start < end:
        mid = start + (end - start) // 2
        if not compare(array[index], array[mid]):
            start = mid + 1
        else:
            end = mid
    if start == rng.end - 1 and not compare(array[index], array[start]):
        start += 1
    return start


def insertion_sort(
    array: MutableSequence[Any], rng: Range, compare: Comparison
) -> None:
    """Stable insertion sort of the items in ``rng``."""
    for i in range(rng.start + 1, rng.end):
        temp = array[i]
        j = i
        while j > rng.start and compare(temp, array[j - 1]):
            array[j] = array[j - 1]
            j -= 1
        array[j] = temp


def reverse(array: MutableSequence[Any], rng: Range) -> None:
    """Reverse the items in ``rng`` in place."""
    array[rng.start:rng.end] = array[rng.start:rng.end][::-1]


def block_swap(
    array: MutableSequence[Any], start1: int, start2: int, block_size: int
) -> None:
    """Swap ``block_size`` items starting at ``start1`` with those at ``start2``."""
    for offset in range(block_size):
        _swap(array, start1 + offset, start2 + offset)


def rotate(
    array: MutableSequence[Any],
    amount: int,
    rng: Range,
    cache: List[Any],
    cache_size: int,
) -> None:
    """Rotate ``rng`` left by ``amount`` (right when negative).

    When the smaller part fits into ``cache_size`` items of ``cache`` the
    cache is used as scratch space; a ``cache_size`` of zero leaves it alone.
    """
    if len(rng) == 0:
        return
    split = rng.start + amount if amount >= 0 else rng.end + amount
    range1 = Range(rng.start, split)
    range2 = Range(split, rng.end)
    len1, len2 = len(range1), len(range2)

    if len1 <= len2:
        if len1 <= cache_size:
            cache[0:len1] = array[range1.start:range1.end]
            array[range1.start:range1.start + len2] = array[range2.start:range2.end]
            array[range1.start + len2:range1.start + len2 + len1] = cache[0:len1]
            return
    elif len2 <= cache_size:
        cache[0:len2] = array[range2.start:range2.end]
        array[range2.end - len1:range2.end] = array[range1.start:range1.end]
        array[range1.start:range1.start + len2] = cache[0:len2]
        return

    reverse(array, range1)
    reverse(array, range2)
    reverse(array, rng)


def wiki_merge(
    array: MutableSequence[Any],
    buffer: Range,
    a: Range,
    b: Range,
    compare: Comparison,
    cache: List[Any],
    cache_size: int,
) -> None:
    """Merge ``a`` with the following ``b``.

    If ``a`` fits in the cache its contents are expected there; otherwise its
    contents are expected in ``buffer``, which ends up holding the items that
    were in ``a`` in some other order.
    """
    len_a, len_b = len(a), len(b)
    if len_a <= cache_size:
        a_index = 0
        b_index = b.start
        insert = a.start
        if len_b > 0 and len_a > 0:
            while True:
                if not compare(array[b_index], cache[a_index]):
                    array[insert] = cache[a_index]
                    a_index += 1
                    insert += 1
                    if a_index == len_a:
                        break
                else:
                    array[insert] = array[b_index]
                    b_index += 1
                    insert += 1
                    if b_index == b.end:
                        break
        array[insert:insert + (len_a - a_index)] = cache[a_index:len_a]
        return

    a_count = b_count = insert = 0
    if len_b > 0 and len_a > 0:
        while True:
            if not compare(array[b.start + b_count], array[buffer.start + a_count]):
                _swap(array, a.start + insert, buffer.start + a_count)
                a_count += 1
                insert += 1
                if a_count >= len_a:
                    break
            else:
                _swap(array, a.start + insert, b.start + b_count)
                b_count += 1
                insert += 1
                if b_count >= len_b:
                    break
    block_swap(array, buffer.start + a_count, a.start + insert, len_a - a_count)


@dataclass
class _Levels:
    """Internal buffers kept for reuse across the merges of one level."""

    level1: Range
    level2: Range
    level_a: Range
    level_b: Range


def _advance(
    decimal: int, fractional: int, decimal_step: int, fractional_step: int,
    fractional_base: int,
) -> Tuple[int, int]:
    decimal += decimal_step
    fractional += fractional_step
    if fractional >= fractional_base:
        fractional -= fractional_base
        decimal += 1
    return decimal, fractional


def _differ(array: MutableSequence[Any], i: int, j: int, compare: Comparison) -> bool:
    return compare(array[i], array[j]) or compare(array[j], array[i])


def _scan_forward(
    array: MutableSequence[Any], first: int, stop: int, count: int, target: int,
    compare: Comparison,
) -> Tuple[int, int]:
    pos = first
    while pos < stop:
        if _differ(array, pos - 1, pos, compare):
            count += 1
            if count == target:
                break
        pos += 1
    return pos, count


def _scan_backward(
    array: MutableSequence[Any], first: int, stop: int, count: int, target: int,
    compare: Comparison,
) -> Tuple[int, int]:
    pos = first
    while pos >= stop:
        if _differ(array, pos, pos + 1, compare):
            count += 1
            if count == target:
                break
        pos -= 1
    return pos, count


def _extract_buffers(
    array: MutableSequence[Any], a: Range, b: Range, buffer_size: int,
    compare: Comparison, cache_size: int,
) -> Tuple[Range, Range, Range, Range]:
    """Look for runs of unique values to serve as internal buffers."""
    pos, count = _scan_forward(array, a.start + 1, a.end, 1, buffer_size, compare)
    buffer1 = Range(pos, pos + count)
    buffer2 = Range()
    buffer_a = Range()
    buffer_b = Range()

    if buffer_size <= cache_size:
        buffer2 = Range(a.start, a.start)
        if len(buffer1) == buffer_size:
            buffer_a = Range(buffer1.start, buffer1.start + buffer_size)
            buffer_b = Range(b.end, b.end)
            buffer1 = Range(a.start, a.start + buffer_size)
        else:
            buffer_a = Range(buffer1.start, buffer1.start)
            pos, count = _scan_backward(
                array, b.end - 2, b.start, 1, buffer_size, compare)
            buffer1 = Range(pos, pos + count)
            if len(buffer1) == buffer_size:
                buffer_b = Range(buffer1.start, buffer1.start + buffer_size)
                buffer1 = Range(b.end - buffer_size, b.end)
        return buffer1, buffer2, buffer_a, buffer_b

    pos, count = _scan_forward(
        array, buffer1.start + 1, a.end, 0, buffer_size, compare)
    buffer2 = Range(pos, pos + count)

    if len(buffer2) == buffer_size:
        buffer_a = Range(buffer2.start, buffer2.start + buffer_size * 2)
        buffer_b = Range(b.end, b.end)
        buffer1 = Range(a.start, a.start + buffer_size)
        buffer2 = Range(a.start + buffer_size, a.start + buffer_size * 2)
    elif len(buffer1) == buffer_size:
        buffer_a = Range(buffer1.start, buffer1.start + buffer_size)
        buffer1 = Range(a.start, a.start + buffer_size)
        pos, count = _scan_backward(
            array, b.end - 2, b.start, 1, buffer_size, compare)
        buffer2 = Range(pos, pos + count)
        if len(buffer2) == buffer_size:
            buffer_b = Range(buffer2.start, buffer2.start + buffer_size)
            buffer2 = Range(b.end - buffer_size, b.end)
        else:
            buffer1.end = buffer1.start
    else:
        pos, count = _scan_backward(
            array, b.end - 2, b.start, 1, buffer_size, compare)
        buffer1 = Range(pos, pos + count)
        pos, count = _scan_backward(
            array, buffer1.start - 1, b.start, 0, buffer_size, compare)
        buffer2 = Range(pos, pos + count)
        if len(buffer2) == buffer_size:
            buffer_a = Range(a.start, a.start)
            buffer_b = Range(buffer2.start, buffer2.start + buffer_size * 2)
            buffer1 = Range(b.end - buffer_size, b.end)
            buffer2 = Range(buffer1.start - buffer_size, buffer1.start)
        else:
            buffer1.end = buffer1.start
    return buffer1, buffer2, buffer_a, buffer_b


def _merge_repeating(
    array: MutableSequence[Any], a: Range, b: Range, compare: Comparison,
    cache: List[Any],
) -> None:
    """Merge two ranges that hold few distinct values."""
    a, b = _dup(a), _dup(b)
    while len(a) > 0 and len(b) > 0:
        mid = binary_first(array, a.start, b, compare)
        amount = mid - a.end
        rotate(array, -amount, Range(a.start, mid), cache, len(cache))
        b.start = mid
        a = Range(binary_last(array, a.start + amount, a, compare), b.start)


def _gather_buffers(
    array: MutableSequence[Any], a: Range, b: Range, buffer_a: Range,
    buffer_b: Range, compare: Comparison, cache: List[Any],
) -> Tuple[Range, Range]:
    """Move the unique values to the start of ``a`` and the end of ``b``."""
    cache_size = len(cache)
    buffer_a = _dup(buffer_a)
    buffer_b = _dup(buffer_b)

    length = len(buffer_a)
    count = 0
    index = buffer_a.start
    while count < length:
        if index == a.start or _differ(array, index - 1, index, compare):
            rotate(array, -count, Range(index + 1, buffer_a.start + 1),
                   cache, cache_size)
            buffer_a.start = index + count
            count += 1
        index -= 1
    new_a = Range(a.start, a.start + length)

    length = len(buffer_b)
    count = 0
    index = buffer_b.start
    while count < length:
        if index == b.end - 1 or _differ(array, index, index + 1, compare):
            rotate(array, count, Range(buffer_b.start, index), cache, cache_size)
            buffer_b.start = index - count
            count += 1
        index += 1
    new_b = Range(b.end - length, b.end)
    return new_a, new_b


def _merge_pair(
    array: MutableSequence[Any], a: Range, b: Range, levels: _Levels,
    block_size: int, buffer_size: int, compare: Comparison, cache: List[Any],
) -> None:
    """Merge the adjacent sorted ranges ``a`` and ``b``."""
    cache_size = len(cache)
    if len(a) <= cache_size:
        cache[0:len(a)] = array[a.start:a.end]
        wiki_merge(array, Range(0, 0), a, b, compare, cache, cache_size)
        return

    if len(levels.level1) > 0:
        buffer_a = Range(a.start, a.start)
        buffer_b = Range(b.end, b.end)
        buffer1 = _dup(levels.level1)
        buffer2 = _dup(levels.level2)
    else:
        buffer1, buffer2, buffer_a, buffer_b = _extract_buffers(
            array, a, b, buffer_size, compare, cache_size)
        if len(buffer1) < buffer_size:
            _merge_repeating(array, a, b, compare, cache)
            return
        buffer_a, buffer_b = _gather_buffers(
            array, a, b, buffer_a, buffer_b, compare, cache)
        levels.level1 = _dup(buffer1)
        levels.level2 = _dup(buffer2)
        levels.level_a = _dup(buffer_a)
        levels.level_b = _dup(buffer_b)

    block_a = Range(buffer_a.end, a.end)
    first_a = Range(buffer_a.end, buffer_a.end + len(block_a) % block_size)

    # Tag each A block by swapping its second value with one from buffer1.
    for index, index_a in enumerate(range(first_a.end + 1, block_a.end, block_size)):
        _swap(array, buffer1.start + index, index_a)

    last_a = _dup(first_a)
    last_b = Range(0, 0)
    block_b = Range(b.start, b.start + min(block_size, len(b) - len(buffer_b)))
    block_a.start += len(first_a)

    min_a = block_a.start
    min_value = array[min_a]
    index_a = 0

    if len(last_a) <= cache_size:
        cache[0:len(last_a)] = array[last_a.start:last_a.end]
    else:
        block_swap(array, last_a.start, buffer2.start, len(last_a))

    while True:
        if (len(last_b) > 0 and not compare(array[last_b.end - 1], min_value)) \
                or len(block_b) == 0:
            b_split = binary_first(array, min_a, last_b, compare)
            b_remaining = last_b.end - b_split

            block_swap(array, block_a.start, min_a, block_size)
            _swap(array, block_a.start + 1, buffer1.start + index_a)
            index_a += 1

            wiki_merge(array, buffer2, last_a, Range(last_a.end, b_split),
                       compare, cache, cache_size)

            if block_size <= cache_size:
                cache[0:block_size] = array[block_a.start:block_a.start + block_size]
            else:
                block_swap(array, block_a.start, buffer2.start, block_size)

            block_swap(array, b_split, block_a.start + block_size - b_remaining,
                       b_remaining)

            last_a = Range(block_a.start - b_remaining,
                           block_a.start - b_remaining + block_size)
            last_b = Range(last_a.end, last_a.end + b_remaining)
            block_a.start += block_size
            if len(block_a) == 0:
                break

            min_a = block_a.start + 1
            for find_a in range(min_a + block_size, block_a.end, block_size):
                if compare(array[find_a], array[min_a]):
                    min_a = find_a
            min_a -= 1
            min_value = array[min_a]
        elif len(block_b) < block_size:
            # The cache holds the previous A block, so rotate without it.
            rotate(array, -len(block_b), Range(block_a.start, block_b.end), cache, 0)
            last_b = Range(block_a.start, block_a.start + len(block_b))
            block_a.start += len(block_b)
            block_a.end += len(block_b)
            min_a += len(block_b)
            block_b.end = block_b.start
        else:
            block_swap(array, block_a.start, block_b.start, block_size)
            last_b = Range(block_a.start, block_a.start + block_size)
            if min_a == block_a.start:
                min_a = block_a.end
            block_a.start += block_size
            block_a.end += block_size
            block_b.start += block_size
            block_b.end += block_size
            if block_b.end > buffer_b.start:
                block_b.end = buffer_b.start

    wiki_merge(array, buffer2, last_a, Range(last_a.end, b.end - len(buffer_b)),
               compare, cache, cache_size)


def _redistribute(
    array: MutableSequence[Any], levels: _Levels, compare: Comparison,
    cache: List[Any],
) -> None:
    """Sort the internal buffers and merge them back into the array."""
    cache_size = len(cache)
    insertion_sort(array, levels.level2, compare)

    level_a = _dup(levels.level_a)
    level_b = _dup(levels.level_b)
    level_start = level_a.start

    index = level_a.end
    while len(level_a) > 0:
        if index == level_b.start or not compare(array[index], array[level_a.start]):
            amount = index - level_a.end
            rotate(array, -amount, Range(level_a.start, index), cache, cache_size)
            level_a.start += amount + 1
            level_a.end += amount
            index -= 1
        index += 1

    index = level_b.start
    while len(level_b) > 0:
        if index == level_start or not compare(array[level_b.end - 1], array[index - 1]):
            amount = level_b.start - index
            rotate(array, amount, Range(index, level_b.end), cache, cache_size)
            level_b.start -= amount
            level_b.end -= amount + 1
            index += 1
        index -= 1


def wiki_sort(array: MutableSequence[Any], compare: Comparison) -> None:
    """Stably sort ``array`` in place; ``compare(x, y)`` means x < y."""
    size = len(array)
    cache: List[Optional[Any]] = [None] * CACHE_SIZE

    if size <= 32:
        insertion_sort(array, Range(0, size), compare)
        return

    power_of_two = floor_power_of_two(size)
    fractional_base = power_of_two // 16
    fractional_step = size % fractional_base
    decimal_step = size // fractional_base

    decimal = fractional = 0
    while decimal < size:
        start = decimal
        decimal, fractional = _advance(
            decimal, fractional, decimal_step, fractional_step, fractional_base)
        insertion_sort(array, Range(start, decimal), compare)

    merge_size = 16
    while merge_size < power_of_two:
        block_size = math.isqrt(decimal_step)
        buffer_size = decimal_step // block_size + 1
        levels = _Levels(Range(), Range(), Range(), Range())

        decimal = fractional = 0
        while decimal < size:
            start = decimal
            decimal, fractional = _advance(
                decimal, fractional, decimal_step, fractional_step, fractional_base)
            mid = decimal
            decimal, fractional = _advance(
                decimal, fractional, decimal_step, fractional_step, fractional_base)
            end = decimal

            if compare(array[end - 1], array[start]):
                rotate(array, mid - start, Range(start, end), cache, CACHE_SIZE)
            elif compare(array[mid], array[mid - 1]):
                _merge_pair(array, Range(start, mid), Range(mid, end), levels,
                            block_size, buffer_size, compare, cache)

        if len(levels.level1) > 0:
            _redistribute(array, levels, compare, cache)

        decimal_step += decimal_step
        fractional_step += fractional_step
        if fractional_step >= fractional_base:
            fractional_step -= fractional_base
            decimal_step += 1
        merge_size += merge_size