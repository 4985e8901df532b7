"""Small deterministic replacements for C library services used by benchmarks.

The random number generator and the bump allocator behave identically on
every platform, so benchmark results can be verified against fixed values.
"""

from __future__ import annotations

RAND_MAX = (1 << 15) - 1
"""Largest value returned by :meth:`Random.rand`."""

VERIFY_DOUBLE_EPS = 1.0e-13
VERIFY_FLOAT_EPS = 1.0e-5

_SEED_MASK = (1 << 31) - 1
_UINT_MASK = (1 << 32) - 1


class BeebsError(Exception):
    """Raised when a benchmark check or heap precondition fails."""


class Random:
    """Linear congruential generator yielding values in ``[0, RAND_MAX]``."""

    def __init__(self, seed: int = 0) -> None:
        self._seed = 0
        self.srand(seed)

    def rand(self) -> int:
        """Advance the generator and return the next value."""
        self._seed = (self._seed * 1103515245 + 12345) & _SEED_MASK
        return self._seed >> 16

    def srand(self, new_seed: int) -> None:
        """Restart the sequence from ``new_seed``."""
        self._seed = int(new_seed) & _UINT_MASK


class Heap:
    """Bump allocator over a fixed block of memory; nothing is ever freed.

    Allocations are reported as byte offsets into :attr:`memory`.
    """

    def __init__(self, size: int, word_size: int = 8) -> None:
        if word_size <= 0:
            raise BeebsError("word size must be positive")
        self.word_size = word_size
        self.memory = bytearray()
        self._next = 0
        self._requested = 0
        self.init(size)

    @property
    def size(self) -> int:
        return len(self.memory)

    @property
    def requested(self) -> int:
        """Bytes requested (including padding) since the last :meth:`init`."""
        return self._requested

    def init(self, size: int) -> None:
        """Reset the heap to an empty block of ``size`` bytes."""
        if size < 0 or size % self.word_size != 0:
            raise BeebsError(
                f"heap size {size} is not a multiple of {self.word_size}"
            )
        self.memory = bytearray(size)
        self._next = 0
        self._requested = 0

    def check(self) -> bool:
        """Return True if no request has exceeded the heap since :meth:`init`."""
        return self._requested <= len(self.memory)

    def malloc(self, size: int) -> int | None:
        """Reserve ``size`` bytes and return their offset, or None on failure."""
        if size == 0:
            return None
        next_offset = self._next + size
        self._requested += size
        remainder = next_offset % self.word_size
        if remainder:
            padding = self.word_size - remainder
            next_offset += padding
            self._requested += padding
        if next_offset > len(self.memory):
            return None
        offset = self._next
        self._next = next_offset
        return offset

    def calloc(self, nmemb: int, size: int) -> int | None:
        """Reserve ``nmemb * size`` zeroed bytes."""
        total = nmemb * size
        offset = self.malloc(total)
        if offset is not None:
            self.memory[offset:offset + total] = bytes(total)
        return offset

    def realloc(self, offset: int | None, size: int) -> int | None:
        """Reserve a new block of ``size`` bytes and copy the old contents."""
        if offset is None:
            return None
        new_offset = self.malloc(size)
        if new_offset is not None:
            data = bytes(self.memory[offset:offset + size])
            self.memory[new_offset:new_offset + len(data)] = data
        return new_offset

    def free(self, offset: int | None) -> None:
        """Release a block; memory is never reclaimed by this allocator.

        Raises :class:`BeebsError` if ``offset`` lies outside the heap.
        """
        if offset is not None and not 0 <= offset < len(self.memory):
            raise BeebsError(f"offset {offset} is outside the heap")


def check(condition: object) -> None:
    """Raise :class:`BeebsError` if ``condition`` is false."""
    if not condition:
        raise BeebsError("benchmark check failed")


def float_eq(expected: float, actual: float) -> bool:
    """Compare single-precision results within :data:`VERIFY_FLOAT_EPS`."""
    return abs(expected - actual) < VERIFY_FLOAT_EPS


def double_eq(expected: float, actual: float) -> bool:
    """Compare double-precision results within :data:`VERIFY_DOUBLE_EPS`."""
    return abs(expected - actual) < VERIFY_DOUBLE_EPS