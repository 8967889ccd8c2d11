"""Compact identifiers for paths in the octree of a planet."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Iterator

_BASE_BITS = 128
_STORE_BITS = 8
_SIZE_SHIFT = _BASE_BITS - _STORE_BITS

MAX_ENCODABLE_LEVELS = (_BASE_BITS - _STORE_BITS) // 3
MAX_STORABLE_LEVELS = 1 << _STORE_BITS
MAX_LEVELS = min(MAX_ENCODABLE_LEVELS, MAX_STORABLE_LEVELS)

_BASE_MASK = (1 << _BASE_BITS) - 1
_DIGITS_MASK = (1 << _SIZE_SHIFT) - 1


def _with_size(value: int, size: int) -> int:
    if size > MAX_LEVELS:
        raise ValueError(f"Exceeded limit of {MAX_LEVELS} levels")
    return (value & _DIGITS_MASK) | (size << _SIZE_SHIFT)


@functools.total_ordering
class OctantIdentifier:
    """An octree path packed into a 128-bit integer.

    Each level takes three bits, starting at the lowest bits; the number of
    levels is stored in the top byte.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        self._value = value & _BASE_MASK

    @classmethod
    def from_string(cls, text: str) -> "OctantIdentifier":
        """Build an identifier from a string of octal digits such as ``"0213"``."""
        identifier = cls()
        for char in text:
            identifier = identifier + ((ord(char) - ord("0")) & 7)
        return identifier

    @property
    def value(self) -> int:
        """The raw packed integer."""
        return self._value

    def __len__(self) -> int:
        return self._value >> _SIZE_SHIFT

    def __getitem__(self, index: int) -> int:
        if not isinstance(index, int):
            raise TypeError("octant index must be an integer")
        if index < 0 or index >= MAX_LEVELS:
            raise IndexError("Out of bounds access")
        return (self._value >> (index * 3)) & 7

    def __iter__(self) -> Iterator[int]:
        value = self._value
        for _ in range(len(self)):
            yield value & 7
            value >>= 3

    def __add__(self, other: object) -> "OctantIdentifier":
        size = len(self)
        if isinstance(other, OctantIdentifier):
            shifted = (other._value << (size * 3)) & _BASE_MASK
            return OctantIdentifier(_with_size(self._value | shifted, size + len(other)))
        if isinstance(other, int):
            digit = (other & 7) << (size * 3)
            return OctantIdentifier(_with_size(self._value | digit, size + 1))
        return NotImplemented

    def substr(self, start: int, length: int) -> "OctantIdentifier":
        """Return the levels ``start`` to ``start + length`` (clipped to the size)."""
        if start < 0 or length < 0:
            raise ValueError("start and length must not be negative")
        end = min(start + length, len(self))
        if start >= end:
            return OctantIdentifier()
        masked = self._value & ((1 << (end * 3)) - 1)
        return OctantIdentifier(_with_size(masked >> (start * 3), end - start))

    def __str__(self) -> str:
        return "".join(str(digit) for digit in self)

    def __repr__(self) -> str:
        return f"OctantIdentifier.from_string({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OctantIdentifier):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OctantIdentifier):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)


def octant_path_to_directory(path: str) -> Path:
    """Turn ``"0213"`` into the nested directory path ``0/2/1/3``."""
    return Path(*path) if path else Path()