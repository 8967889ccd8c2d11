"""On-disk cache files, request paths and file names for tile data."""

from __future__ import annotations

import os
import struct
import tempfile
from pathlib import Path
from typing import Optional, Union

CACHE_SEED = 0x12345678
CACHE_DIRECTORY = "rockglobe"
BASE_URL = os.environ.get("ROCKGLOBE_BASE_URL", "http://localhost/rt/")

_MASK = 0xFFFFFFFF
_P1 = 2654435761
_P2 = 2246822519
_P3 = 3266489917
_P4 = 668265263
_P5 = 374761393


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & _MASK


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK
    return (_rotl(acc, 13) * _P1) & _MASK


def xxh32(data: bytes, seed: int = 0) -> int:
    """The 32-bit xxHash of ``data``."""
    data = bytes(data)
    length = len(data)
    stripe_end = length - length % 16

    if length >= 16:
        v1 = (seed + _P1 + _P2) & _MASK
        v2 = (seed + _P2) & _MASK
        v3 = seed & _MASK
        v4 = (seed - _P1) & _MASK
        for a, b, c, d in struct.iter_unpack("<4I", data[:stripe_end]):
            v1, v2, v3, v4 = _round(v1, a), _round(v2, b), _round(v3, c), _round(v4, d)
        acc = _rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)
    else:
        stripe_end = 0
        acc = seed + _P5

    acc = (acc + length) & _MASK

    tail = data[stripe_end:]
    word_end = len(tail) - len(tail) % 4
    for (word,) in struct.iter_unpack("<I", tail[:word_end]):
        acc = (acc + word * _P3) & _MASK
        acc = (_rotl(acc, 17) * _P4) & _MASK
    for byte in tail[word_end:]:
        acc = (acc + byte * _P5) & _MASK
        acc = (_rotl(acc, 11) * _P1) & _MASK

    acc ^= acc >> 15
    acc = (acc * _P2) & _MASK
    acc ^= acc >> 13
    acc = (acc * _P3) & _MASK
    acc ^= acc >> 16
    return acc


def write_cache_file(path: Union[str, Path], data: bytes) -> None:
    """Write ``data`` followed by its checksum, creating directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    checksum = xxh32(data, CACHE_SEED).to_bytes(4, "little")
    path.write_bytes(bytes(data) + checksum)


def read_cache_file(path: Union[str, Path]) -> Optional[bytes]:
    """Return the cached payload, or None if missing, short or corrupt."""
    try:
        raw = Path(path).read_bytes()
    except OSError:
        return None
    if len(raw) < 4:
        return None
    payload, stored = raw[:-4], int.from_bytes(raw[-4:], "little")
    if xxh32(payload, CACHE_SEED) != stored:
        return None
    return payload


def build_google_url(planet: str, path: str) -> str:
    """The download URL of ``path`` for ``planet``."""
    return f"{BASE_URL}{planet}/{path}"


def build_cache_path(planet: str, path: Union[str, Path]) -> Path:
    """Where the cached copy of ``path`` for ``planet`` lives."""
    return Path(tempfile.gettempdir()) / CACHE_DIRECTORY / planet / path


def bulk_filename(path: object, epoch: int) -> str:
    """Request name of a bulk's metadata."""
    return f"pb=!1m2!1s{path}!2u{epoch}"


def node_filename(
    path: object, epoch: int, texture_format: int, imagery_epoch: Optional[int] = None
) -> str:
    """Request name of a node's data; ``texture_format`` is the wire format code."""
    name = f"pb=!1m2!1s{path}!2u{epoch}!2e{texture_format}"
    if imagery_epoch is not None:
        name += f"!3u{imagery_epoch}"
    return name + "!4b0"