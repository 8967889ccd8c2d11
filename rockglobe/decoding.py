"""Decoders for the packed mesh, bounding-box and path fields of tile data."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass, field
from itertools import accumulate
from typing import List, Sequence, Tuple

import numpy as np

LAYER_BOUND_COUNT = 10
OBB_PACKED_SIZE = 15


class TextureFormat(enum.IntEnum):
    """Pixel layout of a decoded mesh texture."""

    RGB = 0
    DXT1 = 1


@dataclass
class Vertex:
    """A mesh vertex: byte position, octant mask and texture coordinates."""

    x: int = 0
    y: int = 0
    z: int = 0
    w: int = 0
    u: int = 0
    v: int = 0

    def to_bytes(self) -> bytes:
        """The 8-byte packed form used for vertex buffers."""
        return struct.pack("<BBBBHH", self.x, self.y, self.z, self.w, self.u, self.v)


@dataclass
class OrientedBoundingBox:
    """A box with a centre, half extents and a 3x3 rotation matrix (row, column)."""

    center: np.ndarray = field(default_factory=lambda: np.zeros(3))
    extents: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.eye(3))


@dataclass(frozen=True)
class PathAndFlags:
    """The relative octant path, flag bits and level packed in node metadata."""

    path: str
    flags: int
    level: int


def unpack_var_int(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Read a little-endian base-128 integer; return it and the new offset.

    Reading stops quietly at the end of ``data``.
    """
    value = 0
    factor = 1
    size = len(data)
    while offset < size:
        byte = data[offset]
        offset += 1
        value += (byte & 0x7F) * factor
        factor <<= 7
        if not byte & 0x80:
            break
    return value, offset


def unpack_vertices(packed: bytes) -> List[Vertex]:
    """Decode delta-coded x, y and z planes into vertices."""
    count = len(packed) // 3

    def plane(axis: int) -> List[int]:
        return list(accumulate(packed[axis * count:(axis + 1) * count], lambda a, b: (a + b) & 0xFF))

    return [Vertex(x=x, y=y, z=z) for x, y, z in zip(plane(0), plane(1), plane(2))]


def unpack_tex_coords(
    packed: bytes, vertices: Sequence[Vertex]
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Fill in the vertices' u and v; return the uv offset and uv scale."""
    count = len(vertices)
    if len(packed) < 4 or count * 4 != len(packed) - 4:
        raise ValueError("texture coordinate data does not match the vertex count")

    u_mod = 1 + int.from_bytes(packed[0:2], "little")
    v_mod = 1 + int.from_bytes(packed[2:4], "little")
    data = packed[4:]

    u = v = 0
    for i, vertex in enumerate(vertices):
        u = (u + data[i] + (data[count * 2 + i] << 8)) % u_mod
        v = (v + data[count + i] + (data[count * 3 + i] << 8)) % v_mod
        vertex.u = u
        vertex.v = v

    return (0.5, 0.5), (1.0 / u_mod, 1.0 / v_mod)


def unpack_indices(packed: bytes) -> List[int]:
    """Decode the triangle strip: zero means a new vertex, n a back reference."""
    length, offset = unpack_var_int(packed, 0)
    strip: List[int] = []
    zeros = 0
    for _ in range(length):
        value, offset = unpack_var_int(packed, offset)
        strip.append((zeros - value) & 0xFFFF)
        if value == 0:
            zeros += 1
    return strip


def unpack_octant_mask_and_layer_bounds(
    packed: bytes, indices: Sequence[int], vertices: Sequence[Vertex]
) -> List[int]:
    """Set each vertex's octant from the per-octant counts; return 10 layer bounds."""
    length, offset = unpack_var_int(packed, 0)
    bounds: List[int] = []
    index_pos = 0
    total = 0

    for i in range(length):
        if i % 8 == 0 and len(bounds) < LAYER_BOUND_COUNT:
            bounds.append(total)

        count, offset = unpack_var_int(packed, offset)
        if index_pos + count > len(indices):
            raise ValueError("octant counts exceed the number of indices")
        for idx in indices[index_pos:index_pos + count]:
            if idx < len(indices) and idx < len(vertices):
                vertices[idx].w = i & 7
        index_pos += count
        total += count

    bounds.extend([total] * (LAYER_BOUND_COUNT - len(bounds)))
    return bounds


def unpack_obb(
    packed: bytes, head_node_center: Sequence[float], meters_per_texel: float
) -> OrientedBoundingBox:
    """Decode a 15-byte packed oriented bounding box."""
    if len(packed) != OBB_PACKED_SIZE:
        raise ValueError(f"packed bounding box must be {OBB_PACKED_SIZE} bytes")

    cx, cy, cz = struct.unpack_from("<3h", packed, 0)
    ex, ey, ez = packed[6], packed[7], packed[8]
    e0, e1, e2 = struct.unpack_from("<3h", packed, 9)

    center = np.array([cx, cy, cz], dtype=float) * meters_per_texel + np.asarray(
        head_node_center, dtype=float
    )
    extents = np.array([ex, ey, ez], dtype=float) * meters_per_texel

    a0 = e0 * math.pi / 32768.0
    a1 = e1 * math.pi / 65536.0
    a2 = e2 * math.pi / 32768.0
    c0, s0 = math.cos(a0), math.sin(a0)
    c1, s1 = math.cos(a1), math.sin(a1)
    c2, s2 = math.cos(a2), math.sin(a2)

    columns = np.array(
        [
            [c0 * c2 - c1 * s0 * s2, c1 * c0 * s2 + c2 * s0, s2 * s1],
            [-c0 * s2 - c2 * c1 * s0, c0 * c1 * c2 - s0 * s2, c2 * s1],
            [s1 * s0, -c0 * s1, c1],
        ]
    )
    return OrientedBoundingBox(center=center, extents=extents, orientation=columns.T)


def unpack_path_and_flags(path_and_flags: int) -> PathAndFlags:
    """Split node metadata's packed path-and-flags word."""
    level = 1 + (path_and_flags & 3)
    rest = path_and_flags >> 2
    digits = []
    for _ in range(level):
        digits.append(str(rest & 7))
        rest >>= 3
    return PathAndFlags(path="".join(digits), flags=rest, level=level)