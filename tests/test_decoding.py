import math

import numpy as np
import pytest

from rockglobe.decoding import (
    OrientedBoundingBox,
    PathAndFlags,
    Vertex,
    unpack_indices,
    unpack_obb,
    unpack_octant_mask_and_layer_bounds,
    unpack_path_and_flags,
    unpack_tex_coords,
    unpack_var_int,
    unpack_vertices,
)


def encode_var_int(value):
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def deltas(values):
    prev = 0
    out = []
    for value in values:
        out.append((value - prev) & 0xFF)
        prev = value
    return out


def test_var_int_leb128_example():
    assert unpack_var_int(bytes([0xAC, 0x02]), 0) == (300, 2)


@pytest.mark.parametrize("value", [0, 1, 127, 128, 16383, 16384, 2**27])
def test_var_int_round_trip(value):
    encoded = encode_var_int(value)
    assert unpack_var_int(b"\x07" + encoded, 1) == (value, 1 + len(encoded))


def test_var_int_at_end_returns_zero():
    assert unpack_var_int(b"\x05", 1) == (0, 1)


def test_vertices_accumulate_with_wraparound():
    xs, ys, zs = [10, 250, 3], [0, 0, 255], [200, 100, 50]
    packed = bytes(deltas(xs) + deltas(ys) + deltas(zs))
    vertices = unpack_vertices(packed)
    assert [(v.x, v.y, v.z) for v in vertices] == list(zip(xs, ys, zs))


def test_vertices_ignore_trailing_partial_plane():
    assert len(unpack_vertices(bytes(7))) == 2


def test_vertex_packs_to_eight_bytes():
    vertex = Vertex(1, 2, 3, 4, 0x0102, 0x0304)
    assert vertex.to_bytes() == bytes([1, 2, 3, 4, 2, 1, 4, 3])


def test_tex_coords_round_trip():
    u_mod, v_mod = 1000, 600
    us, vs = [5, 999, 300], [599, 0, 42]
    count = len(us)

    def increments(values, mod):
        prev = 0
        out = []
        for value in values:
            out.append((value - prev) % mod)
            prev = value
        return out

    du, dv = increments(us, u_mod), increments(vs, v_mod)
    header = (u_mod - 1).to_bytes(2, "little") + (v_mod - 1).to_bytes(2, "little")
    body = bytes(
        [d & 0xFF for d in du] + [d & 0xFF for d in dv] + [d >> 8 for d in du] + [d >> 8 for d in dv]
    )
    vertices = [Vertex() for _ in range(count)]
    offset, scale = unpack_tex_coords(header + body, vertices)

    assert [v.u for v in vertices] == us
    assert [v.v for v in vertices] == vs
    assert offset == (0.5, 0.5)
    assert scale == pytest.approx((1.0 / u_mod, 1.0 / v_mod))


def test_tex_coords_size_mismatch():
    with pytest.raises(ValueError):
        unpack_tex_coords(bytes(8), [Vertex(), Vertex()])
    with pytest.raises(ValueError):
        unpack_tex_coords(b"\x00", [])


def test_indices_new_and_back_references():
    values = [0, 0, 0, 1, 3]
    packed = encode_var_int(len(values)) + b"".join(encode_var_int(v) for v in values)
    assert unpack_indices(packed) == [0, 1, 2, 2, 0]


def test_indices_all_zeros_count_up():
    n = 20
    packed = encode_var_int(n) + bytes(n)
    assert unpack_indices(packed) == list(range(n))


def test_octant_mask_single_layer():
    indices = [0, 1, 2]
    vertices = [Vertex() for _ in range(3)]
    counts = [2, 1]
    packed = encode_var_int(len(counts)) + b"".join(encode_var_int(c) for c in counts)

    bounds = unpack_octant_mask_and_layer_bounds(packed, indices, vertices)

    assert [v.w for v in vertices] == [0, 0, 1]
    assert len(bounds) == 10
    assert bounds[0] == 0
    assert all(b == sum(counts) for b in bounds[1:])


def test_octant_mask_two_layers():
    counts = list(range(1, 17))
    total = sum(counts)
    indices = list(range(total))
    vertices = [Vertex() for _ in range(total)]
    packed = encode_var_int(len(counts)) + b"".join(encode_var_int(c) for c in counts)

    bounds = unpack_octant_mask_and_layer_bounds(packed, indices, vertices)

    assert bounds[0] == 0
    assert bounds[1] == sum(counts[:8])
    assert all(b == total for b in bounds[2:])
    assert all(0 <= v.w < 8 for v in vertices)
    assert vertices[-1].w == (len(counts) - 1) & 7


def test_octant_mask_too_many_counts():
    packed = encode_var_int(1) + encode_var_int(5)
    with pytest.raises(ValueError):
        unpack_octant_mask_and_layer_bounds(packed, [0, 1], [Vertex(), Vertex()])


def test_obb_identity_orientation():
    packed = bytes(6) + bytes([2, 4, 6]) + bytes(6)
    obb = unpack_obb(packed, (10.0, 20.0, 30.0), 0.5)
    assert isinstance(obb, OrientedBoundingBox)
    np.testing.assert_allclose(obb.center, [10.0, 20.0, 30.0])
    np.testing.assert_allclose(obb.extents, [1.0, 2.0, 3.0])
    np.testing.assert_allclose(obb.orientation, np.eye(3), atol=1e-12)


def test_obb_center_uses_signed_offsets():
    packed = (-4).to_bytes(2, "little", signed=True) + (8).to_bytes(2, "little", signed=True)
    packed += bytes(2) + bytes(3) + bytes(6)
    obb = unpack_obb(packed, (0.0, 0.0, 0.0), 2.0)
    np.testing.assert_allclose(obb.center, [-8.0, 16.0, 0.0])


def test_obb_orientation_is_a_rotation():
    euler = b"".join(v.to_bytes(2, "little", signed=True) for v in (12000, -7000, 30000))
    packed = bytes(6) + bytes([1, 1, 1]) + euler
    rot = unpack_obb(packed, (0.0, 0.0, 0.0), 1.0).orientation
    np.testing.assert_allclose(rot @ rot.T, np.eye(3), atol=1e-12)
    assert math.isclose(np.linalg.det(rot), 1.0, abs_tol=1e-12)


def test_obb_wrong_size():
    with pytest.raises(ValueError):
        unpack_obb(bytes(14), (0.0, 0.0, 0.0), 1.0)


def pack_path_and_flags(path, flags):
    word = flags
    for digit in reversed(path):
        word = (word << 3) | int(digit)
    return (word << 2) | (len(path) - 1)


@pytest.mark.parametrize("path,flags", [("0", 0), ("213", 5), ("7654", 1), ("01", 12)])
def test_path_and_flags_round_trip(path, flags):
    result = unpack_path_and_flags(pack_path_and_flags(path, flags))
    assert result == PathAndFlags(path=path, flags=flags, level=len(path))


def test_path_and_flags_zero():
    assert unpack_path_and_flags(0) == PathAndFlags(path="0", flags=0, level=1)