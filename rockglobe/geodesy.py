"""Earth coordinate conversions, sky tint and view-frustum culling."""

from __future__ import annotations

import enum
import math
from typing import List, Sequence, Tuple

import numpy as np

A_EARTH = 6378.1370
EARTH_ECC = 0.08181919084262157
NAV_E2 = EARTH_ECC * EARTH_ECC

SKY_COLOR = 0x83B5FC
DARK_COLOR = 0x091321
SKY_LOW_LIMIT = 10_000.0
SKY_UP_LIMIT = 500_000.0


class FrustumClass(enum.IntEnum):
    """Where a bounding box lies relative to a view frustum."""

    INSIDE = -1
    INTERSECT = 0
    OUTSIDE = 1


def lla_to_ecef(latitude: float, longitude: float, altitude: float) -> np.ndarray:
    """Convert latitude and longitude (degrees) and altitude to earth-centred coordinates.

    Coordinates outside the accepted range give the zero vector.
    """
    if latitude < -90.0 or latitude > 90.0 or longitude < -180.0 or longitude > 360.0:
        return np.zeros(3)

    lat = math.radians(latitude)
    lon = math.radians(longitude)
    slat, clat = math.sin(lat), math.cos(lat)
    slon, clon = math.sin(lon), math.cos(lon)

    r_n = A_EARTH / math.sqrt(1.0 - NAV_E2 * slat * slat)
    x = (r_n + altitude) * clat * clon
    y = (r_n + altitude) * clat * slon
    z = (r_n * (1.0 - NAV_E2) + altitude) * slat
    return np.array([x, y, z])


def ecef_to_lla(ecef: Sequence[float]) -> np.ndarray:
    """Convert earth-centred coordinates to latitude, longitude (degrees) and altitude."""
    x, y, z = (float(c) for c in ecef)

    b = A_EARTH * math.sqrt(1.0 - NAV_E2)
    ep2 = (A_EARTH * A_EARTH - b * b) / (b * b)

    p = math.hypot(x, y)
    theta = math.atan2(z * A_EARTH, p * b)

    lon = math.atan2(y, x)
    lat = math.atan2(
        z + ep2 * b * math.sin(theta) ** 3,
        p - NAV_E2 * A_EARTH * math.cos(theta) ** 3,
    )

    r_n = A_EARTH / math.sqrt(1.0 - NAV_E2 * math.sin(lat) ** 2)
    alt = p / math.cos(lat) - r_n

    return np.array([math.degrees(lat), math.degrees(lon), alt])


def _rgb(color: int) -> Tuple[float, float, float]:
    return ((color >> 16) & 0xFF) / 255.0, ((color >> 8) & 0xFF) / 255.0, (color & 0xFF) / 255.0


def sky_color(altitude: float) -> Tuple[float, float, float]:
    """The clear colour: blue near the ground fading to dark with altitude."""
    middle = max(min(altitude, SKY_UP_LIMIT), SKY_LOW_LIMIT) - SKY_LOW_LIMIT
    dark_scale = middle / (SKY_UP_LIMIT - SKY_LOW_LIMIT)
    sky_scale = 1.0 - dark_scale

    sky = _rgb(SKY_COLOR)
    dark = _rgb(DARK_COLOR)
    r, g, b = (s * sky_scale + d * dark_scale for s, d in zip(sky, dark))
    return r, g, b


def frustum_planes(projection: Sequence[Sequence[float]]) -> List[np.ndarray]:
    """The six clip planes (a, b, c, d) of a 4x4 projection matrix in row-major form."""
    matrix = np.asarray(projection, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError("projection must be a 4x4 matrix")
    last = matrix[3]
    return [last + matrix[i] for i in range(3)] + [last - matrix[i] for i in range(3)]


def classify_obb_frustum(obb: object, planes: Sequence[Sequence[float]]) -> FrustumClass:
    """Classify an oriented bounding box against frustum planes.

    ``obb`` needs ``center``, ``extents`` and a row-major 3x3 ``orientation``.
    """
    orientation_t = np.asarray(obb.orientation, dtype=float).T
    center = np.asarray(obb.center, dtype=float)
    extents = np.asarray(obb.extents, dtype=float)

    result = FrustumClass.INSIDE
    for plane in planes:
        plane4 = np.asarray(plane, dtype=float)
        plane3 = plane4[:3]
        abs_plane = np.abs(orientation_t @ plane3)

        r = float(np.dot(extents, abs_plane))
        d = float(np.dot(center, plane3) + plane4[3])

        if abs(d) < r:
            result = FrustumClass.INTERSECT
        if d + r < 0.0:
            return FrustumClass.OUTSIDE
    return result


def _normalize(vec: np.ndarray) -> np.ndarray:
    return vec / np.linalg.norm(vec)


def align_vector(source: Sequence[float], target: Sequence[float]) -> np.ndarray:
    """The component of ``target`` along the direction of ``source``."""
    unit = _normalize(np.asarray(source, dtype=float))
    return unit * float(np.dot(unit, np.asarray(target, dtype=float)))


def vector_forward(vec: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """The unit direction of ``vec`` flattened onto the plane perpendicular to ``up``."""
    up = np.asarray(up, dtype=float)
    unit = _normalize(np.asarray(vec, dtype=float))
    right = np.cross(unit, up)
    forward = np.cross(up, right)
    return _normalize(forward)