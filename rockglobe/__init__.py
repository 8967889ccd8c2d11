"""Path encoding, tile decoding, object lifecycle, caching, geodesy and controls for a terrain octree."""

__version__ = "0.1.0"

__all__ = [
    "cache",
    "controls",
    "decoding",
    "geodesy",
    "lifecycle",
    "octant",
    "registry",
    "resources",
    "tasks",
]