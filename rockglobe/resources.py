"""Owned graphics resource handles, deferred deletion and buffering state."""

from __future__ import annotations

import enum
import threading
from typing import Callable, List, Optional, Sequence

import numpy as np

Destructor = Callable[[int], None]
BulkDeleter = Callable[[List[int]], None]


class Handle:
    """Owns a resource name and releases it exactly once."""

    __slots__ = ("_value", "_destructor")

    def __init__(self, value: Optional[int] = None, destructor: Optional[Destructor] = None) -> None:
        self._value = value
        self._destructor = destructor

    def get(self) -> int:
        if self._value is None:
            raise ValueError("handle holds no object")
        return self._value

    def __int__(self) -> int:
        return self.get()

    def is_valid(self) -> bool:
        return self._value is not None

    def destroy(self) -> None:
        """Release the object; an object without a destructor is an error."""
        if self._value is None:
            return
        if self._destructor is None:
            raise RuntimeError("handle has an object but no destructor")
        value, destructor = self._value, self._destructor
        self._value = None
        self._destructor = None
        destructor(value)

    def __enter__(self) -> "Handle":
        return self

    def __exit__(self, *args: object) -> None:
        self.destroy()


class DeferredDeleter:
    """Hands out handles whose release is queued for a later bulk delete.

    Handles may be released on any thread; ``perform_cleanup`` runs the
    deletions on the thread that owns the graphics context.
    """

    def __init__(self, delete_buffers: BulkDeleter, delete_textures: BulkDeleter) -> None:
        self._delete_buffers = delete_buffers
        self._delete_textures = delete_textures
        self._lock = threading.Lock()
        self._buffers: List[int] = []
        self._textures: List[int] = []

    def create_buffer(self, name: int) -> Handle:
        return Handle(name, self._schedule_buffer)

    def create_texture(self, name: int) -> Handle:
        return Handle(name, self._schedule_texture)

    def perform_cleanup(self) -> None:
        """Delete every buffer and texture released since the last cleanup."""
        with self._lock:
            buffers, self._buffers = self._buffers, []
            textures, self._textures = self._textures, []
        if buffers:
            self._delete_buffers(buffers)
        if textures:
            self._delete_textures(textures)

    def __enter__(self) -> "DeferredDeleter":
        return self

    def __exit__(self, *args: object) -> None:
        self.perform_cleanup()

    def _schedule_buffer(self, name: int) -> None:
        with self._lock:
            self._buffers.append(name)

    def _schedule_texture(self, name: int) -> None:
        with self._lock:
            self._textures.append(name)


class BufferState(enum.Enum):
    UNBUFFERED = enum.auto()
    BUFFERING = enum.auto()
    BUFFERED = enum.auto()


class BufferTracker:
    """Tracks whether a mesh's data has been uploaded."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = BufferState.UNBUFFERED

    @property
    def state(self) -> BufferState:
        return self._state

    def is_buffered(self) -> bool:
        return self._state is BufferState.BUFFERED

    def is_buffering(self) -> bool:
        return self._state is BufferState.BUFFERING

    def mark_for_buffering(self) -> bool:
        """Claim the upload; only the first caller on an unbuffered mesh wins."""
        with self._lock:
            if self._state is not BufferState.UNBUFFERED:
                return False
            self._state = BufferState.BUFFERING
            return True

    def mark_as_buffered(self) -> None:
        self._state = BufferState.BUFFERED

    def can_be_deleted(self) -> bool:
        return self._state is not BufferState.BUFFERING


_PLAYER_HEIGHT = 2.5
_PLAYER_WIDTH = 1.0


def _normalize(vec: np.ndarray) -> np.ndarray:
    return vec / np.linalg.norm(vec)


def _translation(offset: Sequence[float]) -> np.ndarray:
    matrix = np.eye(4)
    matrix[:3, 3] = offset
    return matrix


def player_model_matrix(position: Sequence[float], orientation: Sequence[float]) -> np.ndarray:
    """Model matrix placing a player box upright on the globe at ``position``."""
    position = np.asarray(position, dtype=float)
    orientation = np.asarray(orientation, dtype=float)

    up = _normalize(position)
    right = _normalize(np.cross(orientation, up))
    backwards = _normalize(np.cross(right, up))

    rotation = np.eye(4)
    rotation[:3, 0] = right
    rotation[:3, 1] = up
    rotation[:3, 2] = backwards

    scale = np.diag([_PLAYER_WIDTH, _PLAYER_HEIGHT, _PLAYER_WIDTH, 1.0])
    return _translation(position) @ rotation @ _translation((0.0, -1.0, 0.0)) @ scale