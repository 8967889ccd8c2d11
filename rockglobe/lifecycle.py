"""Fetch/ready/delete life cycle shared by streamed objects."""

from __future__ import annotations

import abc
import enum
import threading
import time
from typing import Optional


class ObjectState(enum.Enum):
    FRESH = enum.auto()
    FETCHING = enum.auto()
    READY = enum.auto()
    DELETING = enum.auto()
    FAILED = enum.auto()


_FINAL_STATES = frozenset({ObjectState.READY, ObjectState.FAILED, ObjectState.DELETING})


class LifecycleObject(abc.ABC):
    """An object that is fetched on first use and can later be torn down again."""

    def __init__(self, parent: Optional["LifecycleObject"] = None) -> None:
        self._parent = parent
        self._lock = threading.Lock()
        self._state = ObjectState.FRESH
        self._stop = threading.Event()
        self._last_use = time.monotonic()

    @abc.abstractmethod
    def populate(self) -> None:
        """Start loading the object's data."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Drop the object's data."""

    def can_be_deleted(self) -> bool:
        return True

    @property
    def state(self) -> ObjectState:
        return self._state

    def _transition(self, expected: ObjectState, new: ObjectState) -> bool:
        with self._lock:
            if self._state is not expected:
                return False
            self._state = new
            return True

    def unlink_from(self, parent: "LifecycleObject") -> None:
        if self._parent is parent:
            self._parent = None

    def has_parent(self) -> bool:
        return self._parent is not None

    def is_being_deleted(self) -> bool:
        return self._state is ObjectState.DELETING

    def is_in_final_state(self) -> bool:
        return self._state in _FINAL_STATES

    def is_fetching(self) -> bool:
        return self._state is ObjectState.FETCHING

    def can_be_used(self) -> bool:
        """Whether the object is ready; a fresh object starts fetching."""
        state = self._state
        if state in (ObjectState.DELETING, ObjectState.FAILED):
            return False
        self._last_use = time.monotonic()
        if state is ObjectState.READY:
            return True
        self._fetch()
        return False

    def mark_for_deletion(self) -> bool:
        """Request deletion; fails (but still cancels) while a fetch is running."""
        if not self.is_in_final_state() and not self._transition(
            ObjectState.FRESH, ObjectState.DELETING
        ):
            self._stop.set()
            return False
        self._state = ObjectState.DELETING
        self._stop.set()
        return True

    def try_perform_deletion(self) -> bool:
        if self._state is not ObjectState.DELETING or not self.can_be_deleted():
            return False
        self.clear()
        self._stop = threading.Event()
        self._state = ObjectState.FRESH
        return True

    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def was_used_within(self, normal: float, fetching: float, failed: float) -> bool:
        """Whether the last use lies within a window (seconds) chosen by state."""
        state = self._state
        if state is ObjectState.FAILED:
            window = failed
        elif state is ObjectState.FETCHING:
            window = fetching
        else:
            window = normal
        return (time.monotonic() - self._last_use) < window

    def finish_fetching(self, success: bool) -> None:
        self._state = ObjectState.READY if success else ObjectState.FAILED

    def _fetch(self) -> None:
        if not self._transition(ObjectState.FRESH, ObjectState.FETCHING):
            return
        try:
            self.populate()
        except Exception:
            self.finish_fetching(False)