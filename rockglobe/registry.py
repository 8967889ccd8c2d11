"""Ownership list of streamed objects with incremental cleanup."""

from __future__ import annotations

import threading
import time
from typing import List, Optional

from rockglobe.lifecycle import LifecycleObject


class ObjectRegistry:
    """Owns every streamed object and drops those that are no longer linked.

    Newly stored objects wait in a pending list until the next cleanup pass
    moves them into the main list. A cleanup pass resumes where the previous
    one stopped when it ran out of time.
    """

    def __init__(self) -> None:
        self._objects: List[LifecycleObject] = []
        self._new_objects: List[LifecycleObject] = []
        self._objects_lock = threading.Lock()
        self._new_lock = threading.Lock()
        self._position = 0

    def store(self, obj: LifecycleObject) -> LifecycleObject:
        """Take ownership of ``obj``; it is returned for convenience."""
        with self._new_lock:
            self._new_objects.append(obj)
        return obj

    @property
    def pending(self) -> int:
        """Objects stored but not yet moved into the main list."""
        with self._new_lock:
            return len(self._new_objects)

    def cleanup_dangling_objects(self, timeout: float) -> None:
        """Walk the objects for at most ``timeout`` seconds.

        Unlinked objects in a final state are dropped; unlinked objects that
        are not are marked for deletion so a later pass can drop them.
        """
        with self._new_lock:
            new_objects, self._new_objects = self._new_objects, []

        with self._objects_lock:
            start = time.monotonic()
            position: Optional[int] = self._position
            if position >= len(self._objects):
                # An iterator reset on an empty list stays at its end.
                position = 0 if self._objects else None

            self._objects.extend(new_objects)
            if position is None:
                position = len(self._objects)

            try:
                while position < len(self._objects):
                    if time.monotonic() - start >= timeout:
                        return

                    obj = self._objects[position]
                    is_unused = not obj.has_parent()
                    is_final = obj.is_in_final_state()

                    if is_unused and is_final:
                        del self._objects[position]
                    else:
                        if is_unused:
                            obj.mark_for_deletion()
                        position += 1
            finally:
                self._position = position

    def __len__(self) -> int:
        return len(self._objects)