"""A prioritised pool of worker threads."""

from __future__ import annotations

import contextlib
import os
import threading
import time
from collections import deque
from typing import Callable, Iterator, Optional

Task = Callable[[], None]

QUEUE_COUNT = 4


def task_manager_thread_count(used_threads: int = 3) -> int:
    """Threads left for the pool after ``used_threads``, at least three."""
    total = os.cpu_count() or 1
    return max(3, total - used_threads)


class _PriorityMutex:
    """A recursive lock that lets high-priority acquirers go first."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._state = threading.Lock()
        self._pending_high = 0
        self._no_high_pending = threading.Event()
        self._no_high_pending.set()

    @contextlib.contextmanager
    def high_priority(self) -> Iterator[None]:
        with self._state:
            self._pending_high += 1
            self._no_high_pending.clear()
        try:
            self.lock.acquire()
        finally:
            with self._state:
                self._pending_high -= 1
                if not self._pending_high:
                    self._no_high_pending.set()
        try:
            yield
        finally:
            self.lock.release()

    @contextlib.contextmanager
    def low_priority(self) -> Iterator[None]:
        self._no_high_pending.wait()
        with self.lock:
            yield


class TaskManager:
    """Runs scheduled callables on worker threads, lowest queue index first."""

    QUEUE_COUNT = QUEUE_COUNT

    def __init__(self, num_threads: Optional[int] = None) -> None:
        if num_threads is None:
            num_threads = task_manager_thread_count()
        self._stopped = False
        self._mutex = _PriorityMutex()
        self._cond = threading.Condition(self._mutex.lock)
        self._queues: list[deque[Task]] = [deque() for _ in range(QUEUE_COUNT)]
        self._threads = [
            threading.Thread(target=self._work, name="Task Manager", daemon=True)
            for _ in range(num_threads)
        ]
        for thread in self._threads:
            thread.start()

    def __enter__(self) -> "TaskManager":
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def schedule(
        self,
        task: Task,
        priority: int = QUEUE_COUNT - 1,
        is_high_priority_thread: bool = False,
    ) -> None:
        """Queue ``task``; priorities above the last queue land in the last queue."""
        if priority < 0:
            raise ValueError("priority must not be negative")
        guard = self._mutex.high_priority() if is_high_priority_thread else self._mutex.low_priority()
        with guard:
            self._queues[min(len(self._queues) - 1, priority)].append(task)
            self._cond.notify()

    def stop(self) -> None:
        """Drop pending tasks and wait for the workers to finish."""
        with self._mutex.high_priority():
            self._stopped = True
            self._queues = [deque() for _ in range(QUEUE_COUNT)]
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current and thread.is_alive():
                thread.join()

    def get_tasks(self, index: Optional[int] = None) -> int:
        """Pending tasks in total, or in the queue at ``index``."""
        if index is None:
            return sum(len(queue) for queue in self._queues)
        if not 0 <= index < len(self._queues):
            raise IndexError(f"no task queue {index}")
        return len(self._queues[index])

    @contextlib.contextmanager
    def lock_high_priority(self) -> Iterator[None]:
        """Hold the queue lock with priority over the workers."""
        with self._mutex.high_priority():
            yield

    def _should_wake(self) -> bool:
        return self._stopped or any(self._queues)

    def _work(self) -> None:
        while True:
            with self._mutex.low_priority():
                if not self._should_wake():
                    self._cond.wait_for(self._should_wake, 1.0)
                if self._stopped:
                    break
                queue = next((q for q in self._queues if q), None)
                if queue is None:
                    continue
                task = queue.popleft()

            try:
                task()
            except Exception as exc:
                print(exc)

            time.sleep(0)