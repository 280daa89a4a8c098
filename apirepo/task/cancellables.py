# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator

from .task import Task

__all__ = ("CancellableSet",)

logger = logging.getLogger(__name__)


class CancellableSet:
    """Holds in-flight tasks so an owner can cancel them in bulk.

    Tasks remove themselves once they finish.
    """

    def __init__(self) -> None:
        self._tasks: set[Task] = set()
        self._lock = threading.Lock()

    def insert(self, task: Task) -> Task:
        if task.done:
            return task
        with self._lock:
            self._tasks.add(task)
        task.add_done_callback(self._discard)
        return task

    def _discard(self, task: Task) -> None:
        with self._lock:
            self._tasks.discard(task)

    def cancel_all(self) -> int:
        """Cancel every held task and return how many were cancelled."""
        with self._lock:
            tasks = list(self._tasks)
            self._tasks.clear()
        cancelled = sum(1 for task in tasks if task.cancel())
        if cancelled:
            logger.debug(f"Cancelled {cancelled} outstanding task(s)")
        return cancelled

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        with self._lock:
            return iter(list(self._tasks))

    def __contains__(self, task: object) -> bool:
        with self._lock:
            return task in self._tasks
