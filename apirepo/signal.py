# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import threading
import weakref
from collections.abc import Awaitable, Callable
from typing import Any

__all__ = ("ChangeSignal",)

logger = logging.getLogger(__name__)


class ChangeSignal:
    """Payload-free broadcast stream with weakref-based subscriber cleanup.

    Every subscriber is called on each :meth:`send`; no delivery order is
    promised between subscribers. Bound methods are stored as weak references
    (via ``WeakMethod``) so a subscription never keeps its owner alive.
    Plain functions and lambdas are stored strongly and must be removed
    with :meth:`unsubscribe`.

    Subscribers may be sync or async. Coroutines returned by a subscriber are
    scheduled on the running loop. Subscriber failures are logged and never
    reach the sender.

    Example::

        signal = ChangeSignal()
        signal.subscribe(resource.on_repository_change)
        signal.send()
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name or "change"
        self._subscribers: list[Callable[[], Any]] = []
        self._pending: set[asyncio.Task] = set()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ChangeSignal(name={self.name!r}, subscribers={self.subscriber_count})"

    def subscribe(
        self,
        callback: Callable[[], None] | Callable[[], Awaitable[None]],
    ) -> None:
        """Add subscriber callback (idempotent)."""
        with self._lock:
            for ref in self._subscribers:
                if ref() == callback:
                    return
            if hasattr(callback, "__self__"):
                self._subscribers.append(weakref.WeakMethod(callback))
            else:
                self._subscribers.append(lambda cb=callback: cb)

    def unsubscribe(
        self,
        callback: Callable[[], None] | Callable[[], Awaitable[None]],
    ) -> None:
        with self._lock:
            for ref in list(self._subscribers):
                if ref() == callback:
                    self._subscribers.remove(ref)
                    return

    def _cleanup_dead_refs(self) -> list[Callable[[], Any]]:
        """Prune dead weakrefs, return live callbacks. Must hold _lock."""
        callbacks, alive_refs = [], []
        for ref in self._subscribers:
            if (cb := ref()) is not None:
                callbacks.append(cb)
                alive_refs.append(ref)
        self._subscribers[:] = alive_refs
        return callbacks

    def send(self) -> None:
        """Notify every live subscriber that something changed."""
        with self._lock:
            callbacks = self._cleanup_dead_refs()
        for callback in callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    self._schedule(result)
            except Exception as e:
                logger.error(f"Error in '{self.name}' subscriber: {e}", exc_info=True)

    def _schedule(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(self._guard(coro))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _guard(self, coro) -> None:
        try:
            await coro
        except Exception as e:
            logger.error(f"Error in '{self.name}' subscriber: {e}", exc_info=True)

    def forward(self, other: ChangeSignal) -> Callable[[], None]:
        """Re-send every notification of this signal on ``other``.

        ``other`` is held weakly. Returns the relay callback, which stays
        subscribed for as long as the caller keeps a reference to it.
        """
        target = weakref.ref(other)

        def relay() -> None:
            if (signal := target()) is not None:
                signal.send()

        with self._lock:
            self._subscribers.append(weakref.ref(relay))
        return relay

    @property
    def subscriber_count(self) -> int:
        """Count live subscribers (triggers dead ref cleanup)."""
        with self._lock:
            return len(self._cleanup_dead_refs())
