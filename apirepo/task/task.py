# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""One-shot cancellable asynchronous tasks.

A :class:`Task` wraps a coroutine function and records exactly one terminal
outcome: a value, an error, a skip, or a cancellation. Tasks are started
explicitly and can be awaited any number of times; every waiter observes the
same outcome.

Example::

    task = Task(lambda: session.execute(request), name="get_user")
    task.start()
    user = await task
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import anyio

from .._errors import MissingInputError
from ..ln import Unset, is_unset
from .status import Execution, TaskStatus

if TYPE_CHECKING:
    from .cancellables import CancellableSet

T = TypeVar("T")

__all__ = ("Task", "ParametrizedTask")

logger = logging.getLogger(__name__)


class Task(Generic[T]):
    """A single-result cancellable asynchronous unit of work."""

    def __init__(
        self,
        body: Callable[[], Awaitable[T]] | None = None,
        *,
        name: str | None = None,
    ):
        self.name = name or self.__class__.__name__
        self.execution = Execution()
        self._body = body
        self._aio_task: asyncio.Task | None = None
        self._done_callbacks: list[Callable[[Task[T]], Any]] = []

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, status={self.status.value})"

    @property
    def status(self) -> TaskStatus:
        return self.execution.status

    @property
    def done(self) -> bool:
        return self.status.is_terminal

    @property
    def response(self) -> T | None:
        return self.execution.response

    @property
    def error(self) -> BaseException | None:
        return self.execution.error

    # ------------------------------------------------------------------
    # pre-completed constructors
    # ------------------------------------------------------------------

    @classmethod
    def success(cls, value: T, *, name: str | None = None) -> Task[T]:
        task = cls(name=name)
        task._finish(TaskStatus.COMPLETED, response=value)
        return task

    @classmethod
    def failure(cls, error: BaseException, *, name: str | None = None) -> Task[T]:
        task = cls(name=name)
        task._finish(TaskStatus.FAILED, error=error)
        return task

    @classmethod
    def skipped(cls, value: T | None = None, *, name: str | None = None) -> Task[T]:
        task = cls(name=name)
        task._finish(TaskStatus.SKIPPED, response=value)
        return task

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Task[T]:
        """Schedule the body on the running event loop.

        Starting a task that is already running or finished is a no-op.

        Raises:
            RuntimeError: If no event loop is running.
        """
        if self.status is not TaskStatus.PENDING:
            return self
        loop = asyncio.get_running_loop()
        self.execution.status = TaskStatus.PROCESSING
        self._aio_task = loop.create_task(self._run(), name=self.name)
        return self

    def cancel(self) -> bool:
        """Cancel the task. No value or error is delivered afterwards.

        Returns:
            True if the task was cancelled, False if it had already finished.
        """
        if self.done:
            return False
        if self._aio_task is not None and not self._aio_task.done():
            self._aio_task.cancel()
        logger.warning(f"Task '{self.name}' cancelled.")
        self._finish(TaskStatus.CANCELLED)
        return True

    async def _run(self) -> None:
        start = time.monotonic()
        try:
            value = await self._execute()
        except asyncio.CancelledError:
            self._finish(TaskStatus.CANCELLED)
            raise
        except Exception as e:
            self.execution.duration = time.monotonic() - start
            self._finish(TaskStatus.FAILED, error=e)
        else:
            self.execution.duration = time.monotonic() - start
            self._finish(TaskStatus.COMPLETED, response=value)

    async def _execute(self) -> T:
        if self._body is None:
            raise NotImplementedError("Task has no body to execute.")
        return await self._body()

    def _finish(
        self,
        status: TaskStatus,
        response: Any = None,
        error: BaseException | None = None,
    ) -> None:
        if self.done:
            return
        self.execution.status = status
        self.execution.response = response
        self.execution.error = error
        callbacks, self._done_callbacks = self._done_callbacks, []
        for callback in callbacks:
            self._call_done_callback(callback)

    def _call_done_callback(self, callback: Callable[[Task[T]], Any]) -> None:
        try:
            callback(self)
        except Exception as e:
            logger.error(f"Error in done callback of task '{self.name}': {e}", exc_info=True)

    def add_done_callback(self, callback: Callable[[Task[T]], Any]) -> None:
        """Call ``callback(task)`` once the task reaches a terminal state.

        Callbacks added after completion run immediately.
        """
        if self.done:
            self._call_done_callback(callback)
        else:
            self._done_callbacks.append(callback)

    # ------------------------------------------------------------------
    # waiting
    # ------------------------------------------------------------------

    async def result(self, timeout: float | None = None) -> T:
        """Wait for the task and return its value.

        A pending task is started first. Cancelling the waiter does not
        cancel the task.

        Raises:
            asyncio.CancelledError: If the task was cancelled.
            TimeoutError: If ``timeout`` elapses first.
            Exception: The task's error, if it failed.
        """
        if self.status is TaskStatus.PENDING:
            self.start()
        if not self.done and self._aio_task is not None:
            with anyio.fail_after(timeout):
                try:
                    await asyncio.shield(self._aio_task)
                except asyncio.CancelledError:
                    if self.status is not TaskStatus.CANCELLED:
                        raise
        return self._outcome()

    def _outcome(self) -> T:
        match self.status:
            case TaskStatus.COMPLETED | TaskStatus.SKIPPED:
                return self.execution.response
            case TaskStatus.FAILED:
                raise self.execution.error
            case TaskStatus.CANCELLED:
                raise asyncio.CancelledError(f"Task '{self.name}' was cancelled")
        raise RuntimeError(f"Task '{self.name}' has not finished")

    def __await__(self):
        return self.result().__await__()


class ParametrizedTask(Task[T]):
    """A task whose body takes an input that is delivered before starting.

    Starting without an input ends the task with :class:`MissingInputError`.
    """

    def __init__(
        self,
        body: Callable[[Any], Awaitable[T]],
        *,
        name: str | None = None,
        cancellables: CancellableSet | None = None,
    ):
        super().__init__(name=name)
        self._parametrized_body = body
        self._cancellables = cancellables
        self.input: Any = Unset

    def receive(self, input: Any) -> ParametrizedTask[T]:
        if self.status is not TaskStatus.PENDING:
            raise RuntimeError(f"Task '{self.name}' already started; cannot receive input")
        self.input = input
        return self

    def start(self) -> Task[T]:
        if self.status is TaskStatus.PENDING and is_unset(self.input):
            self._finish(TaskStatus.FAILED, error=MissingInputError())
            return self
        super().start()
        if self._cancellables is not None:
            self._cancellables.insert(self)
        return self

    async def _execute(self) -> T:
        return await self._parametrized_body(self.input)
