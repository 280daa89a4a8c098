# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..task import CancellableSet, Task

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")

__all__ = ("RequestSession",)


class RequestSession(ABC, Generic[RequestT, ResponseT]):
    """Executes requests. The transport behind it is opaque to repositories.

    Attributes:
        cancellables: Tasks the session or its repositories registered for
            bulk cancellation.
    """

    def __init__(self) -> None:
        self.cancellables = CancellableSet()

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """Send ``request`` and return its response.

        Raises:
            Exception: Any transport-level failure.
        """

    def task(self, request: RequestT) -> Task[ResponseT]:
        """Return an unstarted task that executes ``request``."""
        task: Task[ResponseT] = Task(
            lambda: self.execute(request), name=f"{type(self).__name__}.execute"
        )
        return self.cancellables.insert(task)

    async def close(self) -> None:
        self.cancellables.cancel_all()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
