# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = ("TaskStatus", "Execution")


class TaskStatus(str, Enum):
    """Status states for tracking task execution progress.

    Attributes:
        PENDING: Initial state before the task is started.
        PROCESSING: The task body is running.
        COMPLETED: The task delivered a value.
        FAILED: The task delivered an error.
        SKIPPED: The task delivered a value without doing any work.
        CANCELLED: The task was cancelled before delivering anything.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (TaskStatus.PENDING, TaskStatus.PROCESSING)


class Execution:
    """Represents the execution state of a task.

    Attributes:
        status (`TaskStatus`): The current status of the task.
        duration (float | None): Time (in seconds) the execution took,
            if known.
        response (Any): The delivered value, if any.
        error (BaseException | None): The delivered failure, if any.
    """

    __slots__ = ("status", "duration", "response", "error")

    def __init__(
        self,
        duration: float | None = None,
        response: Any = None,
        status: TaskStatus = TaskStatus.PENDING,
        error: BaseException | None = None,
    ) -> None:
        self.status = status
        self.duration = duration
        self.response = response
        self.error = error

    def __str__(self) -> str:
        return (
            f"Execution(status={self.status.value}, duration={self.duration}, "
            f"response={self.response}, error={self.error})"
        )

    def to_dict(self) -> dict:
        error_value = self.error
        if isinstance(self.error, BaseException):
            error_value = {
                "error": type(self.error).__name__,
                "message": str(self.error),
            }
        return {
            "status": self.status.value,
            "duration": self.duration,
            "response": self.response,
            "error": error_value,
        }
