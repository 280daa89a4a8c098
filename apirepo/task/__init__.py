# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .cancellables import CancellableSet
from .status import Execution, TaskStatus
from .task import ParametrizedTask, Task

__all__ = (
    "CancellableSet",
    "Execution",
    "ParametrizedTask",
    "Task",
    "TaskStatus",
)
