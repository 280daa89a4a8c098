# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Cached, observable values backed by repository endpoints.

A :class:`Resource` fetches its value through a *get* endpoint and can push
assignments through an optional *set* endpoint. It keeps the last value it
saw, even across failed refreshes, and announces every value change on its
``did_change`` signal.

State machine::

    IDLE --fetch--> FETCHING --ok--> HOLDING
                        |  \\--error--> FAILED (previous value kept)
    HOLDING/FAILED --fetch--> FETCHING

Assignments are applied optimistically. If the set call fails, the value
the cache held before the assignment is restored and the resource is
flagged for a refresh. The error is delivered through the returned task.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from functools import partial
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .._errors import (
    BuildRequestError,
    DecodeError,
    DependencyUnmetError,
    RepositoryError,
    SetError,
)
from ..endpoint import Endpoint
from ..signal import ChangeSignal
from ..task import Task, TaskStatus
from .dependency import EndpointDependency, as_dependencies, dependencies_met

if TYPE_CHECKING:
    from ..repository import Repository

ValueT = TypeVar("ValueT")

__all__ = (
    "EndpointCoordinator",
    "Resource",
    "ResourceState",
    "SetCoordinator",
)

logger = logging.getLogger(__name__)


def _identity(value: Any) -> Any:
    return value


class ResourceState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    HOLDING = "holding"
    FAILED = "failed"


@dataclass(slots=True)
class EndpointCoordinator:
    """How a resource reads its value.

    Attributes:
        endpoint: The get endpoint or an accessor ``(interface) -> endpoint``.
        input: ``(repository) -> input`` for the endpoint.
        output: ``(endpoint output) -> value``.
        options: Options passed with every call.
    """

    endpoint: Endpoint | Callable[[Any], Endpoint]
    input: Callable[[Any], Any] = field(default=lambda repository: None)
    output: Callable[[Any], Any] = _identity
    options: Any = None


@dataclass(slots=True)
class SetCoordinator:
    """How a resource writes its value.

    Attributes:
        endpoint: The set endpoint or an accessor ``(interface) -> endpoint``.
        input: ``(repository, value) -> input`` for the endpoint.
        output: ``(endpoint output) -> confirmed value``. ``None`` keeps the
            assigned value once the call succeeds.
        options: Options passed with every call.
    """

    endpoint: Endpoint | Callable[[Any], Endpoint]
    input: Callable[[Any, Any], Any] = field(default=lambda repository, value: value)
    output: Callable[[Any], Any] | None = None
    options: Any = None


class Resource(Generic[ValueT]):
    """A cached value fetched with a get endpoint.

    Args:
        get: How to read the value.
        set: How to write the value. Without it, assignments only update
            the cache.
        get_dependencies: Probes that must all pass before a get call.
        set_dependencies: Probes that must all pass before a set call.
        repository: Owning repository, held weakly.
        name: Name used in task names and logs.
    """

    def __init__(
        self,
        get: EndpointCoordinator,
        *,
        set: SetCoordinator | None = None,
        get_dependencies: Iterable[EndpointDependency | str | Callable] | None = None,
        set_dependencies: Iterable[EndpointDependency | str | Callable] | None = None,
        repository: Repository | None = None,
        name: str | None = None,
    ):
        self.get = get
        self.set = set
        self.get_dependencies = as_dependencies(get_dependencies)
        self.set_dependencies = as_dependencies(set_dependencies)
        self.name = name or "resource"

        self.latest_value: ValueT | None = None
        self.state = ResourceState.IDLE
        self.error: BaseException | None = None
        self.needs_get_call = True
        self.did_change = ChangeSignal(name=f"{self.name}.did_change")

        self._repository_ref: weakref.ref | None = (
            weakref.ref(repository) if repository is not None else None
        )
        self._last_root_id: Hashable | None = None
        self._in_flight: Task[ValueT] | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, state={self.state.value}, "
            f"needs_get_call={self.needs_get_call})"
        )

    @property
    def repository(self) -> Repository | None:
        if self._repository_ref is None:
            return None
        return self._repository_ref()

    @property
    def value(self) -> ValueT | None:
        return self.latest_value

    @value.setter
    def value(self, new_value: ValueT | None) -> None:
        self.set_value(new_value)

    @property
    def is_fetching(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done

    def _wrap(self, repository: Repository, error: RepositoryError) -> RepositoryError:
        return repository.interface.wrap_error(error)

    # ------------------------------------------------------------------
    # get
    # ------------------------------------------------------------------

    def fetch(self) -> Task[ValueT]:
        """Fetch the value through the get endpoint.

        Returns the in-flight task if a fetch is already running. Returns a
        skipped task carrying the cached value when the owning repository
        is gone or a dependency is unmet; ``needs_get_call`` stays True in
        that case so a later change signal retries.
        """
        task_name = f"fetch:{self.name}"
        repository = self.repository
        if repository is None:
            logger.warning(f"Resource '{self.name}' has no live repository; fetch skipped")
            return Task.skipped(self.latest_value, name=task_name)

        if self.is_fetching:
            return self._in_flight

        if not dependencies_met(repository, self.get_dependencies):
            self.needs_get_call = True
            logger.debug(f"Resource '{self.name}' has unmet dependencies; fetch skipped")
            return Task.skipped(self.latest_value, name=task_name)

        root_id = repository.interface.id
        try:
            input = self.get.input(repository)
        except Exception as e:
            error = self._wrap(
                repository, BuildRequestError(f"Cannot derive input for '{self.name}'", cause=e)
            )
            self._record_failure(error)
            return Task.failure(error, name=task_name)

        run_task = repository.run(self.get.endpoint, input, self.get.options)
        self.state = ResourceState.FETCHING
        task: Task[ValueT] = Task(
            lambda: self._complete_fetch(repository, run_task, root_id), name=task_name
        )
        self._in_flight = task
        task.add_done_callback(partial(self._fetch_finished, run_task, root_id))
        repository.cancellables.insert(task)
        return task.start()

    async def _complete_fetch(
        self, repository: Repository, run_task: Task, root_id: Hashable
    ) -> ValueT:
        try:
            output = await run_task
        except Exception as e:
            self._record_failure(e)
            raise

        try:
            value = self.get.output(output)
        except Exception as e:
            error = self._wrap(repository, DecodeError(f"Cannot map output of '{self.name}'", cause=e))
            self._record_failure(error)
            raise error from e

        self._record_value(value, root_id)
        return value

    def _fetch_finished(self, run_task: Task, root_id: Hashable, task: Task) -> None:
        if self._in_flight is task:
            self._in_flight = None
        if task.status is TaskStatus.CANCELLED:
            run_task.cancel()
            self._restore_settled_state()
            return
        self._fetch_settled(root_id)

    def _fetch_settled(self, root_id: Hashable) -> None:
        """Called once a fetch against the interface ``root_id`` finished."""

    def _record_value(self, value: ValueT, root_id: Hashable) -> None:
        self.latest_value = value
        self.error = None
        self.needs_get_call = False
        self._last_root_id = root_id
        self.state = ResourceState.HOLDING
        self.did_change.send()

    def _record_failure(self, error: BaseException) -> None:
        logger.debug(f"Resource '{self.name}' fetch failed: {error}")
        self.error = error
        self.needs_get_call = True
        self.state = ResourceState.FAILED

    def _restore_settled_state(self) -> None:
        if self.state is ResourceState.FETCHING:
            self.state = (
                ResourceState.IDLE if self.latest_value is None else ResourceState.HOLDING
            )

    # ------------------------------------------------------------------
    # set
    # ------------------------------------------------------------------

    def set_value(self, value: ValueT | None) -> Task[ValueT | None]:
        """Assign ``value`` and push it through the set endpoint, if any.

        The cache takes the new value immediately. When the set call fails
        the previous value is restored and the returned task fails with a
        :class:`SetError`.
        """
        task_name = f"set:{self.name}"
        repository = self.repository
        previous = self.latest_value

        if self.set is None or repository is None:
            self._apply(value)
            return Task.success(value, name=task_name)

        if not dependencies_met(repository, self.set_dependencies):
            error = self._wrap(
                repository,
                SetError(
                    f"Dependencies of '{self.name}' unmet; value not set",
                    cause=DependencyUnmetError(),
                ),
            )
            return Task.failure(error, name=task_name)

        try:
            input = self.set.input(repository, value)
        except Exception as e:
            error = self._wrap(
                repository, SetError(f"Cannot derive set input for '{self.name}'", cause=e)
            )
            return Task.failure(error, name=task_name)

        coordinator = self.set
        self._apply(value)
        run_task = repository.run(coordinator.endpoint, input, coordinator.options)
        task: Task[ValueT | None] = Task(
            lambda: self._complete_set(repository, coordinator, run_task, value, previous),
            name=task_name,
        )
        task.add_done_callback(partial(self._set_finished, run_task, value, previous))
        repository.cancellables.insert(task)
        return task.start()

    async def _complete_set(
        self,
        repository: Repository,
        coordinator: SetCoordinator,
        run_task: Task,
        value: ValueT | None,
        previous: ValueT | None,
    ) -> ValueT | None:
        try:
            output = await run_task
            confirmed = value if coordinator.output is None else coordinator.output(output)
        except Exception as e:
            self._roll_back(value, previous)
            error = self._wrap(repository, SetError(f"Setting '{self.name}' failed", cause=e))
            self.error = error
            raise error from e

        if self.latest_value is value and confirmed is not value:
            self._apply(confirmed)
        return confirmed

    def _set_finished(
        self, run_task: Task, value: ValueT | None, previous: ValueT | None, task: Task
    ) -> None:
        if task.status is TaskStatus.CANCELLED:
            run_task.cancel()
            self._roll_back(value, previous)

    def _apply(self, value: ValueT | None) -> None:
        self.latest_value = value
        if value is not None:
            self.state = ResourceState.HOLDING
            self.needs_get_call = False
        elif self.state is ResourceState.HOLDING:
            self.state = ResourceState.IDLE
        self.did_change.send()

    def _roll_back(self, value: ValueT | None, previous: ValueT | None) -> None:
        # a later assignment owns the cache
        if self.latest_value is not value:
            return
        logger.warning(f"Rolling back '{self.name}' after failed set")
        self.latest_value = previous
        self.needs_get_call = True
        if previous is None and self.state is ResourceState.HOLDING:
            self.state = ResourceState.IDLE
        self.did_change.send()

    def erase(self):
        from .any_resource import AnyRepositoryResource

        return AnyRepositoryResource(self)
