# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

from ..signal import ChangeSignal
from ..task import Task

if TYPE_CHECKING:
    from ..repository import Repository

ValueT = TypeVar("ValueT")
RepositoryT = TypeVar("RepositoryT", bound="Repository")

__all__ = ("AnyResource", "AnyRepositoryResource", "ResourceType")


@runtime_checkable
class ResourceType(Protocol):
    latest_value: Any
    did_change: ChangeSignal

    def fetch(self) -> Task: ...


class AnyResource(Generic[ValueT]):
    """Uniform view over any resource-like object."""

    def __init__(self, resource: ResourceType):
        if isinstance(resource, AnyResource):
            resource = resource.base
        self._base = resource

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._base!r})"

    @property
    def base(self) -> ResourceType:
        return self._base

    @property
    def latest_value(self) -> ValueT | None:
        return self._base.latest_value

    @property
    def did_change(self) -> ChangeSignal:
        return self._base.did_change

    def fetch(self) -> Task[ValueT]:
        return self._base.fetch()


class AnyRepositoryResource(AnyResource[ValueT], Generic[RepositoryT, ValueT]):
    """A type-erased resource that also knows its repository.

    The repository is held weakly, like the resource itself holds it.
    """

    def __init__(
        self,
        resource: ResourceType,
        repository: RepositoryT | None = None,
    ):
        super().__init__(resource)
        if repository is None:
            repository = getattr(self._base, "repository", None)
        self._repository_ref = weakref.ref(repository) if repository is not None else None

    @property
    def repository(self) -> RepositoryT:
        """The owning repository.

        Raises:
            RuntimeError: If there is none or it was garbage collected.
        """
        repository = self._repository_ref() if self._repository_ref else None
        if repository is None:
            raise RuntimeError("Resource is not attached to a live repository")
        return repository
