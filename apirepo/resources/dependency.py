# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ..ln import attr_accessor

if TYPE_CHECKING:
    from ..repository import Repository

__all__ = (
    "EndpointDependency",
    "PredicateDependency",
    "ResourceDependency",
    "as_dependencies",
)


class EndpointDependency(ABC):
    """A read-only probe deciding whether an endpoint call may be issued.

    Probes are evaluated at every prospective call and never cached.
    """

    @abstractmethod
    def is_available(self, repository: Repository) -> bool: ...


class ResourceDependency(EndpointDependency):
    """Available once a sibling resource holds a value.

    Args:
        location: Attribute name of the sibling on the repository, or a
            callable ``(repository) -> resource``.
    """

    def __init__(self, location: str | Callable[[Any], Any]):
        self.location = location
        self._locate = attr_accessor(location)

    def __repr__(self) -> str:
        return f"ResourceDependency({self.location!r})"

    def is_available(self, repository: Repository) -> bool:
        return self._locate(repository).latest_value is not None


class PredicateDependency(EndpointDependency):
    def __init__(self, predicate: Callable[[Any], bool]):
        self.predicate = predicate

    def is_available(self, repository: Repository) -> bool:
        return bool(self.predicate(repository))


def as_dependencies(
    items: Iterable[EndpointDependency | str | Callable[[Any], Any]] | None,
) -> tuple[EndpointDependency, ...]:
    """Normalize dependency declarations.

    Strings and callables locate sibling resources; ready-made
    :class:`EndpointDependency` instances pass through.
    """
    if not items:
        return ()
    return tuple(
        item if isinstance(item, EndpointDependency) else ResourceDependency(item)
        for item in items
    )


def dependencies_met(
    repository: Repository, dependencies: Iterable[EndpointDependency]
) -> bool:
    return all(dependency.is_available(repository) for dependency in dependencies)
