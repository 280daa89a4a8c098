# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Hashable, Iterable
from typing import TYPE_CHECKING, Any, Generic

from ..endpoint import Endpoint
from ..ln import attr_accessor
from .base import EndpointCoordinator, Resource, SetCoordinator, ValueT
from .dependency import EndpointDependency

if TYPE_CHECKING:
    from ..repository import Repository
    from .any_resource import AnyRepositoryResource

__all__ = ("ResourceAccessor", "ResourceField", "resource")

logger = logging.getLogger(__name__)


class ResourceAccessor(Resource[ValueT]):
    """A resource bound to a repository that refreshes itself.

    Once bound, the accessor relays its own ``did_change`` into the
    repository's, and re-fetches whenever the repository signals a change
    while either ``needs_get_call`` is set or the repository's interface
    identity differs from the one seen at the last successful fetch.
    """

    _relay: Callable[[], None] | None = None

    def bind(self, repository: Repository) -> None:
        """Attach to ``repository``. Repeated calls with it are no-ops.

        Raises:
            RuntimeError: If already bound to another live repository.
        """
        current = self.repository
        if current is repository:
            return
        if current is not None:
            raise RuntimeError(
                f"Resource '{self.name}' is already bound to {current!r}"
            )

        self._repository_ref = weakref.ref(repository)
        self._relay = self.did_change.forward(repository.did_change)
        repository.did_change.subscribe(self._on_repository_change)
        self._last_root_id = repository.interface.id
        logger.debug(f"Bound resource '{self.name}' to {type(repository).__name__}")

    @property
    def is_bound(self) -> bool:
        return self.repository is not None

    def _on_repository_change(self) -> None:
        repository = self.repository
        if repository is None:
            return
        if repository.interface.id != self._last_root_id:
            self.needs_get_call = True
        if self.needs_get_call and not self.is_fetching:
            self.fetch()

    def _fetch_settled(self, root_id: Hashable) -> None:
        # the interface was swapped while the fetch was in flight
        repository = self.repository
        if repository is not None and repository.interface.id != root_id:
            self.needs_get_call = True
            self.fetch()

    @property
    def projected(self) -> AnyRepositoryResource[Any, ValueT]:
        from .any_resource import AnyRepositoryResource

        return AnyRepositoryResource(self, self.repository)


class ResourceField(Generic[ValueT]):
    """Class-level declaration of a repository resource.

    Repositories turn every declared field into a per-instance
    :class:`ResourceAccessor` during ``__init__`` and bind it. Reading the
    attribute on an instance returns that accessor.
    """

    def __init__(self, factory: Callable[[str], ResourceAccessor[ValueT]]):
        self._factory = factory
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None):
        if instance is None:
            return self
        try:
            return instance._resources[self.name]
        except (AttributeError, KeyError):
            raise AttributeError(
                f"Resource '{self.name}' is not initialized; "
                f"did {type(instance).__name__}.__init__ call super().__init__()?"
            ) from None

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(
            f"Resource '{self.name}' cannot be replaced; assign to '.value' instead"
        )

    def create(self) -> ResourceAccessor[ValueT]:
        return self._factory(self.name)


def _constant_or_call(value: Any) -> Callable[[Any], Any]:
    if callable(value):
        return value
    return lambda repository: value


def _output_mapping(value: Any) -> Callable[[Any], Any]:
    if value is None:
        return lambda output: output
    return attr_accessor(value)


def resource(
    get: Endpoint | Callable[[Any], Endpoint],
    *,
    get_input: Any = None,
    get_output: str | Callable[[Any], Any] | None = None,
    get_options: Any = None,
    set: Endpoint | Callable[[Any], Endpoint] | None = None,
    set_input: Callable[[Any, Any], Any] | None = None,
    set_output: str | Callable[[Any], Any] | None = None,
    set_options: Any = None,
    depends_on: Iterable[EndpointDependency | str | Callable] | None = None,
    set_depends_on: Iterable[EndpointDependency | str | Callable] | None = None,
) -> ResourceField[Any]:
    """Declare a resource on a repository class.

    Args:
        get: Get endpoint, or ``(interface) -> endpoint``.
        get_input: ``(repository) -> input``, or a constant input. Defaults
            to ``None``.
        get_output: Attribute name or ``(output) -> value`` projecting the
            endpoint output onto the cached value.
        get_options: Options for every get call.
        set: Optional set endpoint, or ``(interface) -> endpoint``.
        set_input: ``(repository, value) -> input``. Defaults to the value.
        set_output: Attribute name or ``(output) -> confirmed value``. By
            default the assigned value is kept.
        set_options: Options for every set call.
        depends_on: Sibling resource names, locators, or dependency probes
            that must be available before a get call.
        set_depends_on: Same, gating set calls.

    Example::

        class AccountRepository(Repository):
            profile = resource(lambda api: api.get_profile)
            settings = resource(
                lambda api: api.get_settings,
                get_input=lambda repo: repo.profile.value.id,
                depends_on=["profile"],
            )
    """

    def factory(name: str) -> ResourceAccessor:
        set_coordinator = None
        if set is not None:
            set_coordinator = SetCoordinator(
                endpoint=set,
                input=set_input or (lambda repository, value: value),
                output=None if set_output is None else attr_accessor(set_output),
                options=set_options,
            )
        return ResourceAccessor(
            EndpointCoordinator(
                endpoint=get,
                input=_constant_or_call(get_input),
                output=_output_mapping(get_output),
                options=get_options,
            ),
            set=set_coordinator,
            get_dependencies=depends_on,
            set_dependencies=set_depends_on,
            name=name,
        )

    return ResourceField(factory)
