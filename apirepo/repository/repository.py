# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Repositories: an interface bound to a session.

Running an endpoint goes through three stages, strictly in order:

1. build the request from ``(input, options, interface)``;
2. execute it on the session;
3. decode the response into the endpoint output.

A build failure ends the task before anything is sent. Failures from each
stage are tagged as :class:`BuildRequestError`, :class:`TransportError` or
:class:`DecodeError` and converted into the interface's ``error_type``.

Example::

    class UserRepository(Repository):
        profile = resource(lambda api: api.get_profile)

    repo = UserRepository(UserInterface(), AiohttpSession())
    user = await repo.run(lambda api: api.get_user, "42")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from .._errors import (
    BuildRequestError,
    DecodeError,
    RepositoryError,
    TransportError,
)
from ..endpoint import BuildRequestContext, DecodeOutputContext, Endpoint, Interface
from ..resources.accessor import ResourceAccessor, ResourceField
from ..session import RequestSession
from ..signal import ChangeSignal
from ..task import CancellableSet, ParametrizedTask, Task

InterfaceT = TypeVar("InterfaceT", bound=Interface)
SessionT = TypeVar("SessionT", bound=RequestSession)

EndpointLike = Endpoint | Callable[[Any], Endpoint]

__all__ = ("Repository", "RunEndpointFunction")

logger = logging.getLogger(__name__)


def _tag(error_type: type[RepositoryError], error: Exception) -> RepositoryError:
    if isinstance(error, RepositoryError):
        return error
    return error_type(
        str(error) or None,
        status_code=getattr(error, "status_code", None),
        cause=error,
    )


def _endpoint_name(endpoint: EndpointLike) -> str:
    if isinstance(endpoint, Endpoint) and endpoint.name:
        return endpoint.name
    return getattr(endpoint, "__name__", None) or type(endpoint).__name__


@dataclass(slots=True, frozen=True)
class RunEndpointFunction:
    """A repository endpoint ready to be called with an input."""

    repository: Repository
    endpoint: EndpointLike
    options: Any = None

    def __call__(self, input: Any = None) -> Task:
        return self.repository.run(self.endpoint, input, self.options)


class Repository(Generic[InterfaceT, SessionT]):
    """Binds one interface to one session and runs its endpoints as tasks.

    Resources declared on the class with :func:`~apirepo.resource` are
    created and bound per instance. The repository's ``did_change`` stream
    aggregates their change notifications and drives their refreshes.

    Args:
        interface: The endpoint catalog.
        session: The request executor.
    """

    def __init__(self, interface: InterfaceT, session: SessionT):
        self._interface = interface
        self._session = session
        self.did_change = ChangeSignal(name=f"{type(self).__name__}.did_change")
        self._resources: dict[str, ResourceAccessor] = {}
        self._bind_declared_resources()
        logger.debug(
            f"Initialized {type(self).__name__} with interface={interface!r}, "
            f"session={type(session).__name__}"
        )

    def _bind_declared_resources(self) -> None:
        for klass in reversed(type(self).__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, ResourceField):
                    self._resources[name] = value.create()
        for accessor in self._resources.values():
            accessor.bind(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(interface={self.interface!r})"

    # ------------------------------------------------------------------
    # properties
    # ------------------------------------------------------------------

    @property
    def interface(self) -> InterfaceT:
        return self._interface

    @interface.setter
    def interface(self, value: InterfaceT) -> None:
        """Swap the interface and announce the change."""
        self._interface = value
        logger.debug(f"{type(self).__name__} interface replaced by {value!r}")
        self.notify_change()

    @property
    def session(self) -> SessionT:
        return self._session

    @property
    def cancellables(self) -> CancellableSet:
        return self.session.cancellables

    @property
    def resources(self) -> MappingProxyType[str, ResourceAccessor]:
        return MappingProxyType(self._resources)

    @property
    def root_id(self) -> Hashable:
        return self.interface.id

    def notify_change(self) -> None:
        self.did_change.send()

    # ------------------------------------------------------------------
    # pipeline
    # ------------------------------------------------------------------

    def _resolve(self, endpoint: EndpointLike, root: Interface) -> Endpoint:
        """Resolve ``endpoint`` against ``root``.

        Raises:
            RepositoryError: A :class:`BuildRequestError` in the interface's
                error family when the endpoint cannot be resolved or belongs
                to another interface type.
        """
        try:
            resolved = endpoint
            if not isinstance(resolved, Endpoint):
                if not callable(resolved):
                    raise TypeError(
                        f"Expected an Endpoint or accessor, got {type(endpoint).__name__}"
                    )
                resolved = resolved(root)
                if not isinstance(resolved, Endpoint):
                    raise TypeError(
                        f"Endpoint accessor returned {type(resolved).__name__}, not an Endpoint"
                    )
            if not resolved.accepts_root(root):
                raise TypeError(
                    f"{resolved!r} belongs to {resolved.root_type.__name__}, "
                    f"not {type(root).__name__}"
                )
        except Exception as e:
            raise root.wrap_error(
                BuildRequestError(f"Cannot resolve endpoint: {e}", cause=e)
            ) from e
        return resolved

    def _build_request(
        self, endpoint: Endpoint, root: Interface, input: Any, options: Any
    ) -> Any:
        try:
            return endpoint.build_request(
                input, BuildRequestContext(root=root, options=options)
            )
        except Exception as e:
            raise root.wrap_error(_tag(BuildRequestError, e)) from e

    async def _dispatch(
        self,
        endpoint: Endpoint,
        root: Interface,
        input: Any,
        options: Any,
        request: Any,
    ) -> Any:
        try:
            response = await self.session.execute(request)
        except Exception as e:
            raise root.wrap_error(_tag(TransportError, e)) from e

        try:
            return endpoint.decode_output(
                response,
                DecodeOutputContext(
                    root=root, input=input, request=request, options=options
                ),
            )
        except Exception as e:
            raise root.wrap_error(_tag(DecodeError, e)) from e

    async def _perform(self, endpoint: EndpointLike, input: Any, options: Any) -> Any:
        root = self.interface
        endpoint = self._resolve(endpoint, root)
        request = self._build_request(endpoint, root, input, options)
        return await self._dispatch(endpoint, root, input, options, request)

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------

    def task(self, endpoint: EndpointLike) -> ParametrizedTask:
        """Return an unstarted task for ``endpoint``.

        Deliver ``(input, options)`` with ``receive`` before starting it.
        """
        async def body(params: tuple[Any, Any]) -> Any:
            input, options = params
            return await self._perform(endpoint, input, options)

        return ParametrizedTask(
            body, name=f"run:{_endpoint_name(endpoint)}", cancellables=self.cancellables
        )

    def run(
        self,
        endpoint: EndpointLike,
        input: Any = None,
        options: Any = None,
    ) -> Task:
        """Run ``endpoint`` with ``input`` and return the started task.

        ``endpoint`` may be an :class:`Endpoint` or an accessor called with
        the interface, e.g. ``lambda api: api.get_user``.
        """
        root = self.interface
        name = f"run:{_endpoint_name(endpoint)}"
        try:
            resolved = self._resolve(endpoint, root)
            request = self._build_request(resolved, root, input, options)
        except RepositoryError as e:
            logger.debug(f"{name} failed before dispatch: {e}")
            return Task.failure(e, name=name)

        task = Task(
            lambda: self._dispatch(resolved, root, input, options, request),
            name=name,
        )
        self.cancellables.insert(task)
        return task.start()

    def endpoint(self, endpoint: EndpointLike, options: Any = None) -> RunEndpointFunction:
        return RunEndpointFunction(self, endpoint, options)

    def erase(self):
        from .any_repository import AnyRepository

        return AnyRepository(self)

    # ------------------------------------------------------------------
    # teardown
    # ------------------------------------------------------------------

    def close(self) -> int:
        """Cancel every outstanding task. Returns how many were cancelled."""
        return self.cancellables.cancel_all()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()
