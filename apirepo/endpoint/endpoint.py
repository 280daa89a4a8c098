# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Typed descriptions of remote operations.

An :class:`Endpoint` turns an input into a request and a response into an
output. It never performs I/O itself; a repository pairs it with a session.
Endpoints are usually declared as attributes of an
:class:`~apirepo.endpoint.interface.Interface`::

    class UserInterface(Interface):
        get_user = FunctionEndpoint(
            build=lambda user_id, ctx: {"path": f"/users/{user_id}"},
            decode=lambda response, ctx: User(**response),
        )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from .._errors import BuildRequestError

if TYPE_CHECKING:
    from .interface import Interface

RootT = TypeVar("RootT", bound="Interface")
InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")
OptionsT = TypeVar("OptionsT")

__all__ = (
    "BuildRequestContext",
    "DecodeOutputContext",
    "Endpoint",
    "NeverEndpoint",
)


@dataclass(slots=True, frozen=True)
class BuildRequestContext(Generic[RootT, OptionsT]):
    """Per-call context handed to :meth:`Endpoint.build_request`."""

    root: RootT
    options: OptionsT = None


@dataclass(slots=True, frozen=True)
class DecodeOutputContext(Generic[RootT, InputT, OptionsT]):
    """Per-call context handed to :meth:`Endpoint.decode_output`."""

    root: RootT
    input: InputT
    request: Any
    options: OptionsT = None


class Endpoint(ABC, Generic[RootT, InputT, OutputT, OptionsT]):
    """A pure request-building and response-decoding description.

    Attributes:
        root_type: Interface class this endpoint belongs to. When set, the
            repository refuses to run it against any other interface.
        name: Endpoint name, filled from the attribute name when declared on
            an interface class.
    """

    root_type: ClassVar[type[Interface] | None] = None

    def __init__(self, name: str | None = None):
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"

    @abstractmethod
    def build_request(
        self, input: InputT, context: BuildRequestContext[RootT, OptionsT]
    ) -> Any:
        """Map ``input`` to a request. May raise."""

    @abstractmethod
    def decode_output(
        self,
        response: Any,
        context: DecodeOutputContext[RootT, InputT, OptionsT],
    ) -> OutputT:
        """Map a transport response to the output type. May raise."""

    def accepts_root(self, root: Interface) -> bool:
        return self.root_type is None or isinstance(root, self.root_type)


class NeverEndpoint(Endpoint[Any, Any, Any, Any]):
    """Placeholder for an operation an interface does not offer.

    Used as the set endpoint of read-only resources.
    """

    def build_request(self, input, context):
        raise BuildRequestError(
            f"Endpoint '{self.name or 'never'}' cannot be invoked"
        )

    def decode_output(self, response, context):
        raise BuildRequestError(
            f"Endpoint '{self.name or 'never'}' cannot be invoked"
        )
