# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, ClassVar
from uuid import uuid4

from .._errors import RepositoryError
from .endpoint import Endpoint

__all__ = ("Interface",)


class Interface:
    """A named catalog of endpoints sharing one error family.

    Endpoints are declared as class attributes, as instance attributes, or on
    a nested static ``Endpoints`` catalog class. The ``id`` identity token
    tells resources whether the interface behind a repository was swapped.

    Attributes:
        error_type: Error class every pipeline failure is converted into.
        Endpoints: Optional static endpoint catalog.
    """

    error_type: ClassVar[type[RepositoryError]] = RepositoryError
    Endpoints: ClassVar[type | None] = None

    def __init__(self, id: Hashable | None = None):
        self._id = id if id is not None else uuid4()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id!r})"

    @property
    def id(self) -> Hashable:
        return self._id

    def wrap_error(self, error: BaseException) -> RepositoryError:
        return self.error_type.from_error(error)

    def endpoints(self) -> dict[str, Endpoint]:
        """Return every endpoint reachable on this interface by name."""
        found: dict[str, Endpoint] = {}
        sources: list[Any] = []
        if self.Endpoints is not None:
            sources.append(vars(self.Endpoints))
        for klass in reversed(type(self).__mro__):
            sources.append(vars(klass))
        sources.append(vars(self))
        for namespace in sources:
            for key, value in namespace.items():
                if isinstance(value, Endpoint):
                    found[key] = value
        return found
