# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any

from typing_extensions import override

from .repository import InterfaceT, Repository, SessionT

__all__ = ("AnyRepository",)


class AnyRepository(Repository[InterfaceT, SessionT]):
    """Type-erased view of a repository.

    Reads the interface and session through the wrapped repository on every
    access and shares its ``did_change`` stream. Assigning ``interface``
    swaps the wrapped repository's interface. The view owns no resources.
    """

    def __init__(self, repository: Repository[InterfaceT, SessionT]):
        self._get_interface = lambda: repository.interface
        self._set_interface = lambda value: setattr(repository, "interface", value)
        self._get_session = lambda: repository.session
        self.did_change = repository.did_change
        self._resources = {}

    def __repr__(self) -> str:
        return f"AnyRepository(interface={self.interface!r})"

    @property
    @override
    def interface(self) -> InterfaceT:
        return self._get_interface()

    @interface.setter
    def interface(self, value: InterfaceT) -> None:
        self._set_interface(value)

    @property
    @override
    def session(self) -> SessionT:
        return self._get_session()

    @override
    def erase(self) -> AnyRepository[Any, Any]:
        return self
