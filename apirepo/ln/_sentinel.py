# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Final, Literal

__all__ = ("Unset", "UnsetType", "is_unset")


class UnsetType:
    """Sentinel for a value that was never provided.

    Distinguishes "no input received" from an explicit ``None`` input, which
    is a valid value for endpoints that take no parameters.
    """

    __slots__ = ()
    _instance: UnsetType | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Unset"]:
        return "Unset"

    def __reduce__(self):
        return "Unset"


Unset: Final = UnsetType()


def is_unset(value: Any) -> bool:
    return value is Unset
