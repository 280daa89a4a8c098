# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Callable
from operator import attrgetter
from typing import Any

__all__ = ("attr_accessor",)


def attr_accessor(location: str | Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Normalize a field location into an accessor function.

    A string is treated as a dotted attribute path, a callable is returned
    unchanged.
    """
    if isinstance(location, str):
        return attrgetter(location)
    if callable(location):
        return location
    raise TypeError(
        f"Location must be an attribute name or a callable, got {type(location).__name__}"
    )
