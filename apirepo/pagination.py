# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Cursor-paginated results.

APIs return pages in many shapes. A response model implements
:class:`PaginatedResponse` to convert its own shape into a
:class:`PaginatedList`; endpoints then decode with :func:`decode_paginated`
so that a malformed page surfaces as :class:`~apirepo.DecodeError`.

Example::

    class UsersPage(BaseModel):
        data: list[User]
        next: str | None = None

        def convert(self) -> PaginatedList[User]:
            return PaginatedList(items=self.data, next_cursor=self.next)

    list_users = RESTEndpoint("GET", "/users", output_type=UsersPage)
    list_users.add_decode_output_transform(
        lambda page, ctx: decode_paginated(page)
    )
"""

from __future__ import annotations

from typing import Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field
from typing_extensions import Self

from ._errors import DecodeError

T = TypeVar("T")

__all__ = ("PaginatedList", "PaginatedResponse", "decode_paginated")


class PaginatedList(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    next_cursor: str | None = None
    total: int | None = None

    @property
    def has_next(self) -> bool:
        return self.next_cursor is not None

    def __len__(self) -> int:
        return len(self.items)

    def extend(self, page: PaginatedList[T]) -> Self:
        """Append the items of the following page and take over its cursor."""
        return self.model_copy(
            update={
                "items": [*self.items, *page.items],
                "next_cursor": page.next_cursor,
                "total": page.total if page.total is not None else self.total,
            }
        )


@runtime_checkable
class PaginatedResponse(Protocol[T]):
    def convert(self) -> PaginatedList[T]: ...


def decode_paginated(response: PaginatedResponse[T]) -> PaginatedList[T]:
    """Convert ``response`` into a :class:`PaginatedList`.

    Raises:
        DecodeError: If the response cannot be converted.
    """
    if not isinstance(response, PaginatedResponse):
        raise DecodeError(
            f"{type(response).__name__} does not implement convert()",
            details={"type": type(response).__name__},
        )
    try:
        page = response.convert()
    except Exception as e:
        raise DecodeError(f"Cannot convert {type(response).__name__} page", cause=e) from e
    if not isinstance(page, PaginatedList):
        raise DecodeError(
            f"convert() returned {type(page).__name__}, expected PaginatedList"
        )
    return page
