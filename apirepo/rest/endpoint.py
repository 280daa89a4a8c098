# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import string
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, TypeAdapter

from .._errors import BuildRequestError
from ..endpoint import BuildRequestContext, DecodeOutputContext, MutableEndpoint
from ..session.http import HTTPRequest, HTTPResponse
from .interface import RESTInterface

__all__ = ("RESTEndpoint",)

_QUERY_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})


def _path_fields(template: str) -> list[str]:
    return [
        field for _, field, _, _ in string.Formatter().parse(template) if field
    ]


class RESTEndpoint(MutableEndpoint[RESTInterface, Any, Any, Any]):
    """An HTTP endpoint described by method, path template and output type.

    The input fills the ``{placeholders}`` of ``path``; whatever is left goes
    to the query string for GET/HEAD/DELETE/OPTIONS and to the JSON body
    otherwise. A scalar input fills the single placeholder of a path.
    Options, when a mapping, may carry extra ``headers`` and ``params``.

    Args:
        method: HTTP method.
        path: Path template relative to the interface ``base_url``.
        output_type: Type the JSON body is validated against. ``None``
            discards the body.
        input_type: Optional pydantic model mapping inputs are validated
            against before the request is built.
        name: Optional endpoint name.
    """

    root_type = RESTInterface

    def __init__(
        self,
        method: str = "GET",
        path: str = "",
        *,
        output_type: Any = Any,
        input_type: type[BaseModel] | None = None,
        name: str | None = None,
    ):
        super().__init__(name=name)
        self.method = method.upper()
        self.path = path
        self.output_type = output_type
        self.input_type = input_type
        self._path_fields = _path_fields(path)
        self._adapter = TypeAdapter(output_type) if output_type is not None else None

    def __repr__(self) -> str:
        return f"RESTEndpoint({self.method} {self.path!r})"

    def _input_fields(self, input: Any) -> dict[str, Any]:
        if self.input_type is not None and isinstance(input, Mapping):
            input = self.input_type.model_validate(input)
        if input is None:
            return {}
        if isinstance(input, BaseModel):
            return input.model_dump(mode="json", exclude_none=True)
        if isinstance(input, Mapping):
            return dict(input)
        if len(self._path_fields) == 1:
            return {self._path_fields[0]: input}
        raise BuildRequestError(
            f"Cannot map input of type {type(input).__name__} onto '{self.path}'"
        )

    def _build_request(
        self, input: Any, context: BuildRequestContext[RESTInterface, Any]
    ) -> HTTPRequest:
        fields = self._input_fields(input)
        missing = [name for name in self._path_fields if name not in fields]
        if missing:
            raise BuildRequestError(
                f"Missing path parameter(s) {missing} for '{self.path}'",
                details={"missing": missing},
            )
        path = self.path.format(
            **{name: quote(str(fields.pop(name)), safe="") for name in self._path_fields}
        )

        options = context.options if isinstance(context.options, Mapping) else {}
        params: dict[str, Any] = dict(options.get("params") or {})
        body = None
        if self.method in _QUERY_METHODS:
            params.update(fields)
        elif fields:
            body = fields

        root = context.root
        return HTTPRequest(
            method=self.method,
            url=root.url_for(path),
            headers=root.headers(options.get("headers")),
            params=params,
            body=body,
        )

    def _decode_output(
        self,
        response: HTTPResponse,
        context: DecodeOutputContext[RESTInterface, Any, Any],
    ) -> Any:
        response.raise_for_status()
        if self._adapter is None:
            return None
        return self._adapter.validate_python(response.body)
