# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic

from .endpoint import (
    BuildRequestContext,
    DecodeOutputContext,
    Endpoint,
    InputT,
    OptionsT,
    OutputT,
    RootT,
)

__all__ = (
    "BuildRequestTransform",
    "BuildRequestTransformContext",
    "DecodeOutputTransform",
    "DecodeOutputTransformContext",
    "FunctionEndpoint",
    "MutableEndpoint",
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BuildRequestTransformContext(Generic[RootT, InputT, OptionsT]):
    root: RootT
    input: InputT
    options: OptionsT = None


@dataclass(slots=True, frozen=True)
class DecodeOutputTransformContext(Generic[RootT, InputT, OptionsT]):
    root: RootT
    input: InputT
    request: Any
    options: OptionsT = None


BuildRequestTransform = Callable[[Any, BuildRequestTransformContext], Any]
DecodeOutputTransform = Callable[[Any, DecodeOutputTransformContext], Any]


class MutableEndpoint(Endpoint[RootT, InputT, OutputT, OptionsT]):
    """An endpoint with appendable request and output transforms.

    Subclasses implement :meth:`_build_request` and :meth:`_decode_output`.
    The public methods run those first and then fold every registered
    transform over the result in registration order. A transform that
    raises aborts the chain. Transforms may run more than once for the same
    input, since a request is rebuilt on every run, so their side effects
    must be idempotent.

    Example::

        endpoint.add_build_request_transform(
            lambda request, ctx: request.with_header("X-Tenant", ctx.root.tenant)
        )
    """

    def __init__(self, name: str | None = None):
        super().__init__(name=name)
        self._build_request_transforms: list[BuildRequestTransform] = []
        self._decode_output_transforms: list[DecodeOutputTransform] = []

    @property
    def build_request_transforms(self) -> tuple[BuildRequestTransform, ...]:
        return tuple(self._build_request_transforms)

    @property
    def decode_output_transforms(self) -> tuple[DecodeOutputTransform, ...]:
        return tuple(self._decode_output_transforms)

    def add_build_request_transform(self, transform: BuildRequestTransform) -> None:
        if not callable(transform):
            raise TypeError("Transform must be callable")
        self._build_request_transforms.append(transform)
        logger.debug(
            f"Endpoint '{self.name}' registered build transform #{len(self._build_request_transforms)}"
        )

    def add_decode_output_transform(self, transform: DecodeOutputTransform) -> None:
        if not callable(transform):
            raise TypeError("Transform must be callable")
        self._decode_output_transforms.append(transform)

    def _build_request(
        self, input: InputT, context: BuildRequestContext[RootT, OptionsT]
    ) -> Any:
        raise NotImplementedError

    def _decode_output(
        self,
        response: Any,
        context: DecodeOutputContext[RootT, InputT, OptionsT],
    ) -> OutputT:
        raise NotImplementedError

    def build_request(
        self, input: InputT, context: BuildRequestContext[RootT, OptionsT]
    ) -> Any:
        request = self._build_request(input, context)
        if not self._build_request_transforms:
            return request
        transform_context = BuildRequestTransformContext(
            root=context.root, input=input, options=context.options
        )
        for transform in self._build_request_transforms:
            request = transform(request, transform_context)
        return request

    def decode_output(
        self,
        response: Any,
        context: DecodeOutputContext[RootT, InputT, OptionsT],
    ) -> OutputT:
        output = self._decode_output(response, context)
        if not self._decode_output_transforms:
            return output
        transform_context = DecodeOutputTransformContext(
            root=context.root,
            input=context.input,
            request=context.request,
            options=context.options,
        )
        for transform in self._decode_output_transforms:
            output = transform(output, transform_context)
        return output


class FunctionEndpoint(MutableEndpoint[RootT, InputT, OutputT, OptionsT]):
    """A mutable endpoint built from two plain callables.

    Args:
        build: ``(input, BuildRequestContext) -> request``.
        decode: ``(response, DecodeOutputContext) -> output``. Defaults to
            returning the response unchanged.
        name: Optional endpoint name.
    """

    def __init__(
        self,
        build: Callable[[InputT, BuildRequestContext], Any],
        decode: Callable[[Any, DecodeOutputContext], OutputT] | None = None,
        name: str | None = None,
    ):
        super().__init__(name=name)
        self._build = build
        self._decode = decode

    def _build_request(self, input, context):
        return self._build(input, context)

    def _decode_output(self, response, context):
        if self._decode is None:
            return response
        return self._decode(response, context)
