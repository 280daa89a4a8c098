# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .endpoint import (
    BuildRequestContext,
    DecodeOutputContext,
    Endpoint,
    NeverEndpoint,
)
from .interface import Interface
from .mutable import (
    BuildRequestTransformContext,
    DecodeOutputTransformContext,
    FunctionEndpoint,
    MutableEndpoint,
)

__all__ = (
    "BuildRequestContext",
    "BuildRequestTransformContext",
    "DecodeOutputContext",
    "DecodeOutputTransformContext",
    "Endpoint",
    "FunctionEndpoint",
    "Interface",
    "MutableEndpoint",
    "NeverEndpoint",
)
