# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import TYPE_CHECKING

from . import ln as ln
from ._errors import (
    BuildRequestError,
    DecodeError,
    DependencyUnmetError,
    ErrorKind,
    MissingInputError,
    RepositoryError,
    SetError,
    TransportError,
)
from .ln import Unset
from .version import __version__

if TYPE_CHECKING:
    from .config import AppSettings, settings
    from .endpoint import (
        BuildRequestContext,
        DecodeOutputContext,
        Endpoint,
        FunctionEndpoint,
        Interface,
        MutableEndpoint,
        NeverEndpoint,
    )
    from .pagination import PaginatedList, PaginatedResponse, decode_paginated
    from .repository import AnyRepository, Repository, RunEndpointFunction
    from .resources import (
        AnyRepositoryResource,
        AnyResource,
        PredicateDependency,
        Resource,
        ResourceAccessor,
        ResourceDependency,
        ResourceState,
        resource,
    )
    from .rest import RESTEndpoint, RESTInterface
    from .session import (
        AiohttpSession,
        HeaderFactory,
        HTTPRequest,
        HTTPResponse,
        RequestSession,
    )
    from .signal import ChangeSignal
    from .task import CancellableSet, ParametrizedTask, Task, TaskStatus

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

_LAZY_IMPORTS: dict[str, tuple[str, str | None]] = {
    "AppSettings": ("config", None),
    "settings": ("config", None),
    "BuildRequestContext": ("endpoint", None),
    "DecodeOutputContext": ("endpoint", None),
    "Endpoint": ("endpoint", None),
    "FunctionEndpoint": ("endpoint", None),
    "Interface": ("endpoint", None),
    "MutableEndpoint": ("endpoint", None),
    "NeverEndpoint": ("endpoint", None),
    "PaginatedList": ("pagination", None),
    "PaginatedResponse": ("pagination", None),
    "decode_paginated": ("pagination", None),
    "AnyRepository": ("repository", None),
    "Repository": ("repository", None),
    "RunEndpointFunction": ("repository", None),
    "AnyRepositoryResource": ("resources", None),
    "AnyResource": ("resources", None),
    "PredicateDependency": ("resources", None),
    "Resource": ("resources", None),
    "ResourceAccessor": ("resources", None),
    "ResourceDependency": ("resources", None),
    "ResourceState": ("resources", None),
    "resource": ("resources", None),
    "RESTEndpoint": ("rest", None),
    "RESTInterface": ("rest", None),
    "AiohttpSession": ("session", None),
    "HeaderFactory": ("session", None),
    "HTTPRequest": ("session", None),
    "HTTPResponse": ("session", None),
    "RequestSession": ("session", None),
    "ChangeSignal": ("signal", None),
    "CancellableSet": ("task", None),
    "ParametrizedTask": ("task", None),
    "Task": ("task", None),
    "TaskStatus": ("task", None),
}


def __getattr__(name: str):
    return ln.lazy_import(name, _LAZY_IMPORTS, __name__, globals())


def __dir__():
    return list(__all__)


__all__ = (
    "BuildRequestError",
    "DecodeError",
    "DependencyUnmetError",
    "ErrorKind",
    "MissingInputError",
    "RepositoryError",
    "SetError",
    "TransportError",
    "Unset",
    "__version__",
    "ln",
    *_LAZY_IMPORTS,
)
