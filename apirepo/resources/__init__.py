# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .accessor import ResourceAccessor, ResourceField, resource
from .any_resource import AnyRepositoryResource, AnyResource, ResourceType
from .base import EndpointCoordinator, Resource, ResourceState, SetCoordinator
from .dependency import (
    EndpointDependency,
    PredicateDependency,
    ResourceDependency,
)

__all__ = (
    "AnyRepositoryResource",
    "AnyResource",
    "EndpointCoordinator",
    "EndpointDependency",
    "PredicateDependency",
    "Resource",
    "ResourceAccessor",
    "ResourceDependency",
    "ResourceField",
    "ResourceState",
    "ResourceType",
    "SetCoordinator",
    "resource",
)
