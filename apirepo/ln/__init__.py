# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._lazy_init import lazy_import
from ._sentinel import Unset, UnsetType, is_unset
from ._utils import attr_accessor

__all__ = (
    "Unset",
    "UnsetType",
    "attr_accessor",
    "is_unset",
    "lazy_import",
)
