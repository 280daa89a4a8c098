# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .any_repository import AnyRepository
from .repository import Repository, RunEndpointFunction

__all__ = ("AnyRepository", "Repository", "RunEndpointFunction")
