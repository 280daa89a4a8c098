# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .base import RequestSession
from .header_factory import AuthType, HeaderFactory
from .http import AiohttpSession, HTTPRequest, HTTPResponse

__all__ = (
    "AiohttpSession",
    "AuthType",
    "HTTPRequest",
    "HTTPResponse",
    "HeaderFactory",
    "RequestSession",
)
