# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Hashable

from pydantic import SecretStr

from ..config import settings
from ..endpoint import Interface
from ..session.header_factory import AuthType, HeaderFactory

__all__ = ("RESTInterface",)


class RESTInterface(Interface):
    """An interface whose endpoints address one HTTP API.

    ``base_url`` and the auth settings may be given per instance or as class
    attributes. When no API key is given, ``APIREPO_API_KEY`` from the
    settings is used; ``auth_type="none"`` sends no credentials.

    Example::

        class GitHub(RESTInterface):
            base_url = "https://api.github.com"
            get_user = RESTEndpoint("GET", "/users/{login}", output_type=User)
    """

    base_url: str = ""
    auth_type: AuthType = "bearer"
    default_headers: dict[str, str] = {}

    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | SecretStr | None = None,
        auth_type: AuthType | None = None,
        default_headers: dict[str, str] | None = None,
        id: Hashable | None = None,
    ):
        super().__init__(id=id)
        if base_url is not None:
            self.base_url = base_url
        if auth_type is not None:
            self.auth_type = auth_type
        self.default_headers = {**type(self).default_headers, **(default_headers or {})}
        self._api_key = api_key if api_key is not None else settings.APIREPO_API_KEY

    def url_for(self, path: str) -> str:
        if not self.base_url:
            return path
        if not path:
            return self.base_url
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = HeaderFactory.get_header(
            auth_type=self.auth_type,
            api_key=self._api_key,
            default_headers=self.default_headers,
        )
        if extra:
            headers.update(extra)
        return headers
