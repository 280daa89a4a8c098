# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""HTTP request/response values and an aiohttp-backed session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
import backoff
import orjson
from aiocache import cached
from pydantic import BaseModel, ConfigDict, Field

from .._errors import TransportError
from ..config import settings
from .base import RequestSession

__all__ = ("HTTPRequest", "HTTPResponse", "AiohttpSession")

logger = logging.getLogger(__name__)

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})


class HTTPRequest(BaseModel):
    """An immutable HTTP request description."""

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    body: Any = None

    def with_header(self, name: str, value: str) -> HTTPRequest:
        return self.model_copy(update={"headers": {**self.headers, name: value}})

    def with_params(self, **params: Any) -> HTTPRequest:
        return self.model_copy(update={"params": {**self.params, **params}})

    @property
    def has_body(self) -> bool:
        return self.method.upper() not in _BODYLESS_METHODS and self.body is not None


class HTTPResponse(BaseModel):
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self) -> None:
        if not self.ok:
            raise TransportError(
                f"Request failed with status {self.status}",
                status_code=self.status,
                details={"body": self.body},
            )


def _cache_key(func, request: HTTPRequest) -> str:
    params = sorted((k, str(v)) for k, v in request.params.items())
    return f"{request.method.upper()}:{request.url}:{params}"


def _query_params(params: dict[str, Any]) -> dict[str, str | int | float] | None:
    if not params:
        return None
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            query[key] = value
        else:
            query[key] = str(value)
    return query


def _giveup_on_client_error(e: Exception) -> bool:
    # Don't retry on 4xx errors except 429 (rate limit)
    if isinstance(e, aiohttp.ClientResponseError):
        return 400 <= e.status < 500 and e.status != 429
    return False


class AiohttpSession(RequestSession[HTTPRequest, HTTPResponse]):
    """Executes :class:`HTTPRequest` values with aiohttp.

    Each request gets its own client session so the session object can be
    shared by concurrent tasks. Rate limits (429), server errors and
    connection failures are retried with exponential backoff; other non-2xx
    statuses fail immediately. Every failure surfaces as
    :class:`~apirepo.TransportError`.

    Args:
        timeout: Total request timeout in seconds.
        max_retries: Maximum attempts per request, first attempt included.
        cache_control: Cache successful GET responses with aiocache.
        client_kwargs: Extra keyword arguments for ``aiohttp.ClientSession``.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        max_retries: int | None = None,
        cache_control: bool = False,
        client_kwargs: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.timeout = timeout if timeout is not None else settings.APIREPO_REQUEST_TIMEOUT
        self.max_retries = (
            max_retries if max_retries is not None else settings.APIREPO_MAX_RETRIES
        )
        self.cache_control = cache_control
        self.client_kwargs = client_kwargs or {}
        self._cached_send = None
        if cache_control:
            self._cached_send = cached(
                **settings.aiocache_config.as_kwargs(), key_builder=_cache_key
            )(self._send_with_backoff)

        logger.debug(
            f"Initialized AiohttpSession with timeout={self.timeout}, "
            f"max_retries={self.max_retries}, cache_control={cache_control}"
        )

    def _create_http_session(self) -> aiohttp.ClientSession:
        """Create a new HTTP session (not shared between requests)."""
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            **self.client_kwargs,
        )

    async def execute(self, request: HTTPRequest) -> HTTPResponse:
        try:
            if self._cached_send is not None and request.method.upper() == "GET":
                return await self._cached_send(request)
            return await self._send_with_backoff(request)
        except aiohttp.ClientResponseError as e:
            raise TransportError(
                e.message or f"Request failed with status {e.status}",
                status_code=e.status,
                cause=e,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"{request.method} {request.url} failed: {e!r}", cause=e
            ) from e

    async def _send_with_backoff(self, request: HTTPRequest) -> HTTPResponse:
        backoff_handler = backoff.on_exception(
            backoff.expo,
            (aiohttp.ClientError, asyncio.TimeoutError),
            max_tries=self.max_retries,
            giveup=_giveup_on_client_error,
            jitter=backoff.full_jitter,
        )
        return await backoff_handler(self._send)(request)

    async def _send(self, request: HTTPRequest) -> HTTPResponse:
        async with self._create_http_session() as session:
            async with session.request(
                method=request.method.upper(),
                url=request.url,
                headers=request.headers,
                params=_query_params(request.params),
                json=request.body if request.has_body else None,
            ) as response:
                body = await self._read_body(response)

                if response.status == 429 or response.status >= 500:
                    response.raise_for_status()  # caught by backoff
                elif not 200 <= response.status < 300:
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=f"Request failed with status {response.status}: {body}",
                        headers=response.headers,
                    )

                return HTTPResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                )

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        raw = await response.read()
        if not raw:
            return None
        if "json" in response.headers.get("Content-Type", "application/json"):
            try:
                return orjson.loads(raw)
            except orjson.JSONDecodeError:
                logger.debug("Response declared JSON but did not parse; returning text")
        return raw.decode("utf-8", errors="replace")
