"""Tests for apirepo.session.http module."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import orjson
import pytest

from apirepo import TransportError
from apirepo.session import AiohttpSession, HTTPRequest, HTTPResponse
from apirepo.session.http import _cache_key, _giveup_on_client_error, _query_params


class FakeResponse:
    def __init__(self, status: int, body=None, content_type="application/json"):
        self.status = status
        self.headers = {"Content-Type": content_type}
        if body is None:
            self._raw = b""
        elif isinstance(body, bytes):
            self._raw = body
        else:
            self._raw = orjson.dumps(body)
        self.request_info = MagicMock()
        self.history = ()

    async def read(self) -> bytes:
        return self._raw

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                self.request_info,
                self.history,
                status=self.status,
                message="error",
                headers=self.headers,
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeClientSession:
    """Stands in for aiohttp.ClientSession, replaying scripted outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def no_sleep():
    with patch("asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


def make_session(fake: FakeClientSession, **kwargs) -> AiohttpSession:
    session = AiohttpSession(max_retries=3, **kwargs)
    session._create_http_session = MagicMock(return_value=fake)
    return session


class TestHTTPValues:
    """Test suite for HTTPRequest and HTTPResponse."""

    def test_request_is_immutable(self):
        request = HTTPRequest(url="https://x.test")

        with pytest.raises(Exception):
            request.url = "https://y.test"

    def test_with_header_and_params_copy(self):
        request = HTTPRequest(url="https://x.test")

        updated = request.with_header("X-A", "1").with_params(page=2)

        assert updated.headers == {"X-A": "1"}
        assert updated.params == {"page": 2}
        assert request.headers == {}

    def test_get_never_has_body(self):
        assert not HTTPRequest(url="u", body={"a": 1}).has_body
        assert HTTPRequest(method="post", url="u", body={"a": 1}).has_body

    def test_raise_for_status(self):
        HTTPResponse(status=204).raise_for_status()

        with pytest.raises(TransportError) as exc_info:
            HTTPResponse(status=404, body={"detail": "x"}).raise_for_status()
        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"body": {"detail": "x"}}


class TestHelpers:
    def test_query_params(self):
        assert _query_params({}) is None
        assert _query_params({"a": True, "b": 1, "c": None}) == {
            "a": "true",
            "b": 1,
        }

    def test_giveup_only_on_client_errors(self):
        def error(status):
            return aiohttp.ClientResponseError(MagicMock(), (), status=status)

        assert _giveup_on_client_error(error(404))
        assert not _giveup_on_client_error(error(429))
        assert not _giveup_on_client_error(error(503))
        assert not _giveup_on_client_error(aiohttp.ClientConnectionError())

    def test_cache_key_ignores_param_order(self):
        first = HTTPRequest(url="u", params={"a": 1, "b": 2})
        second = HTTPRequest(url="u", params={"b": 2, "a": 1})

        assert _cache_key(None, first) == _cache_key(None, second)


class TestAiohttpSession:
    """Test suite for AiohttpSession."""

    def test_defaults_come_from_settings(self):
        from apirepo.config import settings

        session = AiohttpSession()

        assert session.timeout == settings.APIREPO_REQUEST_TIMEOUT
        assert session.max_retries == settings.APIREPO_MAX_RETRIES

    @pytest.mark.asyncio
    async def test_execute_decodes_json(self):
        fake = FakeClientSession(FakeResponse(200, {"id": "42"}))
        session = make_session(fake)
        request = HTTPRequest(
            method="POST",
            url="https://api.test/users",
            headers={"Authorization": "Bearer k"},
            params={"verbose": True},
            body={"name": "Ada"},
        )

        response = await session.execute(request)

        assert response.status == 200
        assert response.body == {"id": "42"}
        assert fake.calls == [
            {
                "method": "POST",
                "url": "https://api.test/users",
                "headers": {"Authorization": "Bearer k"},
                "params": {"verbose": "true"},
                "json": {"name": "Ada"},
            }
        ]

    @pytest.mark.asyncio
    async def test_text_body(self):
        fake = FakeClientSession(FakeResponse(200, b"hello", content_type="text/plain"))

        response = await make_session(fake).execute(HTTPRequest(url="u"))

        assert response.body == "hello"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        fake = FakeClientSession(FakeResponse(204))

        response = await make_session(fake).execute(HTTPRequest(url="u"))

        assert response.body is None

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, no_sleep):
        fake = FakeClientSession(FakeResponse(404, {"detail": "missing"}))

        with pytest.raises(TransportError) as exc_info:
            await make_session(fake).execute(HTTPRequest(url="u"))

        assert exc_info.value.status_code == 404
        assert len(fake.calls) == 1

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self, no_sleep):
        fake = FakeClientSession(
            FakeResponse(503),
            FakeResponse(429),
            FakeResponse(200, {"ok": True}),
        )

        response = await make_session(fake).execute(HTTPRequest(url="u"))

        assert response.body == {"ok": True}
        assert len(fake.calls) == 3

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self, no_sleep):
        fake = FakeClientSession(*(FakeResponse(503) for _ in range(3)))

        with pytest.raises(TransportError) as exc_info:
            await make_session(fake).execute(HTTPRequest(url="u"))

        assert exc_info.value.status_code == 503
        assert len(fake.calls) == 3

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, no_sleep):
        fake = FakeClientSession(*(aiohttp.ClientConnectionError("down") for _ in range(3)))

        with pytest.raises(TransportError) as exc_info:
            await make_session(fake).execute(HTTPRequest(url="u"))

        assert isinstance(exc_info.value.get_cause(), aiohttp.ClientConnectionError)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_task_is_tracked(self):
        fake = FakeClientSession(FakeResponse(200, {"ok": True}))
        session = make_session(fake)

        task = session.task(HTTPRequest(url="u")).start()

        assert task in session.cancellables
        assert (await task).body == {"ok": True}

    @pytest.mark.asyncio
    async def test_close_cancels_tasks(self):
        session = make_session(FakeClientSession())
        task = session.task(HTTPRequest(url="u"))

        async with session:
            pass

        assert task.done

    @pytest.mark.asyncio
    async def test_cache_control_reuses_get_responses(self):
        fake = FakeClientSession(
            FakeResponse(200, {"n": 1}),
            FakeResponse(200, {"n": 2}),
            FakeResponse(200, {"n": 3}),
        )
        session = make_session(fake, cache_control=True)
        request = HTTPRequest(url="https://api.test/cached", params={"q": "x"})

        first = await session.execute(request)
        second = await session.execute(request)
        posted = await session.execute(
            HTTPRequest(method="POST", url="https://api.test/cached")
        )

        assert first.body == second.body == {"n": 1}
        assert posted.body == {"n": 2}
        assert len(fake.calls) == 2
