"""Shared fixtures: a scripted session and a small user API."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from pydantic import BaseModel

from apirepo import TransportError
from apirepo.endpoint import FunctionEndpoint, Interface
from apirepo.session import RequestSession


class User(BaseModel):
    id: str
    name: str


class Settings(BaseModel):
    user_id: str
    theme: str = "light"


class MockSession(RequestSession[dict, dict]):
    """Answers requests from a handler and records every request it sees.

    The handler receives the request and returns the response, or raises to
    simulate a transport failure. ``gate`` can hold responses back until the
    test releases them.
    """

    def __init__(self, handler: Callable[[dict], Any] | None = None):
        super().__init__()
        self.handler = handler or (lambda request: request)
        self.requests: list[dict] = []
        self.gate: asyncio.Event | None = None

    def calls_to(self, path_prefix: str) -> list[dict]:
        return [r for r in self.requests if r["path"].startswith(path_prefix)]

    async def execute(self, request: dict) -> dict:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        return self.handler(request)


def _build_get_user(user_id, ctx):
    return {"method": "GET", "path": f"/users/{user_id}"}


def _checked_body(response: dict) -> Any:
    if response.get("status", 200) >= 400:
        raise TransportError(status_code=response["status"])
    return response["body"]


def _decode_user(response, ctx):
    return User.model_validate(_checked_body(response))


def _decode_settings(response, ctx):
    return Settings.model_validate(_checked_body(response))


class UserInterface(Interface):
    get_user = FunctionEndpoint(_build_get_user, _decode_user)
    get_profile = FunctionEndpoint(
        lambda _, ctx: {"method": "GET", "path": "/me"}, _decode_user
    )
    get_settings = FunctionEndpoint(
        lambda user_id, ctx: {"method": "GET", "path": f"/settings/{user_id}"},
        _decode_settings,
    )
    put_settings = FunctionEndpoint(
        lambda settings, ctx: {
            "method": "PUT",
            "path": f"/settings/{settings.user_id}",
            "body": settings.model_dump(),
        },
        _decode_settings,
    )


USERS = {
    "42": {"id": "42", "name": "Ada"},
    "7": {"id": "7", "name": "Grace"},
}


def default_handler(request: dict) -> dict:
    path = request["path"]
    if path == "/me":
        return {"status": 200, "body": USERS["42"]}
    if path.startswith("/users/"):
        user = USERS.get(path.rsplit("/", 1)[-1])
        if user is None:
            return {"status": 404, "body": {"detail": "not found"}}
        return {"status": 200, "body": user}
    if path.startswith("/settings/"):
        user_id = path.rsplit("/", 1)[-1]
        if request["method"] == "PUT":
            return {"status": 200, "body": request["body"]}
        return {"status": 200, "body": {"user_id": user_id, "theme": "dark"}}
    return {"status": 404, "body": None}


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks and their follow-ups run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def session():
    return MockSession(default_handler)


@pytest.fixture
def interface():
    return UserInterface()
