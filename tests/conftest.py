"""
Shared fixtures: a fake Zalo served through httpx.MockTransport, strategy
options, and a builder for starlette requests.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock
from urllib.parse import urlencode

import httpx
import pytest
from starlette.requests import Request

from zalo_auth.auth_strategies.oauth.zalo import ZaloOAuthStrategy
from zalo_auth.schemas.oauth import ZaloStrategyOptions

CALLBACK_URL = "https://www.example.net/auth/zalo/callback"

PROFILE = {
    "id": "1234567890123456789",
    "name": "Nguyễn Văn A",
    "birthday": "01/01/1990",
    "gender": "male",
    "picture": {"data": {"url": "https://s120-ava-talk.zadn.vn/a/b/c/avatar.jpg"}},
}


class FakeZalo:
    """Answers token and Graph requests and records every request it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token: tuple[int, Any] = (
            200,
            {
                "access_token": "access-abc",
                "refresh_token": "refresh-xyz",
                "token_type": "Bearer",
                "expires_in": 3600,
            },
        )
        self.profile: tuple[int, Any] = (200, PROFILE)
        self.error: Exception | None = None

    @staticmethod
    def _respond(status_code: int, body: Any) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if request.url.path.endswith("/access_token"):
            return self._respond(*self.token)
        if request.url.host == "graph.zalo.me":
            return self._respond(*self.profile)
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_zalo() -> FakeZalo:
    return FakeZalo()


@pytest.fixture
def callback_url() -> str:
    return CALLBACK_URL


@pytest.fixture
def options() -> ZaloStrategyOptions:
    return ZaloStrategyOptions(
        app_id="app-123",
        client_secret="shhh-its-a-secret",
        callback_url=CALLBACK_URL,
    )


@pytest.fixture
def verify() -> AsyncMock:
    return AsyncMock(side_effect=lambda access_token, refresh_token, profile: profile)


@pytest.fixture
def make_strategy(
    options: ZaloStrategyOptions, verify: AsyncMock, fake_zalo: FakeZalo
) -> Callable[..., ZaloOAuthStrategy]:
    def _make(**overrides: Any) -> ZaloOAuthStrategy:
        opts = options.model_copy(update=overrides) if overrides else options
        return ZaloOAuthStrategy(opts, verify, transport=fake_zalo.transport)

    return _make


@pytest.fixture
def strategy(make_strategy: Callable[..., ZaloOAuthStrategy]) -> ZaloOAuthStrategy:
    return make_strategy()


@pytest.fixture
def make_request() -> Callable[..., Request]:
    def _make(query: dict[str, str] | None = None, path: str = "/auth/zalo/callback") -> Request:
        scope = {
            "type": "http",
            "method": "GET",
            "scheme": "https",
            "server": ("www.example.net", 443),
            "path": path,
            "root_path": "",
            "query_string": urlencode(query or {}).encode(),
            "headers": [(b"host", b"www.example.net")],
        }
        return Request(scope)

    return _make


@pytest.fixture
def raw_profile() -> dict[str, Any]:
    return PROFILE
