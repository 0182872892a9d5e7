"""
Tests for the generic authorization-code engine, driven through the Zalo
strategy's hooks where the provider behaviour matters.
"""

from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import httpx
import pytest

from zalo_auth.auth_strategies.oauth.oauth2 import OAuth2Strategy, loads_or_none
from zalo_auth.auth_strategies.oauth.zalo import ZaloOAuthStrategy
from zalo_auth.core.exceptions import (
    AuthorizationError,
    InternalOAuthError,
    OAuthRequestError,
    TokenError,
    ZaloAPIError,
)
from zalo_auth.schemas.oauth import ZaloProfile


def _engine(transport: httpx.MockTransport, verify=None) -> OAuth2Strategy:
    return OAuth2Strategy(
        client_id="client-1",
        client_secret="secret-1",
        authorization_url="https://auth.example/authorize",
        token_url="https://auth.example/oauth/access_token",
        callback_url="https://app.example/callback",
        verify=verify or AsyncMock(return_value={"id": "u1"}),
        transport=transport,
    )


# ---------------------------------------------------------------------------
# redirect
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_redirects_to_authorization_url(strategy, make_request, callback_url) -> None:
    outcome = await strategy.authenticate(make_request(path="/auth/zalo"), {"display": "popup"})

    assert outcome.action == "redirect"
    url = httpx.URL(outcome.redirect_url)
    assert url.host == "oauth.zaloapp.com"
    assert url.path == "/v3/auth"
    assert url.params["client_id"] == "app-123"
    assert url.params["response_type"] == "code"
    assert url.params["redirect_uri"] == callback_url
    assert url.params["display"] == "popup"
    assert url.params["state"] == outcome.state


@pytest.mark.asyncio
async def test_scope_is_joined_with_separator(make_strategy, make_request) -> None:
    strategy = make_strategy(scope=["id", "name", "picture"])

    outcome = await strategy.authenticate(make_request(path="/auth/zalo"))

    assert httpx.URL(outcome.redirect_url).params["scope"] == "id,name,picture"


@pytest.mark.asyncio
async def test_scope_option_overrides_configured_scope(make_strategy, make_request) -> None:
    strategy = make_strategy(scope=["id"])

    outcome = await strategy.authenticate(make_request(path="/auth/zalo"), {"scope": ["name"]})

    assert httpx.URL(outcome.redirect_url).params["scope"] == "name"


@pytest.mark.asyncio
async def test_relative_callback_is_resolved_against_request(make_strategy, make_request) -> None:
    strategy = make_strategy(callback_url="/auth/zalo/callback")

    outcome = await strategy.authenticate(make_request(path="/auth/zalo"))

    redirect_uri = httpx.URL(outcome.redirect_url).params["redirect_uri"]
    assert redirect_uri == "https://www.example.net/auth/zalo/callback"


@pytest.mark.asyncio
async def test_callback_url_option_wins(strategy, make_request) -> None:
    outcome = await strategy.authenticate(
        make_request(path="/auth/zalo"), {"callback_url": "https://other.example/cb"}
    )

    assert httpx.URL(outcome.redirect_url).params["redirect_uri"] == "https://other.example/cb"


# ---------------------------------------------------------------------------
# callback errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_access_denied_fails(strategy, make_request) -> None:
    outcome = await strategy.authenticate(
        make_request({"error": "access_denied", "error_description": "User denied"})
    )

    assert outcome.action == "fail"
    assert outcome.info == {"message": "User denied"}


@pytest.mark.asyncio
async def test_other_authorization_errors_raise(strategy, make_request) -> None:
    with pytest.raises(AuthorizationError) as exc_info:
        await strategy.authenticate(
            make_request({"error": "server_error", "error_description": "Try later"})
        )

    assert exc_info.value.code == "server_error"
    assert exc_info.value.status == 502


# ---------------------------------------------------------------------------
# code exchange
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_code_exchange_loads_profile_and_verifies(
    strategy, make_request, fake_zalo, verify, callback_url
) -> None:
    outcome = await strategy.authenticate(make_request({"code": "auth-code"}))

    assert outcome.action == "success"
    assert isinstance(outcome.user, ZaloProfile)
    assert outcome.user.provider == "zalo"

    access_token, refresh_token, profile = verify.await_args.args
    assert access_token == "access-abc"
    assert refresh_token == "refresh-xyz"
    assert profile is outcome.user

    token_request, profile_request = fake_zalo.requests
    assert token_request.method == "POST"
    assert token_request.url.path == "/v3/access_token"
    form = parse_qs(token_request.content.decode())
    assert form["code"] == ["auth-code"]
    assert form["grant_type"] == ["authorization_code"]
    assert form["client_id"] == ["app-123"]
    assert form["client_secret"] == ["shhh-its-a-secret"]
    assert form["redirect_uri"] == [callback_url]
    assert profile_request.headers["Authorization"] == "Bearer access-abc"


@pytest.mark.asyncio
async def test_verify_rejecting_user_fails(strategy, make_request, verify) -> None:
    verify.side_effect = None
    verify.return_value = (None, {"message": "unknown user"})

    outcome = await strategy.authenticate(make_request({"code": "auth-code"}))

    assert outcome.action == "fail"
    assert outcome.info == {"message": "unknown user"}


@pytest.mark.asyncio
async def test_sync_verify_is_supported(options, make_request, fake_zalo) -> None:
    def verify(access_token, refresh_token, profile):
        return {"zalo_id": profile.id}, {"scope": "basic"}

    strategy = ZaloOAuthStrategy(options, verify, transport=fake_zalo.transport)

    outcome = await strategy.authenticate(make_request({"code": "auth-code"}))

    assert outcome.action == "success"
    assert outcome.user == {"zalo_id": "1234567890123456789"}
    assert outcome.info == {"scope": "basic"}


@pytest.mark.asyncio
async def test_structured_token_error_raises_api_error(strategy, make_request, fake_zalo) -> None:
    fake_zalo.token = (400, {"error": {"message": "Invalid app secret", "code": -14002}})

    with pytest.raises(ZaloAPIError) as exc_info:
        await strategy.authenticate(make_request({"code": "auth-code"}))

    assert exc_info.value.code == -14002
    assert exc_info.value.message == "Invalid app secret"


@pytest.mark.asyncio
async def test_structured_token_error_with_ok_status(strategy, make_request, fake_zalo) -> None:
    fake_zalo.token = (200, {"error": {"message": "Invalid code", "code": -14003}})

    with pytest.raises(ZaloAPIError):
        await strategy.authenticate(make_request({"code": "auth-code"}))


@pytest.mark.asyncio
async def test_standard_token_error_raises_token_error(strategy, make_request, fake_zalo) -> None:
    fake_zalo.token = (400, {"error": "invalid_grant", "error_description": "Code expired"})

    with pytest.raises(TokenError) as exc_info:
        await strategy.authenticate(make_request({"code": "auth-code"}))

    assert exc_info.value.code == "invalid_grant"
    assert exc_info.value.message == "Code expired"


@pytest.mark.asyncio
async def test_unparseable_token_error_raises_internal_error(
    strategy, make_request, fake_zalo, verify
) -> None:
    fake_zalo.token = (502, "<html>Bad Gateway</html>")

    with pytest.raises(InternalOAuthError) as exc_info:
        await strategy.authenticate(make_request({"code": "auth-code"}))

    assert exc_info.value.message == "Failed to obtain access token"
    verify.assert_not_awaited()


@pytest.mark.asyncio
async def test_token_network_failure_raises_internal_error(
    strategy, make_request, fake_zalo
) -> None:
    fake_zalo.error = httpx.ConnectError("connection refused")

    with pytest.raises(InternalOAuthError):
        await strategy.authenticate(make_request({"code": "auth-code"}))


# ---------------------------------------------------------------------------
# engine defaults
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_engine_without_hooks_passes_no_profile(make_request) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "tok", "token_type": "bearer"})

    verify = AsyncMock(return_value={"id": "u1"})
    engine = _engine(httpx.MockTransport(handler), verify)

    outcome = await engine.authenticate(make_request({"code": "c"}))

    assert outcome.action == "success"
    verify.assert_awaited_once_with("tok", None, None)


@pytest.mark.asyncio
async def test_get_returns_body_and_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(200, text='{"ok": true}')

    engine = _engine(httpx.MockTransport(handler))

    body, response = await engine.get("https://api.example/me", "tok")

    assert body == '{"ok": true}'
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_get_raises_request_error_with_body() -> None:
    engine = _engine(httpx.MockTransport(lambda request: httpx.Response(404, text="missing")))

    with pytest.raises(OAuthRequestError) as exc_info:
        await engine.get("https://api.example/me", "tok")

    assert exc_info.value.status_code == 404
    assert exc_info.value.data == "missing"


def test_default_parse_error_response() -> None:
    engine = _engine(httpx.MockTransport(lambda request: httpx.Response(500)))

    err = engine.parse_error_response(
        '{"error": "invalid_client", "error_uri": "https://auth.example/errors"}', 401
    )

    assert isinstance(err, TokenError)
    assert err.code == "invalid_client"
    assert err.uri == "https://auth.example/errors"
    assert engine.parse_error_response('{"message": "nope"}', 401) is None


def test_loads_or_none() -> None:
    assert loads_or_none('{"a": 1}') == {"a": 1}
    assert loads_or_none("nope") is None
    assert loads_or_none(None) is None
