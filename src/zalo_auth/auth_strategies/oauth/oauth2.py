# auth_strategies/oauth/oauth2.py

import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any
from urllib.parse import urljoin

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from starlette.requests import Request

from zalo_auth.auth_strategies.base import BaseAuthStrategy
from zalo_auth.core.exceptions import (
    AuthorizationError,
    InternalOAuthError,
    OAuthRequestError,
    TokenError,
    ZaloAuthException,
)
from zalo_auth.schemas.oauth import AuthOutcome

logger = logging.getLogger(__name__)

VerifyCallback = Callable[[str, str | None, Any], Any]
UserProfileHook = Callable[[str], Awaitable[Any]]
AuthorizationParamsHook = Callable[[dict[str, Any]], dict[str, Any]]
ParseErrorResponseHook = Callable[[str, int], Exception | None]


def loads_or_none(data: str | bytes | None) -> Any:
    """Decode a JSON body, returning None when there is nothing decodable."""
    if not data:
        return None
    try:
        return json.loads(data)
    except ValueError:
        return None


class OAuth2Strategy(BaseAuthStrategy):
    """
    Generic OAuth 2.0 authorization-code strategy.

    Provider strategies hold one of these and plug in their own behaviour
    through hooks instead of subclassing it:

        user_profile(access_token)         -> profile handed to verify
        authorization_params(options)      -> extra authorization query params
        parse_error_response(body, status) -> error raised for a failed token request

    Flow:
        1. authenticate() without code:   redirect user to provider
        2. authenticate() with code:      exchange code, load profile, verify
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        verify: VerifyCallback,
        callback_url: str | None = None,
        scope: Sequence[str] | str | None = None,
        scope_separator: str = " ",
        name: str = "oauth2",
        user_profile: UserProfileHook | None = None,
        authorization_params: AuthorizationParamsHook | None = None,
        parse_error_response: ParseErrorResponseHook | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(name)
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.callback_url = callback_url
        self.scope = scope
        self.scope_separator = scope_separator
        self.verify = verify
        self.transport = transport

        self._user_profile = user_profile or self.user_profile
        self._authorization_params = authorization_params or self.authorization_params
        self._parse_error_response = parse_error_response or self.parse_error_response

    def get_oauth_client(
        self, redirect_uri: str | None = None, token: dict[str, Any] | None = None
    ) -> AsyncOAuth2Client:
        """Create a fresh async OAuth2 client for this provider."""
        return AsyncOAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=redirect_uri,
            token=token,
            token_endpoint_auth_method="client_secret_post",
            transport=self.transport,
        )

    async def authenticate(
        self, request: Request, options: dict[str, Any] | None = None
    ) -> AuthOutcome:
        options = options or {}
        query = request.query_params

        error = query.get("error")
        if error:
            if error == "access_denied":
                logger.info(f"[{self.name}] User denied authorization")
                return AuthOutcome(
                    action="fail", info={"message": query.get("error_description")}
                )
            raise AuthorizationError(
                query.get("error_description"), error, query.get("error_uri")
            )

        callback_url = self._resolve_callback_url(
            request, options.get("callback_url") or self.callback_url
        )

        code = query.get("code")
        if code:
            return await self._complete(code, callback_url)

        params = dict(self._authorization_params(options))
        scope = options.get("scope", self.scope)
        if scope:
            params["scope"] = self._join_scope(scope)

        async with self.get_oauth_client(redirect_uri=callback_url) as client:
            uri, state = client.create_authorization_url(self.authorization_url, **params)

        logger.debug(f"[{self.name}] Redirecting to provider, state={state[:8]}...")
        return AuthOutcome(action="redirect", redirect_url=uri, state=state)

    async def _complete(self, code: str, callback_url: str | None) -> AuthOutcome:
        token = await self.exchange_code_for_tokens(code, callback_url)

        access_token = token.get("access_token")
        if not access_token:
            raise InternalOAuthError("Failed to obtain access token")
        refresh_token = token.get("refresh_token")

        profile = await self._user_profile(access_token)

        user, info = await self._call_verify(access_token, refresh_token, profile)
        if not user:
            logger.info(f"[{self.name}] Verify callback rejected the user")
            return AuthOutcome(action="fail", info=info)
        return AuthOutcome(action="success", user=user, info=info)

    async def _call_verify(
        self, access_token: str, refresh_token: str | None, profile: Any
    ) -> tuple[Any, Any]:
        result = self.verify(access_token, refresh_token, profile)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, tuple):
            user, info = result
            return user, info
        return result, None

    async def exchange_code_for_tokens(
        self, code: str, callback_url: str | None = None
    ) -> dict[str, Any]:
        """
        Exchange the authorization code for provider access/refresh tokens.

        Error bodies from the token endpoint go through the parse_error_response
        hook before Authlib sees them.
        """
        async with self.get_oauth_client(redirect_uri=callback_url) as client:
            client.register_compliance_hook("access_token_response", self._check_token_response)
            try:
                token = await client.fetch_token(
                    self.token_url,
                    code=code,
                    grant_type="authorization_code",
                )
                return dict(token)
            except ZaloAuthException:
                raise
            except (AuthlibBaseError, httpx.HTTPError, ValueError) as e:
                logger.error(f"[{self.name}] Token exchange failed: {e}")
                raise InternalOAuthError("Failed to obtain access token", e) from e

    def _check_token_response(self, resp: httpx.Response) -> httpx.Response:
        data = loads_or_none(resp.text)
        if resp.status_code < 400 and not (isinstance(data, dict) and "error" in data):
            return resp

        try:
            err = self._parse_error_response(resp.text, resp.status_code)
        except ValueError:
            err = None
        if err is not None:
            raise err

        raise InternalOAuthError(
            "Failed to obtain access token",
            OAuthRequestError(
                f"Token endpoint returned {resp.status_code}", resp.status_code, resp.text
            ),
        )

    async def get(self, url: str, access_token: str) -> tuple[str, httpx.Response]:
        """
        GET a protected resource with the access token as Bearer credential.

        Returns:
            (body, response) for a 2xx response

        Raises:
            OAuthRequestError: on a non-2xx status or a transport failure
        """
        token = {"access_token": access_token, "token_type": "bearer"}
        async with self.get_oauth_client(token=token) as client:
            try:
                response = await client.get(url)
            except (AuthlibBaseError, httpx.HTTPError) as e:
                logger.error(f"[{self.name}] GET {url} failed: {e}")
                raise OAuthRequestError(str(e)) from e

        if response.is_error:
            raise OAuthRequestError(
                f"GET {url} returned {response.status_code}", response.status_code, response.text
            )
        return response.text, response

    def parse_error_response(self, body: str, status: int) -> Exception | None:
        """
        Default interpretation of a token endpoint error body (RFC 6749 §5.2).

        Raises ValueError when the body is not JSON.
        """
        data = json.loads(body)
        if isinstance(data, dict) and data.get("error"):
            return TokenError(data.get("error_description"), data["error"], data.get("error_uri"))
        return None

    async def user_profile(self, access_token: str) -> Any:
        return None

    def authorization_params(self, options: dict[str, Any]) -> dict[str, Any]:
        return {}

    def _join_scope(self, scope: Sequence[str] | str) -> str:
        if isinstance(scope, str):
            return scope
        return self.scope_separator.join(scope)

    @staticmethod
    def _resolve_callback_url(request: Request, callback_url: str | None) -> str | None:
        if not callback_url:
            return None
        # Relative callback URLs are resolved against the incoming request
        return urljoin(str(request.url), callback_url)
