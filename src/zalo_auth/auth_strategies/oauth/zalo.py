# auth_strategies/oauth/zalo.py

import hashlib
import hmac
import json
import logging
import re
from collections.abc import Sequence
from typing import Any

import httpx
from starlette.requests import Request

from zalo_auth.auth_strategies.base import BaseAuthStrategy
from zalo_auth.auth_strategies.constants import (
    PARAM_ERROR,
    PARAM_ERROR_CODE,
    PARAM_ERROR_MESSAGE,
    ZALO_PROFILE_FIELD_MAP,
)
from zalo_auth.auth_strategies.oauth.oauth2 import OAuth2Strategy, VerifyCallback, loads_or_none
from zalo_auth.auth_strategies.oauth.profile import parse_profile
from zalo_auth.core.exceptions import (
    InternalOAuthError,
    OAuthRequestError,
    ProfileParseError,
    ZaloAPIError,
)
from zalo_auth.schemas.oauth import AuthOutcome, ZaloProfile, ZaloStrategyOptions

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_error_code(value: str | None) -> int | None:
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def _api_error_from(data: Any) -> ZaloAPIError | None:
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        error = data["error"]
        return ZaloAPIError(error.get("message"), error.get("code"))
    return None


class ZaloOAuthStrategy(BaseAuthStrategy):
    """
    OAuth 2.0 strategy for Zalo login.

    The authorization-code exchange itself is delegated to a held
    OAuth2Strategy; this class adds what Zalo does differently:

        - error redirects that carry error_code/error_message instead of error
        - a comma-separated scope list and a Graph `fields` selector
        - structured {"error": {"message", "code"}} bodies

    The host supplies verify(access_token, refresh_token, profile), sync or
    async, returning the user (or a falsy value to reject) or (user, info).
    """

    def __init__(
        self,
        options: ZaloStrategyOptions,
        verify: VerifyCallback,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(options.provider_name)
        self.options = options
        self._profile_url = options.profile_url
        self._profile_fields = options.profile_fields
        self._enable_proof = options.enable_proof
        self._client_secret = options.client_secret

        self._oauth2 = OAuth2Strategy(
            client_id=options.app_id,
            client_secret=options.client_secret,
            authorization_url=options.authorization_url or "",
            token_url=options.token_url or "",
            callback_url=options.callback_url,
            scope=options.scope,
            scope_separator=options.scope_separator,
            verify=verify,
            name=self.name,
            user_profile=self.user_profile,
            authorization_params=self.authorization_params,
            parse_error_response=self.parse_error_response,
            transport=transport,
        )

    async def authenticate(
        self, request: Request, options: dict[str, Any] | None = None
    ) -> AuthOutcome:
        query = request.query_params

        # Zalo redirects with error_code/error_message and no OAuth 2.0 `error`
        if query.get(PARAM_ERROR_CODE) and not query.get(PARAM_ERROR):
            code = _parse_error_code(query.get(PARAM_ERROR_CODE))
            logger.warning(f"[{self.name}] Provider redirected with error_code={code}")
            raise ZaloAPIError(query.get(PARAM_ERROR_MESSAGE), code)

        return await self._oauth2.authenticate(request, options)

    def authorization_params(self, options: dict[str, Any]) -> dict[str, Any]:
        """
        Extra Zalo-specific parameters for the authorization request.

        Options:
            display    → display mode of the dialog: page, popup, touch
            auth_type  → e.g. "rerequest" to ask again for declined permissions
            auth_nonce → app-generated nonce for reauthentication
        """
        params: dict[str, Any] = {}
        if options.get("display"):
            params["display"] = options["display"]
        if options.get("auth_type"):
            params["auth_type"] = options["auth_type"]
        if options.get("auth_nonce"):
            params["auth_nonce"] = options["auth_nonce"]
        return params

    async def user_profile(self, access_token: str) -> ZaloProfile:
        """
        Fetch the user's profile from the Graph API and normalize it.

        Raises:
            ZaloAPIError: Zalo answered with a structured error
            InternalOAuthError: the request failed for any other reason
            ProfileParseError: the response body is not JSON
        """
        url = httpx.URL(self._profile_url)

        if self._enable_proof:
            proof = self.appsecret_proof(access_token)
            # TODO: send appsecret_proof once Zalo documents the query parameter for it
            logger.debug(f"[{self.name}] appsecret_proof computed ({proof[:8]}...) but not sent")

        if self._profile_fields:
            fields = self.convert_profile_fields(self._profile_fields)
            if fields:
                url = url.copy_add_param("fields", fields)

        try:
            body, _ = await self._oauth2.get(str(url), access_token)
        except OAuthRequestError as e:
            api_error = _api_error_from(loads_or_none(e.data))
            if api_error is not None:
                logger.warning(f"[{self.name}] Profile request rejected: {api_error.message}")
                raise api_error from e
            logger.error(f"[{self.name}] Profile fetch failed: {e}")
            raise InternalOAuthError("Failed to fetch user profile", e) from e

        try:
            raw = json.loads(body)
        except ValueError as e:
            raise ProfileParseError("Failed to parse user profile") from e

        profile = parse_profile(raw)
        profile.provider = self.name
        profile.raw_body = body
        profile.raw_json = raw
        return profile

    def parse_error_response(self, body: str, status: int) -> Exception | None:
        """Parse an error body from the token endpoint; non-JSON bodies raise ValueError."""
        data = json.loads(body)
        api_error = _api_error_from(data)
        if api_error is not None:
            return api_error
        return self._oauth2.parse_error_response(body, status)

    def appsecret_proof(self, access_token: str) -> str:
        """HMAC-SHA256 of the access token keyed by the app secret, hex encoded."""
        return hmac.new(
            self._client_secret.encode(), access_token.encode(), hashlib.sha256
        ).hexdigest()

    @staticmethod
    def convert_profile_fields(profile_fields: Sequence[str]) -> str:
        """
        Translate normalized field names to Zalo Graph field names.

        Names without a mapping are passed through so callers can request any
        raw Zalo field.
        """
        fields = [ZALO_PROFILE_FIELD_MAP.get(f, f) for f in profile_fields]
        return ",".join(fields)
