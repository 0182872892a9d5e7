"""
OAuthProviderFactory: builds the correct strategy instance based on provider name.

Reads credentials from settings so endpoints don't need to know about config.
"""

import httpx

from zalo_auth.auth_strategies.constants import SUPPORTED_PROVIDERS, ZALO
from zalo_auth.auth_strategies.oauth.oauth2 import VerifyCallback
from zalo_auth.auth_strategies.oauth.zalo import ZaloOAuthStrategy
from zalo_auth.core.config import Settings, settings
from zalo_auth.core.exceptions import AuthenticationError
from zalo_auth.schemas.oauth import ZaloStrategyOptions


def get_oauth_strategy(
    provider: str,
    verify: VerifyCallback,
    transport: httpx.AsyncBaseTransport | None = None,
    config: Settings | None = None,
) -> ZaloOAuthStrategy:
    """
    Return a configured OAuth strategy for the given provider name.

    Args:
        provider:  Provider name, currently only "zalo"
        verify:    Host callback receiving (access_token, refresh_token, profile)
        transport: Optional httpx transport for every provider request
        config:    Settings to read credentials from (defaults to the global settings)

    Returns:
        Configured strategy instance

    Raises:
        AuthenticationError: If provider is unknown or not configured
    """
    provider = provider.lower()
    config = config or settings

    if provider == ZALO:
        if not config.ZALO_APP_ID or not config.ZALO_CLIENT_SECRET:
            raise AuthenticationError("Zalo OAuth is not configured.")
        return ZaloOAuthStrategy(
            ZaloStrategyOptions.from_settings(config),
            verify,
            transport=transport,
        )

    raise AuthenticationError(
        f"Unknown OAuth provider: '{provider}'. "
        f"Supported providers: {', '.join(sorted(SUPPORTED_PROVIDERS))}"
    )
