"""
Login with Zalo over OAuth 2.0.

Exposes the Zalo strategy, its profile normalizer and the error types a
host application needs to handle.
"""

from zalo_auth.auth_strategies.oauth import OAuth2Strategy, ZaloOAuthStrategy, parse_profile
from zalo_auth.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InternalOAuthError,
    OAuthRequestError,
    ProfileParseError,
    TokenError,
    ZaloAPIError,
    ZaloAuthException,
)
from zalo_auth.schemas.oauth import AuthOutcome, ZaloProfile, ZaloStrategyOptions

__all__ = [
    "AuthOutcome",
    "AuthenticationError",
    "AuthorizationError",
    "InternalOAuthError",
    "OAuth2Strategy",
    "OAuthRequestError",
    "ProfileParseError",
    "TokenError",
    "ZaloAPIError",
    "ZaloAuthException",
    "ZaloOAuthStrategy",
    "ZaloProfile",
    "ZaloStrategyOptions",
    "parse_profile",
]
