from zalo_auth.auth_strategies.oauth.oauth2 import OAuth2Strategy
from zalo_auth.auth_strategies.oauth.profile import parse_profile
from zalo_auth.auth_strategies.oauth.zalo import ZaloOAuthStrategy

__all__ = [
    "OAuth2Strategy",
    "ZaloOAuthStrategy",
    "parse_profile",
]
