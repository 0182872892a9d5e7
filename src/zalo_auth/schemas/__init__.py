from .oauth import (
    AuthOutcome,
    OAuthLoginResponse,
    ProfilePhoto,
    ZaloProfile,
    ZaloStrategyOptions,
)

__all__ = [
    "AuthOutcome",
    "OAuthLoginResponse",
    "ProfilePhoto",
    "ZaloProfile",
    "ZaloStrategyOptions",
]
