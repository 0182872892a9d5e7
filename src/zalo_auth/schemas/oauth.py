from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from zalo_auth.auth_strategies.constants import (
    ZALO,
    ZALO_AUTHORIZATION_URL,
    ZALO_DEFAULT_API_VERSION,
    ZALO_PROFILE_URL,
    ZALO_SCOPE_SEPARATOR,
    ZALO_TOKEN_URL,
)

if TYPE_CHECKING:
    from zalo_auth.core.config import Settings


class ZaloStrategyOptions(BaseModel):
    """Configuration of a Zalo login strategy. Missing endpoints are filled from the API version."""

    model_config = ConfigDict(frozen=True)

    app_id: str
    client_secret: str
    callback_url: str | None = None
    graph_api_version: str = ZALO_DEFAULT_API_VERSION
    authorization_url: str | None = None
    token_url: str | None = None
    profile_url: str = ZALO_PROFILE_URL
    profile_fields: tuple[str, ...] | None = None
    scope: tuple[str, ...] | str | None = None
    scope_separator: str = ZALO_SCOPE_SEPARATOR
    enable_proof: bool = False
    provider_name: str = ZALO

    @model_validator(mode="before")
    @classmethod
    def default_endpoints(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        version = data.get("graph_api_version") or ZALO_DEFAULT_API_VERSION
        if not data.get("authorization_url"):
            data["authorization_url"] = ZALO_AUTHORIZATION_URL.format(version=version)
        if not data.get("token_url"):
            data["token_url"] = ZALO_TOKEN_URL.format(version=version)
        if not data.get("profile_url"):
            data["profile_url"] = ZALO_PROFILE_URL
        if not data.get("scope_separator"):
            data["scope_separator"] = ZALO_SCOPE_SEPARATOR
        return data

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ZaloStrategyOptions":
        return cls(
            app_id=settings.ZALO_APP_ID,
            client_secret=settings.ZALO_CLIENT_SECRET,
            callback_url=settings.ZALO_CALLBACK_URL,
            graph_api_version=settings.ZALO_GRAPH_API_VERSION,
            authorization_url=settings.ZALO_AUTHORIZATION_URL,
            token_url=settings.ZALO_TOKEN_URL,
            profile_url=settings.ZALO_PROFILE_URL,
            profile_fields=settings.ZALO_PROFILE_FIELDS,
            scope=settings.ZALO_SCOPE,
            enable_proof=settings.ZALO_ENABLE_PROOF,
            provider_name=settings.ZALO_PROVIDER_NAME,
        )


class ProfilePhoto(BaseModel):
    value: Any = None


class ZaloProfile(BaseModel):
    """
    Provider-agnostic user profile built from a Zalo Graph /me response.

    photos is None unless the raw profile carried a picture.
    """

    model_config = ConfigDict(populate_by_name=True)

    provider: str | None = None
    id: Any = None
    display_name: Any = Field(default=None, alias="displayName")
    birthday: Any = None
    gender: Any = None
    photos: list[ProfilePhoto] | None = None
    raw_body: str | None = None
    raw_json: dict[str, Any] | None = None


class AuthOutcome(BaseModel):
    """What an authenticate() call decided: send the user to the provider, accept, or reject."""

    action: Literal["redirect", "success", "fail"]
    redirect_url: str | None = None
    state: str | None = None
    user: Any = None
    info: Any = None


class OAuthLoginResponse(BaseModel):
    """Returned after a successful Zalo login."""

    provider: str
    profile: ZaloProfile
