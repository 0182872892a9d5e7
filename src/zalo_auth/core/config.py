from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", case_sensitive=True, extra="ignore"
    )

    # Application
    APP_NAME: str = "ZaloAuth"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Login with Zalo over OAuth 2.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Zalo application
    ZALO_APP_ID: str = ""
    ZALO_CLIENT_SECRET: str = ""
    ZALO_CALLBACK_URL: str = "/api/v1/auth/oauth/zalo/callback"

    # Zalo endpoints; authorization/token URLs are derived from the version when unset
    ZALO_GRAPH_API_VERSION: str = "v3"
    ZALO_AUTHORIZATION_URL: str | None = None
    ZALO_TOKEN_URL: str | None = None
    ZALO_PROFILE_URL: str = "https://graph.zalo.me/v2.0/me"

    # Profile request
    ZALO_PROFILE_FIELDS: str | list[str] | None = None
    ZALO_SCOPE: str | list[str] | None = None
    ZALO_ENABLE_PROOF: bool = False
    ZALO_PROVIDER_NAME: str = "zalo"

    # CORS
    CORS_ORIGINS: str | list[str] = ["http://localhost:3000", "http://localhost:8000"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: str | list[str] = ["*"]
    CORS_ALLOW_HEADERS: str | list[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                try:
                    import json

                    return json.loads(v)
                except ValueError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator(
        "CORS_ALLOW_METHODS",
        "CORS_ALLOW_HEADERS",
        "ZALO_PROFILE_FIELDS",
        "ZALO_SCOPE",
        mode="before",
    )
    @classmethod
    def parse_lists(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


# Global settings instance
try:
    settings = Settings()
except Exception as e:
    # Fallback or re-raise with more info if needed during debugging
    print(f"Error loading settings: {e}")
    raise e
