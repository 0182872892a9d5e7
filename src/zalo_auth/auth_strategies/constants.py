# auth_strategies/constants.py

ZALO = "zalo"

SUPPORTED_PROVIDERS = {ZALO}

# Zalo OAuth URLs; the version segment follows the configured Graph API version
ZALO_DEFAULT_API_VERSION = "v3"
ZALO_AUTHORIZATION_URL = "https://oauth.zaloapp.com/{version}/auth"
ZALO_TOKEN_URL = "https://oauth.zaloapp.com/{version}/access_token"
ZALO_PROFILE_URL = "https://graph.zalo.me/v2.0/me"

# Zalo joins requested scopes with commas rather than spaces
ZALO_SCOPE_SEPARATOR = ","

# Normalized profile field -> Zalo Graph field
ZALO_PROFILE_FIELD_MAP = {
    "id": "id",
    "displayName": "name",
    "gender": "gender",
    "birthday": "birthday",
    "photos": "picture",
}

# Raw profile keys
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_BIRTHDAY = "birthday"
FIELD_GENDER = "gender"
FIELD_PICTURE = "picture"

# Query parameters of Zalo's non-standard error redirects
PARAM_ERROR = "error"
PARAM_ERROR_CODE = "error_code"
PARAM_ERROR_MESSAGE = "error_message"
