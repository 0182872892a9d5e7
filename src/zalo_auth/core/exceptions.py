# core/exceptions.py

from typing import Any

from fastapi import HTTPException, status


class ZaloAuthException(Exception):
    kind: str = "ZaloAuthException"

    def __init__(
        self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(ZaloAuthException):
    kind = "AuthenticationError"

    def __init__(self, message: str = "Authentication failed", error_code: str | None = None):
        super().__init__(message, error_code=error_code or "AUTHENTICATION_ERROR")


class ZaloAPIError(AuthenticationError):
    """
    Error reported by Zalo itself, either on a redirect or in a JSON body.

    https://developers.zalo.me/docs/api/open-api/tai-lieu/ma-loi-post-1067
    """

    kind = "ZaloAPIError"
    status = 500

    def __init__(self, message: str | None = None, code: int | None = None):
        super().__init__(message or "", error_code="ZALO_API_ERROR")
        self.code = code
        self.details = {"code": code}


class AuthorizationError(AuthenticationError):
    """OAuth 2.0 error returned on the authorization callback (RFC 6749 §4.1.2.1)."""

    kind = "AuthorizationError"

    def __init__(self, message: str | None, code: str | None = None, uri: str | None = None):
        super().__init__(message or "", error_code="AUTHORIZATION_ERROR")
        self.code = code or "server_error"
        self.uri = uri
        self.details = {"code": self.code, "uri": uri}

        if self.code == "access_denied":
            self.status = 403
        elif self.code == "server_error":
            self.status = 502
        elif self.code == "temporarily_unavailable":
            self.status = 503
        elif self.code == "unsupported_response_type":
            self.status = 501
        else:
            self.status = 500


class TokenError(AuthenticationError):
    """OAuth 2.0 error returned by the token endpoint (RFC 6749 §5.2)."""

    kind = "TokenError"
    status = 500

    def __init__(self, message: str | None, code: str | None = None, uri: str | None = None):
        super().__init__(message or "", error_code="TOKEN_ERROR")
        self.code = code or "invalid_request"
        self.uri = uri
        self.details = {"code": self.code, "uri": uri}


class OAuthRequestError(ZaloAuthException):
    """A request made with an access token failed, or returned a non-2xx status."""

    kind = "OAuthRequestError"

    def __init__(self, message: str, status_code: int | None = None, data: str | None = None):
        super().__init__(
            message, error_code="OAUTH_REQUEST_ERROR", details={"status_code": status_code}
        )
        self.status_code = status_code
        self.data = data


class InternalOAuthError(ZaloAuthException):
    kind = "InternalOAuthError"

    def __init__(self, message: str, oauth_error: BaseException | None = None):
        super().__init__(message, error_code="INTERNAL_OAUTH_ERROR")
        self.oauth_error = oauth_error

    def __str__(self) -> str:
        if self.oauth_error is None:
            return self.message
        return f"{self.message} ({self.oauth_error})"


class ProfileParseError(ZaloAuthException):
    kind = "ProfileParseError"

    def __init__(self, message: str = "Failed to parse user profile"):
        super().__init__(message, error_code="PROFILE_PARSE_ERROR")


# HTTP Exception converters
def convert_to_http_exception(exc: ZaloAuthException) -> HTTPException:
    status_map = {
        "AUTHENTICATION_ERROR": status.HTTP_400_BAD_REQUEST,
        "OAUTH_REQUEST_ERROR": status.HTTP_502_BAD_GATEWAY,
        "INTERNAL_OAUTH_ERROR": status.HTTP_502_BAD_GATEWAY,
        "PROFILE_PARSE_ERROR": status.HTTP_502_BAD_GATEWAY,
    }

    status_code = getattr(exc, "status", None) or status_map.get(
        exc.error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "error_code": exc.error_code, "details": exc.details},
    )
