import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from zalo_auth.auth_strategies.constants import SUPPORTED_PROVIDERS
from zalo_auth.auth_strategies.oauth.factory import get_oauth_strategy
from zalo_auth.auth_strategies.oauth.zalo import ZaloOAuthStrategy
from zalo_auth.core.exceptions import (
    AuthenticationError,
    ZaloAuthException,
    convert_to_http_exception,
)
from zalo_auth.schemas.oauth import OAuthLoginResponse, ZaloProfile

logger = logging.getLogger(__name__)

router = APIRouter()


async def accept_profile(
    access_token: str, refresh_token: str | None, profile: ZaloProfile
) -> ZaloProfile:
    """Default verify callback: every profile Zalo vouches for is accepted as-is."""
    return profile


def get_strategy(provider: str) -> ZaloOAuthStrategy:
    if provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported provider '{provider}'. "
                f"Choose from: {', '.join(sorted(SUPPORTED_PROVIDERS))}"
            ),
        )
    try:
        return get_oauth_strategy(provider, verify=accept_profile)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/{provider}/login")
async def oauth_login(
    request: Request,
    provider: str,
    display: str | None = Query(default=None, description="Dialog display: page, popup, touch"),
    auth_type: str | None = Query(default=None, description="e.g. rerequest"),
    auth_nonce: str | None = Query(default=None, description="Reauthentication nonce"),
    strategy: ZaloOAuthStrategy = Depends(get_strategy),
) -> RedirectResponse:
    """
    Redirect the user to the provider's OAuth consent/login page.

    Usage:
        Frontend opens: GET /api/v1/auth/oauth/zalo/login?display=popup
        Browser is redirected to the Zalo login page.
    """
    options = {"display": display, "auth_type": auth_type, "auth_nonce": auth_nonce}
    try:
        outcome = await strategy.authenticate(request, options)
    except ZaloAuthException as e:
        logger.warning(f"[oauth:{provider}] Failed to initiate login: {e}")
        raise convert_to_http_exception(e) from e

    if outcome.action != "redirect" or not outcome.redirect_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Login request did not produce a provider redirect.",
        )

    logger.info(f"[oauth:{provider}] Initiating login")
    return RedirectResponse(url=outcome.redirect_url, status_code=status.HTTP_302_FOUND)


@router.get("/{provider}/callback", response_model=OAuthLoginResponse)
async def oauth_callback(
    request: Request,
    provider: str,
    strategy: ZaloOAuthStrategy = Depends(get_strategy),
) -> OAuthLoginResponse | RedirectResponse:
    """
    Handle the OAuth callback from the provider.

    The provider redirects here after the user approves (or denies) access.
    The strategy exchanges the code, fetches the profile and runs verify.
    """
    try:
        outcome = await strategy.authenticate(request)
    except ZaloAuthException as e:
        logger.warning(f"[oauth:{provider}] Authentication failed: {e}")
        raise convert_to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"[oauth:{provider}] Callback error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OAuth authentication failed. Please try again.",
        ) from e

    # Callback reached without a code: start over at the provider
    if outcome.action == "redirect" and outcome.redirect_url:
        return RedirectResponse(url=outcome.redirect_url, status_code=status.HTTP_302_FOUND)

    if outcome.action == "fail":
        message = outcome.info.get("message") if isinstance(outcome.info, dict) else None
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message or "OAuth login denied.",
        )

    logger.info(f"[oauth:{provider}] User {getattr(outcome.user, 'id', None)} authenticated")
    return OAuthLoginResponse(provider=strategy.name, profile=outcome.user)
