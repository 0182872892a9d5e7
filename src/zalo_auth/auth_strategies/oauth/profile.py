# auth_strategies/oauth/profile.py

import json
from typing import Any

from zalo_auth.auth_strategies.constants import (
    FIELD_BIRTHDAY,
    FIELD_GENDER,
    FIELD_ID,
    FIELD_NAME,
    FIELD_PICTURE,
)
from zalo_auth.core.exceptions import ProfileParseError
from zalo_auth.schemas.oauth import ProfilePhoto, ZaloProfile


def parse_profile(raw: str | bytes | dict[str, Any]) -> ZaloProfile:
    """
    Map a Zalo Graph /me response to our common profile format.

    Zalo profile fields:
        id       → unique Zalo user ID
        name     → full display name
        birthday
        gender
        picture  → either a URL or {"data": {"url": ...}}

    Args:
        raw: JSON text or an already decoded object

    Raises:
        ProfileParseError: If the text is not JSON or does not hold an object
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise ProfileParseError() from e

    if not isinstance(raw, dict):
        raise ProfileParseError()

    profile = ZaloProfile(
        id=raw.get(FIELD_ID),
        display_name=raw.get(FIELD_NAME),
        birthday=raw.get(FIELD_BIRTHDAY),
        gender=raw.get(FIELD_GENDER),
    )

    picture = raw.get(FIELD_PICTURE)
    if picture:
        if isinstance(picture, dict):
            # Graph API returns {"data": {"url": ..., "is_silhouette": ...}}
            data = picture.get("data")
            url = data.get("url") if isinstance(data, dict) else None
            if url:
                profile.photos = [ProfilePhoto(value=url)]
        else:
            profile.photos = [ProfilePhoto(value=picture)]

    return profile
