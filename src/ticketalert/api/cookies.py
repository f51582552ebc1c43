"""Spotify session cookies.

Three cookies make up a Spotify "session":

- spotify_access_token  httpOnly, lives as long as the token (expires_in)
- spotify_refresh_token httpOnly, 30 days
- spotify_user          readable by JS, {"id", "name", "image"} for the header badge

Plus spotify_oauth_state, a short-lived httpOnly cookie carrying the OAuth state
value between /login and /callback.
"""

import json
import logging

from fastapi import Response

from ticketalert.domain.entities import SpotifyTokens, SpotifyUser

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "spotify_access_token"
REFRESH_TOKEN_COOKIE = "spotify_refresh_token"
USER_COOKIE = "spotify_user"
OAUTH_STATE_COOKIE = "spotify_oauth_state"

REFRESH_TOKEN_MAX_AGE = 60 * 60 * 24 * 30
OAUTH_STATE_MAX_AGE = 60 * 10

SESSION_COOKIES = (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, USER_COOKIE)


def parse_user_cookie(raw: str | None) -> SpotifyUser | None:
    """Decode the spotify_user cookie. Garbage reads as 'no user'."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.debug("Ignoring malformed spotify_user cookie")
        return None
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return SpotifyUser(
        id=str(data["id"]), name=str(data.get("name") or ""), image=data.get("image")
    )


def set_access_token_cookie(response: Response, tokens: SpotifyTokens, secure: bool) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=tokens.expires_in,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )


def set_session_cookies(
    response: Response,
    tokens: SpotifyTokens,
    user: SpotifyUser | None,
    secure: bool,
) -> None:
    """Write the session cookies after a successful login."""
    set_access_token_cookie(response, tokens, secure)
    if tokens.refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            tokens.refresh_token,
            max_age=REFRESH_TOKEN_MAX_AGE,
            httponly=True,
            secure=secure,
            samesite="lax",
            path="/",
        )
    if user is not None:
        response.set_cookie(
            USER_COOKIE,
            json.dumps(user.to_dict()),
            max_age=tokens.expires_in,
            httponly=False,
            secure=secure,
            samesite="lax",
            path="/",
        )


def clear_session_cookies(response: Response) -> None:
    for name in SESSION_COOKIES:
        response.delete_cookie(name, path="/")


__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "OAUTH_STATE_COOKIE",
    "OAUTH_STATE_MAX_AGE",
    "REFRESH_TOKEN_COOKIE",
    "SESSION_COOKIES",
    "USER_COOKIE",
    "clear_session_cookies",
    "parse_user_cookie",
    "set_access_token_cookie",
    "set_session_cookies",
]
