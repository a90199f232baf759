"""
Google sign-in for the logos pages.

The signed-in user's profile lives in the Starlette session. Routes pull it
through ``get_current_user`` (optional) or ``require_user`` (redirects to
login), and every rendered page gets ``profile``, ``login`` and ``logout``
through ``template_context``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from logos.config import Settings
from logos.errors import AuthError, AuthRequired, ConfigError

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"
STATE_KEY = "oauth2_state"
RETURN_KEY = "oauth2_return"

router = APIRouter()


@dataclass
class UserProfile:
    """The bits of a Google profile the app keeps in the session."""

    id: str
    display_name: str
    image_url: Optional[str] = None

    @classmethod
    def from_userinfo(cls, data: dict[str, Any]) -> "UserProfile":
        return cls(
            id=data["sub"],
            display_name=data.get("name") or data.get("email") or data["sub"],
            image_url=data.get("picture"),
        )


class GoogleOAuthClient:
    """Authorization URL, code exchange and profile lookup against Google."""

    AUTHORIZATION_ENDPOINT: ClassVar[str] = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_ENDPOINT: ClassVar[str] = "https://oauth2.googleapis.com/token"
    USERINFO_ENDPOINT: ClassVar[str] = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES: ClassVar[tuple[str, ...]] = ("openid", "email", "profile")

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def build_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
        }
        return f"{self.AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for an access token."""
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                self.TOKEN_ENDPOINT,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
        if response.status_code != 200:
            logger.error("Google token exchange failed: status=%d", response.status_code)
            raise AuthError("Sign-in failed")
        return response.json()["access_token"]

    async def fetch_profile(self, access_token: str) -> UserProfile:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(
                self.USERINFO_ENDPOINT,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        if response.status_code != 200:
            logger.error("Google userinfo failed: status=%d", response.status_code)
            raise AuthError("Sign-in failed")
        return UserProfile.from_userinfo(response.json())


def build_oauth_client(settings: Settings) -> Optional[GoogleOAuthClient]:
    if not (settings.oauth2_client_id and settings.oauth2_client_secret):
        return None
    return GoogleOAuthClient(
        client_id=settings.oauth2_client_id,
        client_secret=settings.oauth2_client_secret,
        redirect_uri=settings.oauth2_callback,
    )


def get_oauth_client(request: Request) -> GoogleOAuthClient:
    client = request.app.state.oauth_client
    if client is None:
        raise ConfigError("Sign-in is not configured")
    return client


def get_current_user(request: Request) -> Optional[UserProfile]:
    # Errors rendered outside the session middleware have no session.
    if "session" not in request.scope:
        return None
    data = request.session.get(PROFILE_KEY)
    if not data:
        return None
    return UserProfile(**data)


def require_user(
    request: Request, user: Optional[UserProfile] = Depends(get_current_user)
) -> UserProfile:
    if user is None:
        raise AuthRequired(_current_path(request))
    return user


def template_context(request: Request) -> dict[str, Any]:
    """Profile plus login/logout links that return to the current page."""
    here = urlencode({"return": _current_path(request)})
    return {
        "profile": get_current_user(request),
        "login": f"/auth/login?{here}",
        "logout": f"/auth/logout?{here}",
    }


def _current_path(request: Request) -> str:
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


def _safe_return(value: Optional[str]) -> str:
    # Only same-site paths; anything else would be an open redirect.
    if value and value.startswith("/") and not value.startswith("//"):
        return value
    return "/"


@router.get("/login")
def login(
    request: Request,
    return_to: Optional[str] = Query(None, alias="return"),
    client: GoogleOAuthClient = Depends(get_oauth_client),
):
    state = secrets.token_urlsafe(16)
    request.session[STATE_KEY] = state
    request.session[RETURN_KEY] = _safe_return(return_to)
    return RedirectResponse(
        client.build_authorization_url(state), status_code=status.HTTP_302_FOUND
    )


@router.get("/google/callback")
async def callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    client: GoogleOAuthClient = Depends(get_oauth_client),
):
    expected = request.session.pop(STATE_KEY, None)
    if not code or not expected or state != expected:
        raise AuthError("Invalid sign-in response")

    access_token = await client.exchange_code(code)
    profile = await client.fetch_profile(access_token)
    request.session[PROFILE_KEY] = asdict(profile)
    logger.info("User %s signed in", profile.id)

    return_to = request.session.pop(RETURN_KEY, "/")
    return RedirectResponse(_safe_return(return_to), status_code=status.HTTP_302_FOUND)


@router.get("/logout")
def logout(request: Request, return_to: Optional[str] = Query(None, alias="return")):
    request.session.pop(PROFILE_KEY, None)
    return RedirectResponse(_safe_return(return_to), status_code=status.HTTP_302_FOUND)
