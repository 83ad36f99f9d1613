"""
Auth dependencies for protected FastAPI routes.

A caller is identified by a bearer token (API clients) or by the
`access_token` cookie the login form sets (browser).
"""

from __future__ import annotations

from fastapi import Depends, Header, Request

from core.config import Settings
from core.errors import NotAuthenticated

from . import security
from .gate import AuthorizationGate
from .provider import AuthProvider
from .schemas import Caller

ACCESS_TOKEN_COOKIE = "access_token"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gate(request: Request) -> AuthorizationGate:
    return request.app.state.gate


def get_auth_provider(request: Request) -> AuthProvider:
    return request.app.state.auth_provider


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise NotAuthenticated("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise NotAuthenticated("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise NotAuthenticated("Authorization must be: Bearer <token>.")
    return token


async def get_access_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    if authorization:
        return _extract_bearer_token(authorization)
    cookie = (request.cookies.get(ACCESS_TOKEN_COOKIE) or "").strip()
    if not cookie:
        raise NotAuthenticated("Missing Authorization header.")
    return cookie


async def get_current_caller(
    access_token: str = Depends(get_access_token),
    settings: Settings = Depends(get_settings),
) -> Caller:
    try:
        payload = security.decode_access_token(
            access_token,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
    except security.AuthSecurityError as exc:
        raise NotAuthenticated(str(exc)) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise NotAuthenticated("Invalid access token subject.")
    return Caller(username=subject)
