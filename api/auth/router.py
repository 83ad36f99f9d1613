"""
Login, logout and API token endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Header, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from core.config import Settings
from core.errors import NotAuthenticated
from core.views import templates

from . import service
from .dependencies import ACCESS_TOKEN_COOKIE, get_auth_provider, get_gate, get_settings
from .gate import AuthorizationGate
from .provider import AuthProvider

router = APIRouter()


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, error: str = "") -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login.html",
        {"title": "Login", "error": bool(error)},
    )


@router.post("/login-auth")
async def login_auth(
    username: str = Form(default=""),
    password: str = Form(default=""),
    provider: AuthProvider = Depends(get_auth_provider),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    try:
        token = await service.login(provider, settings, username=username, password=password)
    except NotAuthenticated:
        return RedirectResponse("/login?error=1", status_code=303)

    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/logout")
async def logout() -> RedirectResponse:
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return response


@router.get("/api/token", response_class=PlainTextResponse)
async def api_token(
    login: str | None = Header(default=None),
    password: str | None = Header(default=None),
    provider: AuthProvider = Depends(get_auth_provider),
    gate: AuthorizationGate = Depends(get_gate),
    settings: Settings = Depends(get_settings),
) -> PlainTextResponse:
    token = await service.issue_api_token(
        provider,
        gate,
        settings,
        username=login or "",
        password=password or "",
    )
    return PlainTextResponse(token)
