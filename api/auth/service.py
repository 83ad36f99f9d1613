"""
Auth business logic: credential checks and token issuance.
"""

from __future__ import annotations

import logging

from core.config import Settings
from core.errors import NotAuthenticated

from . import security
from .gate import AuthorizationGate
from .provider import AuthProvider
from .schemas import CAN_CREATE, CAN_DELETE, CAN_UPDATE, Caller

logger = logging.getLogger(__name__)

# JWT claim name for each capability advertised in an API token.
TOKEN_CLAIMS = {
    CAN_CREATE: "canCreate",
    CAN_DELETE: "canDelete",
    CAN_UPDATE: "canUpdate",
}


async def authenticate(provider: AuthProvider, username: str, password: str) -> Caller:
    principal = await provider.authenticate(username, password)
    if principal is None:
        logger.info("login_rejected user=%s", (username or "").strip())
        raise NotAuthenticated("Invalid username or password.")
    return Caller(username=principal)


async def login(
    provider: AuthProvider,
    settings: Settings,
    *,
    username: str,
    password: str,
) -> str:
    """
    Browser login: a plain access token, stored in a cookie by the router.
    """
    caller = await authenticate(provider, username, password)
    return security.build_access_token(
        username=caller.username,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )


async def issue_api_token(
    provider: AuthProvider,
    gate: AuthorizationGate,
    settings: Settings,
    *,
    username: str,
    password: str,
) -> str:
    """
    API login: the token also advertises which mutations the caller may run.
    """
    caller = await authenticate(provider, username, password)
    granted = await gate.capabilities(caller, *TOKEN_CLAIMS)
    return security.build_access_token(
        username=caller.username,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
        capabilities={claim: granted[cap] for cap, claim in TOKEN_CLAIMS.items()},
    )
