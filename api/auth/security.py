"""
Password verification and wiki access tokens.

Passwords are stored as bcrypt hashes (the seed rows in `db/init.sql` use
pgcrypto's `crypt(..., gen_salt('bf'))`, which bcrypt verifies as-is).
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt

TOKEN_ISSUER = "wiki"
TOKEN_TYPE = "access"


class AuthSecurityError(RuntimeError):
    pass


def _utf8(value: str | None) -> bytes:
    return (value or "").encode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    secret, stored = _utf8(plain_password), _utf8(password_hash)
    if not (secret and stored):
        return False
    try:
        return bcrypt.checkpw(secret, stored)
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def build_access_token(
    *,
    username: str,
    secret: str,
    algorithm: str = "HS256",
    expire_minutes: int = 60,
    capabilities: dict[str, bool] | None = None,
) -> str:
    issued_at = int(time.time())
    claims: dict[str, Any] = {
        "sub": username,
        "username": username,
        "iss": TOKEN_ISSUER,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + expire_minutes * 60,
    }
    # Informational only: the server re-checks capabilities on every mutation.
    claims.update(capabilities or {})
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        claims = jwt.decode(raw, secret, algorithms=[algorithm], issuer=TOKEN_ISSUER)
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError(f"Invalid access token: {exc}") from exc

    if str(claims.get("type") or "").lower() != TOKEN_TYPE:
        raise AuthSecurityError("Token is not an access token.")
    return claims
