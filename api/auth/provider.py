"""
Authentication and authorization provider.

The gate (`auth/gate.py`) only ever sees the `AuthProvider` protocol; the
realm below is the production implementation.
"""

from __future__ import annotations

from typing import Protocol

from . import security
from .repository import UserRepository

ROLE_PREFIX = "role:"


class AuthProvider(Protocol):
    async def authenticate(self, username: str, password: str) -> str | None:
        """Return the principal name, or None when the credentials are wrong."""
        ...

    async def is_authorized(self, principal: str, capability: str) -> bool:
        ...


class RealmAuthProvider:
    """
    Users, roles and permissions stored next to the pages.

    A capability of the form `role:<name>` checks role membership; anything
    else is a permission granted through one of the user's roles. The `*`
    permission grants everything.
    """

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def authenticate(self, username: str, password: str) -> str | None:
        username = (username or "").strip()
        if not username or not password:
            return None
        row = await self._users.get_user(username)
        if row is None:
            return None
        if not security.verify_password(password, str(row.get("password_hash") or "")):
            return None
        return str(row["username"])

    async def is_authorized(self, principal: str, capability: str) -> bool:
        if capability.startswith(ROLE_PREFIX):
            return await self._users.has_role(principal, capability[len(ROLE_PREFIX):])
        return await self._users.has_permission(principal, capability)
