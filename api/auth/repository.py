"""
Realm persistence: users, their roles, and the permissions each role grants.
"""

from __future__ import annotations

from core.db import ConnectionSource

SQL_CREATE_USERS_TABLE = """
    CREATE TABLE IF NOT EXISTS users (
      username VARCHAR(255) PRIMARY KEY,
      password_hash VARCHAR(255) NOT NULL
    )
"""

SQL_CREATE_USER_ROLES_TABLE = """
    CREATE TABLE IF NOT EXISTS user_roles (
      username VARCHAR(255) NOT NULL,
      role VARCHAR(255) NOT NULL,
      PRIMARY KEY (username, role)
    )
"""

SQL_CREATE_ROLES_PERMS_TABLE = """
    CREATE TABLE IF NOT EXISTS roles_perms (
      role VARCHAR(255) NOT NULL,
      perm VARCHAR(255) NOT NULL,
      PRIMARY KEY (role, perm)
    )
"""

SQL_GET_USER = "SELECT username, password_hash FROM users WHERE username = $1"

SQL_HAS_ROLE = """
    SELECT 1 AS ok
    FROM user_roles
    WHERE username = $1
      AND role = $2
    LIMIT 1
"""

SQL_HAS_PERMISSION = """
    SELECT 1 AS ok
    FROM user_roles ur
    JOIN roles_perms rp ON rp.role = ur.role
    WHERE ur.username = $1
      AND (rp.perm = $2 OR rp.perm = '*')
    LIMIT 1
"""


class UserRepository:
    def __init__(self, source: ConnectionSource) -> None:
        self._source = source

    async def create_schema(self) -> None:
        for statement in (
            SQL_CREATE_USERS_TABLE,
            SQL_CREATE_USER_ROLES_TABLE,
            SQL_CREATE_ROLES_PERMS_TABLE,
        ):
            await self._source.execute(statement)

    async def get_user(self, username: str) -> dict | None:
        return await self._source.fetch_one(SQL_GET_USER, username)

    async def has_role(self, username: str, role: str) -> bool:
        row = await self._source.fetch_one(SQL_HAS_ROLE, username, role)
        return row is not None

    async def has_permission(self, username: str, permission: str) -> bool:
        row = await self._source.fetch_one(SQL_HAS_PERMISSION, username, permission)
        return row is not None
