"""In-memory stand-ins for asyncpg and the auth realm.

The fake pool/connection pair understands exactly the statements the
repositories issue (they are module constants), which keeps the tests close
to the real call pattern without a running PostgreSQL.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from auth import repository as auth_sql
from pages import repository as page_sql

EDITOR_GRANTS = {"create", "update", "delete", "role:writer"}


@dataclass
class FakeStore:
    pages: dict[int, dict] = field(default_factory=dict)
    next_id: int = 1
    users: dict[str, str] = field(default_factory=dict)
    user_roles: set[tuple[str, str]] = field(default_factory=set)
    roles_perms: set[tuple[str, str]] = field(default_factory=set)
    statements: list[str] = field(default_factory=list)
    fail_with: Exception | None = None
    # When set, row fetches stay in flight this long and record what overlapped.
    trace_delay: float = 0.0
    in_flight: set[str] = field(default_factory=set)
    overlaps: list[set[str]] = field(default_factory=list)

    def fail_next(self, exc: Exception) -> None:
        self.fail_with = exc

    def _enter(self, sql: str) -> None:
        if sql.lstrip().upper().startswith("CREATE"):
            return
        self.statements.append(sql)
        if self.fail_with is not None:
            exc, self.fail_with = self.fail_with, None
            raise exc

    async def hold(self, tag: str) -> None:
        if not self.trace_delay:
            await asyncio.sleep(0)
            return
        self.in_flight.add(tag)
        await asyncio.sleep(self.trace_delay)
        self.overlaps.append(set(self.in_flight))
        self.in_flight.discard(tag)


class FakeConnection:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def fetch(self, sql: str, *args):
        self.store._enter(sql)
        await asyncio.sleep(0)
        pages = self.store.pages
        if sql == page_sql.SQL_ALL_PAGES:
            return [{"name": row["name"]} for row in pages.values()]
        if sql == page_sql.SQL_ALL_PAGES_DATA:
            return [dict(row) for row in pages.values()]
        raise AssertionError(f"unexpected query: {sql}")

    async def fetchrow(self, sql: str, *args):
        self.store._enter(sql)
        await self.store.hold("fetch")
        store = self.store
        if sql == page_sql.SQL_GET_PAGE:
            matches = [row for row in store.pages.values() if row["name"] == args[0]]
            if not matches:
                return None
            row = min(matches, key=lambda r: r["id"])
            return {"id": row["id"], "content": row["content"]}
        if sql == page_sql.SQL_GET_PAGE_BY_ID:
            row = store.pages.get(args[0])
            return dict(row) if row is not None else None
        if sql == auth_sql.SQL_GET_USER:
            password_hash = store.users.get(args[0])
            if password_hash is None:
                return None
            return {"username": args[0], "password_hash": password_hash}
        if sql == auth_sql.SQL_HAS_ROLE:
            return {"ok": 1} if (args[0], args[1]) in store.user_roles else None
        if sql == auth_sql.SQL_HAS_PERMISSION:
            roles = {role for (user, role) in store.user_roles if user == args[0]}
            for role, perm in store.roles_perms:
                if role in roles and perm in (args[1], "*"):
                    return {"ok": 1}
            return None
        raise AssertionError(f"unexpected query: {sql}")

    async def execute(self, sql: str, *args):
        self.store._enter(sql)
        await asyncio.sleep(0)
        store = self.store
        if sql.lstrip().upper().startswith("CREATE"):
            return "CREATE TABLE"
        if sql == page_sql.SQL_CREATE_PAGE:
            page_id = store.next_id
            store.next_id += 1
            store.pages[page_id] = {"id": page_id, "name": args[0], "content": args[1]}
            return "INSERT 0 1"
        if sql == page_sql.SQL_SAVE_PAGE:
            content, page_id = args
            if page_id in store.pages:
                store.pages[page_id]["content"] = content
                return "UPDATE 1"
            return "UPDATE 0"
        if sql == page_sql.SQL_DELETE_PAGE:
            return "DELETE 1" if store.pages.pop(args[0], None) else "DELETE 0"
        raise AssertionError(f"unexpected statement: {sql}")


class FakePool:
    """Bounded pool with the acquire/release surface of asyncpg.Pool."""

    def __init__(self, store: FakeStore, size: int = 4) -> None:
        self.size = size
        self.closed = False
        self._idle: asyncio.Queue[FakeConnection] = asyncio.Queue()
        for _ in range(size):
            self._idle.put_nowait(FakeConnection(store))

    @property
    def idle(self) -> int:
        return self._idle.qsize()

    async def acquire(self, *, timeout: float | None = None) -> FakeConnection:
        return await asyncio.wait_for(self._idle.get(), timeout)

    async def release(self, conn: FakeConnection) -> None:
        self._idle.put_nowait(conn)

    async def close(self) -> None:
        self.closed = True


class StaticAuthProvider:
    """In-memory provider: fixed grants, optional failing capabilities."""

    def __init__(
        self,
        grants: dict[str, set[str]] | None = None,
        *,
        passwords: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.grants = grants or {}
        self.passwords = passwords or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    async def authenticate(self, username: str, password: str) -> str | None:
        if username in self.passwords and self.passwords[username] == password:
            return username
        return None

    async def is_authorized(self, principal: str, capability: str) -> bool:
        self.calls.append((principal, capability))
        await asyncio.sleep(0)
        if capability in self.failing:
            raise ConnectionError("authorization provider unreachable")
        return capability in self.grants.get(principal, set())


