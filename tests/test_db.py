"""Tests for core.db.ConnectionSource."""

from __future__ import annotations

import asyncio

import pytest

from core.db import ConnectionSource, _sanitize_database_url
from core.errors import StoreFailure

from tests.fakes import FakePool, FakeStore


class TestScopedAcquisition:
    async def test_connection_is_released_after_success(self, source, pool):
        async with source.connection() as conn:
            assert pool.idle == pool.size - 1
            assert conn is not None
        assert pool.idle == pool.size

    async def test_connection_is_released_after_failure(self, source, pool):
        with pytest.raises(StoreFailure):
            async with source.connection():
                raise RuntimeError("statement blew up")
        assert pool.idle == pool.size

    async def test_failure_message_comes_from_the_cause(self, source, store):
        store.fail_next(RuntimeError("relation \"pages\" does not exist"))
        with pytest.raises(StoreFailure) as exc_info:
            await source.fetch_all("SELECT name FROM pages")
        assert exc_info.value.message == 'relation "pages" does not exist'
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_store_failure_is_not_wrapped_twice(self, source):
        with pytest.raises(StoreFailure) as exc_info:
            async with source.connection():
                raise StoreFailure("already classified")
        assert exc_info.value.__cause__ is None

    async def test_exhausted_pool_suspends_until_release(self, store):
        pool = FakePool(store, size=1)
        source = ConnectionSource(pool_size=1, acquire_timeout_s=None, pool=pool)
        order: list[str] = []
        first_acquired = asyncio.Event()
        release_first = asyncio.Event()

        async def first():
            async with source.connection():
                order.append("first acquired")
                first_acquired.set()
                await release_first.wait()
            order.append("first released")

        async def second():
            async with source.connection():
                order.append("second acquired")

        first_task = asyncio.create_task(first())
        await first_acquired.wait()
        second_task = asyncio.create_task(second())
        await asyncio.sleep(0.01)
        assert order == ["first acquired"]

        release_first.set()
        await asyncio.gather(first_task, second_task)
        assert order == ["first acquired", "first released", "second acquired"]
        assert pool.idle == 1

    async def test_acquire_timeout_is_a_store_failure(self, store):
        pool = FakePool(store, size=1)
        source = ConnectionSource(pool_size=1, acquire_timeout_s=0.01, pool=pool)
        async with source.connection():
            with pytest.raises(StoreFailure, match="Timed out"):
                async with source.connection():
                    pass
        assert pool.idle == 1


class TestLifecycle:
    async def test_open_without_url_fails(self):
        source = ConnectionSource("")
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            await source.open()

    async def test_pool_before_open_fails(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            ConnectionSource("postgresql://localhost/wiki").pool()

    async def test_close_is_idempotent(self):
        pool = FakePool(FakeStore(), size=1)
        source = ConnectionSource(pool=pool)
        await source.open()
        await source.close()
        await source.close()
        assert pool.closed


def test_sslmode_is_stripped_from_database_url():
    url = "postgresql://wiki:secret@db:5432/wiki?sslmode=require&application_name=wiki"
    assert _sanitize_database_url(url) == "postgresql://wiki:secret@db:5432/wiki?application_name=wiki"


def test_url_without_query_is_unchanged():
    url = "postgresql://wiki@db/wiki"
    assert _sanitize_database_url(url) == url
