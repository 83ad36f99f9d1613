"""Root pytest configuration: storage and repository fixtures."""

from __future__ import annotations

import logging

import pytest

from core.db import ConnectionSource
from pages.repository import PageRepository
from tests.fakes import FakePool, FakeStore

logging.getLogger("asyncio").setLevel(logging.WARNING)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def pool(store: FakeStore) -> FakePool:
    return FakePool(store, size=4)


@pytest.fixture
def source(pool: FakePool) -> ConnectionSource:
    return ConnectionSource(pool_size=pool.size, acquire_timeout_s=1.0, pool=pool)


@pytest.fixture
def repository(source: ConnectionSource) -> PageRepository:
    return PageRepository(source)
