"""Tests for auth.gate.AuthorizationGate."""

from __future__ import annotations

import asyncio
import logging

import pytest

from auth.gate import AuthorizationGate
from auth.schemas import Caller
from core.errors import AuthorizationDenied
from tests.fakes import StaticAuthProvider

FOO = Caller(username="foo")


class SlowProvider:
    async def authenticate(self, username, password):
        return None

    async def is_authorized(self, principal, capability):
        await asyncio.sleep(1)
        return True


class TestCheck:
    async def test_granted(self):
        gate = AuthorizationGate(StaticAuthProvider({"foo": {"update"}}))
        decision = await gate.check(FOO, "update")
        assert decision.granted is True
        assert decision.failed is False

    async def test_denied(self):
        gate = AuthorizationGate(StaticAuthProvider({"foo": {"update"}}))
        decision = await gate.check(FOO, "delete")
        assert decision.granted is False
        assert decision.cause is None

    async def test_provider_error_is_not_granted_but_distinguishable(self, caplog):
        gate = AuthorizationGate(StaticAuthProvider({"foo": {"update"}}, failing={"update"}))
        with caplog.at_level(logging.WARNING, logger="auth.gate"):
            decision = await gate.check(FOO, "update")
        assert decision.granted is False
        assert decision.failed is True
        assert isinstance(decision.cause, ConnectionError)
        assert "authorization_check_failed" in caplog.text

    async def test_timeout_is_not_granted(self):
        gate = AuthorizationGate(SlowProvider(), timeout_s=0.01)
        decision = await gate.check(FOO, "update")
        assert decision.granted is False
        assert isinstance(decision.cause, asyncio.TimeoutError)

    async def test_every_check_reaches_the_provider(self):
        provider = StaticAuthProvider({"foo": {"update"}})
        gate = AuthorizationGate(provider)
        await gate.is_authorized(FOO, "update")
        await gate.is_authorized(FOO, "update")
        assert provider.calls == [("foo", "update"), ("foo", "update")]


class TestRequire:
    async def test_denied_raises(self):
        gate = AuthorizationGate(StaticAuthProvider())
        with pytest.raises(AuthorizationDenied) as exc_info:
            await gate.require(FOO, "delete")
        assert exc_info.value.capability == "delete"
        assert exc_info.value.status_code == 403

    async def test_failed_check_raises(self):
        gate = AuthorizationGate(StaticAuthProvider({"foo": {"delete"}}, failing={"delete"}))
        with pytest.raises(AuthorizationDenied):
            await gate.require(FOO, "delete")

    async def test_granted_passes(self):
        gate = AuthorizationGate(StaticAuthProvider({"foo": {"delete"}}))
        await gate.require(FOO, "delete")


async def test_capabilities_checks_all():
    gate = AuthorizationGate(StaticAuthProvider({"foo": {"create", "update"}}, failing={"update"}))
    assert await gate.capabilities(FOO, "create", "update", "delete") == {
        "create": True,
        "update": False,
        "delete": False,
    }
