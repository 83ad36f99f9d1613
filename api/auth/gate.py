"""
Capability checks in front of every mutation.

The gate asks the provider on every call (no caching) and never raises for a
failed check: a provider error or timeout is reported as "not granted" and
logged, so a read flow can keep going while a mutation flow stops.
"""

from __future__ import annotations

import asyncio
import logging

from core.errors import AuthorizationDenied

from .provider import AuthProvider
from .schemas import AuthorizationDecision, Caller

logger = logging.getLogger(__name__)


class AuthorizationGate:
    def __init__(self, provider: AuthProvider, *, timeout_s: float | None = 5.0) -> None:
        self._provider = provider
        self._timeout_s = timeout_s

    async def check(self, caller: Caller, capability: str) -> AuthorizationDecision:
        try:
            granted = await asyncio.wait_for(
                self._provider.is_authorized(caller.username, capability),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "authorization_check_timeout user=%s capability=%s timeout_s=%s",
                caller.username,
                capability,
                self._timeout_s,
            )
            return AuthorizationDecision(capability=capability, granted=False, cause=exc)
        except Exception as exc:
            logger.warning(
                "authorization_check_failed user=%s capability=%s error=%s",
                caller.username,
                capability,
                exc,
            )
            return AuthorizationDecision(capability=capability, granted=False, cause=exc)

        return AuthorizationDecision(capability=capability, granted=bool(granted))

    async def is_authorized(self, caller: Caller, capability: str) -> bool:
        decision = await self.check(caller, capability)
        return decision.granted

    async def require(self, caller: Caller, capability: str) -> None:
        """
        Raise `AuthorizationDenied` unless the caller holds `capability`.
        """
        if not await self.is_authorized(caller, capability):
            raise AuthorizationDenied(capability)

    async def capabilities(self, caller: Caller, *capabilities: str) -> dict[str, bool]:
        """
        Check several capabilities concurrently.
        """
        decisions = await asyncio.gather(*(self.check(caller, c) for c in capabilities))
        return {d.capability: d.granted for d in decisions}
