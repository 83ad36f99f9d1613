"""
Auth value types.
"""

from __future__ import annotations

from dataclasses import dataclass

CAN_CREATE = "create"
CAN_UPDATE = "update"
CAN_DELETE = "delete"
CAN_BACKUP = "role:writer"


@dataclass(frozen=True)
class Caller:
    username: str


@dataclass(frozen=True)
class AuthorizationDecision:
    capability: str
    granted: bool
    # Set when the check itself failed (provider error or timeout), as opposed
    # to the provider answering "no".
    cause: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.cause is not None
