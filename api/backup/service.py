"""
Wiki backup to a gist.

One authorization check, one repository read, one upload. The snapshot only
lives for the duration of the call.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from auth.gate import AuthorizationGate
from auth.schemas import CAN_BACKUP, Caller
from core.errors import BackupTransportError, ExternalServiceFailure
from pages.repository import PageRepository

BACKUP_DESCRIPTION = "A wiki backup"

logger = logging.getLogger(__name__)


class BackupClient(Protocol):
    async def create_gist(self, payload: dict[str, Any]) -> str:
        ...


def build_payload(rows: list[dict[str, Any]], *, public: bool = True) -> dict[str, Any]:
    """
    Gist payload with one file per page, keyed by page name.
    """
    snapshot = [(str(row["name"]), str(row["content"] or "")) for row in rows]
    files = {name: {"content": content} for name, content in snapshot}
    return {
        "files": files,
        "description": BACKUP_DESCRIPTION,
        "public": public,
    }


class BackupService:
    def __init__(
        self,
        repository: PageRepository,
        gate: AuthorizationGate,
        client: BackupClient,
    ) -> None:
        self._repository = repository
        self._gate = gate
        self._client = client

    async def backup(self, caller: Caller) -> str:
        """
        Upload every page and return the gist permalink.
        """
        await self._gate.require(caller, CAN_BACKUP)
        rows = await self._repository.fetch_all_pages_data()
        payload = build_payload(rows)

        try:
            url = await self._client.create_gist(payload)
        except BackupTransportError:
            logger.exception("backup_transport_failed user=%s pages=%s", caller.username, len(rows))
            raise
        except ExternalServiceFailure as exc:
            logger.error("backup_rejected user=%s pages=%s detail=%s", caller.username, len(rows), exc)
            raise

        logger.info("backup_complete user=%s pages=%s url=%s", caller.username, len(rows), url)
        return url
