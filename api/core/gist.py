"""
Gist HTTP client used for wiki backups.

Used endpoint:
- POST /gists  -> 201 {"html_url": "...", ...}
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from .errors import BackupRejected, BackupTransportError

USER_AGENT = "wiki-backup"


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise BackupTransportError("GIST_API_URL is empty.")
    return base_url.rstrip("/")


def _rejection_message(resp: httpx.Response) -> str:
    message = f"Could not backup the wiki: {resp.reason_phrase}"
    if not resp.content:
        return message
    try:
        body: Any = resp.json()
    except ValueError:
        # Avoid dumping huge bodies; include a small snippet.
        return f"{message}\n{resp.text[:500]}"
    return f"{message}\n{json.dumps(body, indent=2, sort_keys=True)}"


class GistClient:
    def __init__(
        self,
        *,
        base_url: str,
        token: str = "",
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._token = (token or "").strip()
        self._timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github.v3+json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def create_gist(self, payload: dict[str, Any]) -> str:
        """
        Create a gist and return its permalink.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.post("/gists", json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise BackupTransportError(f"Failed to call the gist endpoint: {exc}") from exc

        if resp.status_code != 201:
            raise BackupRejected(_rejection_message(resp), status=resp.status_code)

        try:
            data: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise BackupRejected("Gist endpoint returned a non-JSON body.", status=resp.status_code) from exc

        url = data.get("html_url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url.strip():
            raise BackupRejected("Gist endpoint returned no permalink.", status=resp.status_code)
        return url.strip()
