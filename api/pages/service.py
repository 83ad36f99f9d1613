"""
Page request pipeline.

Read flows fan out their authorization checks next to the repository read
and join before rendering. Mutation flows run in a fixed order for both the
HTML forms and the JSON API:

1. validate the payload shape (FastAPI binds the body before any handler
   runs; a bad shape is answered 400 and nothing else runs)
2. check the one capability the action needs (403 on denial)
3. run exactly one repository operation
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import quote

from auth.gate import AuthorizationGate
from auth.schemas import CAN_CREATE, CAN_DELETE, CAN_UPDATE, Caller
from core import rendering
from core.errors import NotFound

from . import schemas
from .repository import PageRepository

EMPTY_PAGE_MARKDOWN = "# A new page\n\nFeel-free to write in Markdown!\n"

logger = logging.getLogger(__name__)


def page_location(name: str) -> str:
    return "/wiki/" + quote(name, safe="")


class PageService:
    def __init__(
        self,
        repository: PageRepository,
        gate: AuthorizationGate,
        *,
        renderer: Callable[[str], str] = rendering.render,
    ) -> None:
        self._repository = repository
        self._gate = gate
        self._render = renderer

    # Views

    async def index(self, caller: Caller, *, backup_gist_url: str | None = None) -> schemas.IndexView:
        can_create, pages = await asyncio.gather(
            self._gate.is_authorized(caller, CAN_CREATE),
            self._repository.fetch_all_pages(),
        )
        return schemas.IndexView(
            username=caller.username,
            can_create_page=can_create,
            pages=pages,
            backup_gist_url=backup_gist_url,
        )

    async def view_page(self, caller: Caller, name: str) -> schemas.PageView:
        # The checks never raise; only a failed fetch aborts the render.
        can_save, can_delete, page = await asyncio.gather(
            self._gate.is_authorized(caller, CAN_UPDATE),
            self._gate.is_authorized(caller, CAN_DELETE),
            self._repository.fetch_page(name),
        )

        found = bool(page.get("found"))
        raw_content = page["raw_content"] if found else EMPTY_PAGE_MARKDOWN
        return schemas.PageView(
            title=name,
            id=int(page["id"]) if found else -1,
            new_page=not found,
            raw_content=raw_content,
            content=self._render(raw_content),
            timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S %Z"),
            username=caller.username,
            can_save_page=can_save,
            can_delete_page=can_delete,
        )

    # Form mutations

    async def save_from_form(self, caller: Caller, form: schemas.SavePageForm) -> str:
        """
        Create or update a page from the editor form; returns the redirect target.
        """
        if form.new_page:
            await self._gate.require(caller, CAN_CREATE)
            await self._repository.create_page(form.name, form.content)
            logger.info("page_created name=%s user=%s", form.name, caller.username)
        else:
            await self._gate.require(caller, CAN_UPDATE)
            await self._repository.save_page(int(form.id), form.content)
            logger.info("page_saved id=%s user=%s", form.id, caller.username)
        return page_location(form.name)

    async def delete_from_form(self, caller: Caller, page_id: int) -> str:
        await self._gate.require(caller, CAN_DELETE)
        await self._repository.delete_page(page_id)
        logger.info("page_deleted id=%s user=%s", page_id, caller.username)
        return "/"

    @staticmethod
    def create_location(name: str | None) -> str:
        name = (name or "").strip()
        return page_location(name) if name else "/"

    # JSON API

    async def api_list_pages(self) -> dict[str, Any]:
        rows = await self._repository.fetch_all_pages_data()
        return {
            "success": True,
            "pages": [{"id": row["id"], "name": row["name"]} for row in rows],
        }

    async def api_get_page(self, page_id: int) -> dict[str, Any]:
        page = await self._repository.fetch_page_by_id(page_id)
        if not page.get("found"):
            raise NotFound(f"There is no page with ID {page_id}")
        return {
            "success": True,
            "page": {
                "id": page["id"],
                "name": page["name"],
                "content": page["content"],
                "html": self._render(page["content"]),
            },
        }

    async def api_create_page(self, caller: Caller, request: schemas.CreatePageRequest) -> dict[str, Any]:
        await self._gate.require(caller, CAN_CREATE)
        await self._repository.create_page(request.name, request.content)
        logger.info("page_created name=%s user=%s", request.name, caller.username)
        return {"success": True}

    async def api_update_page(
        self,
        caller: Caller,
        page_id: int,
        request: schemas.UpdatePageRequest,
    ) -> dict[str, Any]:
        await self._gate.require(caller, CAN_UPDATE)
        await self._repository.save_page(page_id, request.content)
        logger.info("page_saved id=%s user=%s", page_id, caller.username)
        return {"success": True}

    async def api_delete_page(self, caller: Caller, page_id: int) -> dict[str, Any]:
        await self._gate.require(caller, CAN_DELETE)
        await self._repository.delete_page(page_id)
        logger.info("page_deleted id=%s user=%s", page_id, caller.username)
        return {"success": True}
