"""
Wiki JSON API endpoints.

Every response is an envelope: `{"success": true, ...}` on success, and
`{"success": false, "error": "..."}` on failure (see the handlers in
`main.py`). Request bodies are bound to the pydantic models in `schemas`, so a
malformed or incomplete payload is answered 400 before the handler runs.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.schemas import Caller

from . import schemas
from .router import get_page_service
from .service import PageService

router = APIRouter(prefix="/api")


@router.get("/pages")
async def api_root(
    _: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> dict:
    return await pages.api_list_pages()


@router.get("/pages/{page_id}")
async def api_get_page(
    page_id: int,
    _: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> dict:
    return await pages.api_get_page(page_id)


@router.post("/pages", status_code=201)
async def api_create_page(
    payload: schemas.CreatePageRequest,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> dict:
    return await pages.api_create_page(caller, payload)


@router.put("/pages/{page_id}")
async def api_update_page(
    page_id: int,
    payload: schemas.UpdatePageRequest,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> dict:
    return await pages.api_update_page(caller, page_id, payload)


@router.delete("/pages/{page_id}")
async def api_delete_page(
    page_id: int,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> dict:
    return await pages.api_delete_page(caller, page_id)
