"""
Wiki HTML endpoints (browser flow).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from auth import dependencies as auth_dependencies
from auth.schemas import Caller
from core.views import templates

from . import schemas
from .service import PageService

router = APIRouter()


def get_page_service(request: Request) -> PageService:
    return request.app.state.pages


def get_save_page_form(
    page_id: int | None = Form(default=None, alias="id"),
    name: str = Form(...),
    content: str = Form(default=""),
    new_page: str = Form(default=""),
) -> schemas.SavePageForm:
    try:
        return schemas.SavePageForm(
            id=page_id,
            name=name,
            content=content,
            new_page=new_page.strip().lower() == "yes",
        )
    except ValidationError as exc:
        # Same 400 path as a field FastAPI could not bind.
        raise RequestValidationError(exc.errors()) from exc


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> HTMLResponse:
    view = await pages.index(caller)
    return templates.TemplateResponse(request, "index.html", {"view": view})


@router.get("/wiki/{page}", response_class=HTMLResponse)
async def page_rendering(
    page: str,
    request: Request,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> HTMLResponse:
    view = await pages.view_page(caller, page)
    return templates.TemplateResponse(request, "page.html", {"view": view})


@router.post("/action/save")
async def page_update(
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    form: schemas.SavePageForm = Depends(get_save_page_form),
    pages: PageService = Depends(get_page_service),
) -> RedirectResponse:
    location = await pages.save_from_form(caller, form)
    return RedirectResponse(location, status_code=303)


@router.post("/action/create")
async def page_create(
    name: str = Form(default=""),
    _: Caller = Depends(auth_dependencies.get_current_caller),
) -> RedirectResponse:
    """
    Jump to the editor for a (possibly new) page; nothing is stored yet.
    """
    return RedirectResponse(PageService.create_location(name), status_code=303)


@router.post("/action/delete")
async def page_deletion(
    page_id: int = Form(..., alias="id"),
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    pages: PageService = Depends(get_page_service),
) -> RedirectResponse:
    location = await pages.delete_from_form(caller, page_id)
    return RedirectResponse(location, status_code=303)
