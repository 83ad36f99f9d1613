"""
Backup endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from auth import dependencies as auth_dependencies
from auth.schemas import Caller
from core.views import templates
from pages.router import get_page_service
from pages.service import PageService

from .service import BackupService

router = APIRouter()


def get_backup_service(request: Request) -> BackupService:
    return request.app.state.backup


@router.get("/action/backup", response_class=HTMLResponse)
async def backup(
    request: Request,
    caller: Caller = Depends(auth_dependencies.get_current_caller),
    backups: BackupService = Depends(get_backup_service),
    pages: PageService = Depends(get_page_service),
) -> HTMLResponse:
    url = await backups.backup(caller)
    view = await pages.index(caller, backup_gist_url=url)
    return templates.TemplateResponse(request, "index.html", {"view": view})
