import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from auth import router as auth_router
from auth.gate import AuthorizationGate
from auth.provider import AuthProvider, RealmAuthProvider
from auth.repository import UserRepository
from backup import router as backup_router
from backup.service import BackupClient, BackupService
from core.config import Settings, load_settings
from core.db import ConnectionSource
from core.errors import AuthorizationDenied, NotAuthenticated, StoreFailure, WikiError
from core.gist import GistClient
from pages import api as pages_api
from pages import router as pages_router
from pages.repository import PageRepository
from pages.service import PageService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _is_api_request(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _error_response(request: Request, status_code: int, message: str, exc: Exception) -> Response:
    if _is_api_request(request):
        return JSONResponse({"success": False, "error": message}, status_code=status_code)
    if isinstance(exc, NotAuthenticated):
        return RedirectResponse("/login", status_code=302)
    if isinstance(exc, AuthorizationDenied):
        return Response(status_code=status_code)
    return PlainTextResponse(message, status_code=status_code)


def _missing_fields(exc: RequestValidationError) -> list[str]:
    missing = []
    for error in exc.errors():
        if error.get("type") != "missing":
            continue
        parts = [str(part) for part in error.get("loc", ()) if part != "body"]
        missing.append(".".join(parts) or "body")
    return missing


async def wiki_error_handler(request: Request, exc: WikiError) -> Response:
    if isinstance(exc, StoreFailure):
        logger.error("store_failure path=%s error=%s", request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.message, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    logger.error(
        "bad_page_payload path=%s client=%s missing=%s errors=%d",
        request.url.path,
        request.client.host if request.client else None,
        ",".join(_missing_fields(exc)) or "-",
        len(exc.errors()),
    )
    return _error_response(request, 400, "Bad request payload", exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.error("unhandled_error path=%s error=%s", request.url.path, exc, exc_info=exc)
    return _error_response(request, 500, "Internal server error", exc)


def create_app(
    settings: Settings | None = None,
    *,
    source: ConnectionSource | None = None,
    auth_provider: AuthProvider | None = None,
    backup_client: BackupClient | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    source = source or ConnectionSource(
        settings.database_url,
        pool_size=settings.db_pool_size,
        acquire_timeout_s=settings.db_acquire_timeout_s,
        command_timeout_s=settings.db_command_timeout_s,
    )
    users = UserRepository(source)
    pages = PageRepository(source)
    provider = auth_provider or RealmAuthProvider(users)
    gate = AuthorizationGate(provider, timeout_s=settings.auth_timeout_s)
    client = backup_client or GistClient(
        base_url=settings.gist_api_url,
        token=settings.gist_token,
        timeout_s=settings.backup_timeout_s,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Open the pool once per process; tables are created if missing.
        await source.open()
        try:
            await pages.create_schema()
            await users.create_schema()
            yield
        finally:
            await source.close()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.auth_provider = provider
    app.state.gate = gate
    app.state.pages = PageService(pages, gate)
    app.state.backup = BackupService(pages, gate, client)

    # Allow a local frontend dev server to call the JSON API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WikiError, wiki_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(pages_router.router, tags=["pages"])
    app.include_router(pages_api.router, tags=["api"])
    app.include_router(backup_router.router, tags=["backup"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
