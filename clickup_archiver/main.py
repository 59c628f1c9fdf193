import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import (
    ArchiveAbortedError,
    ConfigurationError,
    PersistenceError,
    UpstreamError,
    UpstreamTimeout,
    UpstreamUnreachable,
    ValidationError,
)
from clickup_archiver.mcp_server import mcp
from clickup_archiver.models.common import ErrorResponse, ReadinessResponse
from clickup_archiver.routers.archive import router as archive_router
from clickup_archiver.routers.clickup import router as clickup_router
from clickup_archiver.routers.lists import router as lists_router
from clickup_archiver.routers.tasks import router as tasks_router

logger = logging.getLogger("clickup_archiver")


# --- CORS / method gate ---

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}
ALLOWED_METHODS = {"GET", "POST", "OPTIONS"}


class CorsMiddleware(BaseHTTPMiddleware):
    """Answer preflights, reject unsupported methods and tag every response with CORS headers."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        elif request.method not in ALLOWED_METHODS:
            response = JSONResponse(status_code=405, content={"error": "Method not allowed"})
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


# --- FastAPI app ---

api = FastAPI(title="ClickUp Archiver", version="0.1.0")
api.add_middleware(CorsMiddleware)
api.include_router(archive_router)
api.include_router(lists_router)
api.include_router(tasks_router)
api.include_router(clickup_router)


@api.get("/api/status")
def api_status() -> ReadinessResponse:
    settings = get_settings()
    return ReadinessResponse(
        clickup_configured=bool(settings.clickup_api_key),
        archive_table=settings.archive_table_name,
        default_list_id=settings.clickup_list_id or None,
    )


# --- Exception handlers ---

def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, message=message).model_dump())


@api.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(500, "Configuration error", str(exc))


@api.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, "Missing parameter", str(exc))


@api.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return _error(400, "Invalid request", details)


@api.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return _error(exc.status_code, "ClickUp API error", str(exc))


@api.exception_handler(UpstreamTimeout)
async def upstream_timeout_handler(request: Request, exc: UpstreamTimeout):
    return _error(504, "Request timeout", str(exc))


@api.exception_handler(UpstreamUnreachable)
async def upstream_unreachable_handler(request: Request, exc: UpstreamUnreachable):
    return _error(504, "ClickUp unreachable", str(exc))


@api.exception_handler(ArchiveAbortedError)
async def archive_aborted_handler(request: Request, exc: ArchiveAbortedError):
    return JSONResponse(
        status_code=500,
        content={
            "error": "Archive process failed",
            "message": str(exc),
            "results": jsonable_encoder(exc.results, by_alias=True),
        },
    )


@api.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return _error(500, "Archive store error", str(exc))


@api.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Served outside CorsMiddleware, so the headers are added here.
    response = _error(500, "Internal error", str(exc))
    response.headers.update(CORS_HEADERS)
    return response


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "clickup_archiver.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
