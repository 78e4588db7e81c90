import logging
import time
import traceback

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from resumelens.auth import router as auth_router
from resumelens.config import configure_logging, get_settings
from resumelens.exceptions import (
    AuthenticationError,
    IntegrationError,
    InvalidRequestError,
    PayloadTooLargeError,
    RateLimitError,
    ResumeLensError,
    UnsupportedFileError,
)
from resumelens.mcp_server import mcp
from resumelens.models.common import ErrorResponse
from resumelens.routers.analyze import router as analyze_router

logger = logging.getLogger(__name__)


# --- Request logging middleware ---

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response


# --- FastAPI app ---

api = FastAPI(title="ResumeLens", version="0.1.0")
api.add_middleware(RequestLoggingMiddleware)
api.include_router(auth_router)
api.include_router(analyze_router)


@api.get("/api/status")
def api_status() -> dict:
    settings = get_settings()
    return {
        "gemini": {"ready": bool(settings.google_api_key), "model": settings.model_name},
        "firebase": {
            "ready": bool(settings.firebase_api_key and settings.firebase_project_id),
            "require_auth": settings.require_auth,
        },
    }


# --- Exception handlers ---

ERROR_STATUS = {
    InvalidRequestError: 400,
    UnsupportedFileError: 400,
    AuthenticationError: 401,
    PayloadTooLargeError: 413,
    RateLimitError: 429,
    IntegrationError: 500,
}


def _error_response(
    status_code: int, message: str, details: str | None = None, headers: dict | None = None
) -> JSONResponse:
    body = ErrorResponse(error=message, details=details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)


@api.exception_handler(ResumeLensError)
async def resumelens_error_handler(request: Request, exc: ResumeLensError):
    return _error_response(ERROR_STATUS.get(type(exc), 500), str(exc), exc.details)


@api.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(400, "Invalid request body", str(exc.errors()))


@api.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@api.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, f"Server error: {exc}", "".join(traceback.format_exception(exc)))


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    lifespan=mcp_app.lifespan,
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
)


def run():
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "resumelens.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
