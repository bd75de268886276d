# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from db.database import db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import applications, documents, health, notifications, reviews
from .schemas.error import ErrorResponse
from .services.errors import CaseError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info(
        "%s starting (auth %s, email %s)",
        settings.APP_NAME,
        "disabled" if settings.AUTH_DISABLED else "enabled",
        "enabled" if settings.EMAIL_ENABLED else "disabled",
    )
    yield
    await db_service.close()


app = FastAPI(
    title="Solo Parent Registry API",
    description="Case management for the municipal solo-parent welfare program",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(
    status_code: int, detail: str, request: Request, code: str = ""
) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        code=code,
        request_id=_request_id(request),
        instance=request.url.path,
    )


@app.exception_handler(CaseError)
async def case_error_handler(request: Request, exc: CaseError):
    """Convert domain errors to RFC 7807 Problem Details."""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
    body = _build_error(exc.status_code, exc.detail, request, exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), request)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), request, "validation_error")
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    body = _build_error(500, "An unexpected error occurred.", request)
    logger.exception("Unhandled exception (request_id=%s)", body.request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(reviews.router, prefix="/api/applications", tags=["reviews"])
app.include_router(documents.router, prefix="/api", tags=["documents"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Solo Parent Registry API"}
