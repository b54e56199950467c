# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import settings
from .core.exceptions import DomainError, StorageError
from .middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware
from .routes import audit, careers, cases, health, sla
from .schemas.error import PROBLEM_TYPE_PREFIX, ErrorResponse, FieldError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info(
        "%s API %s starting (auth %s)",
        settings.APP_NAME,
        __version__,
        "DISABLED" if settings.AUTH_DISABLED else "enabled",
    )
    yield
    logger.info("%s API shutting down", settings.APP_NAME)


app = FastAPI(
    title="Gryork API",
    description="CWCRF case lifecycle, NBFC bidding, SLA tracking and audit trail",
    version=__version__,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)

# Request id + client metadata for logs and the audit trail
app.add_middleware(RequestContextMiddleware)

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
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _build_error(
    status_code: int,
    detail: str,
    request: Request,
    *,
    problem_type: str = "about:blank",
    errors: list[FieldError] | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        type=problem_type,
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=_request_id(request),
        instance=request.url.path,
        errors=errors,
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map service-layer exceptions to RFC 7807 Problem Details."""
    if exc.status_code >= 500:
        logger.error(
            "%s (request_id=%s): %s", type(exc).__name__, _request_id(request), exc.message
        )
    body = _build_error(
        exc.status_code,
        exc.message,
        request,
        problem_type=PROBLEM_TYPE_PREFIX + exc.problem_type,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    """Database failures surface as StorageError (503) rather than a bare 500."""
    logger.exception(
        "Storage failure (request_id=%s): %s", _request_id(request), type(exc).__name__
    )
    body = _build_error(
        StorageError.status_code,
        "The data store is temporarily unavailable.",
        request,
        problem_type=PROBLEM_TYPE_PREFIX + StorageError.problem_type,
    )
    return JSONResponse(
        status_code=StorageError.status_code, content=body.model_dump(exclude_none=True)
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), request)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = [
        FieldError(loc=list(e.get("loc", ())), msg=e.get("msg", ""), type=e.get("type", ""))
        for e in exc.errors()
    ]
    detail = "; ".join(f"{'.'.join(str(p) for p in e.loc)}: {e.msg}" for e in errors)
    body = _build_error(422, detail, request, errors=errors)
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    logger.exception("Unhandled exception (request_id=%s)", _request_id(request))
    body = _build_error(500, "An unexpected error occurred.", request)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(cases.router, prefix="/api/cases", tags=["cases"])
app.include_router(sla.router, prefix="/api/sla", tags=["sla"])
app.include_router(audit.router, prefix="/api/audit", tags=["audit"])
app.include_router(careers.router, prefix="/api/careers", tags=["careers"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Gryork API"}
