"""
FastAPI Application Factory.
Creates and configures the FastAPI application with all routers, middleware, and DI.

Run with uvicorn in factory mode:
    uvicorn friendchat.fastapi_app:create_fastapi_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from friendchat import __version__
from friendchat.config.logging_config import (
    NO_CORRELATION_ID,
    correlation_id_var,
    setup_logging,
)
from friendchat.config.settings import Config, get_config
from friendchat.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
    InvalidStateError,
)
from friendchat.presentation.api import (
    accounts_router,
    conversations_router,
    friends_router,
)
from friendchat.setup.ioc import create_container

logger = logging.getLogger(__name__)

# Domain exception → HTTP status
DOMAIN_ERROR_STATUS = {
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    AccessDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidStateError: status.HTTP_409_CONFLICT,
    DomainValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and set correlation ID from request headers."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", NO_CORRELATION_ID)

        # Set in contextvars (propagates to async tasks and logging)
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers["X-Correlation-ID"] = correlation_id
        return response


def create_fastapi_app(
    container: Optional[AsyncContainer] = None,
    settings: Optional[type[Config]] = None,
) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        container: Pre-built DI container (tests pass one backed by an
            in-memory store); built from settings when omitted
        settings: Config class; picked from APP_ENV when omitted
    """
    settings = settings or get_config()
    setup_logging(settings.LOG_LEVEL, settings.LOG_PATH)

    if container is None:
        container = create_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI application started. DI container initialized.")
        yield
        # Shutdown: disconnects Prisma and Redis when those are in use
        await container.close()
        logger.info("FastAPI application shutdown. DI container closed.")

    app = FastAPI(
        title="friendchat API",
        description="Friend graph and conversation access-control service",
        version=__version__,
        lifespan=lifespan,
    )

    # Setup Dishka BEFORE app starts (must add middleware before startup)
    setup_dishka(container, app)

    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def domain_exception_handler(request: Request, exc: Exception):
        status_code = next(
            code
            for error_type, code in DOMAIN_ERROR_STATUS.items()
            if isinstance(exc, error_type)
        )
        logger.info(f"[{status_code}] {type(exc).__name__}: {exc}")
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    for error_type in DOMAIN_ERROR_STATUS:
        app.add_exception_handler(error_type, domain_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info(f"[VALIDATION ERROR] {errors}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "Validation error", "details": jsonable_errors(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[GLOBAL ERROR] {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # Health check routes
    @app.get("/", tags=["health"])
    async def root():
        return {"message": "FastAPI server is running."}

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "healthy"}

    app.include_router(accounts_router)
    app.include_router(friends_router)
    app.include_router(conversations_router)

    return app


def jsonable_errors(errors: list) -> list:
    """Pydantic error dicts may carry exception objects in `ctx`."""
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(error)
    return cleaned
