"""
ThisOrThat Backend Application

A majority-prediction game: players vote on binary questions and win when
they side with the majority.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from services.errors import (
    AlreadyVotedError,
    DailyLimitReachedError,
    GameError,
    InsufficientScoreError,
    InvalidInputError,
    NotFoundError,
    TransientLedgerError,
)

logger = structlog.get_logger(__name__)

# HTTP status for each game error; anything else maps to 400
GAME_ERROR_STATUS: dict[type[GameError], int] = {
    InvalidInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AlreadyVotedError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientScoreError: status.HTTP_402_PAYMENT_REQUIRED,
    DailyLimitReachedError: status.HTTP_429_TOO_MANY_REQUESTS,
    TransientLedgerError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await create_start_app_handler(app)()
    yield
    # Shutdown
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Majority-prediction question game",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS - restricted to specific methods and headers
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Retry-After"],
    )

    # GZip compression for responses
    application.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include routers
    application.include_router(api_v1_router, prefix="/api/v1")

    @application.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
        """Render game rule failures as `{"detail", "code"}` JSON."""
        status_code = GAME_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        headers = {"Retry-After": "1"} if isinstance(exc, TransientLedgerError) else None

        log = logger.warning if status_code >= 500 else logger.info
        log("game_error", code=exc.code, status_code=status_code, path=request.url.path)

        return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)

    # Add global exception handler to ensure CORS headers are present on error responses
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch unhandled exceptions and return a structured 500."""
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_type": type(exc).__name__ if settings.DEBUG else "InternalServerError",
            },
        )

    return application


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "thisorthat-api"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }
