"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from cineverse.api.router import api_router
from cineverse.common.request_id import RequestIDMiddleware
from cineverse.core.app_exceptions import PageRedirect
from cineverse.core.config import settings
from cineverse.core.errors import (
    general_exception_handler,
    http_exception_handler,
    page_redirect_handler,
    validation_exception_handler,
)
from cineverse.core.logging import get_logger, setup_logging
from cineverse.db.base import Base
from cineverse.db.engine import engine
from cineverse.pages.admin import router as admin_pages_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    # Create tables outside production (production schemas are managed externally)
    if settings.ENV in ("dev", "test"):
        Base.metadata.create_all(bind=engine)
    logger.info("Application started", extra={"version": settings.VERSION})
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="CineVerse Captions API",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    # First added is innermost
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(PageRedirect, page_redirect_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(admin_pages_router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


app = create_app()
