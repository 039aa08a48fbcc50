"""FastAPI application for MediCore."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from medicore import __version__
from medicore.api.dependencies import SectionDenied
from medicore.api.middleware import RequestLoggingMiddleware
from medicore.api.routes import auth, consultation, health, navigation
from medicore.attachments import create_attachment_port
from medicore.config import Settings, get_settings
from medicore.core.users import UserDirectory
from medicore.encounter import SessionRegistry

logger = logging.getLogger(__name__)


def build_directory(settings: Settings) -> UserDirectory:
    if settings.demo_accounts_enabled:
        if settings.is_production:
            logger.warning("Demo accounts are enabled in production")
        return UserDirectory.with_demo_accounts(settings.demo_password)
    return UserDirectory()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting MediCore API")
    yield
    logger.info("Shutting down MediCore API")
    port = app.state.attachment_port
    if port is not None:
        await port.aclose()


def create_app(
    settings: Optional[Settings] = None,
    directory: Optional[UserDirectory] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators are built here and kept on ``app.state``; tests pass their
    own instead.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="MediCore API",
        description="Clinical encounter service for the hospital front end",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.directory = directory if directory is not None else build_directory(settings)
    app.state.registry = registry if registry is not None else SessionRegistry()
    app.state.attachment_port = create_attachment_port(settings)
    logger.info(
        f"Configured {len(app.state.directory)} accounts, "
        f"attachments={app.state.attachment_port.name if app.state.attachment_port else 'disabled'}"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
    app.include_router(navigation.router, prefix="/api/v1", tags=["navigation"])
    app.include_router(consultation.router, prefix="/api/v1")

    @app.exception_handler(SectionDenied)
    async def section_denied_handler(request: Request, exc: SectionDenied):
        return RedirectResponse(exc.decision.redirect_to, status_code=303)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.log_level == "DEBUG" else None,
            },
        )

    return app
