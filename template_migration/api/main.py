"""FastAPI application entry point."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings, configure_logging
from ..errors import MigrationError
from ..services.credentials import CredentialStore, create_credential_store
from .routes import templates

logger = logging.getLogger(__name__)


async def migration_error_handler(request: Request, exc: MigrationError) -> JSONResponse:
    """Render run-level errors as ``{error, details}``."""
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors like any other validation failure."""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Optional[Settings] = None,
    credential_store: Optional[CredentialStore] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings; read from the environment when omitted
        credential_store: Store override; chosen from settings when omitted
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Template Migration API",
        description="Migrates HubSpot email templates into SFMC Content Builder",
        version=__version__,
    )
    app.state.settings = settings
    app.state.credential_store = credential_store or create_credential_store(settings)

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MigrationError, migration_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(templates.router, prefix="/api/migrate", tags=["migrate"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
