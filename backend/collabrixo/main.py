"""
Application entry-point.

Run locally (from `backend/`):
    uvicorn collabrixo.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from collabrixo import __version__
from collabrixo.api import router as api_router
from collabrixo.api.pages import router as pages_router
from collabrixo.core.config import Settings, settings as default_settings
from collabrixo.core.context import AppContext
from collabrixo.core.errors import CollabError, ConfigurationError, FormValidationError, RemoteError
from collabrixo.core.logging import configure_logging, logger

# Appwrite statuses that mean the same thing to our caller; everything else is a bad gateway
_PASSTHROUGH_STATUSES = {401, 403, 404, 409}


def create_app(context: Optional[AppContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or (context.settings if context else default_settings)
    context = context or AppContext(settings)

    configure_logging(settings)  # sets loguru as global logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await context.startup()
        try:
            yield
        finally:
            await context.shutdown()

    app = FastAPI(
        title="Collabrixo API",
        version=__version__,
        openapi_url="/openapi.json",
        docs_url="/docs" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )
    app.state.context = context

    # CORS – open in dev, tighten in prod
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount versioned routes
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(pages_router)

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def healthcheck() -> dict:
        """Docker health probe; also reports whether Appwrite is configured."""
        return {"status": "ok", "configured": settings.is_config_valid()}

    return app


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigurationError)
    async def _configuration_error(request: Request, exc: ConfigurationError):
        return JSONResponse(exc.to_api(), status_code=exc.status_code)

    @app.exception_handler(FormValidationError)
    async def _validation_error(request: Request, exc: FormValidationError):
        return JSONResponse(
            {"title": exc.title, "detail": exc.message, "errors": exc.field_errors},
            status_code=exc.status_code,
        )

    @app.exception_handler(RemoteError)
    async def _remote_error(request: Request, exc: RemoteError):
        status_code = exc.status if exc.status in _PASSTHROUGH_STATUSES else exc.status_code
        logger.error("Appwrite error on {} {}: {} ({})", request.method, request.url.path, exc.message, exc.status)
        return JSONResponse({"title": exc.title, "detail": exc.message}, status_code=status_code)

    @app.exception_handler(CollabError)
    async def _collab_error(request: Request, exc: CollabError):
        return JSONResponse({"title": exc.title, "detail": exc.message}, status_code=exc.status_code)


app = create_app()
