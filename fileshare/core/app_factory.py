"""Application factory for the FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI

from fileshare.api.routes import files_router, health_router
from fileshare.core.config import settings
from fileshare.core.exception_handlers import setup_exception_handlers
from fileshare.core.logging import configure_logging
from fileshare.core.middleware import request_id_middleware
from fileshare.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="File Share API",
        description=(
            "Public endpoints of the file storage app: resolve share-link slugs "
            "into short-lived presigned URLs, expose shared-file metadata and "
            "attachment downloads. Rate limited per client IP."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(files_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
