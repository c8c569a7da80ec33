"""Main application entrypoint for the campground image service."""

from fastapi import FastAPI

from campimages.api.v1 import routes_health
from campimages.api.v1.routes_images import router as images_router
from campimages.core.config import settings
from campimages.core.logging import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(images_router)

    return app


# Export app instance for ASGI servers
app = create_app()
