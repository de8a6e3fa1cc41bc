"""Application factory for creating FastAPI application with dependency injection."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taxonpreview import __version__
from taxonpreview.web.core.container import Container
from taxonpreview.web.core.lifespan import lifespan
from taxonpreview.web.routers import health_api_routes, preview_api_routes


def create_app() -> FastAPI:
    """Create FastAPI application with dependency injection.

    Returns:
        FastAPI: The configured application instance.
    """
    container = Container()

    app = FastAPI(
        lifespan=lifespan,
        title="taxonpreview API",
        description="Hover preview data for scientific names",
        version=__version__,
    )

    # Previews are requested from pages served by other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # nosemgrep
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    container.wire(
        modules=[
            "taxonpreview.web.routers.health_api_routes",
            "taxonpreview.web.routers.preview_api_routes",
        ]
    )

    app.include_router(health_api_routes.router, tags=["Health"])
    app.include_router(preview_api_routes.router, prefix="/api", tags=["Preview"])
    app.include_router(preview_api_routes.pages_router, prefix="/api", tags=["Pages"])

    app.container = container  # type: ignore[attr-defined]
    return app
