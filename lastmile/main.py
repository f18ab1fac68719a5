"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lastmile.api.deps import Services, build_services
from lastmile.api.routes.health import router as health_router
from lastmile.api.routes.history import router as history_router
from lastmile.api.routes.live import router as live_router
from lastmile.api.routes.metrics import router as metrics_router
from lastmile.api.routes.position import router as position_router
from lastmile.api.routes.session import router as session_router
from lastmile.api.routes.sharing import router as sharing_router
from lastmile.api.routes.trips import router as trips_router
from lastmile.config import get_settings

VERSION = "0.1.0"


def create_app(services: Services | None = None) -> FastAPI:
    """Build the application.

    Args:
        services: Pre-wired collaborators (tests); built from settings otherwise
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.services = services or await build_services(get_settings())
        try:
            yield
        finally:
            await app.state.services.live.shutdown()

    app = FastAPI(title="LastMile Trip Intelligence API", version=VERSION, lifespan=lifespan)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(session_router, tags=["session"])
    app.include_router(position_router, tags=["position"])
    app.include_router(trips_router, tags=["trips"])
    app.include_router(history_router, tags=["history"])
    app.include_router(sharing_router, tags=["sharing"])
    app.include_router(live_router, tags=["live"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "LastMile Trip Intelligence API", "version": VERSION}

    return app


app = create_app()
