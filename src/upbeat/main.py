"""FastAPI application factory."""

from typing import Any

from fastapi import FastAPI

from upbeat import __version__
from upbeat.api.exception_handlers import register_exception_handlers
from upbeat.api.routers import api_router
from upbeat.config import Settings, get_settings
from upbeat.infrastructure.lifecycle import lifespan
from upbeat.infrastructure.observability import RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to use instead of the environment (tests)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Seed tracks in, upbeat Spotify/iTunes playlists out.",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, Any]:
        """Liveness probe."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": __version__,
            "spotify_configured": settings.spotify.is_configured,
        }

    return app


def run() -> None:
    """Run the server with uvicorn (console entry point)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "upbeat.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )
