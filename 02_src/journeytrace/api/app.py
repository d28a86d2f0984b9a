"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .middleware import BrowserCorrelationMiddleware
from .routes import health, telemetry


# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Journey Trace API",
        description="Browser telemetry ingestion and trace correlation",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(BrowserCorrelationMiddleware, application=application)

    # Browsers send x-trace-id and friends on cross-origin API calls
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(application.settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-backend-trace-correlation"],
    )

    fastapi_app.include_router(telemetry.create_telemetry_router(application))
    fastapi_app.include_router(health.create_health_router())

    return fastapi_app
