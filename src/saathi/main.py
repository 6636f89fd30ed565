"""
SAATHI FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (session registry and orchestrator)
- CORS configuration
- Error handling middleware and domain exception handlers
- Router registration

This is the production entry point for the SAATHI core service.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from saathi import __version__
from saathi.api.middleware import ErrorHandlerMiddleware, register_exception_handlers
from saathi.api.v1.router import api_router
from saathi.config import Settings, get_settings
from saathi.config.logging_config import configure_logging, get_logger
from saathi.infrastructure.generator import ResponseGenerator
from saathi.infrastructure.metrics import update_system_info
from saathi.infrastructure.notifier import Notifier
from saathi.infrastructure.store import ProfileSessionStore
from saathi.services.orchestration import CompanionOrchestrator
from saathi.services.session import SessionRegistry

logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    *,
    generator: Optional[ResponseGenerator] = None,
    store: Optional[ProfileSessionStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings override (defaults to environment settings)
        generator: Response generator; fallback templates when omitted
        store: Profile/session store; in-memory when omitted
        notifier: Crisis notifier; in-memory when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        The session registry is constructed here and torn down on
        shutdown; nothing about sessions is process-global.
        """
        logger.info(
            "Starting SAATHI core",
            env=settings.env,
            version=__version__,
        )
        registry = SessionRegistry(settings.session.allow_concurrent_user_sessions)
        try:
            app.state.settings = settings
            app.state.registry = registry
            app.state.orchestrator = CompanionOrchestrator.build(
                settings,
                registry=registry,
                generator=generator,
                store=store,
                notifier=notifier,
            )
            update_system_info(settings.env)
            logger.info("Companion orchestrator initialized")

            yield

        finally:
            logger.info("Shutting down SAATHI core")
            registry.close()
            app.state.orchestrator = None
            logger.info("SAATHI core shutdown complete")

    app = FastAPI(
        title="SAATHI API",
        description="Multi-signal risk assessment and therapeutic session core",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    register_exception_handlers(app)

    app.include_router(
        api_router,
        prefix=f"/api/{settings.api_version}",
    )

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - basic info."""
        return {
            "name": "SAATHI API",
            "version": __version__,
            "status": "operational",
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "saathi.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
