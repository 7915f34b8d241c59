"""FastAPI Application.

REST API layer for IFC Flow.
Provides HTTP endpoints for model import and workflow execution.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ifc_flow.infrastructure.di.container import container
from ifc_flow.presentation.api import routes
from ifc_flow.shared.config import settings
from ifc_flow.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan.

    Models are held in memory; they are released on shutdown.
    """
    logger.info("API starting", version=settings.app_version)

    yield

    logger.info("API stopping", models=len(container.registry))
    container.reset()


def create_app() -> FastAPI:
    """Create FastAPI application.

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="IFC Flow API",
        description="REST API for running node-graph workflows over IFC models",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS - Allow the workflow canvas and other frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Canvas dev server
            "http://127.0.0.1:3000",
            "http://localhost:8000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API v1 - Current stable version
    app.include_router(routes.models.router, prefix="/api/v1", tags=["v1-models"])
    app.include_router(routes.workflows.router, prefix="/api/v1", tags=["v1-workflows"])

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "ifc-flow-api",
            "models": len(container.registry),
        }

    return app


# Create app instance
app = create_app()


def main() -> None:
    """Entry point for the REST API."""
    import uvicorn

    setup_logging()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
