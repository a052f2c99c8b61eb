"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from infrastructure.config import Settings, settings
from infrastructure.di.container import ensure_indexes
from infrastructure.logging import setup_logging
from interfaces.api.routes.multimedia_routes import router as multimedia_router
from interfaces.api.routes.profile_routes import router as profile_router
from interfaces.api.routes.rating_routes import router as rating_router
from interfaces.dependencies import get_container

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    setup_logging()
    logger.info("app_starting", env=settings.app_env, blob_backend=settings.blob_backend)

    container = get_container()
    try:
        ensure_indexes(container[Database], container[Settings])
    except PyMongoError as e:
        # the API still serves; requests needing the store will answer 503
        logger.warning("index_creation_failed", error=str(e))

    logger.info("app_ready")

    yield

    logger.info("app_shutting_down")
    container[MongoClient].close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Musician profiles, ratings and media files",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(profile_router)
    app.include_router(rating_router)
    app.include_router(multimedia_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
