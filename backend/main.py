"""
Parley - Main Application Entry Point

Realtime one-to-one chat: cookie sessions, direct messages and online presence.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from parley.core.config import get_settings
from parley.core.exceptions import register_exception_handlers
from parley.core.logger import setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Parley in {settings.ENVIRONMENT} mode...")

    from parley.infrastructure.local.database import dispose_db, init_db

    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Parley...")
    from parley.services.realtime_service import realtime_gateway

    await realtime_gateway.close_all()
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Parley",
        description="Realtime chat API with presence",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from parley.api import auth, messages, realtime

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
    app.include_router(realtime.router, prefix="/api/realtime", tags=["realtime"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": "0.1.0",
        }

    # Uploaded images (local storage provider)
    if settings.STORAGE_PROVIDER == "local":
        storage_path = settings.STORAGE_BASE_PATH
        if not os.path.isabs(storage_path):
            storage_path = os.path.join(os.getcwd(), storage_path)
        os.makedirs(storage_path, exist_ok=True)
        app.mount("/storage", StaticFiles(directory=storage_path), name="storage")

    # Built client, production only
    dist_path = settings.FRONTEND_DIST_PATH
    if settings.is_production and dist_path and os.path.isdir(dist_path):
        assets_path = os.path.join(dist_path, "assets")
        if os.path.isdir(assets_path):
            app.mount("/assets", StaticFiles(directory=assets_path), name="assets")
        index_file = os.path.join(dist_path, "index.html")

        @app.get("/{full_path:path}", include_in_schema=False)
        async def serve_spa(full_path: str):
            return FileResponse(index_file)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
