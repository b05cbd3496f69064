"""
Weekgrid - Main Application Entry Point

Weekly planner that turns Markdown project and routine notes into a schedule.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weekgrid.core.config import get_settings
from weekgrid.core.logger import setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info(f"Starting Weekgrid in {settings.ENVIRONMENT} mode (config: {settings.CONFIG_PATH})")

    yield

    logger.info("Shutting down Weekgrid...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Weekgrid",
        description="Markdown-driven weekly schedule planner",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from weekgrid.api import calendar, config, parse, schedule

    app.include_router(config.router, prefix="/api/config", tags=["config"])
    app.include_router(parse.router, prefix="/api/parse", tags=["parse"])
    app.include_router(schedule.router, prefix="/api/schedule", tags=["schedule"])
    app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG and settings.is_local,
    )
