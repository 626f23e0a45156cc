"""
FastAPI Application

Main entry point for the Recurring-Revenue Analytics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from arr_analytics.config import get_settings
from arr_analytics.config.logging import configure_logging
from arr_analytics.serving.api import create_api_app

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Recurring-Revenue Analytics API", version=get_settings().version)
    yield
    logger.info("Shutting down...")


app = create_api_app(lifespan=lifespan)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    settings = get_settings()
    return {
        "name": "Recurring-Revenue Analytics API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


def run() -> None:
    """Console entry point: serve the API with Uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "arr_analytics.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.monitoring.log_level.lower(),
    )


if __name__ == "__main__":
    run()
