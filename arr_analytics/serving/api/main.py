"""
FastAPI Application Factory

Creates and configures the metrics API application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from arr_analytics.config import get_settings
from .middleware import RequestLoggingMiddleware
from .routes import health_router, metrics_router


def create_api_app(**kwargs) -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Recurring-Revenue Analytics API",
        description="ARR waterfall, retention, cohort and monthly SaaS metrics from billing exports",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        **kwargs,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(metrics_router, prefix="/api/v1/metrics", tags=["Metrics"])

    return app
