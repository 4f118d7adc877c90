"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from spendwise.api.middleware import RequestIDMiddleware, MetricsMiddleware
from spendwise.api.v1 import insights
from spendwise.infrastructure.observability.logging import setup_logging
from spendwise.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="SpendWise Insights",
        description="Rule-based spending nudges and budget insights",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first, so request IDs exist before metrics are taken
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(insights.router, prefix="/v1", tags=["insights"])

    return app


app = create_app()
