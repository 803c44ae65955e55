"""FastAPI application factory"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from proximity_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from proximity_gateway.api.dependencies import get_tracker
from proximity_gateway.api.v1 import suggestions, tracking
from proximity_gateway.infrastructure.observability.logging import setup_logging
from proximity_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the idle/cooldown sweeper for the lifetime of the app"""
    tracker = app.dependency_overrides.get(get_tracker, get_tracker)()
    sweeper = asyncio.create_task(tracker.run_sweeper(settings.sweep_interval_seconds))
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Proximity Payment Gateway",
        description="Location-based payment suggestions and live proximity tracking",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(suggestions.router, prefix="/v1", tags=["suggestions"])
    app.include_router(tracking.router, prefix="/v1", tags=["tracking"])

    return app


app = create_app()
